"""
Authentication router for QuizArena.

Handles player signup and login, the shared login across all account
types, sub-admin creation and user removal.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from quizarena.core.database import get_db
from quizarena.core.errors import APIError
from quizarena.core.security import create_account_token, ROLE_ADMIN, ROLE_SUB_ADMIN
from quizarena.models.account import User, Admin
from quizarena.routers.deps import (
    get_current_admin,
    get_current_principal,
    token_claims
)
from quizarena.schemas.auth import SignupRequest, LoginRequest, SubAdminCreate
from quizarena.services import accounts


router = APIRouter()


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Register a player, or an admin when ``role`` is ``ADMIN``.
    """
    role = (payload.role or "").upper()
    if role == ROLE_SUB_ADMIN:
        raise APIError(
            status.HTTP_400_BAD_REQUEST,
            "Sub-admins must be created by an admin"
        )

    model = Admin if role == ROLE_ADMIN else User
    account = accounts.create_account(
        db, model, payload.email, payload.name, payload.password
    )

    return {
        "success": True,
        "message": "Signup successful",
        "token": create_account_token(account)
    }


@router.post("/login")
async def login(
    payload: LoginRequest,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Log in as a user, admin or sub-admin, in that lookup order.
    """
    account = accounts.authenticate(
        accounts.find_account_by_email(db, payload.email),
        payload.password,
        "User not found"
    )

    return {
        "success": True,
        "message": "Login successful",
        "token": create_account_token(account)
    }


@router.post("/create-sub-admin", status_code=status.HTTP_201_CREATED)
async def create_sub_admin(
    payload: SubAdminCreate,
    request: Request,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    sub_admin = accounts.create_sub_admin(
        db, current_admin, payload.email, payload.name, payload.password,
        request=request
    )

    return {
        "success": True,
        "message": "Sub-admin created successfully",
        "data": sub_admin.to_dict()
    }


@router.get("/dashboard")
async def dashboard(
    current_account=Depends(get_current_principal)
) -> Dict[str, Any]:
    return {
        "success": True,
        "message": f"Welcome {current_account.role}",
        "user": token_claims(current_account)
    }


@router.get("/me")
async def get_current_account_info(
    current_account=Depends(get_current_principal)
) -> Dict[str, Any]:
    """
    Get the caller's profile.
    """
    return {"success": True, "data": current_account.to_dict()}


@router.delete("/delete-user/{user_id}")
async def delete_user(
    user_id: int,
    request: Request,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    user = accounts.delete_user(db, current_admin, user_id, request=request)

    return {
        "success": True,
        "message": "User deleted successfully",
        "user": user
    }
