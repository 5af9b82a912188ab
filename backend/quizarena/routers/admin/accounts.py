"""
Admin account router for QuizArena.

Handles admin signup and login, sub-admin login, cookie sessions,
sub-admin management and user removal.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from quizarena.core.config import settings
from quizarena.core.database import get_db
from quizarena.core.errors import APIError, db_errors
from quizarena.core.security import create_account_token, token_lifetime
from quizarena.models.account import Admin, SubAdmin
from quizarena.models.admin import AdminAction
from quizarena.routers.deps import (
    TOKEN_COOKIE,
    get_current_admin,
    get_current_principal,
    get_current_staff
)
from quizarena.schemas.auth import AdminSignupRequest, LoginRequest, SubAdminCreate
from quizarena.services import accounts


router = APIRouter()


def set_session_cookie(response: Response, account) -> str:
    """Issue a token and store it in an httpOnly cookie."""
    token = create_account_token(account)
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        max_age=int(token_lifetime(account.role).total_seconds())
    )
    return token


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def admin_signup(
    payload: AdminSignupRequest,
    response: Response,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    admin = accounts.create_account(
        db, Admin, payload.email, payload.name, payload.password
    )
    token = set_session_cookie(response, admin)

    return {"success": True, "message": "Admin signup successful", "token": token}


@router.post("/login")
async def admin_login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    admin = accounts.authenticate(
        db.query(Admin).filter(Admin.email == payload.email).first(),
        payload.password,
        "Admin not found"
    )
    token = set_session_cookie(response, admin)

    return {"success": True, "message": "Login successful", "token": token}


@router.post("/subadmin/login")
async def sub_admin_login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    sub_admin = accounts.authenticate(
        db.query(SubAdmin).filter(SubAdmin.email == payload.email).first(),
        payload.password,
        "Subadmin not found"
    )
    token = set_session_cookie(response, sub_admin)

    return {"success": True, "message": "Login successful", "token": token}


@router.post("/logout")
async def logout(
    response: Response,
    current_account=Depends(get_current_principal)
) -> Dict[str, Any]:
    response.delete_cookie(TOKEN_COOKIE)
    return {"success": True, "message": "Logged out"}


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


@router.delete("/delete-user/{user_id}")
async def delete_user(
    user_id: int,
    request: Request,
    current_staff=Depends(get_current_staff),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Remove a user with its attempts and leaderboard entries.
    """
    user = accounts.delete_user(db, current_staff, user_id, request=request)

    return {
        "success": True,
        "message": "User deleted successfully",
        "user": user
    }


@router.get("/sub-admins")
async def list_sub_admins(
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List the sub-admins created by the calling admin.
    """
    sub_admins = db.query(SubAdmin).filter(
        SubAdmin.admin_id == current_admin.id
    ).order_by(SubAdmin.created_at.desc(), SubAdmin.id.desc()).all()

    return {
        "success": True,
        "message": "Sub-admins fetched successfully",
        "count": len(sub_admins),
        "subAdmins": [sub_admin.to_dict() for sub_admin in sub_admins]
    }


@router.delete("/sub-admin/{sub_admin_id}")
async def delete_sub_admin(
    sub_admin_id: int,
    request: Request,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    sub_admin = db.query(SubAdmin).filter(
        SubAdmin.id == sub_admin_id,
        SubAdmin.admin_id == current_admin.id
    ).first()

    if not sub_admin:
        raise APIError(
            status.HTTP_404_NOT_FOUND,
            "Sub-admin not found or you do not have permission to delete"
        )

    with db_errors(db, "Internal server error"):
        db.delete(sub_admin)
        accounts.record_action(
            db, current_admin, AdminAction.USER_MANAGEMENT, "sub_admin", sub_admin_id,
            details={"operation": "delete", "email": sub_admin.email},
            request=request
        )
        db.commit()

    return {"success": True, "message": "Sub-admin deleted successfully"}
