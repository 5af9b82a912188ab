"""
Authentication dependencies for QuizArena routers.

Tokens are read from the ``Authorization: Bearer`` header first and the
``token`` cookie second.
"""

from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from quizarena.core.database import get_db
from quizarena.core.errors import APIError
from quizarena.core.security import (
    verify_token, ALL_ROLES, ROLE_USER, ROLE_ADMIN, ROLE_SUB_ADMIN
)
from quizarena.models.account import User, Admin, SubAdmin


TOKEN_COOKIE = "token"

bearer_scheme = HTTPBearer(auto_error=False)

ACCOUNT_MODELS = {
    ROLE_USER: User,
    ROLE_ADMIN: Admin,
    ROLE_SUB_ADMIN: SubAdmin,
}


def get_token_payload(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Dict[str, Any]:
    """
    Decode the caller's JWT.
    """
    token = credentials.credentials if credentials else request.cookies.get(TOKEN_COOKIE)
    if not token:
        raise APIError(
            status.HTTP_401_UNAUTHORIZED,
            "Unauthorized",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = verify_token(token)
    if payload is None or payload.get("role") not in ALL_ROLES or payload.get("sub") is None:
        raise APIError(status.HTTP_403_FORBIDDEN, "Invalid token")
    return payload


def require_roles(*roles: str) -> Callable:
    """
    Build a dependency that resolves the caller's account row and checks
    its role against ``roles``.
    """
    allowed = roles or ALL_ROLES

    def dependency(
        payload: Dict[str, Any] = Depends(get_token_payload),
        db: Session = Depends(get_db)
    ):
        role = payload["role"]
        if role not in allowed:
            raise APIError(status.HTTP_403_FORBIDDEN, "Access denied")

        try:
            account_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise APIError(status.HTTP_403_FORBIDDEN, "Invalid token")

        account = db.get(ACCOUNT_MODELS[role], account_id)
        if account is None:
            raise APIError(status.HTTP_401_UNAUTHORIZED, "Account not found")
        return account

    return dependency


get_current_principal = require_roles()
get_current_user = require_roles(ROLE_USER)
get_current_admin = require_roles(ROLE_ADMIN)
get_current_staff = require_roles(ROLE_ADMIN, ROLE_SUB_ADMIN)


def token_claims(account) -> Dict[str, Any]:
    """The claims echoed back by dashboard endpoints."""
    return {"id": account.id, "email": account.email, "role": account.role}
