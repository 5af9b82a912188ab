"""
Account helpers shared by the auth and admin routers.
"""

from typing import Optional

from fastapi import Request, status
from sqlalchemy.orm import Session

from quizarena.core.errors import APIError, db_errors
from quizarena.core.security import get_password_hash, verify_password
from quizarena.models.account import User, Admin, SubAdmin
from quizarena.models.admin import AdminLog, AdminAction


EMAIL_TAKEN = "Email already registered"

# Login lookup order when the caller does not say which realm it belongs to
LOGIN_MODELS = (User, Admin, SubAdmin)


def email_taken(db: Session, email: str) -> bool:
    """Emails are unique across all account tables."""
    return any(
        db.query(model.id).filter(model.email == email).first() is not None
        for model in LOGIN_MODELS
    )


def create_account(db: Session, model, email: str, name: str, password: str, **extra):
    """
    Insert an account row, rejecting emails used by any account.
    """
    if email_taken(db, email):
        raise APIError(status.HTTP_409_CONFLICT, EMAIL_TAKEN)

    account = model(
        email=email,
        name=name,
        hashed_password=get_password_hash(password),
        **extra
    )
    with db_errors(db, "Internal server error", conflict_message=EMAIL_TAKEN):
        db.add(account)
        db.commit()
    db.refresh(account)
    return account


def find_account_by_email(db: Session, email: str):
    for model in LOGIN_MODELS:
        account = db.query(model).filter(model.email == email).first()
        if account is not None:
            return account
    return None


def authenticate(account, password: str, not_found_message: str):
    """Check a password, raising the envelope errors used by every login route."""
    if account is None:
        raise APIError(status.HTTP_404_NOT_FOUND, not_found_message)
    if not verify_password(password, account.hashed_password):
        raise APIError(status.HTTP_401_UNAUTHORIZED, "Invalid credentials")
    return account


def request_meta(request: Optional[Request]) -> dict:
    if request is None:
        return {}
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def record_action(
    db: Session,
    actor,
    action: AdminAction,
    entity_type: str,
    entity_id: Optional[int] = None,
    details: Optional[dict] = None,
    request: Optional[Request] = None
) -> AdminLog:
    """Add an audit entry to the session; the caller commits."""
    log = AdminLog.log_action(
        actor=actor,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        **request_meta(request)
    )
    db.add(log)
    return log


def create_sub_admin(db: Session, admin: Admin, email: str, name: str, password: str,
                     request: Optional[Request] = None) -> SubAdmin:
    sub_admin = create_account(db, SubAdmin, email, name, password, admin_id=admin.id)

    record_action(
        db, admin, AdminAction.USER_MANAGEMENT, "sub_admin", sub_admin.id,
        details={"operation": "create", "email": sub_admin.email},
        request=request
    )
    db.commit()
    return sub_admin


def delete_user(db: Session, actor, user_id: int, request: Optional[Request] = None) -> dict:
    """
    Remove a user together with its attempts, leaderboard entries and payments.

    Returns the deleted user's public representation.
    """
    user = db.get(User, user_id)
    if user is None:
        raise APIError(status.HTTP_404_NOT_FOUND, "User not found")

    data = user.to_dict()
    with db_errors(db, "Internal server error"):
        db.delete(user)
        record_action(
            db, actor, AdminAction.DELETE, "user", user_id,
            details={"email": data["email"]},
            request=request
        )
        db.commit()
    return data
