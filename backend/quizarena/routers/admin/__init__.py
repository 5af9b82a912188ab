"""
Admin routers for QuizArena.

This module contains all admin-specific API endpoints:
- accounts: Admin and sub-admin sessions, sub-admin and user management
- dashboard: Platform statistics for admins and sub-admins
- logs: Audit trail of admin actions
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from quizarena.core.database import get_db, DatabaseManager
from quizarena.models.account import Admin
from quizarena.models.admin import AdminLog
from quizarena.models.attempt import QuizAttempt
from quizarena.models.payment import Payment, PaymentStatus
from quizarena.routers.deps import get_current_admin, get_current_staff, token_claims

# Import admin sub-routers
from .accounts import router as accounts_router


# Create admin router
admin_router = APIRouter()

admin_router.include_router(accounts_router)


# Admin dashboard endpoint
@admin_router.get("/dashboard")
async def get_admin_dashboard(
    current_staff=Depends(get_current_staff),
    db: Session = Depends(get_db)
) -> dict:
    """
    Get admin dashboard overview with statistics.
    """
    table_stats = DatabaseManager.get_table_stats(db)

    completed_attempts = db.query(QuizAttempt).filter(
        QuizAttempt.completed.is_(True)
    ).count()

    completed_payments = db.query(
        func.count(Payment.id),
        func.coalesce(func.sum(Payment.amount), 0.0)
    ).filter(
        Payment.status == PaymentStatus.COMPLETED.value
    ).one()

    total_attempts = table_stats["quiz_attempts"]

    return {
        "success": True,
        "message": f"Welcome Admin {current_staff.role}",
        "user": token_claims(current_staff),
        "data": {
            "users": table_stats["users"],
            "subAdmins": table_stats["sub_admins"],
            "quizzes": table_stats["quizzes"],
            "questions": table_stats["questions"],
            "attempts": {
                "total": total_attempts,
                "completed": completed_attempts,
                "completionRate": (completed_attempts / total_attempts * 100) if total_attempts > 0 else 0
            },
            "payments": {
                "total": table_stats["payments"],
                "completed": completed_payments[0],
                "revenue": float(completed_payments[1])
            }
        }
    }


# Admin logs endpoint
@admin_router.get("/logs")
async def get_admin_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> dict:
    """
    Get admin action logs with filtering.
    """
    query = db.query(AdminLog)

    # Apply filters
    if action:
        query = query.filter(AdminLog.action == action)
    if entity_type:
        query = query.filter(AdminLog.entity_type == entity_type)

    # Get total count
    total = query.count()

    # Get logs with pagination
    logs = query.order_by(
        AdminLog.created_at.desc(), AdminLog.id.desc()
    ).offset(skip).limit(limit).all()

    return {
        "success": True,
        "data": {
            "total": total,
            "skip": skip,
            "limit": limit,
            "logs": [log.to_dict() for log in logs]
        }
    }


# Export all routers
__all__ = ["admin_router", "accounts_router"]
