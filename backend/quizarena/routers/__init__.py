"""
API routers for QuizArena.

This module contains all API endpoint routers:
- auth: Signup and login for every account type, sub-admin creation
- admin: Admin sessions, sub-admin management, dashboard and audit logs
- quiz: Quiz authoring, joining, taking, scoring and leaderboards
- payment: Checkout orders that unlock paid quizzes
"""

from fastapi import APIRouter

# Import individual routers
from .auth import router as auth_router
from .quiz import router as quiz_router
from .payment import router as payment_router

# Import admin sub-routers
from .admin import admin_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    admin_router,
    prefix="/admin",
    tags=["admin"]
)

api_router.include_router(
    quiz_router,
    prefix="/quiz",
    tags=["quiz"]
)

api_router.include_router(
    payment_router,
    prefix="/payment",
    tags=["payment"]
)

# Export all routers
__all__ = [
    "api_router",
    "auth_router",
    "admin_router",
    "quiz_router",
    "payment_router"
]
