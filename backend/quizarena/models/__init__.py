"""
Database models for QuizArena.

This module contains all SQLAlchemy models for the application:
- Account models (users, admins, sub-admins)
- Quiz authoring models
- Quiz-taking and leaderboard models
- Payments and the admin audit log
"""

from quizarena.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .account import User, Admin, SubAdmin
from .quiz import Quiz, Question, Option
from .attempt import QuizAttempt, LeaderBoard, LeaderBoardEntry
from .payment import Payment, PaymentStatus
from .admin import AdminLog, AdminAction

# Export all models
__all__ = [
    "Base",
    "User",
    "Admin",
    "SubAdmin",
    "Quiz",
    "Question",
    "Option",
    "QuizAttempt",
    "LeaderBoard",
    "LeaderBoardEntry",
    "Payment",
    "PaymentStatus",
    "AdminLog",
    "AdminAction"
]
