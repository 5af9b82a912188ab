"""
Core module for the QuizArena backend.

This module contains core functionality including:
- Configuration management
- Database connections
- Security utilities (JWT, password hashing, payment signatures)
- Error envelopes and logging setup
"""

from .config import settings
from .database import get_db, engine, SessionLocal
from .errors import APIError, db_errors
from .security import (
    create_access_token,
    create_account_token,
    verify_password,
    get_password_hash,
    verify_token
)

__all__ = [
    "settings",
    "get_db",
    "engine",
    "SessionLocal",
    "APIError",
    "db_errors",
    "create_access_token",
    "create_account_token",
    "verify_password",
    "get_password_hash",
    "verify_token"
]
