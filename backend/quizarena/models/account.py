"""
Account models for QuizArena.

Defines the User, Admin and SubAdmin tables. Each table is a separate
login realm; the role is fixed per table and carried in issued tokens.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from quizarena.core.database import Base
from quizarena.core.security import ROLE_USER, ROLE_ADMIN, ROLE_SUB_ADMIN


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class AccountMixin:
    """Columns shared by every account table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Authentication fields
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    role = ""

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, email='{self.email}')>"

    def to_dict(self) -> dict:
        """Public representation; never includes the password hash."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }


class User(AccountMixin, Base):
    """
    A player who joins, pays for and takes quizzes.
    """
    __tablename__ = "users"

    role = ROLE_USER

    # Relationships
    attempts = relationship(
        "QuizAttempt", back_populates="user", cascade="all, delete-orphan",
        passive_deletes=True
    )
    leaderboard_entries = relationship(
        "LeaderBoardEntry", back_populates="user", cascade="all, delete-orphan",
        passive_deletes=True
    )
    payments = relationship(
        "Payment", back_populates="user", cascade="all, delete-orphan",
        passive_deletes=True
    )


class Admin(AccountMixin, Base):
    """
    Quiz author. Owns quizzes and the sub-admins it creates.
    """
    __tablename__ = "admins"

    role = ROLE_ADMIN

    # Relationships
    quizzes = relationship(
        "Quiz", back_populates="admin", cascade="all, delete-orphan",
        passive_deletes=True
    )
    sub_admins = relationship(
        "SubAdmin", back_populates="admin", cascade="all, delete-orphan",
        passive_deletes=True
    )


class SubAdmin(AccountMixin, Base):
    """
    Moderator created by an admin.
    """
    __tablename__ = "sub_admins"

    role = ROLE_SUB_ADMIN

    admin_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("admins.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )

    # Relationships
    admin = relationship("Admin", back_populates="sub_admins")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["adminId"] = self.admin_id
        return data
