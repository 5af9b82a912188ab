"""
Quiz-taking models for QuizArena.

Defines QuizAttempt, LeaderBoard and LeaderBoardEntry.
"""

from datetime import datetime
from sqlalchemy import (
    Boolean, Integer, DateTime, ForeignKey, UniqueConstraint, Index,
    CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from quizarena.core.database import Base


class QuizAttempt(Base):
    """
    A user's single attempt at a quiz. Created on join, completed on submit.
    """
    __tablename__ = "quiz_attempts"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    quiz_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False
    )

    # Results
    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

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

    # Relationships
    user = relationship("User", back_populates="attempts")
    quiz = relationship("Quiz", back_populates="attempts")

    # Table constraints
    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", name="uq_user_quiz_attempt"),
        CheckConstraint("score >= 0", name="check_attempt_score_positive"),
        Index("idx_attempt_quiz", "quiz_id", "completed"),
    )

    def __repr__(self) -> str:
        return f"<QuizAttempt(user_id={self.user_id}, quiz_id={self.quiz_id}, score={self.score})>"

    def complete(self, score: int) -> None:
        """Record the final score of the attempt."""
        self.score = score
        self.completed = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "quizId": self.quiz_id,
            "score": self.score,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class LeaderBoard(Base):
    """
    The leaderboard of a quiz. Exactly one per quiz, created with it.
    """
    __tablename__ = "leaderboards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    quiz_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    quiz = relationship("Quiz", back_populates="leaderboard")
    entries = relationship(
        "LeaderBoardEntry",
        back_populates="leaderboard",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<LeaderBoard(id={self.id}, quiz_id={self.quiz_id})>"


class LeaderBoardEntry(Base):
    """
    A user's score on a quiz leaderboard.
    """
    __tablename__ = "leaderboard_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    leaderboard_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("leaderboards.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

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

    # Relationships
    leaderboard = relationship("LeaderBoard", back_populates="entries")
    user = relationship("User", back_populates="leaderboard_entries")

    # Table constraints
    __table_args__ = (
        UniqueConstraint("leaderboard_id", "user_id", name="uq_leaderboard_user"),
        Index("idx_leaderboard_score", "leaderboard_id", "score"),
    )

    def __repr__(self) -> str:
        return f"<LeaderBoardEntry(leaderboard_id={self.leaderboard_id}, user_id={self.user_id}, score={self.score})>"
