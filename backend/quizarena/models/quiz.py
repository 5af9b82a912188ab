"""
Quiz authoring models for QuizArena.

Defines Quiz, Question and Option. Deleting a quiz removes its
questions, options, attempts, leaderboard and payments.
"""

from datetime import datetime
from typing import List
from sqlalchemy import (
    Integer, String, DateTime, Text, Float, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from quizarena.core.database import Base


class Quiz(Base):
    """
    A quiz authored by an admin. A positive price gates joining behind
    a completed payment.
    """
    __tablename__ = "quizzes"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Basic information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Ownership
    admin_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("admins.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )

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
    admin = relationship("Admin", back_populates="quizzes")
    questions: Mapped[List["Question"]] = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.id"
    )
    attempts = relationship(
        "QuizAttempt", back_populates="quiz", cascade="all, delete-orphan",
        passive_deletes=True
    )
    leaderboard = relationship(
        "LeaderBoard",
        back_populates="quiz",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    payments = relationship(
        "Payment", back_populates="quiz", cascade="all, delete-orphan",
        passive_deletes=True
    )

    # Table constraints
    __table_args__ = (
        CheckConstraint("price >= 0", name="check_price_positive"),
    )

    def __repr__(self) -> str:
        return f"<Quiz(id={self.id}, title='{self.title}', price={self.price})>"

    @property
    def requires_payment(self) -> bool:
        return (self.price or 0) > 0

    def to_dict(self, include_questions: bool = False, include_answers: bool = True) -> dict:
        """Convert quiz to dictionary representation."""
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "adminId": self.admin_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_questions:
            data["questions"] = [
                question.to_dict(include_answer=include_answers)
                for question in self.questions
            ]
        return data


class Question(Base):
    """
    A question with its options. The correct answer is stored as text.
    """
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    quiz_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")
    options: Mapped[List["Option"]] = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Option.id"
    )

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, quiz_id={self.quiz_id})>"

    def is_correct(self, answer_id=None, answer=None) -> bool:
        """
        Check a submitted answer.

        An ``answer_id`` is matched only against this question's option ids
        and is correct when that option's text is the correct answer. A
        free-text ``answer`` is compared with the correct answer itself.
        ``answer_id`` wins when both are given.
        """
        if answer_id is not None:
            return any(
                str(option.id) == str(answer_id)
                and option.text == self.correct_answer
                for option in self.options
            )
        if answer is None:
            return False
        return str(answer) == self.correct_answer

    def to_dict(self, include_answer: bool = True) -> dict:
        data = {
            "id": self.id,
            "quizId": self.quiz_id,
            "text": self.text,
            "options": [option.to_dict() for option in self.options],
        }
        if include_answer:
            data["correctAnswer"] = self.correct_answer
        return data


class Option(Base):
    """
    A selectable option of a question.
    """
    __tablename__ = "options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)

    question = relationship("Question", back_populates="options")

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text}
