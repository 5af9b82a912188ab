"""
Payment model for QuizArena.

A payment unlocks a paid quiz for one user once it is COMPLETED.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import Integer, String, DateTime, Float, ForeignKey, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from quizarena.core.database import Base


class PaymentStatus(str, Enum):
    """Lifecycle of a checkout order."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Payment(Base):
    """
    A checkout order for a paid quiz.
    """
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    quiz_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False
    )

    # Order details, amount is copied from the quiz at order time
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=PaymentStatus.PENDING.value,
        nullable=False
    )
    order_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)

    # Gateway confirmation
    provider_payment_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    provider_signature: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

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
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="payments")
    quiz = relationship("Quiz", back_populates="payments")

    __table_args__ = (
        Index("idx_payment_user_quiz_status", "user_id", "quiz_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Payment(order_id='{self.order_id}', status='{self.status}')>"

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED.value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "orderId": self.order_id,
            "userId": self.user_id,
            "quizId": self.quiz_id,
            "amount": self.amount,
            "currency": self.currency,
            "status": self.status,
            "providerPaymentId": self.provider_payment_id,
            "paidAt": self.paid_at.isoformat() if self.paid_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
