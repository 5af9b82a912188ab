"""
Payment router for QuizArena.

Paid quizzes are unlocked through a checkout order: the player creates an
order, pays through the gateway, and the gateway's signed confirmation is
verified here before the payment counts as completed.
"""

from datetime import datetime, timezone
from typing import Dict, Any
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload

from quizarena.core.config import settings
from quizarena.core.database import get_db
from quizarena.core.errors import APIError, db_errors
from quizarena.core.security import generate_order_id, verify_payment_signature
from quizarena.models.account import User
from quizarena.models.payment import Payment, PaymentStatus
from quizarena.models.quiz import Quiz
from quizarena.routers.deps import get_current_staff, get_current_user
from quizarena.schemas.payment import OrderCreate, PaymentVerify


logger = logging.getLogger(__name__)

router = APIRouter()


def _get_quiz(db: Session, quiz_id: int) -> Quiz:
    quiz = db.get(Quiz, quiz_id)
    if not quiz:
        raise APIError(status.HTTP_404_NOT_FOUND, "Quiz not found")
    return quiz


def _completed_payment(db: Session, user_id: int, quiz_id: int):
    return db.query(Payment).filter(
        Payment.user_id == user_id,
        Payment.quiz_id == quiz_id,
        Payment.status == PaymentStatus.COMPLETED.value
    ).first()


@router.post("/create-order", status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Open a checkout order for a paid quiz.
    """
    quiz = _get_quiz(db, payload.quiz_id)

    if not quiz.requires_payment:
        raise APIError(status.HTTP_400_BAD_REQUEST, "This quiz is free")

    if _completed_payment(db, current_user.id, quiz.id):
        raise APIError(status.HTTP_400_BAD_REQUEST, "You have already paid for this quiz")

    payment = Payment(
        user_id=current_user.id,
        quiz_id=quiz.id,
        amount=quiz.price,
        currency=settings.PAYMENT_CURRENCY,
        status=PaymentStatus.PENDING.value,
        order_id=generate_order_id()
    )

    with db_errors(db, "Error creating payment order"):
        db.add(payment)
        db.commit()
    db.refresh(payment)

    return {
        "success": True,
        "message": "Payment order created",
        "data": payment.to_dict()
    }


@router.post("/verify")
async def verify_payment(
    payload: PaymentVerify,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Confirm a gateway payment by checking its signature.

    A quiz is paid for at most once; verifying a second open order after
    one has completed is rejected and leaves that order pending.
    """
    payment = db.query(Payment).filter(
        Payment.order_id == payload.order_id,
        Payment.user_id == current_user.id
    ).first()

    if not payment:
        raise APIError(status.HTTP_404_NOT_FOUND, "Payment order not found")

    if payment.status != PaymentStatus.PENDING.value:
        raise APIError(
            status.HTTP_400_BAD_REQUEST,
            f"Payment order is already {payment.status.lower()}"
        )

    # another order for the same quiz may have completed in the meantime
    if _completed_payment(db, current_user.id, payment.quiz_id):
        raise APIError(status.HTTP_400_BAD_REQUEST, "You have already paid for this quiz")

    valid = verify_payment_signature(
        payment.order_id, payload.provider_payment_id, payload.signature
    )

    with db_errors(db, "Error verifying payment"):
        payment.provider_payment_id = payload.provider_payment_id
        payment.provider_signature = payload.signature
        if valid:
            payment.status = PaymentStatus.COMPLETED.value
            payment.paid_at = datetime.now(timezone.utc)
        else:
            payment.status = PaymentStatus.FAILED.value
        db.commit()
    db.refresh(payment)

    if not valid:
        logger.warning("Payment signature mismatch for order %s", payment.order_id)
        raise APIError(status.HTTP_400_BAD_REQUEST, "Payment verification failed")

    return {
        "success": True,
        "message": "Payment verified successfully",
        "data": payment.to_dict()
    }


@router.get("/history")
async def payment_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    payments = db.query(Payment).options(
        joinedload(Payment.quiz)
    ).filter(
        Payment.user_id == current_user.id
    ).order_by(Payment.created_at.desc(), Payment.id.desc()).all()

    data = []
    for payment in payments:
        item = payment.to_dict()
        item["quizTitle"] = payment.quiz.title
        data.append(item)

    return {"success": True, "count": len(data), "data": data}


@router.get("/status/{quiz_id}")
async def payment_status(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Tell the caller whether they can join a quiz.
    """
    quiz = _get_quiz(db, quiz_id)
    paid = _completed_payment(db, current_user.id, quiz.id) is not None

    return {
        "success": True,
        "data": {
            "quizId": quiz.id,
            "price": quiz.price,
            "requiresPayment": quiz.requires_payment,
            "hasAccess": paid or not quiz.requires_payment
        }
    }


@router.get("/quiz/{quiz_id}")
async def quiz_payments(
    quiz_id: int,
    current_staff=Depends(get_current_staff),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List every payment made for a quiz with its revenue.
    """
    quiz = _get_quiz(db, quiz_id)

    payments = db.query(Payment).options(
        joinedload(Payment.user)
    ).filter(
        Payment.quiz_id == quiz.id
    ).order_by(Payment.created_at.desc(), Payment.id.desc()).all()

    data = []
    for payment in payments:
        item = payment.to_dict()
        item["user"] = {
            "id": payment.user.id,
            "name": payment.user.name,
            "email": payment.user.email
        }
        data.append(item)

    revenue = sum(payment.amount for payment in payments if payment.is_completed)

    return {
        "success": True,
        "count": len(data),
        "data": {
            "quizId": quiz.id,
            "totalRevenue": revenue,
            "payments": data
        }
    }
