"""
Quiz router for QuizArena.

Handles quiz authoring for admins and the join / take / submit / result
flow for players, plus per-quiz leaderboards.
"""

import math
from typing import Dict, Any, List
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session, joinedload, selectinload

from quizarena.core.config import settings
from quizarena.core.database import get_db
from quizarena.core.errors import APIError, db_errors
from quizarena.core.security import ROLE_USER
from quizarena.models.account import User, Admin
from quizarena.models.admin import AdminAction
from quizarena.models.attempt import QuizAttempt, LeaderBoard, LeaderBoardEntry
from quizarena.models.payment import Payment, PaymentStatus
from quizarena.models.quiz import Quiz, Question, Option
from quizarena.routers.deps import get_current_admin, get_current_principal, get_current_user
from quizarena.schemas.quiz import (
    QuestionCreate,
    QuestionOperation,
    QuizCreate,
    QuizSubmit,
    QuizUpdate
)
from quizarena.services import scoring
from quizarena.services.accounts import record_action


router = APIRouter()


def build_questions(questions: List[QuestionCreate]) -> List[Question]:
    return [
        Question(
            text=question.text,
            correct_answer=question.correct_answer,
            options=[Option(text=option.text) for option in question.options]
        )
        for question in questions
    ]


def get_quiz_or_404(db: Session, quiz_id: int, *options) -> Quiz:
    query = db.query(Quiz)
    if options:
        query = query.options(*options)
    quiz = query.filter(Quiz.id == quiz_id).first()
    if not quiz:
        raise APIError(status.HTTP_404_NOT_FOUND, "Quiz not found")
    return quiz


def get_owned_quiz(db: Session, quiz_id: int, admin: Admin, action: str) -> Quiz:
    quiz = db.query(Quiz).filter(
        Quiz.id == quiz_id,
        Quiz.admin_id == admin.id
    ).first()
    if not quiz:
        raise APIError(
            status.HTTP_404_NOT_FOUND,
            f"Quiz not found or you do not have permission to {action} it"
        )
    return quiz


def get_attempt(db: Session, user_id: int, quiz_id: int):
    return db.query(QuizAttempt).filter(
        QuizAttempt.user_id == user_id,
        QuizAttempt.quiz_id == quiz_id
    ).first()


def has_paid(db: Session, user_id: int, quiz_id: int) -> bool:
    return db.query(Payment.id).filter(
        Payment.user_id == user_id,
        Payment.quiz_id == quiz_id,
        Payment.status == PaymentStatus.COMPLETED.value
    ).first() is not None


def quiz_counts(db: Session, quiz: Quiz) -> Dict[str, int]:
    participants = db.query(QuizAttempt).filter(QuizAttempt.quiz_id == quiz.id).count()
    entries = 0
    if quiz.leaderboard is not None:
        entries = db.query(LeaderBoardEntry).filter(
            LeaderBoardEntry.leaderboard_id == quiz.leaderboard.id
        ).count()
    return {
        "totalQuestions": len(quiz.questions),
        "totalParticipants": participants,
        "leaderboardEntries": entries
    }


@router.post("/create-quiz", status_code=status.HTTP_201_CREATED)
async def create_quiz(
    payload: QuizCreate,
    request: Request,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Create a quiz with its questions, options and leaderboard.
    """
    quiz = Quiz(
        title=payload.title,
        description=payload.description,
        price=payload.price,
        admin_id=current_admin.id,
        questions=build_questions(payload.questions),
        leaderboard=LeaderBoard()
    )

    with db_errors(db, "Error creating quiz"):
        db.add(quiz)
        db.flush()
        record_action(
            db, current_admin, AdminAction.CREATE, "quiz", quiz.id,
            details={"title": quiz.title, "questions": len(payload.questions)},
            request=request
        )
        db.commit()
    db.refresh(quiz)

    return {"success": True, "data": quiz.to_dict(include_questions=True)}


@router.get("/quizzes")
async def list_quizzes(
    current_account=Depends(get_current_principal),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get all quizzes with question and participant counts.
    """
    quizzes = db.query(Quiz).options(
        selectinload(Quiz.questions),
        joinedload(Quiz.leaderboard)
    ).order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()

    data = []
    for quiz in quizzes:
        item = quiz.to_dict()
        item.update(quiz_counts(db, quiz))
        data.append(item)

    return {"success": True, "data": data}


@router.get("/user/joined")
async def list_joined_quizzes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get all quizzes joined by the caller.
    """
    attempts = db.query(QuizAttempt).options(
        joinedload(QuizAttempt.quiz).selectinload(Quiz.questions)
    ).filter(
        QuizAttempt.user_id == current_user.id
    ).order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc()).all()

    data = [
        {
            "attemptId": attempt.id,
            "quizId": attempt.quiz.id,
            "title": attempt.quiz.title,
            "description": attempt.quiz.description,
            "score": attempt.score,
            "completed": attempt.completed,
            "totalQuestions": len(attempt.quiz.questions),
            "joinedAt": attempt.created_at.isoformat() if attempt.created_at else None
        }
        for attempt in attempts
    ]

    return {"success": True, "count": len(data), "data": data}


@router.get("/{quiz_id}")
async def get_quiz(
    quiz_id: int,
    current_account=Depends(get_current_principal),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get a quiz with its questions, counts and top scores.

    Correct answers are only shown to admins and sub-admins.
    """
    quiz = get_quiz_or_404(
        db, quiz_id,
        selectinload(Quiz.questions).selectinload(Question.options),
        joinedload(Quiz.leaderboard)
    )

    data = quiz.to_dict(
        include_questions=True,
        include_answers=current_account.role != ROLE_USER
    )
    data.update(quiz_counts(db, quiz))

    top = []
    if quiz.leaderboard is not None:
        top = [
            {
                "id": entry.id,
                "score": entry.score,
                "user": {"id": entry.user.id, "name": entry.user.name}
            }
            for entry in scoring.top_scores(db, quiz.leaderboard.id, settings.TOP_SCORES_LIMIT)
        ]
    data["topScores"] = top

    return {"success": True, "data": data}


@router.patch("/{quiz_id}")
async def update_quiz(
    quiz_id: int,
    payload: QuizUpdate,
    request: Request,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Partially update a quiz the caller owns.

    ``questions`` requires ``operation``: ``replace`` swaps out every
    existing question, ``add`` appends.
    """
    quiz = get_owned_quiz(db, quiz_id, current_admin, "update")

    if payload.questions is not None and payload.operation is None:
        raise APIError(
            status.HTTP_400_BAD_REQUEST,
            "Provide operation 'replace' or 'add' together with questions"
        )

    changes = payload.model_dump(
        exclude_unset=True, exclude={"questions", "operation"}
    )

    with db_errors(db, "Error updating quiz"):
        for field_name, value in changes.items():
            if value is not None:
                setattr(quiz, field_name, value)

        if payload.questions is not None:
            new_questions = build_questions(payload.questions)
            if payload.operation == QuestionOperation.REPLACE:
                quiz.questions = new_questions
            else:
                quiz.questions.extend(new_questions)

        record_action(
            db, current_admin, AdminAction.UPDATE, "quiz", quiz.id,
            details={
                "fields": sorted(changes),
                "operation": payload.operation.value if payload.operation else None
            },
            request=request
        )
        db.commit()
    db.refresh(quiz)

    return {"success": True, "data": quiz.to_dict(include_questions=True)}


@router.delete("/{quiz_id}")
async def delete_quiz(
    quiz_id: int,
    request: Request,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    quiz = get_owned_quiz(db, quiz_id, current_admin, "delete")

    with db_errors(db, "Error deleting quiz"):
        record_action(
            db, current_admin, AdminAction.DELETE, "quiz", quiz.id,
            details={"title": quiz.title},
            request=request
        )
        db.delete(quiz)
        db.commit()

    return {"success": True, "message": "Quiz deleted successfully"}


@router.post("/{quiz_id}/join", status_code=status.HTTP_201_CREATED)
async def join_quiz(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Join a quiz. Paid quizzes need a completed payment first.
    """
    quiz = get_quiz_or_404(db, quiz_id)

    if get_attempt(db, current_user.id, quiz_id):
        raise APIError(status.HTTP_400_BAD_REQUEST, "You have already joined this quiz")

    if quiz.requires_payment and not has_paid(db, current_user.id, quiz_id):
        raise APIError(
            status.HTTP_402_PAYMENT_REQUIRED,
            "Payment required to join this quiz"
        )

    attempt = QuizAttempt(user_id=current_user.id, quiz_id=quiz_id, score=0, completed=False)
    with db_errors(
        db, "Error joining quiz",
        conflict_message="You have already joined this quiz",
        conflict_status=status.HTTP_400_BAD_REQUEST
    ):
        db.add(attempt)
        db.commit()
    db.refresh(attempt)

    data = attempt.to_dict()
    data["quiz"] = {"title": quiz.title, "description": quiz.description}

    return {
        "success": True,
        "message": "Successfully joined the quiz",
        "data": data
    }


@router.get("/{quiz_id}/users")
async def list_quiz_users(
    quiz_id: int,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get every attempt on a quiz with the participating user.
    """
    attempts = db.query(QuizAttempt).options(
        joinedload(QuizAttempt.user)
    ).filter(
        QuizAttempt.quiz_id == quiz_id
    ).order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc()).all()

    data = []
    for attempt in attempts:
        item = attempt.to_dict()
        item["user"] = {
            "id": attempt.user.id,
            "name": attempt.user.name,
            "email": attempt.user.email
        }
        data.append(item)

    return {"success": True, "count": len(data), "data": data}


@router.get("/{quiz_id}/leaderboard")
async def get_leaderboard(
    quiz_id: int,
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
    current_account=Depends(get_current_principal),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get a page of a quiz leaderboard.
    """
    quiz = get_quiz_or_404(db, quiz_id, joinedload(Quiz.leaderboard))
    skip = (page - 1) * limit

    entries: List[LeaderBoardEntry] = []
    total_entries = 0
    if quiz.leaderboard is not None:
        query = scoring.ranked_entries_query(db, quiz.leaderboard.id)
        total_entries = query.count()
        entries = query.options(
            joinedload(LeaderBoardEntry.user)
        ).offset(skip).limit(limit).all()

    formatted_entries = [
        {
            "rank": skip + index + 1,
            "score": entry.score,
            "userName": entry.user.name,
            "userEmail": entry.user.email,
            "createdAt": entry.created_at.isoformat() if entry.created_at else None
        }
        for index, entry in enumerate(entries)
    ]

    return {
        "success": True,
        "data": {
            "entries": formatted_entries,
            "pagination": {
                "currentPage": page,
                "totalPages": math.ceil(total_entries / limit),
                "totalEntries": total_entries,
                "entriesPerPage": limit
            }
        }
    }


@router.get("/{quiz_id}/take")
async def take_quiz(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get the questions of a joined quiz without the correct answers.
    """
    quiz = get_quiz_or_404(
        db, quiz_id, selectinload(Quiz.questions).selectinload(Question.options)
    )

    attempt = get_attempt(db, current_user.id, quiz_id)
    if not attempt:
        raise APIError(status.HTTP_400_BAD_REQUEST, "You need to join this quiz first")

    if attempt.completed:
        raise APIError(status.HTTP_400_BAD_REQUEST, "You have already completed this quiz")

    questions = [
        {
            "id": question.id,
            "text": question.text,
            "options": [option.to_dict() for option in question.options]
        }
        for question in quiz.questions
    ]

    return {
        "success": True,
        "data": {
            "quizId": quiz.id,
            "title": quiz.title,
            "description": quiz.description,
            "totalQuestions": len(questions),
            "questions": questions
        }
    }


@router.post("/{quiz_id}/submit")
async def submit_quiz(
    quiz_id: int,
    payload: QuizSubmit,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Grade the caller's answers, complete the attempt and update the leaderboard.
    """
    quiz = get_quiz_or_404(
        db, quiz_id,
        selectinload(Quiz.questions).selectinload(Question.options),
        joinedload(Quiz.leaderboard)
    )

    attempt = get_attempt(db, current_user.id, quiz_id)
    if not attempt:
        raise APIError(status.HTTP_400_BAD_REQUEST, "Join the quiz before submitting")

    if attempt.completed:
        raise APIError(status.HTTP_400_BAD_REQUEST, "Quiz already completed")

    result = scoring.score_answers(quiz.questions, payload.answers)

    with db_errors(
        db, "Server error",
        conflict_message="Quiz already completed",
        conflict_status=status.HTTP_400_BAD_REQUEST
    ):
        attempt.complete(result.score)
        if quiz.leaderboard is None:
            quiz.leaderboard = LeaderBoard()
            db.flush()
        scoring.upsert_leaderboard_entry(db, quiz.leaderboard, current_user.id, result.score)
        db.commit()

    return {
        "success": True,
        "data": {
            "score": result.score,
            "totalQuestions": result.total_questions,
            "percentageScore": result.percentage,
            "results": result.results,
            "completed": True
        }
    }


@router.get("/{quiz_id}/result")
async def get_quiz_result(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get the caller's result on a completed quiz with its leaderboard rank.
    """
    attempt = db.query(QuizAttempt).options(
        joinedload(QuizAttempt.quiz).selectinload(Quiz.questions),
        joinedload(QuizAttempt.quiz).joinedload(Quiz.leaderboard)
    ).filter(
        QuizAttempt.user_id == current_user.id,
        QuizAttempt.quiz_id == quiz_id
    ).first()

    if not attempt:
        raise APIError(status.HTTP_404_NOT_FOUND, "Quiz attempt not found")

    if not attempt.completed:
        raise APIError(status.HTTP_400_BAD_REQUEST, "You have not completed this quiz yet")

    quiz = attempt.quiz
    total_questions = len(quiz.questions)

    rank = 0
    total_participants = 0
    top = []
    if quiz.leaderboard is not None:
        leaderboard_id = quiz.leaderboard.id
        rank = scoring.user_rank(db, leaderboard_id, current_user.id)
        total_participants = scoring.ranked_entries_query(db, leaderboard_id).count()
        top = [
            {"rank": index + 1, "name": entry.user.name, "score": entry.score}
            for index, entry in enumerate(
                scoring.top_scores(db, leaderboard_id, settings.TOP_SCORES_LIMIT)
            )
        ]

    return {
        "success": True,
        "data": {
            "quizId": attempt.quiz_id,
            "quizTitle": quiz.title,
            "score": attempt.score,
            "totalQuestions": total_questions,
            "percentageScore": scoring.percentage_score(attempt.score, total_questions),
            "completed": attempt.completed,
            "completedAt": attempt.updated_at.isoformat() if attempt.updated_at else None,
            "rank": rank,
            "totalParticipants": total_participants,
            "topScores": top
        }
    }
