"""
Quiz scoring and leaderboard ranking.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from quizarena.models.attempt import LeaderBoard, LeaderBoardEntry


@dataclass
class ScoreResult:
    score: int
    total_questions: int
    results: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        return percentage_score(self.score, self.total_questions)


def percentage_score(score: int, total_questions: int) -> int:
    """Whole-number percentage, halves rounded up; 0 for an empty quiz."""
    if total_questions <= 0:
        return 0
    return int(math.floor(score * 100 / total_questions + 0.5))


def score_answers(questions: Iterable, answers: Iterable) -> ScoreResult:
    """
    Grade submitted answers against a quiz's questions.

    ``answers`` holds objects with ``question_id``, ``answer_id`` and
    ``answer``. Unknown question ids are reported and never scored; a
    question answered more than once is scored on its first answer only,
    and the repeats are reported as duplicates.
    """
    questions_map = {question.id: question for question in questions}
    seen = set()
    score = 0
    results = []

    for answer in answers:
        question = questions_map.get(answer.question_id)
        if question is None:
            results.append({
                "questionId": answer.question_id,
                "correct": False,
                "message": "Invalid question"
            })
            continue

        if answer.question_id in seen:
            results.append({
                "questionId": question.id,
                "correct": False,
                "duplicate": True,
                "correctAnswer": question.correct_answer
            })
            continue
        seen.add(answer.question_id)

        correct = question.is_correct(answer.answer_id, answer.answer)
        if correct:
            score += 1

        results.append({
            "questionId": question.id,
            "correct": correct,
            "correctAnswer": question.correct_answer
        })

    return ScoreResult(
        score=score,
        total_questions=len(questions_map),
        results=results
    )


def upsert_leaderboard_entry(
    db: Session, leaderboard: LeaderBoard, user_id: int, score: int
) -> LeaderBoardEntry:
    """Set a user's score on a leaderboard, creating the entry if needed."""
    entry = db.query(LeaderBoardEntry).filter(
        LeaderBoardEntry.leaderboard_id == leaderboard.id,
        LeaderBoardEntry.user_id == user_id
    ).first()

    if entry is None:
        entry = LeaderBoardEntry(
            leaderboard_id=leaderboard.id,
            user_id=user_id,
            score=score
        )
        db.add(entry)
    else:
        entry.score = score
    return entry


def ranked_entries_query(db: Session, leaderboard_id: int):
    """Entries best first; ties go to whoever reached the score earlier."""
    return db.query(LeaderBoardEntry).filter(
        LeaderBoardEntry.leaderboard_id == leaderboard_id
    ).order_by(
        LeaderBoardEntry.score.desc(),
        LeaderBoardEntry.updated_at.asc(),
        LeaderBoardEntry.id.asc()
    )


def user_rank(db: Session, leaderboard_id: int, user_id: int) -> int:
    """1-based position of a user on a leaderboard, 0 when absent."""
    user_ids = [
        row.user_id
        for row in ranked_entries_query(db, leaderboard_id).with_entities(
            LeaderBoardEntry.user_id
        )
    ]
    try:
        return user_ids.index(user_id) + 1
    except ValueError:
        return 0


def top_scores(db: Session, leaderboard_id: int, limit: int) -> List[LeaderBoardEntry]:
    return ranked_entries_query(db, leaderboard_id).limit(limit).all()
