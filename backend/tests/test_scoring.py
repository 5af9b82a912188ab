import pytest

from quizarena.models.quiz import Question, Option
from quizarena.schemas.quiz import AnswerSubmit
from quizarena.services.scoring import percentage_score, score_answers


@pytest.fixture
def questions():
    return [
        Question(
            id=1, text="Capital of France?", correct_answer="Paris",
            options=[Option(id=10, text="Paris"), Option(id=11, text="Rome")]
        ),
        Question(
            id=2, text="2 + 2?", correct_answer="4",
            options=[Option(id=20, text="3"), Option(id=21, text="4")]
        ),
        Question(id=3, text="Spell cat", correct_answer="cat", options=[]),
    ]


@pytest.mark.parametrize("score,total,expected", [
    (0, 3, 0),
    (1, 3, 33),
    (2, 3, 67),
    (3, 3, 100),
    (1, 8, 13),
    (0, 0, 0),
])
def test_percentage_score(score, total, expected):
    assert percentage_score(score, total) == expected


def test_answers_by_text_and_option_id(questions):
    answers = [
        AnswerSubmit(question_id=1, answer="Paris"),
        AnswerSubmit(question_id=2, answer_id=21),
        AnswerSubmit(question_id=3, answer="dog"),
    ]

    result = score_answers(questions, answers)

    assert result.score == 2
    assert result.total_questions == 3
    assert result.percentage == 67
    assert [r["correct"] for r in result.results] == [True, True, False]
    assert result.results[2]["correctAnswer"] == "cat"


def test_option_id_of_wrong_option_is_incorrect(questions):
    result = score_answers(questions, [AnswerSubmit(question_id=1, answer_id="11")])
    assert result.score == 0


def test_unknown_question_is_reported(questions):
    result = score_answers(questions, [AnswerSubmit(question_id=99, answer="x")])

    assert result.score == 0
    assert result.results == [
        {"questionId": 99, "correct": False, "message": "Invalid question"}
    ]


def test_repeated_answers_count_once(questions):
    answers = [AnswerSubmit(question_id=1, answer="Paris")] * 3

    result = score_answers(questions, answers)

    assert result.score == 1
    assert [r["correct"] for r in result.results] == [True, False, False]
    assert [r.get("duplicate", False) for r in result.results] == [False, True, True]


def test_unanswered_questions_still_count_towards_total(questions):
    result = score_answers(questions, [])

    assert result.score == 0
    assert result.total_questions == 3
    assert result.percentage == 0


def test_camel_case_payload_parses():
    answer = AnswerSubmit.model_validate({"questionId": 5, "answerId": 7})
    assert answer.question_id == 5
    assert answer.answer_id == "7"
    assert answer.answer is None


def test_option_id_is_not_compared_with_answer_text():
    question = Question(
        id=4, text="3 - 2?", correct_answer="1",
        options=[Option(id=1, text="2"), Option(id=2, text="1")]
    )

    wrong = score_answers([question], [AnswerSubmit(question_id=4, answer_id=1)])
    right = score_answers([question], [AnswerSubmit(question_id=4, answer_id=2)])
    typed = score_answers([question], [AnswerSubmit(question_id=4, answer="1")])
    typed_id = score_answers([question], [AnswerSubmit(question_id=4, answer="2")])

    assert wrong.score == 0
    assert wrong.results[0]["correct"] is False
    assert right.score == 1
    assert typed.score == 1
    assert typed_id.score == 0
