from datetime import datetime

from quizarena.core.database import SessionLocal
from quizarena.core.security import verify_token
from quizarena.models.account import User
from quizarena.models.attempt import LeaderBoardEntry
from tests.utils import API, auth, sample_quiz, signup


def answers_for(quiz, values):
    return {
        "answers": [
            {"questionId": question["id"], "answer": value}
            for question, value in zip(quiz["questions"], values)
        ]
    }


def play(client, token, quiz, values):
    joined = client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(token))
    assert joined.status_code == 201, joined.text
    response = client.post(
        f"{API}/quiz/{quiz['id']}/submit", json=answers_for(quiz, values), headers=auth(token)
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_create_quiz_returns_nested_questions(client, create_quiz):
    quiz = create_quiz(price=0)

    assert quiz["title"] == "Capitals"
    assert len(quiz["questions"]) == 3
    first = quiz["questions"][0]
    assert first["correctAnswer"] == "Paris"
    assert [o["text"] for o in first["options"]] == ["Paris", "Rome"]


def test_create_quiz_requires_questions(client, admin_token):
    body = sample_quiz()
    body["questions"] = []

    response = client.post(f"{API}/quiz/create-quiz", json=body, headers=auth(admin_token))

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_only_admins_create_quizzes(client, user_token):
    response = client.post(f"{API}/quiz/create-quiz", json=sample_quiz(), headers=auth(user_token))
    assert response.status_code == 403


def test_list_quizzes_with_counts(client, user_token, create_quiz):
    quiz = create_quiz()
    play(client, user_token, quiz, ["Paris", "Rome", "Madrid"])

    response = client.get(f"{API}/quiz/quizzes", headers=auth(user_token))

    assert response.status_code == 200
    [item] = response.json()["data"]
    assert item["totalQuestions"] == 3
    assert item["totalParticipants"] == 1
    assert item["leaderboardEntries"] == 1


def test_get_quiz_hides_answers_from_players(client, admin_token, user_token, create_quiz):
    quiz = create_quiz()

    as_player = client.get(f"{API}/quiz/{quiz['id']}", headers=auth(user_token)).json()["data"]
    as_admin = client.get(f"{API}/quiz/{quiz['id']}", headers=auth(admin_token)).json()["data"]

    assert "correctAnswer" not in as_player["questions"][0]
    assert as_admin["questions"][0]["correctAnswer"] == "Paris"
    assert as_admin["topScores"] == []
    assert as_admin["totalParticipants"] == 0


def test_get_missing_quiz(client, user_token):
    response = client.get(f"{API}/quiz/12345", headers=auth(user_token))

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Quiz not found"}


def test_update_quiz_fields_and_add_questions(client, admin_token, create_quiz):
    quiz = create_quiz()

    response = client.patch(
        f"{API}/quiz/{quiz['id']}",
        json={
            "title": "Capitals II",
            "price": 5,
            "operation": "add",
            "questions": [{"text": "Capital of Peru?", "correctAnswer": "Lima", "options": []}]
        },
        headers=auth(admin_token)
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Capitals II"
    assert data["description"] == "European capitals"
    assert data["price"] == 5
    assert len(data["questions"]) == 4


def test_update_quiz_replace_questions(client, admin_token, create_quiz):
    quiz = create_quiz()

    response = client.patch(
        f"{API}/quiz/{quiz['id']}",
        json={
            "operation": "replace",
            "questions": [{"text": "Capital of Peru?", "correctAnswer": "Lima", "options": [{"text": "Lima"}]}]
        },
        headers=auth(admin_token)
    )

    data = response.json()["data"]
    assert [q["text"] for q in data["questions"]] == ["Capital of Peru?"]


def test_update_questions_without_operation(client, admin_token, create_quiz):
    quiz = create_quiz()

    response = client.patch(
        f"{API}/quiz/{quiz['id']}",
        json={"questions": [{"text": "Q", "correctAnswer": "A"}]},
        headers=auth(admin_token)
    )

    assert response.status_code == 400


def test_only_owner_updates_or_deletes(client, create_quiz):
    quiz = create_quiz()
    other = signup(client, "other@example.com", role="ADMIN")

    update = client.patch(f"{API}/quiz/{quiz['id']}", json={"title": "Mine"}, headers=auth(other))
    assert update.status_code == 404
    assert update.json()["message"] == (
        "Quiz not found or you do not have permission to update it"
    )

    delete = client.delete(f"{API}/quiz/{quiz['id']}", headers=auth(other))
    assert delete.status_code == 404
    assert delete.json()["message"] == (
        "Quiz not found or you do not have permission to delete it"
    )


def test_delete_quiz_cascades(client, admin_token, user_token, create_quiz):
    quiz = create_quiz()
    play(client, user_token, quiz, ["Paris"])

    response = client.delete(f"{API}/quiz/{quiz['id']}", headers=auth(admin_token))

    assert response.status_code == 200
    assert response.json()["message"] == "Quiz deleted successfully"
    assert client.get(f"{API}/quiz/{quiz['id']}", headers=auth(admin_token)).status_code == 404
    joined = client.get(f"{API}/quiz/user/joined", headers=auth(user_token)).json()
    assert joined["count"] == 0


def test_join_twice_is_rejected(client, user_token, create_quiz):
    quiz = create_quiz()

    first = client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))
    second = client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))

    assert first.status_code == 201
    assert first.json()["data"]["quiz"]["title"] == "Capitals"
    assert first.json()["data"]["completed"] is False
    assert second.status_code == 400
    assert second.json()["message"] == "You have already joined this quiz"


def test_join_missing_quiz(client, user_token):
    response = client.post(f"{API}/quiz/999/join", headers=auth(user_token))
    assert response.status_code == 404


def test_admins_cannot_join(client, admin_token, create_quiz):
    quiz = create_quiz()
    response = client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(admin_token))
    assert response.status_code == 403


def test_take_requires_join_and_hides_answers(client, user_token, create_quiz):
    quiz = create_quiz()

    before = client.get(f"{API}/quiz/{quiz['id']}/take", headers=auth(user_token))
    assert before.status_code == 400
    assert before.json()["message"] == "You need to join this quiz first"

    client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))
    response = client.get(f"{API}/quiz/{quiz['id']}/take", headers=auth(user_token))

    data = response.json()["data"]
    assert data["totalQuestions"] == 3
    assert set(data["questions"][0]) == {"id", "text", "options"}


def test_submit_scores_and_completes(client, user_token, create_quiz):
    quiz = create_quiz()

    data = play(client, user_token, quiz, ["Paris", "Madrid", "Madrid"])

    assert data["score"] == 2
    assert data["totalQuestions"] == 3
    assert data["percentageScore"] == 67
    assert data["completed"] is True
    assert [r["correct"] for r in data["results"]] == [True, False, True]

    again = client.post(
        f"{API}/quiz/{quiz['id']}/submit",
        json=answers_for(quiz, ["Paris"]),
        headers=auth(user_token)
    )
    assert again.status_code == 400
    assert again.json()["message"] == "Quiz already completed"

    take = client.get(f"{API}/quiz/{quiz['id']}/take", headers=auth(user_token))
    assert take.json()["message"] == "You have already completed this quiz"


def test_submit_accepts_option_ids(client, user_token, create_quiz):
    quiz = create_quiz()
    client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))
    payload = {
        "answers": [
            {"questionId": question["id"], "answerId": question["options"][0]["id"]}
            for question in quiz["questions"]
        ]
    }

    response = client.post(f"{API}/quiz/{quiz['id']}/submit", json=payload, headers=auth(user_token))

    # first options are Paris, Madrid, Madrid
    assert response.json()["data"]["score"] == 2


def test_submit_validation(client, user_token, create_quiz):
    quiz = create_quiz()

    not_joined = client.post(
        f"{API}/quiz/{quiz['id']}/submit", json=answers_for(quiz, ["Paris"]), headers=auth(user_token)
    )
    assert not_joined.status_code == 400
    assert not_joined.json()["message"] == "Join the quiz before submitting"

    client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))
    bad_body = client.post(
        f"{API}/quiz/{quiz['id']}/submit", json={"answers": "Paris"}, headers=auth(user_token)
    )
    assert bad_body.status_code == 400


def test_result_and_rank(client, user_token, create_quiz):
    quiz = create_quiz()
    rival = signup(client, "rival@example.com", name="Rita Rival")
    play(client, rival, quiz, ["Paris", "Rome", "Madrid"])

    pending = client.get(f"{API}/quiz/{quiz['id']}/result", headers=auth(user_token))
    assert pending.status_code == 404
    assert pending.json()["message"] == "Quiz attempt not found"

    client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))
    incomplete = client.get(f"{API}/quiz/{quiz['id']}/result", headers=auth(user_token))
    assert incomplete.status_code == 400
    assert incomplete.json()["message"] == "You have not completed this quiz yet"

    client.post(
        f"{API}/quiz/{quiz['id']}/submit", json=answers_for(quiz, ["Paris"]), headers=auth(user_token)
    )
    result = client.get(f"{API}/quiz/{quiz['id']}/result", headers=auth(user_token)).json()["data"]

    assert result["score"] == 1
    assert result["percentageScore"] == 33
    assert result["rank"] == 2
    assert result["totalParticipants"] == 2
    assert result["topScores"] == [
        {"rank": 1, "name": "Rita Rival", "score": 3},
        {"rank": 2, "name": "Pat Player", "score": 1},
    ]


def test_leaderboard_pagination(client, user_token, create_quiz):
    quiz = create_quiz()
    scores = [["Paris", "Rome", "Madrid"], ["Paris", "Rome"], ["Paris"], []]
    for index, values in enumerate(scores):
        token = signup(client, f"p{index}@example.com", name=f"Player {index}")
        play(client, token, quiz, values)

    first = client.get(
        f"{API}/quiz/{quiz['id']}/leaderboard", params={"limit": 3, "page": 1}, headers=auth(user_token)
    ).json()["data"]
    second = client.get(
        f"{API}/quiz/{quiz['id']}/leaderboard", params={"limit": 3, "page": 2}, headers=auth(user_token)
    ).json()["data"]

    assert [e["score"] for e in first["entries"]] == [3, 2, 1]
    assert [e["rank"] for e in first["entries"]] == [1, 2, 3]
    assert first["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "totalEntries": 4,
        "entriesPerPage": 3
    }
    assert second["entries"] == [
        {
            "rank": 4,
            "score": 0,
            "userName": "Player 3",
            "userEmail": "p3@example.com",
            "createdAt": second["entries"][0]["createdAt"]
        }
    ]


def test_quiz_users_and_joined_listing(client, admin_token, user_token, create_quiz):
    quiz = create_quiz()
    client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))

    users = client.get(f"{API}/quiz/{quiz['id']}/users", headers=auth(admin_token)).json()
    assert users["count"] == 1
    assert users["data"][0]["user"] == {
        "id": verify_token(user_token)["id"],
        "name": "Pat Player",
        "email": "player@example.com"
    }

    joined = client.get(f"{API}/quiz/user/joined", headers=auth(user_token)).json()
    assert joined["count"] == 1
    assert joined["data"][0]["quizId"] == quiz["id"]
    assert joined["data"][0]["totalQuestions"] == 3
    assert joined["data"][0]["completed"] is False


def test_submit_option_id_with_numeric_answers(client, user_token, create_quiz):
    quiz = create_quiz(questions=[
        {
            "text": "3 - 2?",
            "correctAnswer": "1",
            "options": [{"text": "2"}, {"text": "1"}]
        },
        {
            "text": "1 + 1?",
            "correctAnswer": "2",
            "options": [{"text": "2"}, {"text": "3"}]
        },
    ])
    first, second = quiz["questions"]
    client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))

    response = client.post(
        f"{API}/quiz/{quiz['id']}/submit",
        json={"answers": [
            {"questionId": first["id"], "answerId": first["options"][0]["id"]},
            {"questionId": second["id"], "answerId": second["options"][0]["id"]},
        ]},
        headers=auth(user_token)
    )

    data = response.json()["data"]
    assert data["score"] == 1
    assert data["percentageScore"] == 50
    assert [r["correct"] for r in data["results"]] == [False, True]


def test_equal_scores_rank_by_who_finished_first(client, create_quiz):
    quiz = create_quiz()
    early = signup(client, "early@example.com", name="Early Bird")
    late = signup(client, "late@example.com", name="Late Comer")
    play(client, early, quiz, ["Paris", "Rome", "Madrid"])
    play(client, late, quiz, ["Paris", "Rome", "Madrid"])

    def standings():
        board = client.get(
            f"{API}/quiz/{quiz['id']}/leaderboard", headers=auth(early)
        ).json()["data"]["entries"]
        ranks = {
            name: client.get(
                f"{API}/quiz/{quiz['id']}/result", headers=auth(token)
            ).json()["data"]["rank"]
            for name, token in (("Early Bird", early), ("Late Comer", late))
        }
        return [e["userName"] for e in board], ranks

    assert standings() == (
        ["Early Bird", "Late Comer"], {"Early Bird": 1, "Late Comer": 2}
    )

    # the earlier entry now has the later timestamp
    with SessionLocal() as db:
        entry = db.query(LeaderBoardEntry).join(User).filter(
            User.email == "early@example.com"
        ).one()
        entry.updated_at = datetime(2100, 1, 1)
        db.commit()

    assert standings() == (
        ["Late Comer", "Early Bird"], {"Early Bird": 2, "Late Comer": 1}
    )
