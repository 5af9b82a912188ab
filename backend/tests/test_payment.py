from quizarena.core.security import sign_payment
from tests.utils import API, auth, signup


def create_order(client, token, quiz_id):
    response = client.post(
        f"{API}/payment/create-order", json={"quizId": quiz_id}, headers=auth(token)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def verify(client, token, order, provider_payment_id="pay_123", signature=None):
    if signature is None:
        signature = sign_payment(order["orderId"], provider_payment_id)
    return client.post(
        f"{API}/payment/verify",
        json={
            "orderId": order["orderId"],
            "providerPaymentId": provider_payment_id,
            "signature": signature
        },
        headers=auth(token)
    )


def test_paid_quiz_requires_payment_to_join(client, user_token, create_quiz):
    quiz = create_quiz(price=49.0)

    response = client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))

    assert response.status_code == 402
    assert response.json() == {
        "success": False,
        "message": "Payment required to join this quiz"
    }


def test_order_and_verify_unlock_quiz(client, user_token, create_quiz):
    quiz = create_quiz(price=49.0)

    order = create_order(client, user_token, quiz["id"])
    assert order["status"] == "PENDING"
    assert order["amount"] == 49.0
    assert order["currency"] == "INR"

    verified = verify(client, user_token, order)
    assert verified.status_code == 200
    assert verified.json()["data"]["status"] == "COMPLETED"
    assert verified.json()["data"]["paidAt"] is not None

    status = client.get(f"{API}/payment/status/{quiz['id']}", headers=auth(user_token)).json()
    assert status["data"] == {
        "quizId": quiz["id"],
        "price": 49.0,
        "requiresPayment": True,
        "hasAccess": True
    }

    joined = client.post(f"{API}/quiz/{quiz['id']}/join", headers=auth(user_token))
    assert joined.status_code == 201


def test_bad_signature_fails_payment(client, user_token, create_quiz):
    quiz = create_quiz(price=10)
    order = create_order(client, user_token, quiz["id"])

    response = verify(client, user_token, order, signature="0" * 64)

    assert response.status_code == 400
    assert response.json()["message"] == "Payment verification failed"
    history = client.get(f"{API}/payment/history", headers=auth(user_token)).json()
    assert history["data"][0]["status"] == "FAILED"
    assert history["data"][0]["quizTitle"] == "Capitals"

    replay = verify(client, user_token, order)
    assert replay.status_code == 400
    assert replay.json()["message"] == "Payment order is already failed"


def test_free_quiz_needs_no_order(client, user_token, create_quiz):
    quiz = create_quiz(price=0)

    response = client.post(
        f"{API}/payment/create-order", json={"quizId": quiz["id"]}, headers=auth(user_token)
    )

    assert response.status_code == 400
    assert response.json()["message"] == "This quiz is free"
    status = client.get(f"{API}/payment/status/{quiz['id']}", headers=auth(user_token)).json()
    assert status["data"]["hasAccess"] is True


def test_cannot_pay_twice(client, user_token, create_quiz):
    quiz = create_quiz(price=10)
    verify(client, user_token, create_order(client, user_token, quiz["id"]))

    response = client.post(
        f"{API}/payment/create-order", json={"quizId": quiz["id"]}, headers=auth(user_token)
    )

    assert response.status_code == 400
    assert response.json()["message"] == "You have already paid for this quiz"


def test_order_for_missing_quiz(client, user_token):
    response = client.post(
        f"{API}/payment/create-order", json={"quizId": 404}, headers=auth(user_token)
    )
    assert response.status_code == 404


def test_verify_unknown_order(client, user_token):
    response = verify(client, user_token, {"orderId": "order_missing"})
    assert response.status_code == 404
    assert response.json()["message"] == "Payment order not found"


def test_staff_sees_quiz_revenue(client, admin_token, user_token, create_quiz):
    quiz = create_quiz(price=20)
    verify(client, user_token, create_order(client, user_token, quiz["id"]))
    other = signup(client, "other@example.com")
    create_order(client, other, quiz["id"])

    response = client.get(f"{API}/payment/quiz/{quiz['id']}", headers=auth(admin_token))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalRevenue"] == 20
    assert response.json()["count"] == 2
    statuses = {p["user"]["email"]: p["status"] for p in data["payments"]}
    assert statuses == {"player@example.com": "COMPLETED", "other@example.com": "PENDING"}

    forbidden = client.get(f"{API}/payment/quiz/{quiz['id']}", headers=auth(user_token))
    assert forbidden.status_code == 403


def test_second_open_order_cannot_complete(client, admin_token, user_token, create_quiz):
    quiz = create_quiz(price=10)
    first = create_order(client, user_token, quiz["id"])
    second = create_order(client, user_token, quiz["id"])

    assert verify(client, user_token, first).status_code == 200
    response = verify(client, user_token, second, provider_payment_id="pay_456")

    assert response.status_code == 400
    assert response.json()["message"] == "You have already paid for this quiz"
    history = client.get(f"{API}/payment/history", headers=auth(user_token)).json()
    assert sorted(p["status"] for p in history["data"]) == ["COMPLETED", "PENDING"]
    revenue = client.get(f"{API}/payment/quiz/{quiz['id']}", headers=auth(admin_token))
    assert revenue.json()["data"]["totalRevenue"] == 10
