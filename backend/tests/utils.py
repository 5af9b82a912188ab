API = "/api/v1"


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def signup(client, email, name="Tester", password="secret-pass", role=None):
    body = {"email": email, "name": name, "password": password}
    if role:
        body["role"] = role
    response = client.post(f"{API}/auth/signup", json=body)
    assert response.status_code == 201, response.text
    return response.json()["token"]


def sample_quiz(title="Capitals", price=0, questions=None):
    return {
        "title": title,
        "description": "European capitals",
        "price": price,
        "questions": questions or [
            {
                "text": "Capital of France?",
                "correctAnswer": "Paris",
                "options": [{"text": "Paris"}, {"text": "Rome"}]
            },
            {
                "text": "Capital of Italy?",
                "correctAnswer": "Rome",
                "options": [{"text": "Madrid"}, {"text": "Rome"}]
            },
            {
                "text": "Capital of Spain?",
                "correctAnswer": "Madrid",
                "options": [{"text": "Madrid"}, {"text": "Lisbon"}]
            },
        ]
    }
