import os

# Configure before the application modules read settings
os.environ["TESTING"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PAYMENT_SECRET"] = "test-payment-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from quizarena.core.database import DatabaseManager
from quizarena.main import app
from tests.utils import API, auth, sample_quiz, signup


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    DatabaseManager.drop_all_tables()


@pytest.fixture
def admin_token(client):
    return signup(client, "admin@example.com", name="Ada Admin", role="ADMIN")


@pytest.fixture
def user_token(client):
    return signup(client, "player@example.com", name="Pat Player")


@pytest.fixture
def create_quiz(client, admin_token):
    def _create(**kwargs):
        response = client.post(
            f"{API}/quiz/create-quiz", json=sample_quiz(**kwargs), headers=auth(admin_token)
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _create
