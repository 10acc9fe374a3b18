import os
import tempfile

# Settings are read at import time, so configure before importing the app
_TEST_DIR = tempfile.mkdtemp(prefix="shortlinks-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR}/test.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_DEFAULT"] = "20/minute"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-shortlinks-suite"
os.environ["ENVIRONMENT"] = "development"
os.environ["PORT"] = "8000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from shortlinks.main import app
from shortlinks.database import Base, SessionLocal, engine


@pytest.fixture(autouse=True)
def isolate_db():
    """Wipe every table before each test"""
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())

    yield


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def register_user(client: TestClient, email: str, password: str = "secret123") -> dict:
    resp = client.post("/api/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture()
def alice(client):
    body = register_user(client, "alice@example.com")
    return {
        "id": body["user"]["id"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture()
def bob(client):
    body = register_user(client, "bob@example.com")
    return {
        "id": body["user"]["id"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }
