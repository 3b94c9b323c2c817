from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file, with a cheap bcrypt cost."""
    return Settings(
        SECRET_KEY="test-secret",
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        BCRYPT_ROUNDS=4,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture()
def app(settings):
    app = create_app(settings)
    yield app
    app.state.engine.dispose()


@pytest.fixture()
def client(app) -> TestClient:
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def db(app):
    session = app.state.SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client, email="demo@example.com", password="demo123", name="Demo User"):
    response = client.post(
        "/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture()
def demo(client):
    """A registered user; returns ``(user, headers)``."""
    data = register(client)
    return data["user"], auth_headers(data["token"])


@pytest.fixture()
def other(client):
    data = register(client, email="other@example.com", name="Other User")
    return data["user"], auth_headers(data["token"])
