from __future__ import annotations

from pathlib import Path

import pytest

from api import create_app
from models import storage

PASSWORD = "password123"


@pytest.fixture
def app(tmp_path: Path):
    app = create_app(
        "testing",
        {"DATABASE_URL": f"sqlite:///{tmp_path / 'mapper-test.db'}"},
    )
    yield app
    storage.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def codec(app):
    return app.extensions["token_codec"]


@pytest.fixture
def manager(app):
    return app.extensions["session_manager"]


@pytest.fixture
def user(manager):
    return manager.register("alice@example.com", "Alice", PASSWORD)


def register(client, email: str = "a@b.com", name: str = "Name", password: str = PASSWORD):
    return client.post(
        "/api/v1/auth/register",
        json={"email": email, "name": name, "password": password},
    )


def login(client, email: str = "a@b.com", password: str = PASSWORD) -> dict:
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client) -> dict:
    register(client)
    return bearer(login(client)["access_token"])
