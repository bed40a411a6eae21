# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from todo_api.config import Settings
from todo_api.database import Database
from todo_api.main import create_app

from .helpers import TEST_SECRET


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a throwaway SQLite file.

    bcrypt runs at its minimum cost so registration stays fast; `.env` is
    ignored so a developer's local file cannot leak into the tests.
    """
    return Settings(
        _env_file=None,
        JWT_SECRET=TEST_SECRET,
        DATABASE_URL=f"sqlite:///{tmp_path / 'todo.db'}",
        BCRYPT_ROUNDS=4,
    )


@pytest.fixture()
def database(settings: Settings) -> Database:
    db = Database(settings.DATABASE_URL)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def app(settings: Settings, database: Database) -> FastAPI:
    return create_app(settings, database)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register_user(client: TestClient) -> Callable[..., str]:
    """Register through the API and return the issued token."""

    def _register(username: str, email: str | None = None, password: str = "pw1") -> str:
        resp = client.post(
            "/register",
            json={"username": username, "email": email or f"{username}@x.com", "password": password},
        )
        assert resp.status_code == 200, resp.text
        return resp.json()["token"]

    return _register
