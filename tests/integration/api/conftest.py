from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from boringblog.adapters.auth.crypto import JWTAuthAdapter
from boringblog.adapters.sqlite.repos import SQLiteUserRepo
from boringblog.api.auth_utils import get_password_hash
from boringblog.api.deps import Settings
from boringblog.domain.entities import User

PASSWORD = "password123"


@pytest.fixture
def make_user(client: TestClient, app: FastAPI) -> Callable[..., User]:
    """Insert a user straight into the app's database."""
    repo = SQLiteUserRepo(app.state.db)
    hashed = get_password_hash(PASSWORD)

    def _make(email: str = "alice@example.com", name: str = "Alice", role: str = "AUTHOR") -> User:
        return repo.save(User(email=email, name=name, password_hash=hashed, role=role))

    return _make


@pytest.fixture
def auth_headers(settings: Settings) -> Callable[[User], dict[str, str]]:
    adapter = JWTAuthAdapter(settings.secret_key)

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {adapter.create_token(user)}"}

    return _headers


@pytest.fixture
def alice(make_user) -> User:
    return make_user()


@pytest.fixture
def bob(make_user) -> User:
    return make_user(email="bob@example.com", name="Bob")


@pytest.fixture
def root(make_user) -> User:
    return make_user(email="root@example.com", name="Root", role="ADMIN")
