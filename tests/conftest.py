from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from boringblog.adapters.clock import FixedClock
from boringblog.adapters.dev_email import DevEmailAdapter
from boringblog.adapters.sqlite.database import Database
from boringblog.adapters.sqlite.migrator import SQLiteMigrator
from boringblog.api.deps import Settings
from boringblog.api.main import create_app
from boringblog.rules.loader import load_rules
from boringblog.rules.models import Rules

ROOT = Path(__file__).resolve().parent.parent
FIXED_NOW = datetime(2026, 1, 12, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def rules() -> Rules:
    """Real rules from the project root."""
    return load_rules(ROOT / "rules.yaml")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture
def make_doc() -> Callable[..., dict[str, Any]]:
    """Build a one-paragraph-per-argument editor document."""

    def _make(*paragraphs: str) -> dict[str, Any]:
        return {
            "type": "doc",
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": text}]}
                for text in paragraphs
            ],
        }

    return _make


@pytest.fixture
def db(tmp_path: Path) -> Database:
    """Migrated SQLite database in a temp directory."""
    database = Database(str(tmp_path / "blog.db"))
    SQLiteMigrator(database.db_path, str(ROOT / "migrations")).run_migrations()
    return database


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path / "data",
        rules_path=ROOT / "rules.yaml",
        migrations_dir=ROOT / "migrations",
        secret_key="test-secret",
        site_url="https://blog.example.com",
        log_level="WARNING",
    )


@pytest.fixture
def mailer() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def app(settings: Settings, clock: FixedClock, mailer: DevEmailAdapter) -> FastAPI:
    return create_app(settings, clock=clock, mailer=mailer)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    # Context manager runs the lifespan (rules, migrations, state)
    with TestClient(app) as c:
        yield c
