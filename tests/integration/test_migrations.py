import sqlite3
from pathlib import Path

import pytest

from boringblog.adapters.sqlite.migrator import SQLiteMigrator

MIGRATIONS = str(Path(__file__).resolve().parents[2] / "migrations")


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "test_db.sqlite")


def _tables(db_path: str) -> set[str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        return {r[0] for r in rows}
    finally:
        conn.close()


def test_migrator_applies_initial(temp_db_path):
    applied = SQLiteMigrator(temp_db_path, MIGRATIONS).run_migrations()

    assert applied == ["0001_init.sql"]
    assert {"_migrations", "users", "posts", "tags", "post_tags"} <= _tables(temp_db_path)


def test_migrator_is_idempotent(temp_db_path):
    migrator = SQLiteMigrator(temp_db_path, MIGRATIONS)
    migrator.run_migrations()

    assert migrator.run_migrations() == []


def test_down_section_is_not_executed(temp_db_path, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_things.sql").write_text(
        "CREATE TABLE things (id TEXT PRIMARY KEY);\n-- Down\nDROP TABLE things;\n"
    )

    SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()

    assert "things" in _tables(temp_db_path)


def test_failed_migration_raises(temp_db_path, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_broken.sql").write_text("CREATE TABLE oops (;\n")

    with pytest.raises(RuntimeError, match="0001_broken.sql"):
        SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()
