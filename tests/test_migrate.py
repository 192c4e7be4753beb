"""
Tests for the schema migration runner.
"""
import os
import sqlite3
import tempfile

import pytest

from memorybender.migrate import (
    ensure_schema,
    get_current_version,
    get_migration_files,
    load_migration,
    run_migrations,
)


@pytest.fixture
def temp_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    os.unlink(path)

    yield path

    if os.path.exists(path):
        os.unlink(path)


def _tables(db_path):
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    finally:
        conn.close()
    return {row[0] for row in rows}


class TestMigrations:

    def test_fresh_database_is_version_zero(self, temp_db):
        assert get_current_version(temp_db) == 0

    def test_migration_files_in_order(self):
        versions = [load_migration(f).get_migration_version() for f in get_migration_files()]
        assert versions == sorted(versions)
        assert versions[0] == 1

    def test_run_all(self, temp_db):
        assert run_migrations(temp_db) is True

        assert get_current_version(temp_db) == 2
        assert {"memories", "profiles", "schema_version"} <= _tables(temp_db)

    def test_target_version(self, temp_db):
        run_migrations(temp_db, target_version=1)

        assert get_current_version(temp_db) == 1
        assert "profiles" not in _tables(temp_db)

    def test_target_version_zero_applies_nothing(self, temp_db):
        assert run_migrations(temp_db, target_version=0) is True

        assert get_current_version(temp_db) == 0
        assert "memories" not in _tables(temp_db)

    def test_ensure_schema_is_idempotent(self, temp_db):
        ensure_schema(temp_db)
        ensure_schema(temp_db)

        assert get_current_version(temp_db) == 2

    def test_downgrade(self, temp_db):
        ensure_schema(temp_db)
        migration = load_migration(get_migration_files()[-1])

        migration.downgrade(temp_db)

        assert get_current_version(temp_db) == 1
        assert "profiles" not in _tables(temp_db)
