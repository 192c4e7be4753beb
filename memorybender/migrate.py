#!/usr/bin/env python3
"""
Migration Runner for Memory Bender

Runs all pending database migrations in order.
"""

import importlib.util
import logging
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def get_current_version(db_path: str) -> int:
    """Get the current schema version from database"""
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT name FROM sqlite_master
            WHERE type='table' AND name='schema_version'
        """)

        if not cursor.fetchone():
            return 0  # No migrations applied yet

        cursor.execute("SELECT MAX(version) FROM schema_version")
        result = cursor.fetchone()
        return result[0] if result[0] else 0
    finally:
        conn.close()


def get_migration_files() -> List[Path]:
    """Get all migration files in order"""
    return sorted(
        f for f in MIGRATIONS_DIR.glob("M*.py")
        if not f.name.startswith(".")
    )


def load_migration(migration_file: Path):
    """Load a migration module dynamically"""
    spec = importlib.util.spec_from_file_location(
        f"memorybender_migration_{migration_file.stem}",
        migration_file
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def run_migrations(db_path: str, target_version: Optional[int] = None) -> bool:
    """
    Run all pending migrations

    Args:
        db_path: Path to SQLite database
        target_version: Target version (None = latest)

    Returns:
        True if the database is up to date (or at target), False on failure
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    current_version = get_current_version(db_path)
    applied_count = 0

    for migration_file in get_migration_files():
        migration = load_migration(migration_file)
        migration_version = migration.get_migration_version()

        if migration_version <= current_version:
            continue

        if target_version is not None and migration_version > target_version:
            logger.debug(f"Skipping {migration_file.name} (beyond target version)")
            continue

        logger.info(f"Applying {migration_file.name}...")
        try:
            migration.upgrade(db_path)
            applied_count += 1
        except sqlite3.Error as e:
            logger.error(f"Migration {migration_file.name} failed: {e}")
            return False

    if applied_count > 0:
        logger.info(
            f"Schema version: {current_version} -> {get_current_version(db_path)} "
            f"({applied_count} migration(s) applied)"
        )
    return True


def ensure_schema(db_path: str) -> None:
    """
    Bring a database up to the latest schema.

    Raises:
        RuntimeError: if a migration fails
    """
    if not run_migrations(db_path):
        raise RuntimeError(f"Could not migrate database: {db_path}")


def show_status(db_path: str):
    """Show migration status"""
    print(f"\n{'='*60}")
    print("MIGRATION STATUS")
    print(f"{'='*60}\n")

    current_version = get_current_version(db_path)
    print(f"Current version: {current_version}")

    print(f"\nAvailable migrations:")
    for migration_file in get_migration_files():
        version = load_migration(migration_file).get_migration_version()
        status = "✓ Applied" if version <= current_version else "⊙ Pending"
        print(f"  {status} - {migration_file.name} (v{version})")

    print()


def main():
    """Main entry point"""
    if len(sys.argv) < 2:
        print("Usage:")
        print("  python -m memorybender.migrate <db_path>            # Run all pending migrations")
        print("  python -m memorybender.migrate <db_path> status     # Show migration status")
        print("  python -m memorybender.migrate <db_path> <version>  # Migrate to specific version")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format='%(message)s')
    db_path = sys.argv[1]

    if len(sys.argv) > 2:
        if sys.argv[2] == "status":
            show_status(db_path)
        else:
            try:
                target_version = int(sys.argv[2])
            except ValueError:
                print(f"✗ Invalid version: {sys.argv[2]}")
                sys.exit(1)
            sys.exit(0 if run_migrations(db_path, target_version) else 1)
    else:
        sys.exit(0 if run_migrations(db_path) else 1)


if __name__ == "__main__":
    main()
