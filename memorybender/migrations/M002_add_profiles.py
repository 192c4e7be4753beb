"""
Migration 002: Add Profiles

Creates the per-owner profile table (names and avatar).
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)


def get_migration_version():
    """Return the version number of this migration"""
    return 2


def upgrade(db_path: str):
    """Apply the migration"""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    
    try:
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                owner_id TEXT PRIMARY KEY,
                first_name TEXT,
                last_name TEXT,
                display_name TEXT,
                avatar_ref TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        
        cursor.execute("""
            INSERT OR IGNORE INTO schema_version (version) VALUES (?)
        """, (get_migration_version(),))
        
        conn.commit()
        logger.info(f"Migration {get_migration_version()} applied successfully")
        
    except Exception as e:
        conn.rollback()
        logger.error(f"Migration {get_migration_version()} failed: {e}")
        raise
    finally:
        conn.close()


def downgrade(db_path: str):
    """Rollback the migration"""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    
    try:
        cursor.execute("DROP TABLE IF EXISTS profiles")
        cursor.execute("DELETE FROM schema_version WHERE version = ?",
                      (get_migration_version(),))
        
        conn.commit()
        logger.info(f"Migration {get_migration_version()} rolled back")
        
    except Exception as e:
        conn.rollback()
        logger.error(f"Rollback failed: {e}")
        raise
    finally:
        conn.close()
