"""
Migration 001: Initial Schema

Creates base tables for Memory Bender:
- memories (one row per journal entry, scoped by owner)
- schema_version (migration tracking)
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)


def get_migration_version():
    """Return the version number of this migration"""
    return 1


def upgrade(db_path: str):
    """Apply the migration"""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    
    try:
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS memories (
                id TEXT PRIMARY KEY,              -- UUID
                owner_id TEXT NOT NULL,
                memory_date TEXT NOT NULL,        -- YYYY-MM-DD
                text TEXT NOT NULL,
                mood TEXT NOT NULL,
                message_to_past TEXT,
                image_ref TEXT,                   -- Opaque image store reference
                created_at TIMESTAMP NOT NULL,
                updated_at TIMESTAMP NOT NULL
            )
        """)
        
        # Every query is owner-scoped and ordered/filtered by date
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_memories_owner_date
            ON memories(owner_id, memory_date)
        """)
        
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
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
        cursor.execute("DROP TABLE IF EXISTS memories")
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
