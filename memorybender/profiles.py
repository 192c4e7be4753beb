"""
Owner profiles (names and avatar).
"""

import logging
import sqlite3
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from memorybender.config import get_db_path
from memorybender.migrate import ensure_schema


logger = logging.getLogger(__name__)


@dataclass
class Profile:
    """Profile details for one owner."""
    owner_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: Optional[str] = None
    avatar_ref: Optional[str] = None

    @property
    def full_name(self) -> Optional[str]:
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts) if parts else None

    @property
    def greeting_name(self) -> str:
        """Display name, else full name, else the owner id."""
        return self.display_name or self.full_name or self.owner_id

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ProfileStore:
    """Manages profile persistence in SQLite."""

    FIELDS = ("first_name", "last_name", "display_name", "avatar_ref")

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or get_db_path()
        ensure_schema(self.db_path)

    def get_profile(self, owner_id: str) -> Optional[Profile]:
        """Get a profile, or None if the owner never saved one."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT owner_id, first_name, last_name, display_name, avatar_ref
                FROM profiles
                WHERE owner_id = ?
            """, (owner_id,))
            row = cursor.fetchone()
        finally:
            conn.close()

        return Profile(**dict(row)) if row else None

    def upsert_profile(self, owner_id: str, **fields: Optional[str]) -> Profile:
        """
        Create or update a profile.

        Only the given fields change. Blank strings clear a field.

        Raises:
            ValueError: for unknown fields
        """
        unknown = set(fields) - set(self.FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile field(s): {', '.join(sorted(unknown))}")

        current = self.get_profile(owner_id) or Profile(owner_id=owner_id)
        for name, value in fields.items():
            if value is not None and not value.strip():
                value = None
            setattr(current, name, value)

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO profiles (
                    owner_id, first_name, last_name, display_name, avatar_ref, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(owner_id) DO UPDATE SET
                    first_name = excluded.first_name,
                    last_name = excluded.last_name,
                    display_name = excluded.display_name,
                    avatar_ref = excluded.avatar_ref,
                    updated_at = excluded.updated_at
            """, (
                owner_id,
                current.first_name,
                current.last_name,
                current.display_name,
                current.avatar_ref,
                datetime.now().isoformat()
            ))

            conn.commit()
            logger.info(f"Saved profile for {owner_id}")
            return current

        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to save profile for {owner_id}: {e}")
            raise
        finally:
            conn.close()
