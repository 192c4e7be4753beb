"""
SQLite memory store.

Holds memory records keyed by owner and id. Every operation takes the
owner explicitly; there is no notion of a "current user" in here.

Handles:
- Create / read / update / delete of memories
- Owner-scoped listing, optionally limited to a date range
- Validation of the journal form rules (text, mood, date not in future)
"""

import logging
import sqlite3
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from memorybender.config import get_db_path
from memorybender.migrate import ensure_schema
from memorybender.moods import Mood, UnknownMoodError
from memorybender.records import MalformedDateError, MemoryRecord, parse_memory_date


logger = logging.getLogger(__name__)

DateRange = Tuple[date, date]


class MemoryValidationError(ValueError):
    """Raised when a memory fails the journal form rules."""


class MemoryStore:
    """Manages memory persistence in SQLite."""

    PATCHABLE_FIELDS = ("memory_date", "text", "mood", "message_to_past", "image_ref")

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize memory store.

        Args:
            db_path: Path to SQLite database (defaults to the configured one)
        """
        self.db_path = db_path or get_db_path()
        ensure_schema(self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def validate(
        memory_date: Any,
        text: Optional[str],
        mood: Any
    ) -> Tuple[date, str, Mood]:
        """
        Check required form fields and normalise them.

        Raises:
            MemoryValidationError: if the date, text or mood is missing or invalid
        """
        if memory_date is None:
            raise MemoryValidationError("Memory date is required")
        try:
            day = parse_memory_date(memory_date)
        except MalformedDateError as e:
            raise MemoryValidationError(str(e))
        if day > date.today():
            raise MemoryValidationError(f"Memory date {day.isoformat()} is in the future")

        if text is None or not text.strip():
            raise MemoryValidationError("Memory text is required")

        if mood is None:
            raise MemoryValidationError("Mood is required")
        try:
            mood = Mood.parse(mood)
        except UnknownMoodError as e:
            raise MemoryValidationError(str(e))

        return day, text, mood

    @staticmethod
    def _optional(value: Optional[str]) -> Optional[str]:
        """Blank optional text is stored as NULL."""
        if value is None or not value.strip():
            return None
        return value

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> MemoryRecord:
        return MemoryRecord.from_dict(dict(row))

    def create_memory(
        self,
        owner_id: str,
        memory_date: Any,
        text: str,
        mood: Any,
        message_to_past: Optional[str] = None,
        image_ref: Optional[str] = None
    ) -> MemoryRecord:
        """
        Create a new memory for an owner.

        Args:
            owner_id: Owning user
            memory_date: When the remembered event happened (not in the future)
            text: Narrative content (required)
            mood: Mood or mood label
            message_to_past: Optional note to a past self
            image_ref: Optional image store reference

        Returns:
            Created record

        Raises:
            MemoryValidationError: if a required field is missing or invalid
        """
        day, text, mood = self.validate(memory_date, text, mood)
        now = datetime.now().isoformat()

        record = MemoryRecord(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            memory_date=day,
            text=text,
            mood=mood,
            message_to_past=self._optional(message_to_past),
            image_ref=self._optional(image_ref),
            created_at=now,
            updated_at=now,
        )

        conn = self._get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO memories (
                    id, owner_id, memory_date, text, mood,
                    message_to_past, image_ref, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                record.id,
                record.owner_id,
                day.isoformat(),
                record.text,
                mood.label,
                record.message_to_past,
                record.image_ref,
                record.created_at,
                record.updated_at
            ))

            conn.commit()
            logger.info(f"Created memory {record.id} for {owner_id} ({day.isoformat()}, {mood.label})")
            return record

        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to create memory: {e}")
            raise
        finally:
            conn.close()

    def get_memory(self, owner_id: str, memory_id: str) -> Optional[MemoryRecord]:
        """
        Get a single memory.

        Returns:
            Record, or None if it does not exist or belongs to someone else
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM memories
                WHERE id = ? AND owner_id = ?
            """, (memory_id, owner_id))
            row = cursor.fetchone()
        finally:
            conn.close()

        return self._row_to_record(row) if row else None

    def list_memories(
        self,
        owner_id: str,
        date_range: Optional[DateRange] = None
    ) -> List[MemoryRecord]:
        """
        List an owner's memories, newest memory date first.

        Args:
            owner_id: Owning user
            date_range: Optional inclusive (start, end) dates

        Returns:
            Records ordered by memory_date desc, then created_at desc
        """
        query = "SELECT * FROM memories WHERE owner_id = ?"
        params: List[Any] = [owner_id]

        if date_range:
            start, end = date_range
            query += " AND memory_date >= ? AND memory_date <= ?"
            params.extend([start.isoformat(), end.isoformat()])

        query += " ORDER BY memory_date DESC, created_at DESC"

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            rows = cursor.fetchall()
        finally:
            conn.close()

        return [self._row_to_record(row) for row in rows]

    def list_year(self, owner_id: str, year: int) -> List[MemoryRecord]:
        """Memories dated within one calendar year."""
        return self.list_memories(owner_id, (date(year, 1, 1), date(year, 12, 31)))

    def years_with_memories(self, owner_id: str) -> List[int]:
        """Distinct years holding memories, most recent first."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT DISTINCT substr(memory_date, 1, 4) AS year
                FROM memories
                WHERE owner_id = ?
                ORDER BY year DESC
            """, (owner_id,))
            rows = cursor.fetchall()
        finally:
            conn.close()

        return [int(row['year']) for row in rows if row['year'].isdigit()]

    def update_memory(
        self,
        owner_id: str,
        memory_id: str,
        **patch: Any
    ) -> Optional[MemoryRecord]:
        """
        Update fields of an existing memory.

        Args:
            owner_id: Owning user
            memory_id: Memory to update
            **patch: Any of memory_date, text, mood, message_to_past, image_ref

        Returns:
            Updated record, or None if not found

        Raises:
            ValueError: for unknown fields
            MemoryValidationError: if the merged memory is invalid
        """
        unknown = set(patch) - set(self.PATCHABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        existing = self.get_memory(owner_id, memory_id)
        if not existing:
            logger.warning(f"Memory {memory_id} not found for update")
            return None

        day, text, mood = self.validate(
            patch.get("memory_date", existing.memory_date),
            patch.get("text", existing.text),
            patch.get("mood", existing.mood)
        )
        message_to_past = self._optional(patch.get("message_to_past", existing.message_to_past))
        image_ref = self._optional(patch.get("image_ref", existing.image_ref))
        updated_at = datetime.now().isoformat()

        conn = self._get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE memories
                SET memory_date = ?, text = ?, mood = ?,
                    message_to_past = ?, image_ref = ?, updated_at = ?
                WHERE id = ? AND owner_id = ?
            """, (
                day.isoformat(),
                text,
                mood.label,
                message_to_past,
                image_ref,
                updated_at,
                memory_id,
                owner_id
            ))

            conn.commit()
            logger.info(f"Updated memory {memory_id} ({', '.join(sorted(patch)) or 'no fields'})")

        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update memory {memory_id}: {e}")
            raise
        finally:
            conn.close()

        return self.get_memory(owner_id, memory_id)

    def delete_memory(self, owner_id: str, memory_id: str) -> bool:
        """
        Delete a memory.

        Returns:
            True if deleted, False if not found
        """
        conn = self._get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                DELETE FROM memories WHERE id = ? AND owner_id = ?
            """, (memory_id, owner_id))

            deleted = cursor.rowcount > 0
            conn.commit()

            if deleted:
                logger.info(f"Deleted memory {memory_id}")
            else:
                logger.warning(f"Memory {memory_id} not found for deletion")

            return deleted

        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete memory {memory_id}: {e}")
            raise
        finally:
            conn.close()

    def get_stats(self, owner_id: str) -> Dict[str, Any]:
        """Counts for the stats panel."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT mood, COUNT(*) AS count
                FROM memories
                WHERE owner_id = ?
                GROUP BY mood
            """, (owner_id,))
            by_mood = {row['mood']: row['count'] for row in cursor.fetchall()}

            cursor.execute("""
                SELECT MIN(memory_date) AS first, MAX(memory_date) AS last
                FROM memories
                WHERE owner_id = ?
            """, (owner_id,))
            span = cursor.fetchone()
        finally:
            conn.close()

        return {
            "total_memories": sum(by_mood.values()),
            "by_mood": by_mood,
            "first_date": span['first'],
            "last_date": span['last'],
            "years": self.years_with_memories(owner_id),
            "db_path": self.db_path,
        }
