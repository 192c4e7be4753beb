"""
Memory record - one journal entry for one calendar date.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from memorybender.moods import Mood


class MalformedDateError(ValueError):
    """Raised when a memory date cannot be read as year/month/day."""


def parse_memory_date(value: Any) -> date:
    """
    Read a memory date from a date, datetime or ISO string.

    Args:
        value: date, datetime, "YYYY-MM-DD" or full ISO timestamp string

    Returns:
        Calendar date (time component dropped)

    Raises:
        MalformedDateError: if the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise MalformedDateError(f"Not a calendar date: {value!r}")


@dataclass
class MemoryRecord:
    """
    A single memory as returned by the memory store.

    memory_date is normally a date; a value the store could not read is kept
    as the raw string so that index building can skip it with a warning.
    """
    id: str
    owner_id: str
    memory_date: Union[date, str]
    text: str
    mood: Mood
    message_to_past: Optional[str] = None
    image_ref: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def year(self) -> int:
        return parse_memory_date(self.memory_date).year

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to a JSON-friendly dictionary."""
        memory_date = self.memory_date
        if isinstance(memory_date, date):
            memory_date = memory_date.isoformat()
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "memory_date": memory_date,
            "text": self.text,
            "mood": self.mood.label,
            "message_to_past": self.message_to_past,
            "image_ref": self.image_ref,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemoryRecord":
        """Create a record from a dictionary or sqlite3.Row mapping."""
        raw_date = data["memory_date"]
        try:
            memory_date = parse_memory_date(raw_date)
        except MalformedDateError:
            memory_date = raw_date

        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            memory_date=memory_date,
            text=data["text"],
            mood=Mood.parse(data["mood"]),
            message_to_past=data.get("message_to_past"),
            image_ref=data.get("image_ref"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
