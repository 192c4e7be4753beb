"""
Memory Bender - Personal Memory Journal

Record dated memories with a mood, then look back at the same day across years.
"""

__version__ = "0.1.0"

from memorybender.moods import Mood
from memorybender.records import MemoryRecord
from memorybender.timeline import (
    DayKey,
    MemoryIndex,
    TimelineNavigator,
    build_index,
    memories_on_day_key,
    to_day_key,
)

__all__ = [
    "Mood",
    "MemoryRecord",
    "DayKey",
    "MemoryIndex",
    "TimelineNavigator",
    "build_index",
    "memories_on_day_key",
    "to_day_key",
]
