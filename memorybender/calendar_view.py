"""
Calendar helpers for the month view: which days hold memories.
"""

import calendar
from datetime import date
from typing import Iterable, List, Set

from memorybender.records import MalformedDateError, MemoryRecord, parse_memory_date


def _dates(records: Iterable[MemoryRecord]):
    for record in records:
        try:
            yield record, parse_memory_date(record.memory_date)
        except MalformedDateError:
            continue


def memories_on_date(records: Iterable[MemoryRecord], day: date) -> List[MemoryRecord]:
    """Memories dated exactly on a given day, in input order."""
    return [record for record, memory_date in _dates(records) if memory_date == day]


def marked_days(records: Iterable[MemoryRecord], year: int, month: int) -> Set[int]:
    """Day numbers of a month that hold at least one memory."""
    return {
        memory_date.day
        for _, memory_date in _dates(records)
        if memory_date.year == year and memory_date.month == month
    }


def month_grid(year: int, month: int) -> List[List[int]]:
    """Weeks of a month, Monday first; 0 pads days outside the month."""
    return calendar.Calendar(firstweekday=calendar.MONDAY).monthdayscalendar(year, month)
