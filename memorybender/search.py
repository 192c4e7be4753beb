"""
Search and filtering over an already fetched list of memories.
"""

from typing import Iterable, List, Optional, Tuple

from memorybender.moods import Mood
from memorybender.records import MalformedDateError, MemoryRecord, parse_memory_date


def _year_of(record: MemoryRecord) -> Optional[int]:
    try:
        return parse_memory_date(record.memory_date).year
    except MalformedDateError:
        return None


def matches_query(record: MemoryRecord, query: str) -> bool:
    """Case-insensitive substring match over text, message to past, and mood."""
    needle = query.strip().lower()
    if not needle:
        return True
    haystacks = [record.text, record.message_to_past or "", record.mood.label]
    return any(needle in haystack.lower() for haystack in haystacks)


def filter_memories(
    records: Iterable[MemoryRecord],
    query: str = "",
    year: Optional[int] = None,
    mood=None
) -> List[MemoryRecord]:
    """
    Filter memories by free text, year and mood. Filters compose.

    Args:
        records: Memories in display order (order is preserved)
        query: Free text; blank matches everything
        year: Exact memory year, or None for all years
        mood: Mood or mood label, or None for all moods

    Returns:
        Matching records
    """
    wanted_mood = Mood.parse(mood) if mood is not None else None

    results = []
    for record in records:
        if not matches_query(record, query):
            continue
        if year is not None and _year_of(record) != year:
            continue
        if wanted_mood is not None and record.mood is not wanted_mood:
            continue
        results.append(record)
    return results


def available_years(records: Iterable[MemoryRecord]) -> List[int]:
    """Distinct memory years, most recent first."""
    years = {_year_of(record) for record in records}
    years.discard(None)
    return sorted(years, reverse=True)


def highlight_spans(text: str, query: str) -> List[Tuple[int, int]]:
    """
    (start, end) offsets of every case-insensitive occurrence of query.

    Occurrences do not overlap.
    """
    needle = query.strip().lower()
    if not needle:
        return []

    spans = []
    lowered = text.lower()
    start = lowered.find(needle)
    while start != -1:
        end = start + len(needle)
        spans.append((start, end))
        start = lowered.find(needle, end)
    return spans
