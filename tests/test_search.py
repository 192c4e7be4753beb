"""
Tests for search filtering and calendar helpers.
"""
from datetime import date

import pytest

from memorybender.calendar_view import marked_days, memories_on_date, month_grid
from memorybender.moods import Mood, UnknownMoodError
from memorybender.records import MemoryRecord
from memorybender.search import available_years, filter_memories, highlight_spans


def make_record(memory_id, memory_date, text, mood="Happy", message=None):
    return MemoryRecord(
        id=memory_id,
        owner_id="alice",
        memory_date=memory_date,
        text=text,
        mood=Mood.parse(mood),
        message_to_past=message,
    )


@pytest.fixture
def journal():
    return [
        make_record("1", date(2023, 8, 2), "Swam in the lake at dawn", "Excited"),
        make_record("2", date(2023, 1, 15), "Quiet Sunday, read a book", "Lonely", message="Call your friends"),
        make_record("3", date(2022, 8, 2), "Lake trip with the family", "Grateful"),
        make_record("4", date(2021, 12, 24), "Burnt the cookies", "Regretful"),
    ]


class TestFilterMemories:
    """Free text, year and mood filters."""

    def test_no_filters_returns_everything(self, journal):
        assert filter_memories(journal) == journal

    def test_query_is_case_insensitive(self, journal):
        assert [m.id for m in filter_memories(journal, "LAKE")] == ["1", "3"]

    def test_query_matches_message_to_past(self, journal):
        assert [m.id for m in filter_memories(journal, "friends")] == ["2"]

    def test_query_matches_mood_name(self, journal):
        assert [m.id for m in filter_memories(journal, "regret")] == ["4"]

    def test_blank_query_matches_all(self, journal):
        assert len(filter_memories(journal, "   ")) == 4

    def test_year_filter(self, journal):
        assert [m.id for m in filter_memories(journal, year=2023)] == ["1", "2"]

    def test_mood_filter_accepts_label(self, journal):
        assert [m.id for m in filter_memories(journal, mood="grateful")] == ["3"]

    def test_filters_compose(self, journal):
        assert [m.id for m in filter_memories(journal, "lake", year=2022)] == ["3"]
        assert filter_memories(journal, "lake", mood=Mood.SAD) == []

    def test_unknown_mood_rejected(self, journal):
        with pytest.raises(UnknownMoodError):
            filter_memories(journal, mood="Bored")

    def test_available_years(self, journal):
        assert available_years(journal) == [2023, 2022, 2021]
        assert available_years([]) == []


class TestHighlightSpans:
    """Match offsets for highlighting."""

    def test_finds_all_occurrences(self):
        assert highlight_spans("Lake, lake, LAKE", "lake") == [(0, 4), (6, 10), (12, 16)]

    def test_no_query(self):
        assert highlight_spans("anything", "") == []

    def test_no_match(self):
        assert highlight_spans("anything", "zzz") == []

    def test_non_overlapping(self):
        assert highlight_spans("aaaa", "aa") == [(0, 2), (2, 4)]


class TestCalendarView:
    """Month view helpers."""

    def test_memories_on_date(self, journal):
        assert [m.id for m in memories_on_date(journal, date(2023, 8, 2))] == ["1"]
        assert memories_on_date(journal, date(2020, 1, 1)) == []

    def test_marked_days(self, journal):
        assert marked_days(journal, 2023, 8) == {2}
        assert marked_days(journal, 2023, 1) == {15}
        assert marked_days(journal, 2023, 2) == set()

    def test_marked_days_ignores_unreadable_dates(self, journal):
        journal.append(make_record("bad", "???", "Broken"))
        assert marked_days(journal, 2023, 8) == {2}

    def test_month_grid_starts_monday(self):
        # 1 March 2021 was a Monday
        grid = month_grid(2021, 3)

        assert grid[0][0] == 1
        assert grid[-1][-1] == 0
        assert max(day for week in grid for day in week) == 31
