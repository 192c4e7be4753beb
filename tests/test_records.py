"""
Tests for moods and memory records.
"""
from datetime import date, datetime

import pytest

from memorybender.moods import Mood, UnknownMoodError
from memorybender.records import MalformedDateError, MemoryRecord, parse_memory_date


class TestMood:
    """Closed mood set with display attributes."""

    def test_all_moods_present(self):
        assert Mood.labels() == [
            "Happy", "Sad", "Grateful", "Lonely", "Regretful", "Excited", "Inspired"
        ]

    def test_parse_is_case_insensitive(self):
        assert Mood.parse("happy") is Mood.HAPPY
        assert Mood.parse("  INSPIRED ") is Mood.INSPIRED

    def test_parse_passes_through_mood(self):
        assert Mood.parse(Mood.SAD) is Mood.SAD

    @pytest.mark.parametrize("value", ["Angry", "", None, 3])
    def test_unknown_mood_rejected(self, value):
        with pytest.raises(UnknownMoodError):
            Mood.parse(value)

    def test_every_mood_has_display_attributes(self):
        for mood in Mood:
            assert mood.emoji
            assert mood.color
            assert mood.label in mood.badge

    def test_str_is_label(self):
        assert str(Mood.GRATEFUL) == "Grateful"


class TestParseMemoryDate:
    """Reading memory dates."""

    def test_date_passthrough(self):
        assert parse_memory_date(date(2020, 1, 2)) == date(2020, 1, 2)

    def test_datetime_drops_time(self):
        assert parse_memory_date(datetime(2020, 1, 2, 23, 59)) == date(2020, 1, 2)

    def test_iso_strings(self):
        assert parse_memory_date("2020-01-02") == date(2020, 1, 2)
        assert parse_memory_date("2020-01-02T10:30:00") == date(2020, 1, 2)

    @pytest.mark.parametrize("value", ["2020-02-30", "yesterday", "", None, 20200102])
    def test_malformed(self, value):
        with pytest.raises(MalformedDateError):
            parse_memory_date(value)


class TestMemoryRecord:
    """Record conversion."""

    def test_to_dict(self):
        record = MemoryRecord(
            id="m1",
            owner_id="alice",
            memory_date=date(2021, 3, 5),
            text="First snow",
            mood=Mood.EXCITED,
            message_to_past="Wear a coat",
        )
        data = record.to_dict()

        assert data["memory_date"] == "2021-03-05"
        assert data["mood"] == "Excited"
        assert data["message_to_past"] == "Wear a coat"
        assert data["image_ref"] is None

    def test_from_dict(self):
        record = MemoryRecord.from_dict({
            "id": "m1",
            "owner_id": "alice",
            "memory_date": "2021-03-05",
            "text": "First snow",
            "mood": "Excited",
        })

        assert record.memory_date == date(2021, 3, 5)
        assert record.mood is Mood.EXCITED
        assert record.year == 2021

    def test_from_dict_keeps_unreadable_date(self):
        record = MemoryRecord.from_dict({
            "id": "m1",
            "owner_id": "alice",
            "memory_date": "sometime",
            "text": "?",
            "mood": "Sad",
        })

        assert record.memory_date == "sometime"
        with pytest.raises(MalformedDateError):
            record.year
