"""
Tests for the SQLite memory store.
"""
import os
import sqlite3
import tempfile
from datetime import date, timedelta

import pytest

from memorybender.memory_store import MemoryStore, MemoryValidationError
from memorybender.moods import Mood
from memorybender.timeline import DayKey, build_index


@pytest.fixture
def temp_db():
    """Create a temporary database path."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    os.unlink(path)

    yield path

    if os.path.exists(path):
        os.unlink(path)


@pytest.fixture
def store(temp_db):
    return MemoryStore(db_path=temp_db)


class TestCreate:
    """Creating memories."""

    def test_create_and_get(self, store):
        memory = store.create_memory(
            owner_id="alice",
            memory_date=date(2021, 3, 5),
            text="Picnic in the park",
            mood="Happy",
            message_to_past="You will love this day",
        )

        fetched = store.get_memory("alice", memory.id)

        assert fetched.text == "Picnic in the park"
        assert fetched.memory_date == date(2021, 3, 5)
        assert fetched.mood is Mood.HAPPY
        assert fetched.message_to_past == "You will love this day"
        assert fetched.image_ref is None
        assert fetched.created_at == fetched.updated_at

    def test_blank_optional_fields_stored_as_null(self, store):
        memory = store.create_memory("alice", date(2021, 3, 5), "x", "Sad", message_to_past="  ", image_ref="")

        fetched = store.get_memory("alice", memory.id)
        assert fetched.message_to_past is None
        assert fetched.image_ref is None

    def test_accepts_iso_date_string(self, store):
        memory = store.create_memory("alice", "2020-12-24", "Eve", "Grateful")
        assert memory.memory_date == date(2020, 12, 24)

    def test_today_is_allowed(self, store):
        memory = store.create_memory("alice", date.today(), "Now", "Inspired")
        assert memory.memory_date == date.today()

    @pytest.mark.parametrize("kwargs", [
        {"memory_date": None},
        {"memory_date": "not a date"},
        {"memory_date": date.today() + timedelta(days=1)},
        {"text": ""},
        {"text": "   "},
        {"text": None},
        {"mood": None},
        {"mood": "Furious"},
    ])
    def test_validation(self, store, kwargs):
        fields = {"memory_date": date(2021, 1, 1), "text": "Valid", "mood": "Happy"}
        fields.update(kwargs)

        with pytest.raises(MemoryValidationError):
            store.create_memory("alice", **fields)

        assert store.list_memories("alice") == []


class TestQueries:
    """Owner-scoped listing."""

    @pytest.fixture
    def populated(self, store):
        store.create_memory("alice", date(2021, 3, 5), "Spring 2021", "Happy")
        store.create_memory("alice", date(2023, 3, 5), "Spring 2023", "Sad")
        store.create_memory("alice", date(2022, 7, 1), "Summer 2022", "Grateful")
        store.create_memory("bob", date(2022, 7, 1), "Bob's summer", "Lonely")
        return store

    def test_list_is_newest_first(self, populated):
        texts = [m.text for m in populated.list_memories("alice")]
        assert texts == ["Spring 2023", "Summer 2022", "Spring 2021"]

    def test_list_is_owner_scoped(self, populated):
        assert [m.text for m in populated.list_memories("bob")] == ["Bob's summer"]
        assert populated.list_memories("carol") == []

    def test_date_range_is_inclusive(self, populated):
        memories = populated.list_memories("alice", (date(2021, 3, 5), date(2022, 7, 1)))
        assert [m.text for m in memories] == ["Summer 2022", "Spring 2021"]

    def test_list_year(self, populated):
        assert [m.text for m in populated.list_year("alice", 2023)] == ["Spring 2023"]
        assert populated.list_year("alice", 2019) == []

    def test_years_with_memories(self, populated):
        assert populated.years_with_memories("alice") == [2023, 2022, 2021]

    def test_get_other_owners_memory_is_none(self, populated):
        bobs = populated.list_memories("bob")[0]
        assert populated.get_memory("alice", bobs.id) is None

    def test_fetch_feeds_index(self, populated):
        index = build_index(populated.list_memories("alice"))

        assert index.day_keys == [DayKey(3, 5), DayKey(7, 1)]
        assert [m.record.text for m in index.on_day(DayKey(3, 5))] == ["Spring 2023", "Spring 2021"]

    def test_stats(self, populated):
        stats = populated.get_stats("alice")

        assert stats["total_memories"] == 3
        assert stats["by_mood"] == {"Happy": 1, "Sad": 1, "Grateful": 1}
        assert stats["first_date"] == "2021-03-05"
        assert stats["last_date"] == "2023-03-05"

    def test_unreadable_stored_date_is_skipped_by_index(self, populated, temp_db):
        conn = sqlite3.connect(temp_db)
        conn.execute("""
            INSERT INTO memories (id, owner_id, memory_date, text, mood, created_at, updated_at)
            VALUES ('bad', 'alice', 'garbage', 'Broken row', 'Happy', '2024-01-01', '2024-01-01')
        """)
        conn.commit()
        conn.close()

        memories = populated.list_memories("alice")
        index = build_index(memories)

        assert len(memories) == 4
        assert [r.id for r in index.skipped] == ["bad"]
        assert len(index) == 3


class TestUpdateDelete:
    """Editing and removing memories."""

    def test_update_fields(self, store):
        memory = store.create_memory("alice", date(2021, 3, 5), "Draft", "Happy")

        updated = store.update_memory(
            "alice", memory.id,
            text="Final", mood=Mood.REGRETFUL, memory_date=date(2020, 1, 1)
        )

        assert updated.text == "Final"
        assert updated.mood is Mood.REGRETFUL
        assert updated.memory_date == date(2020, 1, 1)
        assert updated.created_at == memory.created_at

    def test_update_clears_optional_field(self, store):
        memory = store.create_memory("alice", date(2021, 3, 5), "x", "Happy", message_to_past="hi")

        updated = store.update_memory("alice", memory.id, message_to_past="")

        assert updated.message_to_past is None

    def test_update_validates(self, store):
        memory = store.create_memory("alice", date(2021, 3, 5), "x", "Happy")

        with pytest.raises(MemoryValidationError):
            store.update_memory("alice", memory.id, text="")

        assert store.get_memory("alice", memory.id).text == "x"

    def test_update_unknown_field(self, store):
        memory = store.create_memory("alice", date(2021, 3, 5), "x", "Happy")

        with pytest.raises(ValueError):
            store.update_memory("alice", memory.id, created_at="2000-01-01")

        assert store.get_memory("alice", memory.id).created_at == memory.created_at

    def test_update_missing_returns_none(self, store):
        assert store.update_memory("alice", "nope", text="x") is None

    def test_update_other_owner_returns_none(self, store):
        memory = store.create_memory("alice", date(2021, 3, 5), "x", "Happy")

        assert store.update_memory("bob", memory.id, text="hacked") is None
        assert store.get_memory("alice", memory.id).text == "x"

    def test_delete(self, store):
        memory = store.create_memory("alice", date(2021, 3, 5), "x", "Happy")

        assert store.delete_memory("alice", memory.id) is True
        assert store.get_memory("alice", memory.id) is None
        assert store.delete_memory("alice", memory.id) is False

    def test_delete_other_owner(self, store):
        memory = store.create_memory("alice", date(2021, 3, 5), "x", "Happy")

        assert store.delete_memory("bob", memory.id) is False
        assert store.get_memory("alice", memory.id) is not None
