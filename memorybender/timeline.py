"""
Cross-Year Timeline

Groups an owner's memories so the same calendar day can be compared
across years:
- Day keys (month + day, year ignored)
- Year-partitioned index with the sorted universe of day keys
- Cross-year query ("what happened on March 5th, every year")
- Navigator cursor over the day-key universe

Everything here is a pure transformation of an already fetched list of
records. Nothing is cached between fetches: callers rebuild the index after
every create/update/delete.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from memorybender.records import MalformedDateError, MemoryRecord, parse_memory_date


logger = logging.getLogger(__name__)

_MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
]


class DayKey(NamedTuple):
    """Year-independent (month, day) pair. Sorts by month, then day."""
    month: int
    day: int

    @property
    def label(self) -> str:
        """MM-DD form, e.g. '03-05'."""
        return f"{self.month:02d}-{self.day:02d}"

    @property
    def display(self) -> str:
        """Human form, e.g. 'March 5'."""
        return f"{_MONTH_NAMES[self.month - 1]} {self.day}"

    @classmethod
    def parse(cls, text: str) -> "DayKey":
        """
        Parse an 'MM-DD' string.

        Raises:
            ValueError: if the text is not a plausible month/day
        """
        try:
            month_text, day_text = text.strip().split("-")
            month, day = int(month_text), int(day_text)
        except ValueError:
            raise ValueError(f"Day must look like MM-DD, got {text!r}")

        if not 1 <= month <= 12 or not 1 <= day <= 31:
            raise ValueError(f"Day out of range: {text!r}")

        # 2000 is a leap year, so Feb 29 is accepted
        try:
            date(2000, month, day)
        except ValueError:
            raise ValueError(f"No such day in the calendar: {text!r}")

        return cls(month, day)


def to_day_key(value: date) -> DayKey:
    """Map a calendar date to its day key. The year is never read."""
    return DayKey(value.month, value.day)


@dataclass
class DatedMemory:
    """A memory matched by the cross-year query, tagged with its year."""
    record: MemoryRecord
    display_year: int


@dataclass
class MemoryIndex:
    """
    Derived view of one owner's memories.

    Attributes:
        year_index: year -> records of that year, in store order
        day_keys: distinct day keys, ascending by (month, day)
        years: distinct years, most recent first
        skipped: records left out because their date was unreadable
    """
    year_index: Dict[int, List[MemoryRecord]] = field(default_factory=dict)
    day_keys: List[DayKey] = field(default_factory=list)
    years: List[int] = field(default_factory=list)
    skipped: List[MemoryRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self.year_index.values())

    @property
    def is_empty(self) -> bool:
        return not self.day_keys

    def on_day(self, day_key: DayKey) -> List[DatedMemory]:
        """Cross-year query against this index."""
        return memories_on_day_key(day_key, self.year_index, self.years)

    def comparison_view(self) -> List[Tuple[DayKey, List[DatedMemory]]]:
        """Every day key with its memories across years."""
        return [(key, self.on_day(key)) for key in self.day_keys]


def build_index(records: Iterable[MemoryRecord]) -> MemoryIndex:
    """
    Partition records by year and collect the day-key universe.

    Records with an unreadable date are skipped with a warning so one bad
    row cannot hide the rest of the history.

    Args:
        records: Records in store order

    Returns:
        Fresh MemoryIndex (empty input gives an empty index)
    """
    index = MemoryIndex()
    keys = set()

    for record in records:
        try:
            memory_date = parse_memory_date(record.memory_date)
        except MalformedDateError as e:
            logger.warning(f"Skipping memory {record.id}: {e}")
            index.skipped.append(record)
            continue

        index.year_index.setdefault(memory_date.year, []).append(record)
        keys.add(to_day_key(memory_date))

    index.day_keys = sorted(keys)
    index.years = sorted(index.year_index, reverse=True)

    logger.debug(
        f"Indexed {len(index)} memories over {len(index.years)} years "
        f"({len(index.day_keys)} distinct days, {len(index.skipped)} skipped)"
    )
    return index


def memories_on_day_key(
    day_key: DayKey,
    year_index: Dict[int, List[MemoryRecord]],
    years: List[int]
) -> List[DatedMemory]:
    """
    All memories sharing a day key, newest year first.

    Args:
        day_key: (month, day) to match
        year_index: year -> records, as built by build_index
        years: years to scan, already sorted descending

    Returns:
        Matches in year-descending order; same-year matches keep bucket
        order. Empty list when nothing matches.
    """
    matches = []
    for year in years:
        for record in year_index.get(year, []):
            if to_day_key(parse_memory_date(record.memory_date)) == day_key:
                matches.append(DatedMemory(record=record, display_year=year))
    return matches


class NavigationStatus(Enum):
    OK = "ok"
    AT_START = "at_start"
    AT_END = "at_end"
    OUT_OF_RANGE = "out_of_range"
    UNKNOWN_DAY = "unknown_day"
    EMPTY = "empty"


@dataclass(frozen=True)
class NavigationResult:
    """Outcome of a navigator transition. Rejected moves leave state unchanged."""
    status: NavigationStatus
    index: Optional[int]

    @property
    def ok(self) -> bool:
        return self.status is NavigationStatus.OK


class TimelineNavigator:
    """
    Cursor over the day-key universe of a MemoryIndex.

    States:
    - Empty: the universe has no keys (index is None)
    - Positioned: 0 <= index < len(universe)

    Transitions never raise; they return a NavigationResult and rejected
    requests leave the cursor where it was.
    """

    def __init__(self):
        self._memory_index = MemoryIndex()
        self._position: Optional[int] = None

    @property
    def index(self) -> Optional[int]:
        return self._position

    @property
    def universe(self) -> List[DayKey]:
        return self._memory_index.day_keys

    @property
    def is_empty(self) -> bool:
        return self._position is None

    @property
    def selected(self) -> Optional[DayKey]:
        if self._position is None:
            return None
        return self._memory_index.day_keys[self._position]

    def initialize(self, memory_index: MemoryIndex) -> NavigationResult:
        """
        Point the navigator at a freshly built index.

        The previously selected day is kept when it is still present;
        otherwise the cursor starts at the first day.
        """
        previous = self.selected
        self._memory_index = memory_index

        if memory_index.is_empty:
            self._position = None
            return self._result(NavigationStatus.EMPTY)

        if previous is not None and previous in memory_index.day_keys:
            self._position = memory_index.day_keys.index(previous)
        else:
            self._position = 0
        return self._result(NavigationStatus.OK)

    def next(self) -> NavigationResult:
        if self._position is None:
            return self._rejected(NavigationStatus.EMPTY, "next")
        if self._position >= len(self.universe) - 1:
            return self._rejected(NavigationStatus.AT_END, "next")
        self._position += 1
        return self._result(NavigationStatus.OK)

    def previous(self) -> NavigationResult:
        if self._position is None:
            return self._rejected(NavigationStatus.EMPTY, "previous")
        if self._position == 0:
            return self._rejected(NavigationStatus.AT_START, "previous")
        self._position -= 1
        return self._result(NavigationStatus.OK)

    def jump_to(self, position: int) -> NavigationResult:
        if self._position is None:
            return self._rejected(NavigationStatus.EMPTY, "jump_to")
        if not 0 <= position < len(self.universe):
            return self._rejected(NavigationStatus.OUT_OF_RANGE, f"jump_to({position})")
        self._position = position
        return self._result(NavigationStatus.OK)

    def select(self, day_key: DayKey) -> NavigationResult:
        """Jump to a specific day key, if any memory falls on it."""
        if self._position is None:
            return self._rejected(NavigationStatus.EMPTY, "select")
        if day_key not in self.universe:
            return self._rejected(NavigationStatus.UNKNOWN_DAY, f"select({day_key.label})")
        return self.jump_to(self.universe.index(day_key))

    def current(self) -> List[DatedMemory]:
        """Memories across years for the selected day (empty when Empty)."""
        if self.selected is None:
            return []
        return self._memory_index.on_day(self.selected)

    def _result(self, status: NavigationStatus) -> NavigationResult:
        return NavigationResult(status=status, index=self._position)

    def _rejected(self, status: NavigationStatus, request: str) -> NavigationResult:
        logger.debug(f"Timeline {request} ignored: {status.value}")
        return self._result(status)
