"""
Mood vocabulary for memories.

Every memory carries exactly one mood from a closed set. Each mood knows how
it is displayed (emoji + rich colour), so there is a single lookup table
instead of one per screen.
"""
from enum import Enum
from typing import List


class UnknownMoodError(ValueError):
    """Raised when a mood value is not part of the closed set."""


class Mood(Enum):
    """Closed set of moods with their display attributes."""

    HAPPY = ("Happy", "😊", "yellow")
    SAD = ("Sad", "😢", "blue")
    GRATEFUL = ("Grateful", "🙏", "green")
    LONELY = ("Lonely", "😔", "purple")
    REGRETFUL = ("Regretful", "😞", "red")
    EXCITED = ("Excited", "🤩", "dark_orange")
    INSPIRED = ("Inspired", "✨", "magenta")

    def __init__(self, label: str, emoji: str, color: str):
        self.label = label
        self.emoji = emoji
        self.color = color

    def __str__(self) -> str:
        return self.label

    @property
    def badge(self) -> str:
        """Rich markup for a coloured mood badge."""
        return f"[{self.color}]{self.emoji} {self.label}[/{self.color}]"

    @classmethod
    def parse(cls, value) -> "Mood":
        """
        Resolve a mood from its label (case-insensitive) or a Mood instance.

        Raises:
            UnknownMoodError: if the value is not one of the known moods
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for mood in cls:
                if mood.label.lower() == wanted:
                    return mood
        raise UnknownMoodError(
            f"Unknown mood: {value!r} (expected one of: {', '.join(cls.labels())})"
        )

    @classmethod
    def labels(cls) -> List[str]:
        return [mood.label for mood in cls]
