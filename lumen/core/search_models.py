from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .entries import DesktopEntry, ExecutableEntry


class MatchField(Enum):
    """Name fields a candidate can match on, highest priority first.

    Each value is (priority, boost); the boost is added to the fuzzy score.
    """

    LOCALIZED_NAME = (6, 10.0)
    LOCALIZED_GENERIC_NAME = (5, 8.0)
    NAME = (4, 6.0)
    GENERIC_NAME = (3, 4.0)
    EXECUTABLE_NAME = (2, 2.0)
    DESKTOP_FILE_NAME = (1, 0.0)

    def __init__(self, priority: int, boost: float):
        self.priority = priority
        self.boost = boost


@dataclass(frozen=True)
class FieldMatch:
    """The best-scoring field for one entry."""

    field: MatchField
    text: str
    fuzzy: float

    @property
    def score(self) -> float:
        return self.fuzzy + self.field.boost

    def sort_key(self):
        # Equal totals go to the higher-priority field
        return (self.score, self.field.priority)


@dataclass(frozen=True)
class Candidate:
    """A ranked search result for one entry."""

    entry: Union[DesktopEntry, ExecutableEntry]
    match: Optional[FieldMatch] = None
    history_bonus: float = 0.0

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def title(self) -> str:
        return self.entry.display_name

    @property
    def field(self) -> Optional[MatchField]:
        return self.match.field if self.match else None

    @property
    def base_score(self) -> float:
        return self.match.score if self.match else 0.0

    @property
    def score(self) -> float:
        return self.base_score + self.history_bonus

    @property
    def in_history(self) -> bool:
        return self.history_bonus > 0

    @property
    def match_text(self) -> Optional[str]:
        """Matched field text when it differs from the title."""
        if self.match is None or self.match.text == self.title:
            return None
        return self.match.text
