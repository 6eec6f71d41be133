"""Record table primitives shared by matchup, playoff, season and streak records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Literal, Optional, Tuple, TypeVar


EntryT = TypeVar("EntryT")


@dataclass(frozen=True)
class RecordTable(Generic[EntryT]):
    """Extreme value of a record and every holder tied at it."""

    value: Optional[float] = None
    entries: Tuple[EntryT, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.entries


@dataclass(frozen=True)
class GameEntry:
    """One side of a matchup, or the whole game for combined records."""

    season: int
    week: int
    owner_id: str
    opponent_id: str
    score: float
    opponent_score: float
    is_playoff: bool = False


@dataclass(frozen=True)
class OwnerTotalEntry:
    owner_id: str
    value: float


class RecordTracker(Generic[EntryT]):
    """Keep the extreme value seen so far and all distinct entries tied at it."""

    def __init__(self, mode: Literal["max", "min"] = "max") -> None:
        self.mode = mode
        self.value: Optional[float] = None
        self._entries: List[EntryT] = []

    def offer(self, value: float, entry: EntryT) -> None:
        if self.value is None or (value > self.value if self.mode == "max" else value < self.value):
            self.value = value
            self._entries = [entry]
        elif value == self.value and entry not in self._entries:
            self._entries.append(entry)

    def table(self) -> RecordTable[EntryT]:
        return RecordTable(value=self.value, entries=tuple(self._entries))


__all__ = ["GameEntry", "OwnerTotalEntry", "RecordTable", "RecordTracker"]
