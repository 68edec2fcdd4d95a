"""Move history for undo and repetition counting."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .oracle import STARTING_FEN


START_EXPORT = STARTING_FEN + " "


@dataclass(frozen=True)
class MoveRecord:
    """One played move: its notation and the export string after it."""
    notation: str
    uci: str
    exported: str
    position_key: str

    def to_dict(self) -> Dict[str, Any]:
        return {"notation": self.notation, "uci": self.uci, "exported": self.exported}


class GameHistory:
    """
    Append-only move log with an origin.

    The origin is the export string the game started from (the standard
    start, or whatever was imported); undoing the first record returns to it.
    """

    def __init__(self, origin: str = START_EXPORT, origin_key: Optional[str] = None):
        self.origin = origin
        self.origin_key = origin_key
        self._records: List[MoveRecord] = []

    def append(self, record: MoveRecord) -> None:
        self._records.append(record)

    def pop(self) -> Optional[MoveRecord]:
        """Drop the last record; None when nothing has been played."""
        if not self._records:
            return None
        return self._records.pop()

    def restart(self, origin: str, origin_key: Optional[str] = None) -> None:
        self.origin = origin
        self.origin_key = origin_key
        self._records.clear()

    @property
    def current_export(self) -> str:
        """Export string of the position after the last record (or the origin)."""
        return self._records[-1].exported if self._records else self.origin

    def records(self) -> List[MoveRecord]:
        return list(self._records)

    def notations(self) -> List[str]:
        return [r.notation for r in self._records]

    def repetitions(self, key: str) -> int:
        """How often ``key`` occurred, origin included."""
        counts = Counter(r.position_key for r in self._records)
        if self.origin_key is not None:
            counts[self.origin_key] += 1
        return counts[key]

    def __len__(self) -> int:
        return len(self._records)
