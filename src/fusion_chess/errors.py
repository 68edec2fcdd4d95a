"""Exceptions raised by the fusion rules engine.

Illegal moves are not errors: they come back as ``MoveRejected`` values.
Only malformed imports and an impossible placeholder-king insertion are
reported by raising.
"""

from __future__ import annotations

from enum import Enum


class FusionError(Exception):
    """Base class for fusion engine failures."""


class ImportFailure(Enum):
    """Why an export string was refused."""
    BAD_POSITION = "bad_position"                  # FEN part unparsable or structurally invalid
    BAD_ENTRY = "bad_entry"                        # Fusion entry syntax or target invalid
    INCONSISTENT_VIRTUAL = "inconsistent_virtual"  # Fused capabilities leave the side not to move in check


class ImportRejected(FusionError, ValueError):
    """An export string could not be imported; state is left untouched."""

    def __init__(self, reason: ImportFailure, message: str):
        super().__init__(f"{reason.value}: {message}")
        self.reason = reason
        self.message = message


class PlaceholderKingError(FusionError, RuntimeError):
    """No unoccupied, unattacked square exists for a placeholder king."""
