"""
Virtual board synchronizer.

The virtual position is the primary position with every fused square's
occupant swapped for its secondary type (color unchanged). Kings are never
rewritten: python-chess cannot hold a king that moves like another piece,
so king fusion is simulated separately in ``king_fusion``.
"""

from __future__ import annotations

import logging
from typing import Optional

import chess

from .fusion_map import FusionMap


LOGGER = logging.getLogger(__name__)


def build_virtual(board: chess.Board, fused: FusionMap) -> chess.Board:
    """
    Derive the virtual position from a primary board and a Fusion Map.

    Entries whose square is empty (or holds a king) are stale: they are
    skipped, not repaired. Eviction is left to an explicit
    ``report_missing_fused_piece`` call.
    """
    virtual = board.copy(stack=False)
    for square, piece_type in fused.items():
        occupant = board.piece_at(square)
        if occupant is None or occupant.piece_type == chess.KING:
            LOGGER.warning("stale_fusion_entry", extra={"square": chess.square_name(square)})
            continue
        virtual.set_piece_at(square, chess.Piece(piece_type, occupant.color))
    return virtual


class VirtualBoardSynchronizer:
    """Keeps one virtual position in step with (primary, Fusion Map)."""

    def __init__(self) -> None:
        self._virtual: Optional[chess.Board] = None

    def rebuild(self, board: chess.Board, fused: FusionMap) -> chess.Board:
        """Recompute from scratch; idempotent for an unchanged input pair."""
        self._virtual = build_virtual(board, fused)
        return self._virtual.copy(stack=False)

    @property
    def fen(self) -> str:
        if self._virtual is None:
            raise RuntimeError("Virtual board has not been built yet")
        return self._virtual.fen()

    def board(self) -> chess.Board:
        """A private copy of the current virtual position."""
        if self._virtual is None:
            raise RuntimeError("Virtual board has not been built yet")
        return self._virtual.copy(stack=False)
