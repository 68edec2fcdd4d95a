"""Compound game state and its read-only view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import chess

from .fusion_map import FusionMap, KingFusionTable
from .oracle import STARTING_FEN, load_position


@dataclass
class CompoundState:
    """
    Primary position + Fusion Map + King Fusion Table.

    The three advance together or not at all; probes work on ``copy()``
    results and the engine swaps a finished state in whole.
    """
    board: chess.Board
    fused: FusionMap = field(default_factory=FusionMap)
    kings: KingFusionTable = field(default_factory=KingFusionTable)

    @classmethod
    def initial(cls, fen: str = STARTING_FEN) -> "CompoundState":
        return cls(board=load_position(fen))

    @property
    def turn(self) -> chess.Color:
        return self.board.turn

    def copy(self) -> "CompoundState":
        return CompoundState(
            board=self.board.copy(stack=False),
            fused=self.fused.copy(),
            kings=self.kings.copy(),
        )


@dataclass(frozen=True)
class FusionSnapshot:
    """Named, read-only view of the compound state."""
    fen: str
    fused: Dict[str, str]
    virtual_fen: str
    king_fused: Dict[str, str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fen": self.fen,
            "fused": dict(self.fused),
            "virtual_fen": self.virtual_fen,
            "king_fused": dict(self.king_fused),
        }
