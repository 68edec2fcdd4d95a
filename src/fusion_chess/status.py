"""
Terminal-state detection on the compound state.

python-chess answers these questions for the primary position only; here
they are re-derived so fused capabilities count: a side can be in check
through a virtual attack, and a position with a fused king is never
insufficient material.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import chess

from .config import EngineConfig
from .history import GameHistory
from .legality import LegalityValidator
from .serialization import position_key
from .state import CompoundState
from .virtual import build_virtual


class DrawReason(Enum):
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    FIFTY_MOVES = "fifty_moves"
    REPETITION = "repetition"


@dataclass(frozen=True)
class GameStatus:
    is_check: bool = False
    is_checkmate: bool = False
    is_stalemate: bool = False
    draw_reason: Optional[DrawReason] = None
    winner: Optional[chess.Color] = None

    @property
    def is_draw(self) -> bool:
        return self.draw_reason is not None

    @property
    def is_game_over(self) -> bool:
        return self.is_checkmate or self.is_draw

    def to_dict(self) -> Dict[str, Any]:
        return {
            "check": self.is_check,
            "checkmate": self.is_checkmate,
            "stalemate": self.is_stalemate,
            "draw": self.is_draw,
            "draw_reason": self.draw_reason.value if self.draw_reason else None,
            "game_over": self.is_game_over,
            "winner": None if self.winner is None else chess.COLOR_NAMES[self.winner],
        }


def is_insufficient_material(state: CompoundState) -> bool:
    """Neither side can mate in the primary view nor in the virtual view."""
    if len(state.kings):
        return False
    if not state.board.is_insufficient_material():
        return False
    return build_virtual(state.board, state.fused).is_insufficient_material()


def evaluate(
    state: CompoundState,
    validator: LegalityValidator,
    config: EngineConfig,
    history: Optional[GameHistory] = None,
) -> GameStatus:
    """Full terminal-state evaluation for the side to move."""
    in_check = validator.is_in_check(state)
    if not validator.has_legal_move(state):
        if in_check:
            return GameStatus(is_check=True, is_checkmate=True, winner=not state.turn)
        return GameStatus(is_stalemate=True, draw_reason=DrawReason.STALEMATE)

    reason = None
    if is_insufficient_material(state):
        reason = DrawReason.INSUFFICIENT_MATERIAL
    elif state.board.halfmove_clock >= config.fifty_move_halfmoves:
        reason = DrawReason.FIFTY_MOVES
    elif history is not None and history.repetitions(position_key(state)) >= config.repetition_count:
        reason = DrawReason.REPETITION
    return GameStatus(is_check=in_check, draw_reason=reason)
