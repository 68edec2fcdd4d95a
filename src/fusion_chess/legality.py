"""
Legality validator ("jeopardy test").

A move is legal only if, after it, the mover's king is attacked in none of
the three representations of the compound position:

1. the primary position (standard check rules);
2. the virtual position (secondary movement of fused non-king pieces);
3. the opponent's fused king, simulated as its secondary type.

No single representation is complete, so all three are always asked. The
same screen filters generated move lists, which removes moves the oracle
accepts but which walk into a virtual-board attack.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import chess

from .king_fusion import fused_king_attacks
from .oracle import find_king_square, is_square_attacked
from .probes import MovePlan, MoveRejected, RejectReason, candidate_targets, plan_move
from .state import CompoundState
from .virtual import build_virtual


@dataclass(frozen=True)
class JeopardyReport:
    """Which representations see the square attacked."""
    primary: bool = False
    virtual: bool = False
    king_fusion: bool = False

    def __bool__(self) -> bool:
        return self.primary or self.virtual or self.king_fusion

    def to_dict(self) -> Dict[str, Any]:
        return {"primary": self.primary, "virtual": self.virtual, "king_fusion": self.king_fusion}


class LegalityValidator:
    """Composes the three attack views into one king-safety screen."""

    def __init__(self, prefer_existing: bool = True, rng: Optional[random.Random] = None):
        self.prefer_existing = prefer_existing
        self.rng = rng

    # --- attack views ---

    def square_threats(
        self,
        state: CompoundState,
        square: chess.Square,
        by_color: chess.Color,
        virtual: Optional[chess.Board] = None,
    ) -> JeopardyReport:
        """Attack on ``square`` by ``by_color`` in each representation."""
        if virtual is None:
            virtual = build_virtual(state.board, state.fused)
        king_type = state.kings.get(by_color)
        return JeopardyReport(
            primary=is_square_attacked(state.board, square, by_color),
            virtual=is_square_attacked(virtual, square, by_color),
            king_fusion=(
                king_type is not None
                and fused_king_attacks(state.board, by_color, king_type, square)
            ),
        )

    def king_threats(self, state: CompoundState, color: chess.Color) -> JeopardyReport:
        """Attack on ``color``'s king. A missing king counts as attacked."""
        king_sq = find_king_square(state.board, color)
        if king_sq is None:
            return JeopardyReport(primary=True)
        return self.square_threats(state, king_sq, not color)

    def is_in_check(self, state: CompoundState) -> bool:
        return bool(self.king_threats(state, state.turn))

    # --- move screening ---

    def castling_path_safe(self, state: CompoundState, plan: MovePlan) -> bool:
        """
        The king may not start on, cross or land on an attacked square.

        The oracle already checks this on the primary position; the virtual
        and king-fusion views are unknown to it.
        """
        color = plan.mover.color
        from_sq, to_sq = plan.from_square, plan.to_square
        step = 1 if to_sq > from_sq else -1
        virtual = build_virtual(state.board, state.fused)
        for square in range(from_sq, to_sq + step, step):
            if self.square_threats(state, square, not color, virtual=virtual):
                return False
        return True

    def screen(self, state: CompoundState, plan: MovePlan) -> Optional[MoveRejected]:
        """None if ``plan`` keeps the mover's king safe, else the rejection."""
        if plan.is_castling and not self.castling_path_safe(state, plan):
            return MoveRejected(RejectReason.CASTLING_THROUGH_ATTACK, plan.from_square, plan.to_square)
        report = self.king_threats(plan.after, plan.mover.color)
        if report:
            return MoveRejected(
                RejectReason.KING_IN_JEOPARDY, plan.from_square, plan.to_square,
                detail=",".join(k for k, v in report.to_dict().items() if v),
            )
        return None

    def check_move(self, state: CompoundState, from_sq: chess.Square,
                   to_sq: chess.Square) -> Union[MovePlan, MoveRejected]:
        """Plan the move and screen it; the plan comes back only if it is legal."""
        outcome = plan_move(state, from_sq, to_sq, self.prefer_existing, self.rng)
        if isinstance(outcome, MoveRejected):
            return outcome
        rejection = self.screen(state, outcome)
        return rejection if rejection is not None else outcome

    def would_jeopardize_king(self, state: CompoundState, from_sq: chess.Square,
                              to_sq: chess.Square) -> bool:
        """
        True if some capability can make the move but it leaves the mover's
        king attacked (or castles through an attack).

        A move no capability can make at all does not jeopardize anything
        and answers False.
        """
        outcome = plan_move(state, from_sq, to_sq, self.prefer_existing, self.rng)
        if isinstance(outcome, MoveRejected):
            return False
        return self.screen(state, outcome) is not None

    def legal_plans(self, state: CompoundState, square: Optional[chess.Square] = None) -> List[MovePlan]:
        """Every legal move for the side to move (optionally from one square)."""
        squares = [square] if square is not None else _own_squares(state)
        plans: List[MovePlan] = []
        for from_sq in squares:
            for to_sq, _ in candidate_targets(state, from_sq, self.rng):
                outcome = self.check_move(state, from_sq, to_sq)
                if isinstance(outcome, MovePlan):
                    plans.append(outcome)
        return plans

    def has_legal_move(self, state: CompoundState) -> bool:
        for from_sq in _own_squares(state):
            for to_sq, _ in candidate_targets(state, from_sq, self.rng):
                if isinstance(self.check_move(state, from_sq, to_sq), MovePlan):
                    return True
        return False


def _own_squares(state: CompoundState) -> List[chess.Square]:
    """Squares holding the side to move's pieces, a1..h8."""
    return list(chess.SquareSet(state.board.occupied_co[state.turn]))
