"""
Fusion move executor.

Turns a (from, to) request into either a ``MoveResult`` plus the complete
post-move ``CompoundState``, or a ``MoveRejected``. The caller's state is
never touched: every probe works on copies and the engine swaps the new
state in only after the whole transition succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

import chess

from .config import EngineConfig
from .legality import LegalityValidator
from .policy import FusionChange
from .probes import Capability, MovePlan, MoveRejected
from .state import CompoundState


@dataclass(frozen=True)
class MoveResult:
    """What a successful move did, in caller-facing terms."""
    from_square: str
    to_square: str
    uci: str
    notation: str
    capability: Capability
    piece: str
    captured: Optional[str] = None
    captured_fused: Optional[str] = None
    is_castling: bool = False
    is_en_passant: bool = False
    promotion: Optional[str] = None
    fusion: FusionChange = field(default_factory=FusionChange)
    is_check: bool = False
    is_checkmate: bool = False

    def __bool__(self) -> bool:
        return True

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_square,
            "to": self.to_square,
            "uci": self.uci,
            "notation": self.notation,
            "capability": self.capability.value,
            "piece": self.piece,
            "captured": self.captured,
            "captured_fused": self.captured_fused,
            "is_capture": self.is_capture,
            "is_castling": self.is_castling,
            "is_en_passant": self.is_en_passant,
            "promotion": self.promotion,
            "fusion": self.fusion.to_dict(),
            "check": self.is_check,
            "checkmate": self.is_checkmate,
        }


def notation_for(plan: MovePlan, is_check: bool = False, is_checkmate: bool = False) -> str:
    """
    Compound SAN for a plan.

    ``Nxc3[B]`` plain SAN plus gained type, ``N/Be5`` secondary movement,
    ``K/Re4`` king fusion movement; ``+``/``#`` from the compound check test.
    """
    if plan.capability == Capability.FUSED:
        text = f"{chess.piece_symbol(plan.mover.piece_type).upper()}/{plan.san}"
    elif plan.capability == Capability.KING_FUSION:
        text = f"K/{plan.san}"
    else:
        text = plan.san
    if plan.fusion.gained and plan.fusion.piece_type is not None:
        text += f"[{chess.piece_symbol(plan.fusion.piece_type).upper()}]"
    if is_checkmate:
        text += "#"
    elif is_check:
        text += "+"
    return text


class FusionMoveExecutor:
    """Plans, screens and settles one move on the compound state."""

    def __init__(self, validator: LegalityValidator, config: Optional[EngineConfig] = None):
        self.validator = validator
        self.config = config or EngineConfig()

    def plan(self, state: CompoundState, from_sq: chess.Square,
             to_sq: chess.Square) -> Union[MovePlan, MoveRejected]:
        return self.validator.check_move(state, from_sq, to_sq)

    def execute(
        self, state: CompoundState, from_sq: chess.Square, to_sq: chess.Square
    ) -> Tuple[Union[MoveResult, MoveRejected], Optional[CompoundState]]:
        """
        Returns ``(result, after)``; ``after`` is None when the move is
        rejected.
        """
        outcome = self.plan(state, from_sq, to_sq)
        if isinstance(outcome, MoveRejected):
            return outcome, None

        after = outcome.after
        is_check = self.validator.is_in_check(after)
        is_checkmate = is_check and not self.validator.has_legal_move(after)
        result = MoveResult(
            from_square=chess.square_name(outcome.from_square),
            to_square=chess.square_name(outcome.to_square),
            uci=chess.Move(outcome.from_square, outcome.to_square, outcome.promotion).uci(),
            notation=notation_for(outcome, is_check, is_checkmate),
            capability=outcome.capability,
            piece=outcome.mover.symbol(),
            captured=outcome.captured.symbol() if outcome.captured is not None else None,
            captured_fused=(
                chess.piece_symbol(outcome.captured_secondary)
                if outcome.captured_secondary is not None else None
            ),
            is_castling=outcome.is_castling,
            is_en_passant=outcome.is_en_passant,
            promotion=chess.piece_symbol(outcome.promotion) if outcome.promotion else None,
            fusion=outcome.fusion,
            is_check=is_check,
            is_checkmate=is_checkmate,
        )
        return result, after
