"""
Fusion assignment policy.

Decides what a capture does to the capturer's capabilities. The decision is
pure: it looks at the types involved and returns a ``FusionDecision``; the
probes write the result into the Fusion Map / King Fusion Table.

Rules for a non-king capturer:
- a shared type between capturer (primary or secondary) and captured
  (primary or secondary) is a plain capture;
- the candidate is the stronger of the captured piece's primary and fused
  types (ties by ``prefer_existing``);
- rook x bishop or bishop x rook promotes the capturer to a queen in place;
- a candidate the capturer's movement already covers is a plain capture;
- a secondary that forms rook+bishop with the candidate becomes a queen;
- otherwise the candidate replaces whatever secondary the capturer held.

Rules for a king capturer:
- pawns and a king already holding queen movement give a flat capture;
- rook+bishop combine into queen movement;
- a weaker candidate never displaces the current fusion.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import chess

from .pieces import FUSION_STRENGTH, forms_queen, stronger, subsumes


class FusionKind(Enum):
    NONE = "none"              # Not a capture
    PLAIN = "plain"            # Capture, capabilities unchanged
    FUSED = "fused"            # Capturer gains / replaces its secondary type
    PROMOTED = "promoted"      # Capturer's primary type becomes queen
    KING_FUSED = "king_fused"  # Capturing king gains / replaces its fusion
    FLAT = "flat"              # King capture that grants nothing


@dataclass(frozen=True)
class FusionDecision:
    kind: FusionKind
    piece_type: Optional[chess.PieceType] = None


@dataclass(frozen=True)
class FusionChange:
    """What a move did to the fusion tables, as reported to callers."""
    kind: FusionKind = FusionKind.NONE
    square: Optional[chess.Square] = None
    piece_type: Optional[chess.PieceType] = None
    color: Optional[chess.Color] = None

    @property
    def gained(self) -> bool:
        return self.kind in (FusionKind.FUSED, FusionKind.PROMOTED, FusionKind.KING_FUSED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "square": chess.square_name(self.square) if self.square is not None else None,
            "piece_type": chess.piece_symbol(self.piece_type) if self.piece_type is not None else None,
            "color": None if self.color is None else chess.COLOR_NAMES[self.color],
        }


def decide_capture(
    mover_type: chess.PieceType,
    mover_secondary: Optional[chess.PieceType],
    captured_type: chess.PieceType,
    captured_secondary: Optional[chess.PieceType],
    prefer_existing: bool = True,
) -> FusionDecision:
    """Fusion outcome when a non-king piece captures."""
    own = {mover_type, mover_secondary} - {None}
    theirs = {captured_type, captured_secondary} - {None}
    if own & theirs:
        return FusionDecision(FusionKind.PLAIN)

    candidate = stronger(captured_type, captured_secondary, prefer_existing)
    if forms_queen(mover_type, candidate):
        return FusionDecision(FusionKind.PROMOTED, chess.QUEEN)
    if subsumes(own, candidate):
        return FusionDecision(FusionKind.PLAIN)
    if forms_queen(mover_secondary, candidate):
        return FusionDecision(FusionKind.FUSED, chess.QUEEN)
    return FusionDecision(FusionKind.FUSED, candidate)


def decide_king_capture(
    current: Optional[chess.PieceType],
    captured_type: chess.PieceType,
    captured_secondary: Optional[chess.PieceType],
    prefer_existing: bool = True,
) -> FusionDecision:
    """Fusion outcome when a king captures."""
    if current == chess.QUEEN:
        return FusionDecision(FusionKind.FLAT)
    candidate = stronger(captured_type, captured_secondary, prefer_existing)
    if candidate == chess.PAWN or candidate == current:
        return FusionDecision(FusionKind.FLAT)
    if current is None:
        return FusionDecision(FusionKind.KING_FUSED, candidate)
    if forms_queen(current, candidate):
        return FusionDecision(FusionKind.KING_FUSED, chess.QUEEN)

    cs, ks = FUSION_STRENGTH[candidate], FUSION_STRENGTH[current]
    if cs < ks or (cs == ks and prefer_existing):
        return FusionDecision(FusionKind.FLAT)
    return FusionDecision(FusionKind.KING_FUSED, candidate)
