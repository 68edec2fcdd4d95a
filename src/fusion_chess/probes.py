"""
Capability probes.

A move request is tried against each capability in a fixed order:

1. primary  - the occupant's own type, on the primary position;
2. fused    - the occupant's secondary type, on the virtual position;
3. king     - the king's fused type, on a substituted copy (``king_fusion``).

Every probe is pure: it reads a ``CompoundState`` and returns either a
``MovePlan`` holding the complete post-move state, or a ``MoveRejected``.
Nothing is raised for an impossible move and nothing is committed here;
king safety is judged afterwards by the legality validator.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import chess

from .king_fusion import king_fusion_moves, substitute_king
from .oracle import bare_san, find_move, generate_moves, get_piece
from .pieces import castling_rook_squares, en_passant_victim, subsumes
from .policy import FusionChange, FusionKind, decide_capture, decide_king_capture
from .state import CompoundState
from .virtual import build_virtual


class Capability(Enum):
    PRIMARY = "primary"
    FUSED = "fused"
    KING_FUSION = "king_fusion"


class RejectReason(Enum):
    INVALID_SQUARE = "invalid_square"
    EMPTY_SQUARE = "empty_square"
    WRONG_TURN = "wrong_turn"
    NO_CAPABILITY = "no_capability"
    KING_IN_JEOPARDY = "king_in_jeopardy"
    CASTLING_THROUGH_ATTACK = "castling_through_attack"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class MoveRejected:
    """Sentinel for a refused move. Falsy, so ``if engine.move_piece(...)`` reads naturally."""
    reason: RejectReason
    from_square: Optional[chess.Square] = None
    to_square: Optional[chess.Square] = None
    detail: str = ""

    def __bool__(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rejected": True,
            "reason": self.reason.value,
            "from": chess.square_name(self.from_square) if self.from_square is not None else None,
            "to": chess.square_name(self.to_square) if self.to_square is not None else None,
            "detail": self.detail,
        }


@dataclass
class MovePlan:
    """An accepted probe: the move as the oracle saw it plus the full post-move state."""
    capability: Capability
    move: chess.Move
    san: str
    after: CompoundState
    mover: chess.Piece
    captured: Optional[chess.Piece] = None
    captured_square: Optional[chess.Square] = None
    captured_secondary: Optional[chess.PieceType] = None
    fusion: FusionChange = field(default_factory=FusionChange)
    is_castling: bool = False
    is_en_passant: bool = False
    promotion: Optional[chess.PieceType] = None

    @property
    def from_square(self) -> chess.Square:
        return self.move.from_square

    @property
    def to_square(self) -> chess.Square:
        return self.move.to_square

    @property
    def is_capture(self) -> bool:
        return self.captured is not None


Outcome = Union[MovePlan, MoveRejected]


# =============================================================================
# Shared settlement
# =============================================================================

def _settle(
    after: CompoundState,
    mover: chess.Piece,
    mover_secondary: Optional[chess.PieceType],
    to_sq: chess.Square,
    captured: Optional[chess.Piece],
    captured_secondary: Optional[chess.PieceType],
    promoted: bool,
    prefer_existing: bool,
) -> FusionChange:
    """Write the mover's capabilities at ``to_sq`` after the board has moved."""
    color = mover.color

    if mover.piece_type == chess.KING:
        if captured is None:
            return FusionChange()
        decision = decide_king_capture(
            after.kings.get(color), captured.piece_type, captured_secondary, prefer_existing
        )
        if decision.kind == FusionKind.KING_FUSED and after.kings.grant(color, decision.piece_type):
            return FusionChange(FusionKind.KING_FUSED, to_sq, decision.piece_type, color)
        return FusionChange(FusionKind.FLAT, to_sq, None, color)

    mover_type = after.board.piece_type_at(to_sq)
    if promoted and mover_secondary is not None and subsumes({chess.QUEEN}, mover_secondary):
        mover_secondary = None

    if captured is None:
        if mover_secondary is not None:
            after.fused.assign(to_sq, mover_secondary)
        return FusionChange()

    decision = decide_capture(
        mover_type, mover_secondary, captured.piece_type, captured_secondary, prefer_existing
    )
    if decision.kind == FusionKind.FUSED:
        after.fused.assign(to_sq, decision.piece_type)
        return FusionChange(FusionKind.FUSED, to_sq, decision.piece_type, color)
    if decision.kind == FusionKind.PROMOTED:
        after.board.set_piece_at(to_sq, chess.Piece(chess.QUEEN, color))
        if mover_secondary is not None and not subsumes({chess.QUEEN}, mover_secondary):
            after.fused.assign(to_sq, mover_secondary)
        return FusionChange(FusionKind.PROMOTED, to_sq, chess.QUEEN, color)

    if mover_secondary is not None:
        after.fused.assign(to_sq, mover_secondary)
    return FusionChange(FusionKind.PLAIN, to_sq, None, color)


# =============================================================================
# Probes
# =============================================================================

def probe_primary(state: CompoundState, from_sq: chess.Square, to_sq: chess.Square,
                  prefer_existing: bool = True, rng: Optional[random.Random] = None) -> Outcome:
    """The move through the occupant's own type, straight from the oracle."""
    board = state.board
    move = find_move(board, from_sq, to_sq)
    if move is None:
        return MoveRejected(RejectReason.NO_CAPABILITY, from_sq, to_sq, "primary")

    mover = board.piece_at(from_sq)
    is_castling = board.is_castling(move)
    is_ep = board.is_en_passant(move)
    captured_sq = en_passant_victim(move, mover.color) if is_ep else to_sq
    captured = None if is_castling else board.piece_at(captured_sq)
    san = bare_san(board, move)

    after = state.copy()
    after.board.push(move)
    mover_secondary = after.fused.clear(from_sq)
    captured_secondary = after.fused.clear(captured_sq) if captured is not None else None
    after.fused.clear(to_sq)
    if is_castling:
        rook_from, rook_to = castling_rook_squares(move)
        after.fused.migrate(rook_from, rook_to)

    fusion = _settle(after, mover, mover_secondary, to_sq, captured, captured_secondary,
                     move.promotion is not None, prefer_existing)
    return MovePlan(
        capability=Capability.PRIMARY, move=move, san=san, after=after, mover=mover,
        captured=captured, captured_square=captured_sq if captured is not None else None,
        captured_secondary=captured_secondary, fusion=fusion,
        is_castling=is_castling, is_en_passant=is_ep, promotion=move.promotion,
    )


def probe_fused(state: CompoundState, from_sq: chess.Square, to_sq: chess.Square,
                prefer_existing: bool = True, rng: Optional[random.Random] = None) -> Outcome:
    """
    The move through a non-king piece's secondary type.

    The oracle proves it on the virtual position; the result is then forced
    back onto the primary position. Forcing the whole virtual placement would
    also turn every other fused piece into its secondary type, so those
    squares get their primary occupants back.
    """
    mover = state.board.piece_at(from_sq)
    secondary = state.fused.get(from_sq)
    if secondary is None or mover.piece_type == chess.KING:
        return MoveRejected(RejectReason.NO_CAPABILITY, from_sq, to_sq, "fused")

    virtual = build_virtual(state.board, state.fused)
    move = find_move(virtual, from_sq, to_sq)
    if move is None:
        return MoveRejected(RejectReason.NO_CAPABILITY, from_sq, to_sq, "fused")

    far_rank = chess.BB_RANK_8 if mover.color == chess.WHITE else chess.BB_RANK_1
    pawn_promotes = False
    if mover.piece_type == chess.PAWN and chess.BB_SQUARES[to_sq] & chess.BB_BACKRANKS:
        if not chess.BB_SQUARES[to_sq] & far_rank:
            return MoveRejected(RejectReason.NO_CAPABILITY, from_sq, to_sq, "pawn on its first rank")
        pawn_promotes = True

    is_ep = virtual.is_en_passant(move)
    captured_sq = en_passant_victim(move, mover.color) if is_ep else to_sq
    captured = state.board.piece_at(captured_sq)
    san = bare_san(virtual, move)
    if pawn_promotes and move.promotion is None:
        san += "=Q"
    after_virtual = virtual.copy(stack=False)
    after_virtual.push(move)

    promoted = move.promotion is not None or pawn_promotes
    placement = after_virtual.piece_map()
    for square, _ in state.fused.items():
        if square in (from_sq, captured_sq):
            continue
        occupant = state.board.piece_at(square)
        if occupant is not None:
            placement[square] = occupant
    placement[to_sq] = chess.Piece(chess.QUEEN if promoted else mover.piece_type, mover.color)

    after = state.copy()
    board = after.board
    board.set_piece_map(placement)
    board.turn = after_virtual.turn
    board.ep_square = None  # only a primary pawn push leaves an en-passant target
    if mover.piece_type == chess.PAWN or captured is not None:
        board.halfmove_clock = 0
    else:
        board.halfmove_clock = after_virtual.halfmove_clock
    board.fullmove_number = after_virtual.fullmove_number
    board.castling_rights = (
        state.board.castling_rights & ~chess.BB_SQUARES[from_sq] & ~chess.BB_SQUARES[to_sq]
    )

    mover_secondary = after.fused.clear(from_sq)
    captured_secondary = after.fused.clear(captured_sq) if captured is not None else None
    after.fused.clear(to_sq)
    fusion = _settle(after, mover, mover_secondary, to_sq, captured, captured_secondary,
                     promoted, prefer_existing)
    return MovePlan(
        capability=Capability.FUSED, move=move, san=san, after=after, mover=mover,
        captured=captured, captured_square=captured_sq if captured is not None else None,
        captured_secondary=captured_secondary, fusion=fusion,
        is_en_passant=is_ep, promotion=chess.QUEEN if promoted else None,
    )


def probe_king_fusion(state: CompoundState, from_sq: chess.Square, to_sq: chess.Square,
                      prefer_existing: bool = True, rng: Optional[random.Random] = None) -> Outcome:
    """
    The move through a fused king's secondary type.

    The substituted copy's move was made by a non-king piece, so its turn
    machinery is not trusted: the king token is relocated by hand and the
    side to move, clocks and castling rights are updated explicitly.
    """
    mover = state.board.piece_at(from_sq)
    piece_type = state.kings.get(mover.color)
    if mover.piece_type != chess.KING or piece_type is None:
        return MoveRejected(RejectReason.NO_CAPABILITY, from_sq, to_sq, "king_fusion")

    sub = substitute_king(state.board, mover.color, piece_type, rng=rng)
    move = find_move(sub, from_sq, to_sq)
    if move is None:
        return MoveRejected(RejectReason.NO_CAPABILITY, from_sq, to_sq, "king_fusion")
    san = bare_san(sub, move)

    captured = state.board.piece_at(to_sq)
    after = state.copy()
    board = after.board
    board.remove_piece_at(from_sq)
    board.set_piece_at(to_sq, mover)
    back_rank = chess.BB_RANK_1 if mover.color == chess.WHITE else chess.BB_RANK_8
    board.castling_rights &= ~back_rank & ~chess.BB_SQUARES[to_sq]
    board.ep_square = None
    board.halfmove_clock = 0 if captured is not None else board.halfmove_clock + 1
    if mover.color == chess.BLACK:
        board.fullmove_number += 1
    board.turn = not mover.color

    held = after.fused.clear(to_sq)
    captured_secondary = held if captured is not None else None
    fusion = _settle(after, mover, None, to_sq, captured, captured_secondary, False, prefer_existing)
    return MovePlan(
        capability=Capability.KING_FUSION, move=move, san=san, after=after, mover=mover,
        captured=captured, captured_square=to_sq if captured is not None else None,
        captured_secondary=captured_secondary, fusion=fusion,
    )


PROBES: Tuple[Callable[..., Outcome], ...] = (probe_primary, probe_fused, probe_king_fusion)


def plan_move(state: CompoundState, from_sq: chess.Square, to_sq: chess.Square,
              prefer_existing: bool = True, rng: Optional[random.Random] = None) -> Outcome:
    """Run the probes in order and return the first accepted plan."""
    mover = get_piece(state.board, from_sq)
    if mover is None:
        return MoveRejected(RejectReason.EMPTY_SQUARE, from_sq, to_sq)
    if mover.color != state.turn:
        return MoveRejected(RejectReason.WRONG_TURN, from_sq, to_sq)
    if from_sq == to_sq or state.board.piece_type_at(to_sq) == chess.KING:
        return MoveRejected(RejectReason.NO_CAPABILITY, from_sq, to_sq)

    for probe in PROBES:
        outcome = probe(state, from_sq, to_sq, prefer_existing, rng)
        if isinstance(outcome, MovePlan):
            return outcome
    return MoveRejected(RejectReason.NO_CAPABILITY, from_sq, to_sq)


# =============================================================================
# Candidate targets
# =============================================================================

def candidate_targets(state: CompoundState, square: chess.Square,
                      rng: Optional[random.Random] = None) -> List[Tuple[chess.Square, Capability]]:
    """
    Destination squares any capability of the piece on ``square`` reaches,
    before king-safety screening. First capability wins on duplicates.
    """
    piece = state.board.piece_at(square)
    if piece is None or piece.color != state.turn:
        return []

    seen: Dict[chess.Square, Capability] = {}
    for move in generate_moves(state.board, square):
        seen.setdefault(move.to_square, Capability.PRIMARY)
    for to_sq in fused_targets(state, square, rng):
        seen.setdefault(to_sq, Capability.KING_FUSION if piece.piece_type == chess.KING else Capability.FUSED)
    return sorted(seen.items())


def fused_targets(state: CompoundState, square: chess.Square,
                  rng: Optional[random.Random] = None) -> List[chess.Square]:
    """Destinations reachable only through the secondary capability on ``square``."""
    piece = state.board.piece_at(square)
    if piece is None or piece.color != state.turn:
        return []
    if piece.piece_type == chess.KING:
        piece_type = state.kings.get(piece.color)
        if piece_type is None:
            return []
        return sorted({m.to_square for m in king_fusion_moves(state.board, piece.color, piece_type, rng)})
    if square not in state.fused:
        return []
    virtual = build_virtual(state.board, state.fused)
    return sorted({m.to_square for m in generate_moves(virtual, square)})
