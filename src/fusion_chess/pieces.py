"""
Square and piece-type helpers shared by the fusion modules.

Fusion decisions compare piece types by movement strength. Rook, bishop and
knight sit on the same step; ties are settled by ``EngineConfig.tie_break``.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

import chess


SquareLike = Union[chess.Square, str]


# Movement strength used by fusion decisions (king > queen > rook = bishop = knight > pawn)
FUSION_STRENGTH = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 3,
    chess.QUEEN: 9,
    chess.KING: 100,
}

# Types a queen's movement already covers
QUEEN_SUBSUMES = frozenset({chess.PAWN, chess.BISHOP, chess.ROOK, chess.QUEEN})

ROOK_BISHOP = frozenset({chess.ROOK, chess.BISHOP})

SECONDARY_TYPES = (chess.PAWN, chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN)
KING_SECONDARY_TYPES = (chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN)


# =============================================================================
# Squares
# =============================================================================

def parse_square(value: SquareLike) -> chess.Square:
    """Accept a square index or an algebraic name; raise ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError(f"Bad square: {value!r}")
    if isinstance(value, int):
        if 0 <= value < 64:
            return value
        raise ValueError(f"Bad square: {value!r}")
    if isinstance(value, str):
        return chess.parse_square(value.strip().lower())
    raise ValueError(f"Bad square: {value!r}")


def en_passant_victim(move: chess.Move, color: chess.Color) -> chess.Square:
    """Square of the pawn removed by an en-passant capture made by ``color``."""
    return move.to_square - 8 if color == chess.WHITE else move.to_square + 8


def castling_rook_squares(move: chess.Move) -> tuple:
    """(rook_from, rook_to) for a standard castling move given as king e1g1 / e1c1."""
    rank = chess.square_rank(move.from_square)
    if chess.square_file(move.to_square) > chess.square_file(move.from_square):
        return chess.square(7, rank), chess.square(5, rank)
    return chess.square(0, rank), chess.square(3, rank)


# =============================================================================
# Piece types
# =============================================================================

def parse_type_letter(letter: str) -> chess.PieceType:
    letter = letter.strip().lower()
    if letter not in chess.PIECE_SYMBOLS[1:]:
        raise ValueError(f"Bad piece type: {letter!r}")
    return chess.PIECE_SYMBOLS.index(letter)


def stronger(
    primary: chess.PieceType,
    secondary: Optional[chess.PieceType],
    prefer_existing: bool = True,
) -> chess.PieceType:
    """
    Pick the stronger of a captured piece's primary and fused types.

    On equal strength ``prefer_existing`` keeps the fused (already present)
    type, otherwise the primary type wins.
    """
    if secondary is None:
        return primary
    ps, ss = FUSION_STRENGTH[primary], FUSION_STRENGTH[secondary]
    if ss > ps:
        return secondary
    if ps > ss:
        return primary
    return secondary if prefer_existing else primary


def subsumes(capabilities: Iterable[Optional[chess.PieceType]], candidate: chess.PieceType) -> bool:
    """True if the movement in ``capabilities`` already covers ``candidate``."""
    caps = {c for c in capabilities if c is not None}
    if candidate in caps:
        return True
    return chess.QUEEN in caps and candidate in QUEEN_SUBSUMES


def forms_queen(a: Optional[chess.PieceType], b: Optional[chess.PieceType]) -> bool:
    """Rook and bishop movement together are queen movement."""
    return a is not None and b is not None and frozenset({a, b}) == ROOK_BISHOP
