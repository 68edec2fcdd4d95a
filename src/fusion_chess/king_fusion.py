"""
King fusion handler.

python-chess refuses to represent "a king that moves like a rook", so a fused
king is handled by substitution on a disposable copy of the primary board:

1. take the king off its square and put a piece of the fused type there;
2. if the copy now lacks a king of that color, insert a placeholder king on
   an unoccupied, unattacked square that cannot interfere with the question
   being asked;
3. ask the oracle the normal question (legal moves). Attack tests skip step 2.

Only the *movement* found on the copy is carried back to the real board.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

import chess

from .errors import PlaceholderKingError
from .oracle import generate_moves


LOGGER = logging.getLogger(__name__)


def insert_placeholder_king(
    board: chess.Board,
    color: chess.Color,
    avoid: chess.Bitboard = chess.BB_EMPTY,
    vacate: Optional[chess.Square] = None,
    rng: Optional[random.Random] = None,
) -> chess.Square:
    """
    Put a stand-in king of ``color`` on the first safe square (a1..h8 scan).

    A square is safe when it is empty, outside ``avoid`` and not attacked by
    the other color. ``vacate`` names a square whose piece is about to move:
    attacks are judged with it already gone, so the placeholder cannot end up
    in a discovered check.

    Raises:
        PlaceholderKingError: no safe square exists and no ``rng`` fallback
            was supplied.
    """
    probe = board
    if vacate is not None:
        probe = board.copy(stack=False)
        probe.remove_piece_at(vacate)

    for square in chess.SQUARES:
        if board.piece_at(square) is not None or chess.BB_SQUARES[square] & avoid:
            continue
        if probe.is_attacked_by(not color, square):
            continue
        board.set_piece_at(square, chess.Piece(chess.KING, color))
        return square

    if rng is not None:
        empty = [sq for sq in chess.SQUARES if board.piece_at(sq) is None and not chess.BB_SQUARES[sq] & avoid]
        if empty:
            square = rng.choice(empty)
            LOGGER.warning("placeholder_king_random_fallback", extra={"square": chess.square_name(square)})
            board.set_piece_at(square, chess.Piece(chess.KING, color))
            return square

    raise PlaceholderKingError(
        f"No safe square for a placeholder {chess.COLOR_NAMES[color]} king in {board.board_fen()}"
    )


def substitute_king(
    board: chess.Board,
    color: chess.Color,
    piece_type: chess.PieceType,
    rng: Optional[random.Random] = None,
) -> chess.Board:
    """
    Disposable copy with ``color``'s king replaced by ``piece_type`` and a
    placeholder king inserted clear of the substitute's lines.
    """
    king_sq = board.king(color)
    if king_sq is None:
        raise ValueError(f"No {chess.COLOR_NAMES[color]} king to substitute")
    sub = board.copy(stack=False)
    sub.remove_piece_at(king_sq)
    sub.set_piece_at(king_sq, chess.Piece(piece_type, color))
    insert_placeholder_king(
        sub, color,
        avoid=sub.attacks_mask(king_sq),
        vacate=king_sq,
        rng=rng,
    )
    return sub


def king_fusion_moves(
    board: chess.Board,
    color: chess.Color,
    piece_type: chess.PieceType,
    rng: Optional[random.Random] = None,
) -> List[chess.Move]:
    """Moves the fused king can make through its secondary type (oracle view)."""
    if board.turn != color:
        return []
    sub = substitute_king(board, color, piece_type, rng=rng)
    return generate_moves(sub, board.king(color))


def fused_king_attacks(
    board: chess.Board,
    color: chess.Color,
    piece_type: chess.PieceType,
    target: chess.Square,
) -> bool:
    """
    Does ``color``'s king, moving as ``piece_type``, attack ``target``?

    Attack masks need no king on the board, so no placeholder is inserted.
    """
    king_sq = board.king(color)
    if king_sq is None or king_sq == target:
        return False
    sim = board.copy(stack=False)
    sim.remove_piece_at(king_sq)
    sim.set_piece_at(king_sq, chess.Piece(piece_type, color))
    return king_sq in sim.attackers(color, target)
