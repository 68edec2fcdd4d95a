"""
Board oracle adapter.

Thin call surface onto python-chess, the standard-chess rule oracle. Nothing
here knows about fusion: every function answers a plain chess question for
the board it is handed, so the rest of the engine can be read (and mocked)
against this one contract.
"""

from __future__ import annotations

from typing import List, Optional

import chess


STARTING_FEN = chess.STARTING_FEN

# Oracle status bits that make a position unusable as a primary position.
# Checker-count and en-passant/castling bookkeeping bits are left out because
# fused movement produces checks and pawn-like squares standard chess cannot.
PRIMARY_STATUS_MASK = (
    chess.STATUS_EMPTY
    | chess.STATUS_NO_WHITE_KING
    | chess.STATUS_NO_BLACK_KING
    | chess.STATUS_TOO_MANY_KINGS
    | chess.STATUS_PAWNS_ON_BACKRANK
    | chess.STATUS_OPPOSITE_CHECK
)

# A virtual position may hold secondary pawns on a back rank.
VIRTUAL_STATUS_MASK = PRIMARY_STATUS_MASK & ~chess.STATUS_PAWNS_ON_BACKRANK


def load_position(fen: str) -> chess.Board:
    """Parse a FEN string; raises ValueError on syntax errors."""
    return chess.Board(fen)


def validate_position(board: chess.Board, mask: int = PRIMARY_STATUS_MASK) -> int:
    """Return the oracle status bits selected by ``mask`` (0 means valid)."""
    return board.status() & mask


def serialize_position(board: chess.Board) -> str:
    return board.fen()


def get_piece(board: chess.Board, square: chess.Square) -> Optional[chess.Piece]:
    return board.piece_at(square)


def find_king_square(board: chess.Board, color: chess.Color) -> Optional[chess.Square]:
    return board.king(color)


def is_square_attacked(board: chess.Board, square: chess.Square, by_color: chess.Color) -> bool:
    return board.is_attacked_by(by_color, square)


def is_in_check(board: chess.Board) -> bool:
    return board.is_check()


def generate_moves(board: chess.Board, square: Optional[chess.Square] = None) -> List[chess.Move]:
    """
    Legal moves for the side to move, optionally from one square.

    Under-promotions are dropped: promotion is always to a queen.
    """
    from_mask = chess.BB_ALL if square is None else chess.BB_SQUARES[square]
    return [
        m for m in board.generate_legal_moves(from_mask=from_mask)
        if m.promotion in (None, chess.QUEEN)
    ]


def find_move(board: chess.Board, from_sq: chess.Square, to_sq: chess.Square) -> Optional[chess.Move]:
    """The oracle's legal move from ``from_sq`` to ``to_sq``, if any."""
    for move in generate_moves(board, from_sq):
        if move.to_square == to_sq:
            return move
    return None


def apply_move(board: chess.Board, from_sq: chess.Square, to_sq: chess.Square) -> Optional[chess.Move]:
    """Push the legal move ``from_sq``-``to_sq`` on ``board``; None if the oracle refuses it."""
    move = find_move(board, from_sq, to_sq)
    if move is None:
        return None
    board.push(move)
    return move


def bare_san(board: chess.Board, move: chess.Move) -> str:
    """SAN without the oracle's check/mate suffix."""
    return board.san(move).rstrip("+#")
