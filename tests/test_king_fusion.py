"""Tests for the king fusion handler and placeholder kings."""

import random

import chess
import pytest

from fusion_chess.errors import PlaceholderKingError
from fusion_chess.king_fusion import (
    fused_king_attacks,
    insert_placeholder_king,
    king_fusion_moves,
    substitute_king,
)


def _rook_wall():
    """White rooks on the whole first rank: every empty square is attacked."""
    board = chess.Board(None)
    for square in chess.SquareSet(chess.BB_RANK_1):
        board.set_piece_at(square, chess.Piece(chess.ROOK, chess.WHITE))
    return board


class TestPlaceholderKing:
    """Deterministic scan and its failure modes."""

    def test_first_safe_square(self):
        board = chess.Board("4k3/8/8/8/8/8/8/8 w - - 0 1")
        square = insert_placeholder_king(board, chess.WHITE)

        assert square == chess.A1
        assert board.king(chess.WHITE) == chess.A1

    def test_avoid_mask_is_respected(self):
        board = chess.Board("4k3/8/8/8/8/8/8/8 w - - 0 1")
        square = insert_placeholder_king(board, chess.WHITE, avoid=chess.BB_A1)

        assert square == chess.B1

    def test_attacked_squares_are_skipped(self):
        board = chess.Board("4k3/8/8/8/8/8/8/r7 w - - 0 1")
        square = insert_placeholder_king(board, chess.WHITE)

        # a-file and first rank are covered by the rook
        assert chess.square_file(square) != 0
        assert chess.square_rank(square) != 0

    def test_no_safe_square_raises(self):
        board = _rook_wall()
        with pytest.raises(PlaceholderKingError):
            insert_placeholder_king(board, chess.BLACK)

    def test_random_fallback_when_enabled(self):
        board = _rook_wall()
        square = insert_placeholder_king(board, chess.BLACK, rng=random.Random(0))

        assert chess.square_rank(square) >= 1
        assert board.king(chess.BLACK) == square


class TestSubstitution:
    """King replaced by its fused type on a disposable copy."""

    FEN = "3k4/8/8/8/8/8/4K3/8 w - - 0 1"

    def test_substitute_king(self):
        board = chess.Board(self.FEN)
        sub = substitute_king(board, chess.WHITE, chess.ROOK)

        assert sub.piece_at(chess.E2) == chess.Piece(chess.ROOK, chess.WHITE)
        assert sub.king(chess.WHITE) == chess.A1
        assert board.piece_at(chess.E2) == chess.Piece(chess.KING, chess.WHITE)

    def test_king_fusion_moves_as_rook(self):
        board = chess.Board(self.FEN)
        targets = {m.to_square for m in king_fusion_moves(board, chess.WHITE, chess.ROOK)}

        assert chess.E4 in targets
        assert chess.A2 in targets
        assert chess.D3 not in targets
        assert len(targets) == 14

    def test_no_moves_out_of_turn(self):
        board = chess.Board(self.FEN)

        assert king_fusion_moves(board, chess.BLACK, chess.QUEEN) == []


class TestFusedKingAttacks:
    """Attack simulation for a fused king."""

    def test_open_file(self):
        board = chess.Board("4k3/8/8/8/8/8/4K3/8 w - - 0 1")

        assert fused_king_attacks(board, chess.WHITE, chess.ROOK, chess.E8)
        assert not fused_king_attacks(board, chess.WHITE, chess.ROOK, chess.D3)
        assert not fused_king_attacks(board, chess.WHITE, chess.BISHOP, chess.E8)

    def test_blocked_file(self):
        board = chess.Board("4k3/8/8/8/4p3/8/4K3/8 w - - 0 1")

        assert not fused_king_attacks(board, chess.WHITE, chess.ROOK, chess.E8)

    def test_needs_no_placeholder_square(self):
        """Every empty square is attacked by black, so no placeholder king would fit."""
        board = chess.Board(None)
        for square in chess.SquareSet(chess.BB_RANK_8):
            board.set_piece_at(square, chess.Piece(chess.ROOK, chess.BLACK))
        board.set_piece_at(chess.A1, chess.Piece(chess.KING, chess.WHITE))

        assert fused_king_attacks(board, chess.WHITE, chess.ROOK, chess.A8)
        assert not fused_king_attacks(board, chess.WHITE, chess.BISHOP, chess.A8)
        assert board.piece_at(chess.A1) == chess.Piece(chess.KING, chess.WHITE)
