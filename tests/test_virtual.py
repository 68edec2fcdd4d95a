"""Tests for the virtual board synchronizer."""

import logging

import chess
import pytest

from fusion_chess.fusion_map import FusionMap
from fusion_chess.virtual import VirtualBoardSynchronizer, build_virtual


BOARD_FEN = "4k3/8/8/8/8/2N5/8/4K3 w - - 0 1"


class TestBuildVirtual:
    """Deriving the virtual position."""

    def test_fused_square_shows_secondary_type(self):
        board = chess.Board(BOARD_FEN)
        virtual = build_virtual(board, FusionMap({chess.C3: chess.BISHOP}))

        assert virtual.piece_at(chess.C3) == chess.Piece(chess.BISHOP, chess.WHITE)
        assert board.piece_at(chess.C3) == chess.Piece(chess.KNIGHT, chess.WHITE)

    def test_rest_of_position_is_unchanged(self):
        board = chess.Board(BOARD_FEN)
        virtual = build_virtual(board, FusionMap({chess.C3: chess.BISHOP}))

        assert virtual.turn == board.turn
        assert virtual.king(chess.WHITE) == chess.E1
        assert virtual.king(chess.BLACK) == chess.E8

    def test_stale_entry_is_skipped_and_logged(self, caplog):
        board = chess.Board(BOARD_FEN)
        with caplog.at_level(logging.WARNING, logger="fusion_chess.virtual"):
            virtual = build_virtual(board, FusionMap({chess.D4: chess.QUEEN}))

        assert virtual.piece_at(chess.D4) is None
        assert "stale_fusion_entry" in caplog.text

    def test_king_square_is_never_rewritten(self):
        board = chess.Board(BOARD_FEN)
        virtual = build_virtual(board, FusionMap({chess.E1: chess.ROOK}))

        assert virtual.piece_at(chess.E1) == chess.Piece(chess.KING, chess.WHITE)


class TestVirtualBoardSynchronizer:
    """Rebuild semantics."""

    def test_rebuild_is_idempotent(self):
        sync = VirtualBoardSynchronizer()
        board = chess.Board(BOARD_FEN)
        fused = FusionMap({chess.C3: chess.ROOK})

        first = sync.rebuild(board, fused).fen()
        second = sync.rebuild(board, fused).fen()

        assert first == second == sync.fen
        assert "2R5" in sync.fen

    def test_board_returns_private_copy(self):
        sync = VirtualBoardSynchronizer()
        sync.rebuild(chess.Board(BOARD_FEN), FusionMap({chess.C3: chess.ROOK}))
        copy = sync.board()
        copy.remove_piece_at(chess.C3)

        assert sync.board().piece_at(chess.C3) is not None

    def test_unbuilt_synchronizer_raises(self):
        with pytest.raises(RuntimeError):
            VirtualBoardSynchronizer().fen
