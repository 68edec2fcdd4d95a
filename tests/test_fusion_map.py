"""Tests for the Fusion Map and King Fusion Table."""

import chess
import pytest

from fusion_chess.fusion_map import FusionMap, KingFusionTable, king_token


class TestFusionMap:
    """Square -> secondary type bookkeeping."""

    def test_assign_overwrites_instead_of_stacking(self):
        """A square holds at most one secondary type."""
        fused = FusionMap()
        fused.assign(chess.C3, chess.BISHOP)
        fused.assign(chess.C3, chess.ROOK)

        assert len(fused) == 1
        assert fused.get(chess.C3) == chess.ROOK

    def test_king_is_not_a_secondary_type(self):
        with pytest.raises(ValueError):
            FusionMap().assign(chess.E4, chess.KING)

    def test_clear_returns_previous_value(self):
        fused = FusionMap({chess.D5: chess.KNIGHT})

        assert fused.clear(chess.D5) == chess.KNIGHT
        assert fused.clear(chess.D5) is None
        assert chess.D5 not in fused

    def test_migrate_moves_entry_and_drops_destination(self):
        """Migration carries the entry and replaces whatever the destination held."""
        fused = FusionMap({chess.C3: chess.BISHOP, chess.E5: chess.PAWN})
        fused.migrate(chess.C3, chess.E5)

        assert fused.as_dict() == {"e5": "b"}

    def test_migrate_from_empty_square_clears_destination(self):
        fused = FusionMap({chess.E5: chess.PAWN})
        fused.migrate(chess.C3, chess.E5)

        assert len(fused) == 0

    def test_items_in_square_order(self):
        fused = FusionMap({chess.H8: chess.PAWN, chess.A1: chess.ROOK, chess.E4: chess.QUEEN})

        assert [sq for sq, _ in fused.items()] == [chess.A1, chess.E4, chess.H8]
        assert list(fused) == [chess.A1, chess.E4, chess.H8]

    def test_copy_is_independent(self):
        fused = FusionMap({chess.C3: chess.BISHOP})
        clone = fused.copy()
        clone.clear(chess.C3)

        assert fused.get(chess.C3) == chess.BISHOP
        assert clone != fused


class TestKingFusionTable:
    """Per-colour king fusion with the queen ceiling."""

    def test_grant_and_read(self):
        kings = KingFusionTable()
        assert kings.grant(chess.WHITE, chess.ROOK)

        assert kings.get(chess.WHITE) == chess.ROOK
        assert kings.get(chess.BLACK) is None

    def test_queen_is_maximal(self):
        """Nothing replaces a queen fusion."""
        kings = KingFusionTable({chess.BLACK: chess.QUEEN})

        assert kings.is_maximal(chess.BLACK)
        assert not kings.grant(chess.BLACK, chess.KNIGHT)
        assert kings.get(chess.BLACK) == chess.QUEEN

    def test_pawn_is_not_a_king_fusion(self):
        with pytest.raises(ValueError):
            KingFusionTable().grant(chess.WHITE, chess.PAWN)

    def test_as_dict_uses_color_tokens_white_first(self):
        kings = KingFusionTable({chess.BLACK: chess.KNIGHT, chess.WHITE: chess.BISHOP})

        assert list(kings.as_dict().items()) == [("wK", "b"), ("bK", "n")]
        assert king_token(chess.BLACK) == "bK"
