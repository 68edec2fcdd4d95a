"""Tests for the three-view jeopardy test."""

import chess

from fusion_chess.legality import JeopardyReport, LegalityValidator
from fusion_chess.probes import Capability, MovePlan, MoveRejected, RejectReason, plan_move
from fusion_chess.serialization import import_state


def _uci(plans):
    return {p.move.uci() for p in plans}


class TestJeopardyReport:
    """Truthiness and serialization."""

    def test_empty_report_is_falsy(self):
        assert not JeopardyReport()
        assert JeopardyReport(king_fusion=True)

    def test_to_dict(self):
        assert JeopardyReport(virtual=True).to_dict() == {
            "primary": False, "virtual": True, "king_fusion": False,
        }


class TestVirtualSelfCheck:
    """A pinned piece the oracle alone would happily move."""

    STATE = "4k3/8/8/4n3/8/8/4R3/4K3 w - - 0 1 e5=r,"

    def test_oracle_accepts_but_validator_rejects(self):
        state = import_state(self.STATE)
        validator = LegalityValidator()

        plan = plan_move(state, chess.E2, chess.A2)
        assert isinstance(plan, MovePlan)

        outcome = validator.check_move(state, chess.E2, chess.A2)
        assert isinstance(outcome, MoveRejected)
        assert outcome.reason == RejectReason.KING_IN_JEOPARDY
        assert outcome.detail == "virtual"

    def test_report_names_the_virtual_view(self):
        state = import_state(self.STATE)
        validator = LegalityValidator()
        plan = plan_move(state, chess.E2, chess.A2)

        report = validator.king_threats(plan.after, chess.WHITE)
        assert report == JeopardyReport(virtual=True)

    def test_filtered_move_list(self):
        state = import_state(self.STATE)
        plans = LegalityValidator().legal_plans(state, chess.E2)

        assert _uci(plans) == {"e2e3", "e2e4", "e2e5"}

    def test_would_jeopardize_king(self):
        state = import_state(self.STATE)
        validator = LegalityValidator()

        assert validator.would_jeopardize_king(state, chess.E2, chess.A2)
        assert not validator.would_jeopardize_king(state, chess.E2, chess.E3)
        # a move nothing can make does not jeopardize anything
        assert not validator.would_jeopardize_king(state, chess.E2, chess.B5)


class TestCastling:
    """Castling path checked against the virtual view."""

    STATE = "4k3/8/n7/8/8/8/8/4K2R w K - 0 1 a6=b,"

    def test_castling_through_virtual_attack(self):
        state = import_state(self.STATE)
        outcome = LegalityValidator().check_move(state, chess.E1, chess.G1)

        assert isinstance(outcome, MoveRejected)
        assert outcome.reason == RejectReason.CASTLING_THROUGH_ATTACK

    def test_king_moves(self):
        state = import_state(self.STATE)
        plans = LegalityValidator().legal_plans(state, chess.E1)

        assert _uci(plans) == {"e1d1", "e1d2", "e1f2"}

    def test_castling_allowed_without_fusion(self):
        state = import_state("4k3/8/n7/8/8/8/8/4K2R w K - 0 1")
        outcome = LegalityValidator().check_move(state, chess.E1, chess.G1)

        assert isinstance(outcome, MovePlan)
        assert outcome.is_castling


class TestKingFusionView:
    """Check delivered by a fused king."""

    def test_fused_king_gives_check(self):
        state = import_state("4k3/8/8/8/8/8/4K3/8 b - - 0 1 wK=r,")
        validator = LegalityValidator()

        assert validator.is_in_check(state)
        assert validator.king_threats(state, chess.BLACK) == JeopardyReport(king_fusion=True)

    def test_escape_squares(self):
        state = import_state("4k3/8/8/8/8/8/4K3/8 b - - 0 1 wK=r,")
        plans = LegalityValidator().legal_plans(state)

        assert _uci(plans) == {"e8d8", "e8d7", "e8f8", "e8f7"}

    def test_king_fusion_capability_is_used(self):
        state = import_state("3k4/8/8/8/8/8/4K3/8 w - - 0 1 wK=r,")
        outcome = LegalityValidator().check_move(state, chess.E2, chess.E4)

        assert isinstance(outcome, MovePlan)
        assert outcome.capability == Capability.KING_FUSION
        assert outcome.after.board.king(chess.WHITE) == chess.E4
        assert outcome.after.turn == chess.BLACK


class TestBasicRejections:
    """Requests that never reach the probes."""

    def test_empty_and_wrong_turn(self):
        state = import_state("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
        validator = LegalityValidator()

        assert validator.check_move(state, chess.D4, chess.D5).reason == RejectReason.EMPTY_SQUARE
        assert validator.check_move(state, chess.E8, chess.D8).reason == RejectReason.WRONG_TURN
        assert validator.check_move(state, chess.E1, chess.E3).reason == RejectReason.NO_CAPABILITY

    def test_has_legal_move(self):
        assert LegalityValidator().has_legal_move(import_state("4k3/8/8/8/8/8/8/4K3 w - - 0 1"))
