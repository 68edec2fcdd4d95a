"""Tests for compound-state feature planes."""

import chess
import numpy as np

from fusion_chess import FusionEngine
from fusion_chess.planes import PLANE_DIM, encode_state


SECONDARY_OFFSET = 12 * 64
KING_OFFSET = SECONDARY_OFFSET + 10 * 64


class TestEncodeState:
    """Layout of the encoded vector."""

    def test_start_position(self):
        vector = FusionEngine().encode_planes()

        assert vector.shape == (PLANE_DIM,)
        assert vector.dtype == np.float32
        assert vector[:SECONDARY_OFFSET].sum() == 32
        assert vector[SECONDARY_OFFSET:KING_OFFSET].sum() == 0
        assert list(vector[KING_OFFSET:KING_OFFSET + 10]) == [1, 0, 0, 0, 0, 1, 0, 0, 0, 0]
        assert vector[-1] == 1.0

    def test_fusions_are_encoded(self):
        engine = FusionEngine()
        engine.import_state("3k4/8/8/8/8/2N5/8/4K3 b - - 0 1 c3=b,wK=r,")
        vector = encode_state(engine.positions())

        # white secondaries: P N B R Q; bishop is index 2
        assert vector[SECONDARY_OFFSET + 2 * 64 + chess.C3] == 1.0
        assert vector[SECONDARY_OFFSET:KING_OFFSET].sum() == 1
        # white king slot: none N B R Q; rook is slot 3
        assert list(vector[KING_OFFSET:KING_OFFSET + 5]) == [0, 0, 0, 1, 0]
        assert vector[-1] == 0.0
