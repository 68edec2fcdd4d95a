"""Feature planes for a compound position.

Encodes a ``FusionSnapshot`` as a flat float32 vector for external analysis
tools:

- 12 x 64 primary piece planes (white P N B R Q K, then black);
- 10 x 64 secondary-type planes (white P N B R Q, then black);
- 10 king fusion slots (one-hot of the fused type per colour);
- 1 side-to-move flag (1 = white).
"""

from __future__ import annotations

from typing import Dict

import chess
import numpy as np

from .fusion_map import king_token
from .pieces import KING_SECONDARY_TYPES, SECONDARY_TYPES, parse_type_letter
from .state import FusionSnapshot


PRIMARY_TYPES = (chess.PAWN, chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN, chess.KING)
COLORS = (chess.WHITE, chess.BLACK)

PLANE_DIM = 12 * 64 + 10 * 64 + 10 + 1


def _piece_plane(board: chess.Board, piece_type: chess.PieceType, color: chess.Color) -> np.ndarray:
    """Create 64-element binary plane for a piece type and color."""
    plane = np.zeros(64, dtype=np.float32)
    for sq in board.pieces(piece_type, color):
        plane[sq] = 1.0
    return plane


def _secondary_planes(board: chess.Board, fused: Dict[str, str]) -> np.ndarray:
    planes = np.zeros((2, len(SECONDARY_TYPES), 64), dtype=np.float32)
    for name, letter in fused.items():
        square = chess.parse_square(name)
        occupant = board.piece_at(square)
        if occupant is None:
            continue  # stale
        idx = SECONDARY_TYPES.index(parse_type_letter(letter))
        planes[0 if occupant.color == chess.WHITE else 1, idx, square] = 1.0
    return planes.reshape(-1)


def _king_slots(king_fused: Dict[str, str]) -> np.ndarray:
    slots = np.zeros((2, 5), dtype=np.float32)
    for i, color in enumerate(COLORS):
        letter = king_fused.get(king_token(color))
        if letter is not None:
            slots[i, 1 + KING_SECONDARY_TYPES.index(parse_type_letter(letter))] = 1.0
        else:
            slots[i, 0] = 1.0
    return slots.reshape(-1)


def encode_state(snapshot: FusionSnapshot) -> np.ndarray:
    board = chess.Board(snapshot.fen)
    primary = [_piece_plane(board, pt, c) for c in COLORS for pt in PRIMARY_TYPES]
    turn = np.array([1.0 if board.turn == chess.WHITE else 0.0], dtype=np.float32)
    return np.concatenate(primary + [
        _secondary_planes(board, snapshot.fused),
        _king_slots(snapshot.king_fused),
        turn,
    ])
