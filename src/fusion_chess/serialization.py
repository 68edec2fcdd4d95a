"""
Export string codec.

An export string is the primary FEN followed by one whitespace-separated
token of comma-terminated fusion entries::

    3k4/8/8/8/8/2N5/8/4K3 w - - 0 1 c3=b,wK=r,

Normal entries come first in square order, then ``wK`` and ``bK``. With no
fusions the string is the FEN plus a single trailing space.

Import is all-or-nothing: ``import_state`` either returns a fully validated
``CompoundState`` or raises ``ImportRejected``; it never touches a live
engine.
"""

from __future__ import annotations

import re
from typing import List, Tuple

import chess

from .errors import ImportFailure, ImportRejected
from .fusion_map import FusionMap, KingFusionTable, king_token
from .king_fusion import fused_king_attacks
from .oracle import (
    PRIMARY_STATUS_MASK,
    VIRTUAL_STATUS_MASK,
    load_position,
    serialize_position,
    validate_position,
)
from .pieces import parse_type_letter
from .state import CompoundState
from .virtual import build_virtual


SQUARE_ENTRY_RE = re.compile(r"^([a-h][1-8])=([pnbrq])$")
KING_ENTRY_RE = re.compile(r"^([wb])K=([nbrq])$")

Entry = Tuple[str, str]


# =============================================================================
# Export
# =============================================================================

def fusion_entries(state: CompoundState) -> List[Entry]:
    """(key, letter) pairs in export order."""
    entries = [(chess.square_name(sq), chess.piece_symbol(pt)) for sq, pt in state.fused.items()]
    entries.extend((king_token(c), chess.piece_symbol(pt)) for c, pt in state.kings.items())
    return entries


def fusion_token(state: CompoundState) -> str:
    return "".join(f"{key}={letter}," for key, letter in fusion_entries(state))


def export_state(state: CompoundState) -> str:
    return f"{serialize_position(state.board)} {fusion_token(state)}"


def position_key(state: CompoundState) -> str:
    """Repetition key: placement, side, castling, en passant and fusions."""
    fields = state.board.fen().split()[:4]
    return " ".join(fields) + " " + fusion_token(state)


# =============================================================================
# Import
# =============================================================================

def split_export(text: str) -> Tuple[str, List[str]]:
    """Separate the FEN from the fusion entry list."""
    if not isinstance(text, str) or not text.strip():
        raise ImportRejected(ImportFailure.BAD_POSITION, "empty export string")
    parts = text.split()
    tail = parts[-1]
    if len(parts) > 1 and ("=" in tail or tail.endswith(",")):
        return " ".join(parts[:-1]), [e for e in tail.split(",") if e]
    return " ".join(parts), []


def _parse_entries(board: chess.Board, raw: List[str]) -> Tuple[FusionMap, KingFusionTable]:
    fused = FusionMap()
    kings = KingFusionTable()
    seen = set()
    for entry in raw:
        key = entry.split("=")[0]
        if key in seen:
            raise ImportRejected(ImportFailure.BAD_ENTRY, f"duplicate entry {entry!r}")

        match = KING_ENTRY_RE.match(entry)
        if match:
            color = chess.WHITE if match.group(1) == "w" else chess.BLACK
            kings.grant(color, parse_type_letter(match.group(2)))
            seen.add(key)
            continue

        match = SQUARE_ENTRY_RE.match(entry)
        if not match:
            raise ImportRejected(ImportFailure.BAD_ENTRY, f"malformed entry {entry!r}")
        square = chess.parse_square(match.group(1))
        piece_type = parse_type_letter(match.group(2))
        occupant = board.piece_at(square)
        if occupant is not None and occupant.piece_type == chess.KING:
            raise ImportRejected(ImportFailure.BAD_ENTRY, f"{entry!r} points at a king")
        if occupant is not None and occupant.piece_type == piece_type:
            raise ImportRejected(ImportFailure.BAD_ENTRY, f"{entry!r} restates the occupant's type")
        fused.assign(square, piece_type)
        seen.add(key)
    return fused, kings


def import_state(text: str) -> CompoundState:
    """
    Parse and validate an export string.

    Raises:
        ImportRejected: BAD_POSITION for an unparsable or structurally
            invalid FEN, BAD_ENTRY for a malformed fusion entry,
            INCONSISTENT_VIRTUAL when the fused capabilities leave the side
            not to move in check.
    """
    fen, raw = split_export(text)
    try:
        board = load_position(fen)
    except ValueError as e:
        raise ImportRejected(ImportFailure.BAD_POSITION, str(e)) from e
    status = validate_position(board, PRIMARY_STATUS_MASK)
    if status:
        raise ImportRejected(ImportFailure.BAD_POSITION, f"oracle status {chess.Status(status)!r}")

    fused, kings = _parse_entries(board, raw)

    virtual = build_virtual(board, fused)
    if validate_position(virtual, VIRTUAL_STATUS_MASK):
        raise ImportRejected(ImportFailure.INCONSISTENT_VIRTUAL, f"virtual position {virtual.fen()} is invalid")
    mover_fusion = kings.get(board.turn)
    if mover_fusion is not None and fused_king_attacks(board, board.turn, mover_fusion, board.king(not board.turn)):
        raise ImportRejected(ImportFailure.INCONSISTENT_VIRTUAL, "fused king attacks the king not to move")

    return CompoundState(board=board, fused=fused, kings=kings)
