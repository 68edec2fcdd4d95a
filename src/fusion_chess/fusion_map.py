"""
Fusion Map and King Fusion Table.

Both tables only record *secondary* capabilities; the primary type always
lives on the board. A square holds at most one secondary type and a king at
most one fusion.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

import chess

from .pieces import KING_SECONDARY_TYPES, SECONDARY_TYPES


class FusionMap:
    """Square -> secondary piece type, for non-king pieces."""

    def __init__(self, entries: Optional[Dict[chess.Square, chess.PieceType]] = None):
        self._entries: Dict[chess.Square, chess.PieceType] = {}
        for square, piece_type in (entries or {}).items():
            self.assign(square, piece_type)

    def get(self, square: chess.Square) -> Optional[chess.PieceType]:
        return self._entries.get(square)

    def assign(self, square: chess.Square, piece_type: chess.PieceType) -> None:
        """Write the square's secondary type, replacing any previous one."""
        if piece_type not in SECONDARY_TYPES:
            raise ValueError(f"Not a secondary piece type: {piece_type!r}")
        self._entries.pop(square, None)
        self._entries[square] = piece_type

    def clear(self, square: chess.Square) -> Optional[chess.PieceType]:
        """Drop the entry at ``square`` and return what it held."""
        return self._entries.pop(square, None)

    def migrate(self, src: chess.Square, dst: chess.Square) -> None:
        """Carry the entry at ``src`` to ``dst`` (the piece moved)."""
        piece_type = self._entries.pop(src, None)
        self._entries.pop(dst, None)
        if piece_type is not None:
            self._entries[dst] = piece_type

    def items(self) -> List[Tuple[chess.Square, chess.PieceType]]:
        """Entries in square order."""
        return sorted(self._entries.items())

    def copy(self) -> "FusionMap":
        return FusionMap(dict(self._entries))

    def as_dict(self) -> Dict[str, str]:
        return {chess.square_name(sq): chess.piece_symbol(pt) for sq, pt in self.items()}

    def __contains__(self, square: object) -> bool:
        return square in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[chess.Square]:
        return iter(sorted(self._entries))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FusionMap) and self._entries == other._entries

    def __repr__(self) -> str:
        return f"FusionMap({self.as_dict()})"


class KingFusionTable:
    """
    Color -> secondary piece type granted to that color's king.

    Once a king holds queen movement it is maximal and nothing replaces it.
    """

    def __init__(self, entries: Optional[Dict[chess.Color, chess.PieceType]] = None):
        self._entries: Dict[chess.Color, chess.PieceType] = {}
        for color, piece_type in (entries or {}).items():
            self.grant(color, piece_type)

    def get(self, color: chess.Color) -> Optional[chess.PieceType]:
        return self._entries.get(color)

    def is_maximal(self, color: chess.Color) -> bool:
        return self._entries.get(color) == chess.QUEEN

    def grant(self, color: chess.Color, piece_type: chess.PieceType) -> bool:
        """Give ``color``'s king a secondary type. Returns False when already maximal."""
        if piece_type not in KING_SECONDARY_TYPES:
            raise ValueError(f"Not a king fusion type: {piece_type!r}")
        if self.is_maximal(color):
            return False
        self._entries[color] = piece_type
        return True

    def items(self) -> List[Tuple[chess.Color, chess.PieceType]]:
        """Entries with white first."""
        return [(c, self._entries[c]) for c in (chess.WHITE, chess.BLACK) if c in self._entries]

    def copy(self) -> "KingFusionTable":
        return KingFusionTable(dict(self._entries))

    def as_dict(self) -> Dict[str, str]:
        return {king_token(c): chess.piece_symbol(pt) for c, pt in self.items()}

    def __contains__(self, color: object) -> bool:
        return color in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, KingFusionTable) and self._entries == other._entries

    def __repr__(self) -> str:
        return f"KingFusionTable({self.as_dict()})"


def king_token(color: chess.Color) -> str:
    """Reserved pseudo-square for a king entry: ``wK`` / ``bK``."""
    return ("w" if color == chess.WHITE else "b") + "K"
