"""Engine configuration for fusion chess.

The rules are fixed by the variant; the knobs here only cover the places
where the variant leaves room for a product decision (tie-breaks, draw
thresholds) and the engine's own bookkeeping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


TIE_BREAK_EXISTING = "existing"
TIE_BREAK_NEWER = "newer"


@dataclass
class EngineConfig:
    """Configuration for a FusionEngine instance."""
    tie_break: str = TIE_BREAK_EXISTING    # Equal-strength fusion candidates keep the value already present
    fifty_move_halfmoves: int = 100        # Halfmove clock value that ends the game
    repetition_count: int = 3              # Occurrences of one position that end the game
    record_frames: bool = True             # Collect GameLogger frames for every engine event
    placeholder_random_fallback: bool = False  # Guess a placeholder king square when no safe one exists
    rng_seed: Optional[int] = None         # Seed for the placeholder fallback

    def __post_init__(self) -> None:
        if self.tie_break not in (TIE_BREAK_EXISTING, TIE_BREAK_NEWER):
            raise ValueError(f"Unknown tie_break: {self.tie_break!r}")
        if self.fifty_move_halfmoves <= 0:
            raise ValueError("fifty_move_halfmoves must be positive")
        if self.repetition_count < 2:
            raise ValueError("repetition_count must be at least 2")

    @property
    def prefer_existing(self) -> bool:
        return self.tie_break == TIE_BREAK_EXISTING

    def as_dict(self) -> Dict[str, Any]:
        return {
            "tie_break": self.tie_break,
            "fifty_move_halfmoves": self.fifty_move_halfmoves,
            "repetition_count": self.repetition_count,
            "record_frames": self.record_frames,
            "placeholder_random_fallback": self.placeholder_random_fallback,
            "rng_seed": self.rng_seed,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EngineConfig":
        return cls(
            tie_break=d.get("tie_break", TIE_BREAK_EXISTING),
            fifty_move_halfmoves=d.get("fifty_move_halfmoves", 100),
            repetition_count=d.get("repetition_count", 3),
            record_frames=d.get("record_frames", True),
            placeholder_random_fallback=d.get("placeholder_random_fallback", False),
            rng_seed=d.get("rng_seed"),
        )
