# src/fusion_chess/__init__.py
"""
Fusion chess rules engine.

Capturing a piece fuses the captured piece's movement onto the capturer
(kings included). Standard chess legality comes from python-chess; this
package tracks the fused capabilities and combines them into one game.
"""

from .config import EngineConfig, TIE_BREAK_EXISTING, TIE_BREAK_NEWER
from .engine import FusionEngine
from .errors import FusionError, ImportFailure, ImportRejected, PlaceholderKingError
from .executor import FusionMoveExecutor, MoveResult
from .fusion_map import FusionMap, KingFusionTable
from .history import GameHistory, MoveRecord
from .legality import JeopardyReport, LegalityValidator
from .logger import GameLogger
from .policy import FusionChange, FusionKind
from .probes import Capability, MovePlan, MoveRejected, RejectReason
from .serialization import export_state, import_state
from .state import CompoundState, FusionSnapshot
from .status import DrawReason, GameStatus
from .virtual import VirtualBoardSynchronizer

__all__ = [
    "FusionEngine", "EngineConfig", "TIE_BREAK_EXISTING", "TIE_BREAK_NEWER",
    "FusionError", "ImportFailure", "ImportRejected", "PlaceholderKingError",
    "FusionMoveExecutor", "MoveResult",
    "FusionMap", "KingFusionTable",
    "GameHistory", "MoveRecord",
    "JeopardyReport", "LegalityValidator",
    "GameLogger",
    "FusionChange", "FusionKind",
    "Capability", "MovePlan", "MoveRejected", "RejectReason",
    "export_state", "import_state",
    "CompoundState", "FusionSnapshot",
    "DrawReason", "GameStatus",
    "VirtualBoardSynchronizer",
]
