import json
from typing import List, Dict, Any, Optional


class GameLogger:
    """
    Collects per-event frames for replay/debugging.

    Frame schema (all optional except type/ply):
      {
        "type": "move" | "reject" | "undo" | "reset" | "import" | "evict",
        "ply": int,
        "note": str,
        "env": { "fen": str, "virtual_fen": str, "export": str },
        "move": { ... MoveResult.to_dict() ... },
        "rejection": { ... MoveRejected.to_dict() ... }
      }
    """

    EVENT_TYPES = ("move", "reject", "undo", "reset", "import", "evict")

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.events: List[Dict[str, Any]] = []

    def frame(
        self,
        kind: str,
        ply: int,
        note: str = "",
        env: Optional[Dict[str, Any]] = None,
        move: Optional[Dict[str, Any]] = None,
        rejection: Optional[Dict[str, Any]] = None,
    ):
        if kind not in self.EVENT_TYPES:
            raise ValueError(f"Unknown event type: {kind!r}")
        if not self.enabled:
            return
        frame: Dict[str, Any] = {
            "type": kind,
            "ply": ply,
            "note": note,
        }
        if env is not None:
            frame["env"] = env
        if move is not None:
            frame["move"] = move
        if rejection is not None:
            frame["rejection"] = rejection
        self.events.append(frame)

    def of_type(self, kind: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["type"] == kind]

    def to_json(self, path: str):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.events, f, indent=2)
