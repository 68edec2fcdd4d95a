"""
FusionEngine: the public surface of the rules engine.

The engine holds one ``CompoundState`` (primary board, Fusion Map, King
Fusion Table), the virtual board derived from it, the move history and a
frame logger. Every public operation runs to completion and either swaps a
complete new state in or leaves the old one untouched; no mutable internal
object is ever handed out.

Usage:
    from fusion_chess import FusionEngine

    engine = FusionEngine()
    result = engine.move_piece("b1", "c3")
    if not result:
        print(result.reason)
    print(engine.export_state())
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Union

import chess
import numpy as np

from .config import EngineConfig
from .errors import ImportRejected
from .executor import FusionMoveExecutor, MoveResult, notation_for
from .fusion_map import king_token
from .history import START_EXPORT, GameHistory, MoveRecord
from .legality import LegalityValidator
from .logger import GameLogger
from .oracle import STARTING_FEN
from .pieces import SquareLike, parse_square
from .planes import encode_state
from .probes import MoveRejected, RejectReason, fused_targets
from .serialization import export_state, import_state, position_key
from .state import CompoundState, FusionSnapshot
from .status import GameStatus, evaluate
from .virtual import VirtualBoardSynchronizer


class FusionEngine:
    """Fusion chess game: moves, legality, terminal states, history, export/import."""

    def __init__(self, config: Optional[EngineConfig] = None, logger: Optional[GameLogger] = None):
        self.config = config or EngineConfig()
        self.logger = logger or GameLogger(enabled=self.config.record_frames)
        rng = random.Random(self.config.rng_seed) if self.config.placeholder_random_fallback else None
        self._validator = LegalityValidator(prefer_existing=self.config.prefer_existing, rng=rng)
        self._executor = FusionMoveExecutor(self._validator, self.config)
        self._virtual = VirtualBoardSynchronizer()
        self._state = CompoundState.initial(STARTING_FEN)
        self._history = GameHistory(START_EXPORT, position_key(self._state))
        self._sync()

    # --- internals ---

    def _sync(self) -> None:
        self._virtual.rebuild(self._state.board, self._state.fused)

    def _env(self) -> Dict[str, Any]:
        return {
            "fen": self._state.board.fen(),
            "virtual_fen": self._virtual.fen,
            "export": export_state(self._state),
        }

    def _load(self, state: CompoundState) -> None:
        self._state = state
        self._sync()

    # --- moves ---

    def move_piece(self, from_square: SquareLike, to_square: SquareLike) -> Union[MoveResult, MoveRejected]:
        """
        Apply a move if any capability makes it legal.

        Returns a truthy ``MoveResult`` or a falsy ``MoveRejected``; an
        illegal request never raises and never changes the state.
        """
        try:
            from_sq, to_sq = parse_square(from_square), parse_square(to_square)
        except ValueError as e:
            return self._reject(MoveRejected(RejectReason.INVALID_SQUARE, detail=str(e)))

        if self.status().is_game_over:
            return self._reject(MoveRejected(RejectReason.GAME_OVER, from_sq, to_sq))

        result, after = self._executor.execute(self._state, from_sq, to_sq)
        if after is None:
            return self._reject(result)

        self._load(after)
        self._history.append(MoveRecord(
            notation=result.notation,
            uci=result.uci,
            exported=export_state(after),
            position_key=position_key(after),
        ))
        self.logger.frame("move", len(self._history), note=result.notation,
                          env=self._env(), move=result.to_dict())
        return result

    def _reject(self, rejection: MoveRejected) -> MoveRejected:
        self.logger.frame("reject", len(self._history), note=rejection.reason.value,
                          rejection=rejection.to_dict())
        return rejection

    def get_legal_moves(self, square: Optional[SquareLike] = None,
                        verbose: bool = False) -> List[Union[str, Dict[str, Any]]]:
        """
        Legal moves for the side to move, screened by the full jeopardy test.

        Plain UCI strings, or dicts with notation/capability/capture details
        when ``verbose``.
        """
        sq = None
        if square is not None:
            try:
                sq = parse_square(square)
            except ValueError:
                return []
        plans = self._validator.legal_plans(self._state, sq)
        if not verbose:
            return [chess.Move(p.from_square, p.to_square, p.promotion).uci() for p in plans]
        return [
            {
                "from": chess.square_name(p.from_square),
                "to": chess.square_name(p.to_square),
                "uci": chess.Move(p.from_square, p.to_square, p.promotion).uci(),
                "notation": notation_for(p),
                "capability": p.capability.value,
                "piece": p.mover.symbol(),
                "captured": p.captured.symbol() if p.captured is not None else None,
                "fusion": p.fusion.to_dict(),
            }
            for p in plans
        ]

    def get_fused_moves(self, entry: str, hovered: SquareLike) -> List[str]:
        """
        Moves the fused capability ``entry`` (``"c3"`` or ``"wK"``) offers,
        shown only while its own square is hovered and its owner is to move.
        """
        if entry in (king_token(chess.WHITE), king_token(chess.BLACK)):
            color = chess.WHITE if entry[0] == "w" else chess.BLACK
            if color not in self._state.kings:
                return []
            square = self._state.board.king(color)
        else:
            try:
                square = parse_square(entry)
            except ValueError:
                return []
            if square not in self._state.fused:
                return []
        try:
            hovered_sq = parse_square(hovered)
        except ValueError:
            return []
        piece = self._state.board.piece_at(square) if square is not None else None
        if hovered_sq != square or piece is None or piece.color != self._state.turn:
            return []

        moves = []
        for to_sq in fused_targets(self._state, square, self._validator.rng):
            outcome = self._validator.check_move(self._state, square, to_sq)
            if outcome:
                moves.append(chess.Move(square, to_sq, outcome.promotion).uci())
        return moves

    # --- status ---

    def status(self) -> GameStatus:
        return evaluate(self._state, self._validator, self.config, self._history)

    def is_in_check(self) -> bool:
        return self._validator.is_in_check(self._state)

    def is_checkmate(self) -> bool:
        return self.status().is_checkmate

    def is_stalemate(self) -> bool:
        return self.status().is_stalemate

    def is_draw(self) -> bool:
        return self.status().is_draw

    def is_game_over(self) -> bool:
        return self.status().is_game_over

    @property
    def turn(self) -> chess.Color:
        return self._state.turn

    # --- history ---

    def get_history(self, verbose: bool = False) -> List[Union[str, Dict[str, Any]]]:
        if verbose:
            return [r.to_dict() for r in self._history.records()]
        return self._history.notations()

    def undo_move(self) -> Optional[MoveRecord]:
        """Take back the last move; None when there is nothing to undo."""
        record = self._history.pop()
        if record is None:
            return None
        self._load(import_state(self._history.current_export))
        self.logger.frame("undo", len(self._history), note=record.notation, env=self._env())
        return record

    def reset(self) -> None:
        self._load(CompoundState.initial(STARTING_FEN))
        self._history.restart(START_EXPORT, position_key(self._state))
        self.logger.frame("reset", 0, env=self._env())

    # --- serialization ---

    def export_state(self) -> str:
        return export_state(self._state)

    def import_state(self, text: str) -> None:
        """
        Replace the game with an exported position.

        Raises:
            ImportRejected: the string is malformed or inconsistent; the
                current game is left exactly as it was.
        """
        try:
            state = import_state(text)
        except ImportRejected as e:
            self.logger.frame("import", len(self._history), note=f"rejected: {e}")
            raise
        self._load(state)
        self._history.restart(export_state(state), position_key(state))
        self.logger.frame("import", 0, env=self._env())

    def report_missing_fused_piece(self, square: SquareLike) -> bool:
        """
        Evict a stale Fusion Map entry whose square no longer holds a piece
        that can carry it. Returns True when an entry was removed.
        """
        try:
            sq = parse_square(square)
        except ValueError:
            return False
        if sq not in self._state.fused:
            return False
        occupant = self._state.board.piece_at(sq)
        if occupant is not None and occupant.piece_type != chess.KING:
            return False
        state = self._state.copy()
        state.fused.clear(sq)
        self._load(state)
        self.logger.frame("evict", len(self._history), note=chess.square_name(sq), env=self._env())
        return True

    # --- views ---

    def positions(self) -> FusionSnapshot:
        return FusionSnapshot(
            fen=self._state.board.fen(),
            fused=self._state.fused.as_dict(),
            virtual_fen=self._virtual.fen,
            king_fused=self._state.kings.as_dict(),
        )

    def fused_entries(self) -> Dict[str, str]:
        entries = self._state.fused.as_dict()
        entries.update(self._state.kings.as_dict())
        return entries

    def fused_display(self) -> List[str]:
        """Lines for a "Fused" side panel: ``1. c3=B``."""
        return [f"{i}. {key}={letter.upper()}" for i, (key, letter) in enumerate(self.fused_entries().items(), 1)]

    def encode_planes(self) -> np.ndarray:
        return encode_state(self.positions())

    def __repr__(self) -> str:
        return f"FusionEngine({self.export_state()!r})"
