from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Tuple

if TYPE_CHECKING:  # avoid runtime imports to prevent circular deps
    from .state import GameState


class BoardType(str, Enum):
    STANDARD = "standard"
    INNER_GADULU = "innerGadulu"

    @classmethod
    def parse(cls, value: "BoardType | str") -> "BoardType":
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name, member.name.lower()):
                return member
        raise ValueError(f"Unknown board type '{value}'")


class TurnPhase(str, Enum):
    AWAITING_ROLL = "awaiting-roll"
    ROLL_PENDING_SELECTION = "roll-pending-selection"
    MOVE_IN_PROGRESS = "move-in-progress"
    GAME_OVER = "game-over"


class RejectReason(str, Enum):
    GAME_OVER = "game_over"
    ROLL_PENDING = "roll_pending"
    NO_ROLL = "no_roll"
    MOVE_IN_PROGRESS = "move_in_progress"
    NOT_YOUR_TURN = "not_your_turn"
    UNKNOWN_PIECE = "unknown_piece"
    ILLEGAL_MOVE = "illegal_move"
    NOTHING_TO_COMMIT = "nothing_to_commit"


class EventKind(str, Enum):
    ROLL = "roll"
    TURN_PASSED = "turn_passed"
    STEP = "step"
    CAPTURE = "capture"
    ARRIVAL = "arrival"
    RANK = "rank"
    TURN_CHANGED = "turn_changed"
    GAME_OVER = "game_over"


@dataclass(frozen=True, slots=True)
class RollOutcome:
    point_value: int
    extra_turn: bool
    open_count: int
    seeds: Tuple[bool, ...]
    name: str
    is_remainder: bool = False


@dataclass(frozen=True, slots=True)
class MoveEvents:
    entered_board: bool = False
    finished: bool = False
    captured_piece_id: Optional[str] = None
    captured_owner_id: Optional[int] = None
    first_kill: bool = False  # this capture unlocked the inner spiral
    rank_assigned: Optional[int] = None

    @property
    def captured(self) -> bool:
        return self.captured_piece_id is not None


@dataclass(frozen=True, slots=True)
class MoveResult:
    state: "GameState"
    player_id: int
    piece_id: str
    points_spent: int
    old_position: int
    new_position: int
    path: Tuple[int, ...]
    squares: Tuple[int, ...]
    events: MoveEvents

    @property
    def scored(self) -> bool:
        return self.events.finished


@dataclass(frozen=True, slots=True)
class PendingMove:
    """Turn decision recorded by a move until the caller commits it."""

    player_id: int
    piece_id: str
    keeps_turn: bool
    remainder: Optional[RollOutcome] = None


@dataclass(frozen=True, slots=True)
class EngineEvent:
    kind: EventKind
    player_id: int
    piece_id: Optional[str] = None
    progress: Optional[int] = None
    square: Optional[int] = None
    value: Optional[int] = None


@dataclass(frozen=True, slots=True)
class GameOver:
    winner_id: Optional[int]
    ranks: Dict[int, int]
    last_place_id: Optional[int]
    message: str


@dataclass(frozen=True, slots=True)
class StepResult:
    accepted: bool
    state: "GameState"
    reason: Optional[RejectReason] = None
    message: str = ""
    events: Tuple[EngineEvent, ...] = field(default_factory=tuple)
    roll: Optional[RollOutcome] = None
    move: Optional[MoveResult] = None
    game_over: Optional[GameOver] = None

    @classmethod
    def rejected(
        cls, state: "GameState", reason: RejectReason, message: str
    ) -> "StepResult":
        return cls(accepted=False, state=state, reason=reason, message=message)
