from .board import path_of, physical_square, safe_zones
from .config import config, roll_config
from .engine import (
    candidate_pieces,
    check_game_over,
    commit_move,
    request_roll,
    select_piece,
)
from .exceptions import AshtaChammaError, InvariantViolation, SetupError
from .game import Game
from .piece import Piece
from .player import PieceType, Player, PlayerSpec, default_seating
from .rules import can_move, check_kill, execute_move
from .seeds import generate_roll, roll_distribution
from .simulator import SimulationReport, Simulator
from .state import GameState, initialize, validate_state
from .types import (
    BoardType,
    EventKind,
    GameOver,
    MoveEvents,
    MoveResult,
    RejectReason,
    RollOutcome,
    StepResult,
    TurnPhase,
)

__all__ = [
    "AshtaChammaError",
    "BoardType",
    "can_move",
    "candidate_pieces",
    "check_game_over",
    "check_kill",
    "commit_move",
    "config",
    "default_seating",
    "EventKind",
    "execute_move",
    "Game",
    "GameOver",
    "GameState",
    "generate_roll",
    "initialize",
    "InvariantViolation",
    "MoveEvents",
    "MoveResult",
    "path_of",
    "physical_square",
    "Piece",
    "PieceType",
    "Player",
    "PlayerSpec",
    "RejectReason",
    "request_roll",
    "roll_config",
    "roll_distribution",
    "RollOutcome",
    "safe_zones",
    "select_piece",
    "SetupError",
    "SimulationReport",
    "Simulator",
    "StepResult",
    "TurnPhase",
    "validate_state",
]
