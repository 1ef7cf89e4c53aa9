"""
Immutable game state for Ashta Chamma.

Every transition builds a new ``GameState`` by structural copy-on-write: only
the changed piece, its player and the state shell are rebuilt, every other
player and piece object is shared with the previous snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

from .board import PLAYER_IDS, physical_square, safe_zones
from .config import config
from .exceptions import InvariantViolation, SetupError
from .piece import Piece
from .player import PieceType, Player, PlayerSpec
from .types import BoardType, GameOver, PendingMove, RollOutcome, TurnPhase

PlayerInput = Union[PlayerSpec, Mapping[str, object]]


@dataclass(frozen=True, slots=True)
class GameState:
    players: Tuple[Player, ...]
    board_type: BoardType
    current_turn_player_id: int
    phase: TurnPhase = TurnPhase.AWAITING_ROLL
    current_roll: Optional[RollOutcome] = None  # live roll awaiting consumption
    pending_move: Optional[PendingMove] = None  # set while MOVE_IN_PROGRESS
    game_over: Optional[GameOver] = None
    roll_count: int = 0

    # --- Lookups ---
    @property
    def current_roll_value(self) -> Optional[int]:
        return self.current_roll.point_value if self.current_roll else None

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def current_player(self) -> Player:
        return self.player(self.current_turn_player_id)

    @property
    def is_over(self) -> bool:
        return self.phase == TurnPhase.GAME_OVER

    def player(self, player_id: int) -> Player:
        for pl in self.players:
            if pl.player_id == player_id:
                return pl
        raise InvariantViolation(f"Player {player_id} is not seated in this game")

    def find_piece(self, piece_id: str) -> Optional[Tuple[Player, Piece]]:
        for pl in self.players:
            pc = pl.piece(piece_id)
            if pc is not None:
                return pl, pc
        return None

    def ranked_players(self) -> list[Player]:
        return sorted((pl for pl in self.players if pl.is_ranked), key=lambda p: p.rank)

    def ranked_count(self) -> int:
        return sum(1 for pl in self.players if pl.is_ranked)

    def next_player_id(self, from_player_id: Optional[int] = None) -> int:
        """Next seat after ``from_player_id`` skipping ranked players, wrapping."""
        start = self.current_turn_player_id if from_player_id is None else from_player_id
        ids = [pl.player_id for pl in self.players]
        idx = ids.index(start)
        for step in range(1, len(ids) + 1):
            candidate = self.players[(idx + step) % len(ids)]
            if not candidate.is_ranked:
                return candidate.player_id
        return start

    # --- Copy-on-write helpers ---
    def with_player(self, player: Player) -> "GameState":
        players = tuple(
            player if pl.player_id == player.player_id else pl for pl in self.players
        )
        return replace(self, players=players)

    def with_piece(self, piece: Piece) -> "GameState":
        return self.with_player(self.player(piece.owner_id).with_piece(piece))

    # --- Export ---
    def to_dict(self) -> dict:
        players = []
        for pl in self.players:
            data = pl.to_dict()
            for pc_data, pc in zip(data["pieces"], pl.pieces):
                pc_data["square"] = (
                    None if pc.is_home else physical_square(pl.player_id, pc.position)
                )
            players.append(data)
        return {
            "players": players,
            "board_type": self.board_type.value,
            "current_turn_player_id": self.current_turn_player_id,
            "phase": self.phase.value,
            "current_roll_value": self.current_roll_value,
            "game_over": (
                {
                    "winner_id": self.game_over.winner_id,
                    "ranks": dict(self.game_over.ranks),
                    "last_place_id": self.game_over.last_place_id,
                    "message": self.game_over.message,
                }
                if self.game_over
                else None
            ),
        }


def _coerce_spec(entry: PlayerInput) -> PlayerSpec:
    if isinstance(entry, PlayerSpec):
        return entry
    try:
        return PlayerSpec(
            player_id=int(entry["id"] if "id" in entry else entry["player_id"]),
            name=str(entry.get("name", "")),
            piece_type=entry.get("piece_type", entry.get("pieceType", PieceType.BANGLE)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SetupError(f"Invalid player entry {entry!r}: {e}") from e


def initialize(
    players: Sequence[PlayerInput], board_type: BoardType | str = BoardType.STANDARD
) -> GameState:
    """Create the opening state: all pieces home, first listed player to roll."""
    specs = [_coerce_spec(p) for p in players]
    if not config.MIN_PLAYERS <= len(specs) <= config.MAX_PLAYERS:
        raise SetupError(f"A game needs 2 to 4 players, got {len(specs)}")
    ids = [s.player_id for s in specs]
    if len(set(ids)) != len(ids):
        raise SetupError(f"Duplicate player ids in {ids}")
    unknown = [pid for pid in ids if pid not in PLAYER_IDS]
    if unknown:
        raise SetupError(f"Player ids must be in {PLAYER_IDS}, got {unknown}")
    try:
        board = BoardType.parse(board_type)
        seated = tuple(Player.create(s) for s in specs)
    except ValueError as e:
        raise SetupError(str(e)) from e

    logger.debug(f"New game: players={ids}, board={board.value}")
    return GameState(
        players=seated,
        board_type=board,
        current_turn_player_id=seated[0].player_id,
    )


def validate_state(state: GameState) -> None:
    """Raise ``InvariantViolation`` if any rule invariant is broken."""
    safe = safe_zones(state.board_type)
    ranks: list[int] = []

    for pl in state.players:
        occupied: set[int] = set()
        for pc in pl.pieces:
            if pc.owner_id != pl.player_id:
                raise InvariantViolation(f"Piece {pc.piece_id} seated under player {pl.player_id}")
            if not config.HOME_POSITION <= pc.position <= config.MAX_PATH_INDEX:
                raise InvariantViolation(f"Piece {pc.piece_id} at invalid position {pc.position}")
            if not pl.has_first_kill and pc.position > config.OUTER_LOOP_END:
                raise InvariantViolation(
                    f"Piece {pc.piece_id} left the outer loop without a first kill"
                )
            if pc.on_board:
                sq = physical_square(pl.player_id, pc.position)
                if sq not in safe:
                    if sq in occupied:
                        raise InvariantViolation(
                            f"Player {pl.player_id} stacks two pieces on square {sq}"
                        )
                    occupied.add(sq)
        if pl.rank is not None:
            if not pl.all_finished:
                raise InvariantViolation(f"Player {pl.player_id} ranked before finishing")
            ranks.append(pl.rank)

    if sorted(ranks) != list(range(1, len(ranks) + 1)):
        raise InvariantViolation(f"Ranks {sorted(ranks)} are not 1..{len(ranks)}")

    live_roll = state.current_roll is not None
    if live_roll != (state.phase == TurnPhase.ROLL_PENDING_SELECTION):
        raise InvariantViolation(f"Live roll inconsistent with phase {state.phase.value}")
    if (state.pending_move is not None) != (state.phase == TurnPhase.MOVE_IN_PROGRESS):
        raise InvariantViolation(f"Pending move inconsistent with phase {state.phase.value}")
    if (state.game_over is not None) != (state.phase == TurnPhase.GAME_OVER):
        raise InvariantViolation("Game-over record inconsistent with phase")
    accepting_input = state.phase in (
        TurnPhase.AWAITING_ROLL,
        TurnPhase.ROLL_PENDING_SELECTION,
    )
    if accepting_input and state.current_player.is_ranked:
        raise InvariantViolation(
            f"Ranked player {state.current_turn_player_id} holds the turn"
        )


def iter_pieces(state: GameState) -> Iterable[Piece]:
    for pl in state.players:
        yield from pl.pieces
