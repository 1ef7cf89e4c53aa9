from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from . import engine
from .piece import Piece
from .player import default_seating
from .state import GameState, PlayerInput, initialize
from .types import BoardType, StepResult


@dataclass(slots=True)
class Game:
    """A playing session: the current snapshot plus every committed one.

    Snapshots are immutable, so ``history`` holds plain references and any
    earlier state can be inspected or replayed from.
    """

    state: GameState
    rng: random.Random = field(default_factory=random.Random)
    history: List[GameState] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.history.append(self.state)

    @classmethod
    def new(
        cls,
        players: Optional[Sequence[PlayerInput]] = None,
        board_type: BoardType | str = BoardType.STANDARD,
        num_players: int = 4,
        seed: Optional[int] = None,
    ) -> "Game":
        """Start a game; without ``players`` the default seating is used."""
        seating = list(players) if players is not None else default_seating(num_players)
        return cls(state=initialize(seating, board_type), rng=random.Random(seed))

    # --- Properties ---
    @property
    def is_over(self) -> bool:
        return self.state.is_over

    @property
    def current_player_id(self) -> int:
        return self.state.current_turn_player_id

    # --- Actions ---
    def _apply(self, result: StepResult) -> StepResult:
        if result.state is not self.state:
            self.state = result.state
            self.history.append(result.state)
        return result

    def roll(self, forced_points: Optional[int] = None) -> StepResult:
        return self._apply(engine.request_roll(self.state, self.rng, forced_points))

    def select(self, piece_id: str, commit: bool = True) -> StepResult:
        return self._apply(engine.select_piece(self.state, piece_id, commit, self.rng))

    def commit(self) -> StepResult:
        return self._apply(engine.commit_move(self.state))

    def candidates(self) -> List[Piece]:
        return engine.candidate_pieces(self.state)

    def auto_piece(self) -> Optional[str]:
        return engine.auto_move_candidate(self.state)

    def play_auto(self, forced_points: Optional[int] = None) -> List[StepResult]:
        """Roll, then keep moving while exactly one piece can use the roll.

        Stops when the roll passes, when a real choice is needed, or when the
        turn ends. Returns every step taken.
        """
        steps = [self.roll(forced_points)]
        while True:
            piece_id = self.auto_piece()
            if piece_id is None:
                return steps
            steps.append(self.select(piece_id))
