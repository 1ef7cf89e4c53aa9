from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from loguru import logger

from .config import config
from .game import Game
from .piece import Piece
from .state import GameState, validate_state
from .types import EventKind, StepResult

# (state, candidate pieces, rng) -> chosen piece id
Chooser = Callable[[GameState, Sequence[Piece], random.Random], str]


def random_chooser(state: GameState, candidates: Sequence[Piece], rng: random.Random) -> str:
    return rng.choice(list(candidates)).piece_id


def furthest_chooser(state: GameState, candidates: Sequence[Piece], rng: random.Random) -> str:
    """Always advance the piece closest to the center."""
    return max(candidates, key=lambda pc: (pc.position, -pc.ordinal)).piece_id


CHOOSERS: Dict[str, Chooser] = {
    "random": random_chooser,
    "furthest": furthest_chooser,
}


@dataclass(slots=True)
class SimulationReport:
    ranks: Dict[int, int] = field(default_factory=dict)
    winner_id: Optional[int] = None
    last_place_id: Optional[int] = None
    message: str = ""
    finished: bool = False
    turns: int = 0
    rolls: int = 0
    moves: int = 0
    captures: int = 0
    passes: int = 0


@dataclass(slots=True)
class Simulator:
    """Plays whole games headlessly, checking invariants after every step."""

    game: Game
    chooser: Chooser = random_chooser
    max_turns: int = config.MAX_TURNS
    validate: bool = True
    report: SimulationReport = field(default_factory=SimulationReport, init=False)
    observers: List[Callable[[GameState, StepResult], None]] = field(
        default_factory=list, init=False, repr=False
    )

    @classmethod
    def for_game(cls, game: Game, chooser: Chooser | str = "random", **kwargs) -> "Simulator":
        if isinstance(chooser, str):
            chooser = CHOOSERS[chooser]
        return cls(game=game, chooser=chooser, **kwargs)

    def _record(self, result: StepResult) -> None:
        if self.validate:
            validate_state(result.state)
        for ev in result.events:
            if ev.kind == EventKind.CAPTURE:
                self.report.captures += 1
            elif ev.kind == EventKind.TURN_PASSED:
                self.report.passes += 1
            elif ev.kind == EventKind.TURN_CHANGED:
                self.report.turns += 1
        for observer in self.observers:
            observer(result.state, result)

    def step(self) -> StepResult:
        """Roll once and play the roll out (including an 8-roll remainder)."""
        result = self.game.roll()
        self.report.rolls += 1
        self._record(result)
        while self.game.candidates():
            piece_id = self.game.auto_piece() or self.chooser(
                self.game.state, self.game.candidates(), self.game.rng
            )
            result = self.game.select(piece_id)
            self.report.moves += 1
            self._record(result)
        return result

    def run(self) -> SimulationReport:
        if self.validate:
            validate_state(self.game.state)
        while self.report.turns < self.max_turns:
            self.step()
            if self.game.is_over:
                break
        state = self.game.state
        self.report.finished = state.is_over
        if state.game_over is not None:
            self.report.ranks = dict(state.game_over.ranks)
            self.report.winner_id = state.game_over.winner_id
            self.report.last_place_id = state.game_over.last_place_id
            self.report.message = state.game_over.message
        else:
            self.report.ranks = {pl.player_id: pl.rank for pl in state.ranked_players()}
            logger.warning(f"Game stopped after {self.report.turns} turns without a result")
        return self.report


def simulate_game(
    num_players: int = 4,
    board_type: str = config.BOARD_TYPE,
    seed: Optional[int] = None,
    chooser: Chooser | str = "random",
    max_turns: int = config.MAX_TURNS,
) -> SimulationReport:
    game = Game.new(board_type=board_type, num_players=num_players, seed=seed)
    return Simulator.for_game(game, chooser=chooser, max_turns=max_turns).run()
