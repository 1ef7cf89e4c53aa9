"""
Tamarind-seed roll generator.

A roll is four two-faced seeds; the number of open faces picks the move
points. The production generator does not throw seeds: it samples the
outcome from an adaptive distribution (pity, capture-seeking bias, end-game
tension) and derives a matching seed pattern for display.
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from .board import physical_square
from .config import config, roll_config
from .exceptions import InvariantViolation
from .rules import can_move, check_kill, target_progress
from .state import GameState
from .types import RollOutcome

SEED_COUNT = 4

# open count -> (points, extra turn, traditional name)
SEED_OUTCOMES: Dict[int, Tuple[int, bool, str]] = {
    1: (1, False, "Kanu"),
    2: (2, False, "Rendu"),
    3: (3, False, "Moodu"),
    4: (4, True, "Chamma"),
    0: (8, True, "Ashta"),
}

POINTS_TO_OPEN_COUNT: Dict[int, int] = {
    points: open_count for open_count, (points, _, _) in SEED_OUTCOMES.items()
}

POINT_VALUES: Tuple[int, ...] = roll_config.sample_order


def seed_pattern(open_count: int, rng: Optional[random.Random] = None) -> Tuple[bool, ...]:
    """Shuffled display pattern with exactly ``open_count`` open seeds."""
    if not 0 <= open_count <= SEED_COUNT:
        raise InvariantViolation(f"Open count {open_count} outside 0..{SEED_COUNT}")
    rng = rng or random.Random()
    seeds = [i < open_count for i in range(SEED_COUNT)]
    rng.shuffle(seeds)
    return tuple(seeds)


def outcome_for_points(
    points: int, rng: Optional[random.Random] = None, is_remainder: bool = False
) -> RollOutcome:
    if points not in POINTS_TO_OPEN_COUNT:
        raise InvariantViolation(f"No seed outcome yields {points} points")
    open_count = POINTS_TO_OPEN_COUNT[points]
    _, extra, name = SEED_OUTCOMES[open_count]
    return RollOutcome(
        point_value=points,
        extra_turn=extra,
        open_count=open_count,
        seeds=seed_pattern(open_count, rng),
        name=name,
        is_remainder=is_remainder,
    )


def score_seeds(seeds: Sequence[bool]) -> RollOutcome:
    """Score an explicit four-seed throw (True = open face up)."""
    if len(seeds) != SEED_COUNT:
        raise InvariantViolation(f"A throw needs {SEED_COUNT} seeds, got {len(seeds)}")
    open_count = sum(1 for s in seeds if s)
    points, extra, name = SEED_OUTCOMES[open_count]
    return RollOutcome(
        point_value=points,
        extra_turn=extra,
        open_count=open_count,
        seeds=tuple(bool(s) for s in seeds),
        name=name,
    )


def roll_fair_seeds(rng: Optional[random.Random] = None) -> RollOutcome:
    """Unbiased throw of four independent fair seeds."""
    rng = rng or random.Random()
    return score_seeds([rng.random() > 0.5 for _ in range(SEED_COUNT)])


# --- Adaptive distribution ---

def _distance_to_center(position: int) -> int:
    return config.MAX_PATH_INDEX - position


def roll_weights(state: GameState, player_id: Optional[int] = None) -> Dict[int, float]:
    """Unnormalised bucket weights for the next roll of ``player_id``.

    Applies, in order: pity, capture-seeking bias and end-game tension.
    """
    player = state.player(state.current_turn_player_id if player_id is None else player_id)

    if player.pity_counter >= roll_config.pity_threshold:
        weights = {points: 0.0 for points in POINT_VALUES}
        weights.update(roll_config.pity_forced)
        return weights

    weights = dict(roll_config.base_weights)
    pity_bonus = player.pity_counter * roll_config.pity_step
    weights[4] += pity_bonus
    weights[8] += pity_bonus

    for piece in player.pieces:
        if piece.is_finished:
            continue
        for points in POINT_VALUES:
            if not can_move(piece, points, player, state.board_type):
                continue
            square = physical_square(player.player_id, target_progress(piece, points, player))
            if check_kill(state, square, player.player_id) is not None:
                weights[points] += roll_config.capture_bias

    for piece in player.pieces:
        dist = _distance_to_center(piece.position)
        if dist in roll_config.tension_distances and (
            piece.endgame_attempts < roll_config.tension_attempts
        ):
            weights[dist] = max(
                roll_config.tension_floor, weights[dist] - roll_config.tension_penalty
            )

    return weights


def roll_distribution(state: GameState, player_id: Optional[int] = None) -> Dict[int, float]:
    """Normalised probabilities keyed by point value in sampling order."""
    weights = roll_weights(state, player_id)
    values = np.asarray([weights[p] for p in POINT_VALUES], dtype=np.float64)
    total = values.sum()
    if total <= 0:
        raise InvariantViolation(f"Roll weights sum to {total}")
    probs = values / total
    return {points: float(prob) for points, prob in zip(POINT_VALUES, probs)}


def sample_points(distribution: Dict[int, float], draw: float) -> int:
    """Walk buckets in sampling order; first cumulative mass >= draw wins."""
    probs = np.asarray([distribution.get(p, 0.0) for p in POINT_VALUES], dtype=np.float64)
    cumulative = np.cumsum(probs)
    idx = int(np.searchsorted(cumulative, draw, side="left"))
    if idx >= len(POINT_VALUES):
        # float round-off left the total just under the draw
        idx = len(POINT_VALUES) - 1
    return POINT_VALUES[idx]


def _update_counters(state: GameState, points: int) -> GameState:
    player = state.current_player
    pity = 0 if points in config.ENTRY_ROLLS else player.pity_counter + 1
    pieces = tuple(
        replace(pc, endgame_attempts=pc.endgame_attempts + 1)
        if _distance_to_center(pc.position) in roll_config.tension_distances
        else pc
        for pc in player.pieces
    )
    return state.with_player(replace(player, pity_counter=pity, pieces=pieces))


def generate_roll(
    state: GameState,
    rng: Optional[random.Random] = None,
    forced_points: Optional[int] = None,
) -> Tuple[RollOutcome, GameState]:
    """Roll for the current player.

    Returns the outcome and a copy of ``state`` with the player's pity counter
    and end-game attempt counters updated. ``forced_points`` skips sampling
    (the counters still update as for any roll).
    """
    rng = rng or random.Random()
    if forced_points is None:
        distribution = roll_distribution(state)
        draw = rng.random()
        points = sample_points(distribution, draw)
        rounded = {k: round(v, 4) for k, v in distribution.items()}
        logger.debug(
            f"Player {state.current_turn_player_id} roll: draw={draw:.4f} "
            f"dist={rounded} -> {points}"
        )
    else:
        points = forced_points

    outcome = outcome_for_points(points, rng)
    return outcome, _update_counters(state, points)
