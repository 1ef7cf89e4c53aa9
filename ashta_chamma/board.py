"""
Ashta Chamma board topology.

Describes the 5x5 grid, the per-player progress paths and the safe zones
(kachhas) of both board variants. Everything here is immutable data plus
lookup helpers; the tables are checked once at import time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, FrozenSet, Tuple

import numpy as np

from .config import config
from .exceptions import InvariantViolation
from .types import BoardType

if TYPE_CHECKING:
    from .state import GameState

CENTER_SQUARE: int = 12

# Edge midpoints (player start squares) plus the center.
STANDARD_SAFE_ZONES: FrozenSet[int] = frozenset({2, 10, 12, 14, 22})

# Inner Gadulu adds the four inner squares in a diamond around the center.
INNER_GADULU_SAFE_ZONES: FrozenSet[int] = STANDARD_SAFE_ZONES | {6, 8, 16, 18}

_SAFE_ZONES: Dict[BoardType, FrozenSet[int]] = {
    BoardType.STANDARD: STANDARD_SAFE_ZONES,
    BoardType.INNER_GADULU: INNER_GADULU_SAFE_ZONES,
}

# Progress index -> physical square. 0..15 walk the outer perimeter from the
# player's start square, 16..23 spiral inward clockwise, 24 is the center.
PLAYER_PATHS: Dict[int, Tuple[int, ...]] = {
    1: (  # bottom
        22, 23, 24, 19, 14, 9, 4, 3, 2, 1, 0, 5, 10, 15, 20, 21,
        16, 11, 6, 7, 8, 13, 18, 17,
        12,
    ),
    2: (  # right
        14, 9, 4, 3, 2, 1, 0, 5, 10, 15, 20, 21, 22, 23, 24, 19,
        18, 17, 16, 11, 6, 7, 8, 13,
        12,
    ),
    3: (  # top
        2, 1, 0, 5, 10, 15, 20, 21, 22, 23, 24, 19, 14, 9, 4, 3,
        8, 13, 18, 17, 16, 11, 6, 7,
        12,
    ),
    4: (  # left
        10, 15, 20, 21, 22, 23, 24, 19, 14, 9, 4, 3, 2, 1, 0, 5,
        6, 7, 8, 13, 18, 17, 16, 11,
        12,
    ),
}

PLAYER_IDS: Tuple[int, ...] = tuple(sorted(PLAYER_PATHS))


# ---------------------------------------------------------------------------
# Coordinate helpers
# ---------------------------------------------------------------------------

def sq_to_rc(sq: int) -> Tuple[int, int]:
    """Convert a flat square index (0..24) to (row, col)."""
    return divmod(sq, config.BOARD_SIZE)


def rc_to_sq(r: int, c: int) -> int:
    """Convert (row, col) to a flat square index."""
    return r * config.BOARD_SIZE + c


def _is_perimeter(sq: int) -> bool:
    r, c = sq_to_rc(sq)
    edge = config.BOARD_SIZE - 1
    return r in (0, edge) or c in (0, edge)


def _adjacent(a: int, b: int) -> bool:
    ra, ca = sq_to_rc(a)
    rb, cb = sq_to_rc(b)
    return abs(ra - rb) + abs(ca - cb) == 1


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def safe_zones(board_type: BoardType | str) -> FrozenSet[int]:
    """Return the physical squares where no capture can happen."""
    return _SAFE_ZONES[BoardType.parse(board_type)]


def is_safe(square: int, board_type: BoardType | str) -> bool:
    return square in safe_zones(board_type)


def path_of(player_id: int) -> Tuple[int, ...]:
    """Return the 25 physical squares of a player's progress track."""
    try:
        return PLAYER_PATHS[player_id]
    except KeyError:
        raise InvariantViolation(f"No path for player id {player_id}") from None


def physical_square(player_id: int, progress: int) -> int:
    """Translate a player-relative progress index to a physical square."""
    if not 0 <= progress <= config.MAX_PATH_INDEX:
        raise InvariantViolation(
            f"Progress index {progress} outside 0..{config.MAX_PATH_INDEX}"
        )
    return path_of(player_id)[progress]


def start_square(player_id: int) -> int:
    return path_of(player_id)[0]


def occupancy_grid(state: "GameState") -> np.ndarray:
    """Return a (5, 5) array with the owner id of the piece on each square.

    Empty squares hold 0. Where several pieces share a safe square the first
    player in seating order wins the cell; the center holds every finished
    piece's owner the same way.
    """
    grid = np.zeros((config.BOARD_SIZE, config.BOARD_SIZE), dtype=np.int64)
    for player in state.players:
        for piece in player.pieces:
            if piece.is_home:
                continue
            r, c = sq_to_rc(physical_square(player.player_id, piece.position))
            if grid[r, c] == 0:
                grid[r, c] = player.player_id
    return grid


# ---------------------------------------------------------------------------
# Table validation (runs once at import)
# ---------------------------------------------------------------------------

def _validate_paths() -> None:
    path_len = config.MAX_PATH_INDEX + 1
    loop = config.OUTER_LOOP_LENGTH
    perimeter = {sq for sq in range(config.NUM_SQUARES) if _is_perimeter(sq)}
    inner_ring = {
        sq
        for sq in range(config.NUM_SQUARES)
        if not _is_perimeter(sq) and sq != CENTER_SQUARE
    }
    reference_loop = PLAYER_PATHS[PLAYER_IDS[0]][:loop]
    starts = set()

    for player_id, path in PLAYER_PATHS.items():
        if len(path) != path_len:
            raise InvariantViolation(f"Path of player {player_id} has {len(path)} squares")
        if set(path[:loop]) != perimeter:
            raise InvariantViolation(f"Outer loop of player {player_id} is not the perimeter")
        if set(path[loop:-1]) != inner_ring:
            raise InvariantViolation(f"Spiral of player {player_id} is not the inner ring")
        if path[-1] != CENTER_SQUARE:
            raise InvariantViolation(f"Path of player {player_id} does not end at the center")
        for a, b in zip(path, path[1:]):
            if not _adjacent(a, b):
                raise InvariantViolation(
                    f"Path of player {player_id} jumps from {a} to {b}"
                )
        # every outer loop is the same cycle, rotated to the player's start
        offset = reference_loop.index(path[0])
        if path[:loop] != reference_loop[offset:] + reference_loop[:offset]:
            raise InvariantViolation(f"Outer loop of player {player_id} runs the wrong way")
        if path[0] not in STANDARD_SAFE_ZONES:
            raise InvariantViolation(f"Start square of player {player_id} is not safe")
        starts.add(path[0])

    if len(starts) != len(PLAYER_PATHS):
        raise InvariantViolation("Players share a start square")


_validate_paths()
