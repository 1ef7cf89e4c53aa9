"""
Move legality, capture resolution and move execution.

Positions are player-relative progress indices; every comparison between
pieces of different players goes through ``board.physical_square``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Tuple

from loguru import logger

from .board import physical_square, safe_zones
from .config import config
from .exceptions import InvariantViolation
from .piece import Piece
from .player import Player
from .state import GameState
from .types import BoardType, MoveEvents, MoveResult


# --- Legality ---

def target_progress(piece: Piece, point_value: int, player: Player) -> Optional[int]:
    """Progress index a roll would carry ``piece`` to, or None if it cannot go.

    Ignores the self-stacking rule; see ``can_move`` for the full check.
    """
    if piece.is_finished or point_value <= 0:
        return None

    if piece.is_home:
        return 0 if point_value in config.ENTRY_ROLLS else None

    target = piece.position + point_value
    if piece.position <= config.OUTER_LOOP_END and not player.has_first_kill:
        # Golden Rule: locked to the outer loop, wrap exactly once
        if target > config.OUTER_LOOP_END:
            target -= config.OUTER_LOOP_LENGTH
    elif target > config.MAX_PATH_INDEX:
        return None
    return target


def can_move(
    piece: Piece, point_value: int, player: Player, board_type: BoardType | str
) -> bool:
    if piece.owner_id != player.player_id:
        raise InvariantViolation(
            f"Piece {piece.piece_id} checked against player {player.player_id}"
        )
    target = target_progress(piece, point_value, player)
    if target is None:
        return False

    square = physical_square(player.player_id, target)
    if square in safe_zones(board_type):
        return True
    # two pieces of one player may only share a safe zone
    for other in player.pieces:
        if other.ordinal == piece.ordinal or not other.on_board:
            continue
        if physical_square(player.player_id, other.position) == square:
            return False
    return True


def movable_pieces(
    state: GameState, point_value: int, player_id: Optional[int] = None
) -> List[Piece]:
    """Pieces of ``player_id`` (default: current player) that can use the roll."""
    player = state.player(state.current_turn_player_id if player_id is None else player_id)
    return [
        pc for pc in player.pieces if can_move(pc, point_value, player, state.board_type)
    ]


# --- Captures ---

def check_kill(
    state: GameState, physical_target_square: int, moving_player_id: int
) -> Optional[Piece]:
    """Opponent piece that would be captured on the square, if any."""
    if physical_target_square in safe_zones(state.board_type):
        return None
    for pl in state.players:
        if pl.player_id == moving_player_id:
            continue
        for pc in pl.pieces:
            if pc.on_board and physical_square(pl.player_id, pc.position) == physical_target_square:
                return pc
    return None


# --- Execution ---

def points_spent(piece: Piece, point_value: int) -> int:
    """Entering the board always costs exactly four points, even on an 8."""
    return config.ENTRY_COST if piece.is_home else point_value


def move_path(piece: Piece, point_value: int, player: Player) -> Tuple[int, ...]:
    """Progress indices visited one step at a time, ending on the target."""
    if piece.is_home:
        return (0,)
    path: List[int] = []
    pos = piece.position
    for _ in range(point_value):
        if pos >= config.OUTER_LOOP_END and not player.has_first_kill:
            pos = (pos + 1) % config.OUTER_LOOP_LENGTH
        else:
            pos += 1
        path.append(pos)
    return tuple(path)


def execute_move(state: GameState, piece_id: str, point_value: int) -> MoveResult:
    """Apply a legal move and return the new state with what happened.

    The input state is never modified. Turn bookkeeping (phase, live roll,
    whose turn) is left untouched for the turn controller.
    """
    found = state.find_piece(piece_id)
    if found is None:
        raise InvariantViolation(f"Unknown piece {piece_id}")
    player, piece = found
    if not can_move(piece, point_value, player, state.board_type):
        raise InvariantViolation(f"Illegal move: {piece_id} with {point_value} points")

    target = target_progress(piece, point_value, player)
    spent = points_spent(piece, point_value)
    path = move_path(piece, spent, player)
    if path[-1] != target:
        raise InvariantViolation(f"Path {path} of {piece_id} does not end on {target}")
    square = physical_square(player.player_id, target)
    victim = check_kill(state, square, player.player_id)

    new_state = state.with_piece(piece.moved_to(target))
    captured_id: Optional[str] = None
    captured_owner: Optional[int] = None
    first_kill = False
    if victim is not None:
        new_state = new_state.with_piece(victim.sent_home())
        captured_id, captured_owner = victim.piece_id, victim.owner_id
        first_kill = not player.has_first_kill
        new_state = new_state.with_player(
            replace(new_state.player(player.player_id), has_first_kill=True)
        )
        logger.info(
            f"Player {player.player_id} piece {piece_id} captured {captured_id} on square {square}"
        )

    finished = target == config.MAX_PATH_INDEX
    rank: Optional[int] = None
    if finished:
        mover = new_state.player(player.player_id)
        logger.info(f"Piece {piece_id} reached the center")
        if mover.all_finished and mover.rank is None:
            rank = 1 + max((pl.rank for pl in new_state.players if pl.is_ranked), default=0)
            new_state = new_state.with_player(replace(mover, rank=rank))
            logger.info(f"Player {player.player_id} ({mover.name}) finished with rank {rank}")

    events = MoveEvents(
        entered_board=piece.is_home,
        finished=finished,
        captured_piece_id=captured_id,
        captured_owner_id=captured_owner,
        first_kill=first_kill,
        rank_assigned=rank,
    )
    return MoveResult(
        state=new_state,
        player_id=player.player_id,
        piece_id=piece_id,
        points_spent=spent,
        old_position=piece.position,
        new_position=target,
        path=path,
        squares=tuple(physical_square(player.player_id, p) for p in path),
        events=events,
    )
