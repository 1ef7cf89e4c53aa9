"""
Turn and win controller.

Pure transition functions over ``GameState``. Each returns a ``StepResult``;
inputs that do not fit the current phase are rejected without touching the
state. A move is applied in two steps so a presentation layer can animate
``move.path`` between them:

    awaiting-roll --request_roll--> roll-pending-selection
    roll-pending-selection --select_piece--> move-in-progress
    move-in-progress --commit_move--> awaiting-roll | roll-pending-selection | game-over
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import List, Optional

from loguru import logger

from .piece import Piece
from .rules import can_move, execute_move, movable_pieces
from .seeds import generate_roll, outcome_for_points
from .state import GameState
from .types import (
    EngineEvent,
    EventKind,
    GameOver,
    PendingMove,
    RejectReason,
    StepResult,
    TurnPhase,
)


def _reject(state: GameState, reason: RejectReason, message: str) -> StepResult:
    logger.warning(f"Rejected {reason.value}: {message}")
    return StepResult.rejected(state, reason, message)


def _busy(state: GameState) -> Optional[StepResult]:
    if state.is_over:
        return _reject(state, RejectReason.GAME_OVER, "The game is over")
    if state.phase == TurnPhase.MOVE_IN_PROGRESS:
        return _reject(
            state, RejectReason.MOVE_IN_PROGRESS, "Previous move has not been committed"
        )
    return None


# --- Win detection ---

def detect_game_over(state: GameState) -> Optional[GameOver]:
    """Return the game-over record if enough players are ranked, else None."""
    if state.ranked_count() < state.player_count - 1:
        return None
    ranked = state.ranked_players()
    winner = ranked[0]
    unranked = [pl for pl in state.players if not pl.is_ranked]
    if state.player_count == 2:
        message = f"Congratulations! {winner.name} won the game!"
    else:
        latest = ranked[-1]
        message = f"Game Over! {latest.name} got rank {latest.rank}!"
    return GameOver(
        winner_id=winner.player_id,
        ranks={pl.player_id: pl.rank for pl in ranked},
        last_place_id=unranked[0].player_id if unranked else None,
        message=message,
    )


def check_game_over(state: GameState) -> GameState:
    """Move ``state`` to game-over if the termination rule holds."""
    if state.is_over:
        return state
    over = detect_game_over(state)
    if over is None:
        return state
    logger.info(over.message)
    return replace(
        state,
        phase=TurnPhase.GAME_OVER,
        current_roll=None,
        pending_move=None,
        game_over=over,
    )


def _game_over_step(state: GameState, events: List[EngineEvent]) -> StepResult:
    events.append(
        EngineEvent(
            EventKind.GAME_OVER,
            player_id=state.game_over.winner_id,
            value=len(state.game_over.ranks),
        )
    )
    return StepResult(
        accepted=True, state=state, events=tuple(events), game_over=state.game_over
    )


# --- Queries ---

def candidate_pieces(state: GameState) -> List[Piece]:
    """Current player's pieces that can legally use the live roll."""
    if state.phase != TurnPhase.ROLL_PENDING_SELECTION or state.current_roll is None:
        return []
    return movable_pieces(state, state.current_roll.point_value)


def auto_move_candidate(state: GameState) -> Optional[str]:
    """Piece id to move without asking when exactly one piece can move."""
    candidates = candidate_pieces(state)
    return candidates[0].piece_id if len(candidates) == 1 else None


# --- Transitions ---

def request_roll(
    state: GameState,
    rng: Optional[random.Random] = None,
    forced_points: Optional[int] = None,
) -> StepResult:
    """Roll for the current player.

    If no piece can use the roll the turn passes (or stays, on an extra-turn
    roll) and the state returns to awaiting-roll.
    """
    busy = _busy(state)
    if busy is not None:
        return busy
    if state.phase == TurnPhase.ROLL_PENDING_SELECTION:
        return _reject(
            state,
            RejectReason.ROLL_PENDING,
            f"Roll of {state.current_roll_value} has not been used",
        )
    ended = check_game_over(state)
    if ended is not state:
        return StepResult(
            accepted=False,
            state=ended,
            reason=RejectReason.GAME_OVER,
            message=ended.game_over.message,
            game_over=ended.game_over,
        )

    pid = state.current_turn_player_id
    outcome, rolled = generate_roll(state, rng=rng, forced_points=forced_points)
    rolled = replace(rolled, roll_count=rolled.roll_count + 1)
    events = [EngineEvent(EventKind.ROLL, player_id=pid, value=outcome.point_value)]
    logger.debug(f"Player {pid} rolled {outcome.point_value} ({outcome.name})")

    if movable_pieces(rolled, outcome.point_value):
        new_state = replace(
            rolled, phase=TurnPhase.ROLL_PENDING_SELECTION, current_roll=outcome
        )
        return StepResult(accepted=True, state=new_state, events=tuple(events), roll=outcome)

    events.append(EngineEvent(EventKind.TURN_PASSED, player_id=pid, value=outcome.point_value))
    next_pid = pid if outcome.extra_turn else rolled.next_player_id(pid)
    if next_pid != pid:
        events.append(EngineEvent(EventKind.TURN_CHANGED, player_id=next_pid))
    logger.info(
        f"Player {pid} has no move for {outcome.point_value}; turn goes to player {next_pid}"
    )
    new_state = replace(
        rolled,
        phase=TurnPhase.AWAITING_ROLL,
        current_roll=None,
        current_turn_player_id=next_pid,
    )
    return StepResult(accepted=True, state=new_state, events=tuple(events), roll=outcome)


def select_piece(
    state: GameState,
    piece_id: str,
    commit: bool = False,
    rng: Optional[random.Random] = None,
) -> StepResult:
    """Apply the live roll to ``piece_id``.

    The returned state is in move-in-progress and already shows the move;
    ``commit_move`` settles the turn. With ``commit=True`` both happen here.
    """
    busy = _busy(state)
    if busy is not None:
        return busy
    roll = state.current_roll
    if state.phase != TurnPhase.ROLL_PENDING_SELECTION or roll is None:
        return _reject(state, RejectReason.NO_ROLL, "Roll before selecting a piece")

    found = state.find_piece(piece_id)
    if found is None:
        return _reject(state, RejectReason.UNKNOWN_PIECE, f"No piece '{piece_id}'")
    player, piece = found
    if player.player_id != state.current_turn_player_id:
        return _reject(
            state,
            RejectReason.NOT_YOUR_TURN,
            f"Piece {piece_id} belongs to player {player.player_id}, "
            f"player {state.current_turn_player_id} is to move",
        )
    if not can_move(piece, roll.point_value, player, state.board_type):
        return _reject(
            state,
            RejectReason.ILLEGAL_MOVE,
            f"Piece {piece_id} cannot move {roll.point_value}",
        )

    move = execute_move(state, piece_id, roll.point_value)
    pid = player.player_id
    events = [
        EngineEvent(EventKind.STEP, player_id=pid, piece_id=piece_id, progress=p, square=sq)
        for p, sq in zip(move.path, move.squares)
    ]
    if move.events.captured:
        events.append(
            EngineEvent(
                EventKind.CAPTURE,
                player_id=pid,
                piece_id=move.events.captured_piece_id,
                square=move.squares[-1],
                value=move.events.captured_owner_id,
            )
        )
    if move.events.finished:
        events.append(
            EngineEvent(
                EventKind.ARRIVAL, player_id=pid, piece_id=piece_id, square=move.squares[-1]
            )
        )
    ranked = move.events.rank_assigned is not None
    if ranked:
        events.append(EngineEvent(EventKind.RANK, player_id=pid, value=move.events.rank_assigned))

    remainder = None
    if move.points_spent < roll.point_value:
        remainder = outcome_for_points(
            roll.point_value - move.points_spent, rng, is_remainder=True
        )
    keeps_turn = not ranked and (
        roll.extra_turn or move.events.captured or move.scored
    )
    pending = PendingMove(
        player_id=pid, piece_id=piece_id, keeps_turn=keeps_turn, remainder=remainder
    )
    logger.debug(
        f"Player {pid} moved {piece_id} {move.old_position}->{move.new_position} "
        f"keeps_turn={keeps_turn} remainder={remainder.point_value if remainder else 0}"
    )
    new_state = replace(
        move.state,
        phase=TurnPhase.MOVE_IN_PROGRESS,
        current_roll=None,
        pending_move=pending,
    )
    result = StepResult(
        accepted=True, state=new_state, events=tuple(events), roll=roll, move=move
    )
    if not commit:
        return result

    committed = commit_move(new_state)
    return replace(committed, events=result.events + committed.events, move=move, roll=roll)


def commit_move(state: GameState) -> StepResult:
    """Settle the turn after a move: hold, pass, re-arm a remainder, or end."""
    if state.is_over:
        return _reject(state, RejectReason.GAME_OVER, "The game is over")
    pending = state.pending_move
    if state.phase != TurnPhase.MOVE_IN_PROGRESS or pending is None:
        return _reject(state, RejectReason.NOTHING_TO_COMMIT, "No move to commit")

    settled = replace(state, phase=TurnPhase.AWAITING_ROLL, pending_move=None)
    events: List[EngineEvent] = []
    ended = check_game_over(settled)
    if ended.is_over:
        return _game_over_step(ended, events)

    pid = pending.player_id
    remainder = pending.remainder
    if remainder is not None:
        if movable_pieces(settled, remainder.point_value, pid):
            logger.debug(f"Player {pid} keeps {remainder.point_value} points after entering")
            armed = replace(
                settled, phase=TurnPhase.ROLL_PENDING_SELECTION, current_roll=remainder
            )
            return StepResult(accepted=True, state=armed, roll=remainder)
        events.append(
            EngineEvent(EventKind.TURN_PASSED, player_id=pid, value=remainder.point_value)
        )
        logger.info(f"Player {pid} has no move for the remaining {remainder.point_value}")

    if pending.keeps_turn:
        return StepResult(accepted=True, state=settled, events=tuple(events))

    next_pid = settled.next_player_id(pid)
    if next_pid != pid:
        events.append(EngineEvent(EventKind.TURN_CHANGED, player_id=next_pid))
    logger.info(f"Turn passes from player {pid} to player {next_pid}")
    return StepResult(
        accepted=True,
        state=replace(settled, current_turn_player_id=next_pid),
        events=tuple(events),
    )
