from __future__ import annotations

import unittest
from dataclasses import replace

import pytest

from ashta_chamma.board import path_of
from ashta_chamma.exceptions import InvariantViolation
from ashta_chamma.player import default_seating
from ashta_chamma.rules import (
    can_move,
    check_kill,
    execute_move,
    move_path,
    movable_pieces,
    target_progress,
)
from ashta_chamma.state import GameState, initialize, validate_state
from ashta_chamma.types import BoardType


def place(state: GameState, piece_id: str, position: int) -> GameState:
    _, piece = state.find_piece(piece_id)
    return state.with_piece(piece.moved_to(position))


def with_kill(state: GameState, player_id: int) -> GameState:
    return state.with_player(replace(state.player(player_id), has_first_kill=True))


def legal(state: GameState, piece_id: str, points: int) -> bool:
    player, piece = state.find_piece(piece_id)
    return can_move(piece, points, player, state.board_type)


class MoveLegalityTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = initialize(default_seating(2))

    def test_home_piece_enters_only_on_four_or_eight(self) -> None:
        for points in (1, 2, 3):
            self.assertFalse(legal(self.state, "1-0", points))
        for points in (4, 8):
            self.assertTrue(legal(self.state, "1-0", points))
            player, piece = self.state.find_piece("1-0")
            self.assertEqual(target_progress(piece, points, player), 0)

    def test_loop_locked_piece_wraps_around(self) -> None:
        state = place(self.state, "1-0", 15)
        player, piece = state.find_piece("1-0")
        self.assertEqual(target_progress(piece, 3, player), 2)
        self.assertEqual(move_path(piece, 3, player), (0, 1, 2))

    def test_first_kill_unlocks_spiral(self) -> None:
        state = place(with_kill(self.state, 1), "1-0", 15)
        player, piece = state.find_piece("1-0")
        self.assertEqual(target_progress(piece, 3, player), 18)
        self.assertEqual(move_path(piece, 3, player), (16, 17, 18))

    def test_overshooting_center_is_illegal(self) -> None:
        state = place(with_kill(self.state, 1), "1-0", 22)
        self.assertTrue(legal(state, "1-0", 2))
        self.assertFalse(legal(state, "1-0", 3))
        self.assertFalse(legal(state, "1-0", 8))

    def test_finished_piece_never_moves(self) -> None:
        state = place(with_kill(self.state, 1), "1-0", 24)
        for points in (1, 2, 3, 4, 8):
            self.assertFalse(legal(state, "1-0", points))

    def test_no_self_stacking_on_plain_square(self) -> None:
        # 1-1 sits on square 23; 1-0 on square 22 must not join it
        state = place(place(self.state, "1-0", 0), "1-1", 1)
        self.assertFalse(legal(state, "1-0", 1))
        self.assertTrue(legal(state, "1-0", 2))

    def test_self_stacking_allowed_on_safe_square(self) -> None:
        state = place(self.state, "1-0", 0)
        self.assertTrue(legal(state, "1-1", 4))
        # square 14 (progress 4) is a safe zone as well
        state = place(state, "1-1", 4)
        self.assertTrue(legal(state, "1-0", 4))

    def test_inner_gadulu_adds_safe_squares(self) -> None:
        # progress 18 of player 1 is square 6: safe only on the inner board
        standard = place(place(with_kill(self.state, 1), "1-0", 18), "1-1", 17)
        self.assertFalse(legal(standard, "1-1", 1))
        gadulu = replace(standard, board_type=BoardType.INNER_GADULU)
        self.assertTrue(legal(gadulu, "1-1", 1))

    def test_movable_pieces_default_to_current_player(self) -> None:
        state = place(self.state, "1-0", 0)
        self.assertEqual([p.piece_id for p in movable_pieces(state, 2)], ["1-0"])
        self.assertEqual(movable_pieces(state, 2, player_id=3), [])

    def test_can_move_checks_owner(self) -> None:
        player = self.state.player(3)
        _, piece = self.state.find_piece("1-0")
        with self.assertRaises(InvariantViolation):
            can_move(piece, 4, player, self.state.board_type)


class CaptureAndExecutionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = initialize(default_seating(2))

    def test_check_kill_finds_opponent(self) -> None:
        state = place(self.state, "3-0", 9)  # square 23
        victim = check_kill(state, 23, 1)
        self.assertIsNotNone(victim)
        self.assertEqual(victim.piece_id, "3-0")
        self.assertIsNone(check_kill(state, 23, 3))

    def test_check_kill_ignores_safe_squares_and_home_pieces(self) -> None:
        state = place(self.state, "3-0", 8)  # square 22, player 1's start
        self.assertIsNone(check_kill(state, 22, 1))
        self.assertIsNone(check_kill(self.state, 23, 1))

    def test_entry_move(self) -> None:
        result = execute_move(self.state, "1-0", 4)
        piece = result.state.player(1).piece("1-0")
        self.assertEqual(piece.position, 0)
        self.assertFalse(piece.is_finished)
        self.assertEqual(result.squares, (path_of(1)[0],))
        self.assertTrue(result.events.entered_board)
        # input state untouched
        self.assertTrue(self.state.player(1).piece("1-0").is_home)

    def test_entry_on_eight_spends_four(self) -> None:
        result = execute_move(self.state, "1-0", 8)
        self.assertEqual(result.points_spent, 4)
        self.assertEqual(result.new_position, 0)

    def test_capture_sends_victim_home_and_unlocks(self) -> None:
        state = place(place(self.state, "1-0", 0), "3-0", 9)
        result = execute_move(state, "1-0", 1)
        self.assertTrue(result.events.captured)
        self.assertEqual(result.events.captured_piece_id, "3-0")
        self.assertEqual(result.events.captured_owner_id, 3)
        self.assertTrue(result.events.first_kill)
        self.assertTrue(result.state.player(3).piece("3-0").is_home)
        self.assertTrue(result.state.player(1).has_first_kill)
        validate_state(result.state)

    def test_second_capture_keeps_flag(self) -> None:
        state = with_kill(place(place(self.state, "1-0", 0), "3-0", 9), 1)
        result = execute_move(state, "1-0", 1)
        self.assertTrue(result.events.captured)
        self.assertFalse(result.events.first_kill)
        self.assertTrue(result.state.player(1).has_first_kill)

    def test_reaching_center_finishes_piece(self) -> None:
        state = place(with_kill(self.state, 1), "1-0", 22)
        result = execute_move(state, "1-0", 2)
        self.assertTrue(result.scored)
        self.assertTrue(result.state.player(1).piece("1-0").is_finished)
        self.assertIsNone(result.events.rank_assigned)
        self.assertIsNone(result.state.player(1).rank)

    def test_fourth_finisher_gets_next_rank(self) -> None:
        state = with_kill(self.state, 1)
        for pid in ("1-1", "1-2", "1-3"):
            state = place(state, pid, 24)
        state = place(state, "1-0", 22)
        result = execute_move(state, "1-0", 2)
        self.assertEqual(result.events.rank_assigned, 1)
        self.assertEqual(result.state.player(1).rank, 1)

    def test_illegal_execution_is_a_defect(self) -> None:
        with self.assertRaises(InvariantViolation):
            execute_move(self.state, "1-0", 3)
        with self.assertRaises(InvariantViolation):
            execute_move(self.state, "7-0", 4)


@pytest.mark.parametrize("position", list(range(16)))
@pytest.mark.parametrize("points", [1, 2, 3, 4, 8])
def test_loop_lock_keeps_piece_on_outer_loop(position, points):
    state = place(initialize(default_seating(4)), "2-0", position)
    player, piece = state.find_piece("2-0")
    target = target_progress(piece, points, player)
    assert 0 <= target <= 15
    path = move_path(piece, points, player)
    assert path[-1] == target
    assert all(0 <= p <= 15 for p in path)
