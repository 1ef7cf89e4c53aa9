from __future__ import annotations

import unittest

import pytest

from ashta_chamma.exceptions import SetupError
from ashta_chamma.game import Game
from ashta_chamma.player import PieceType, PlayerSpec, default_seating
from ashta_chamma.state import initialize
from ashta_chamma.types import BoardType, TurnPhase


class GameSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.game = Game.new(num_players=2, seed=1)

    def test_new_game_uses_default_seating(self) -> None:
        ids = [pl.player_id for pl in self.game.state.players]
        self.assertEqual(ids, [1, 3])
        self.assertEqual(self.game.current_player_id, 1)
        self.assertEqual(len(self.game.history), 1)

    def test_history_records_each_transition(self) -> None:
        first = self.game.state
        self.game.roll(forced_points=4)
        self.game.select("1-0")
        self.assertEqual(len(self.game.history), 3)
        self.assertIs(self.game.history[0], first)
        self.assertTrue(first.player(1).piece("1-0").is_home)

    def test_rejected_step_is_not_recorded(self) -> None:
        self.game.roll(forced_points=4)
        result = self.game.roll(forced_points=4)
        self.assertFalse(result.accepted)
        self.assertEqual(len(self.game.history), 2)

    def test_select_without_commit_then_commit(self) -> None:
        self.game.roll(forced_points=4)
        moving = self.game.select("1-0", commit=False)
        self.assertEqual(moving.state.phase, TurnPhase.MOVE_IN_PROGRESS)
        done = self.game.commit()
        self.assertTrue(done.accepted)
        self.assertEqual(self.game.state.phase, TurnPhase.AWAITING_ROLL)

    def test_play_auto_resolves_single_candidate(self) -> None:
        self.game.roll(forced_points=4)
        self.game.select("1-0")
        steps = self.game.play_auto(forced_points=2)
        self.assertEqual(len(steps), 2)
        self.assertEqual(self.game.state.player(1).piece("1-0").position, 2)
        self.assertEqual(self.game.current_player_id, 3)

    def test_play_auto_stops_when_choice_needed(self) -> None:
        steps = self.game.play_auto(forced_points=4)
        self.assertEqual(len(steps), 1)
        self.assertEqual(len(self.game.candidates()), 4)
        self.assertIsNone(self.game.auto_piece())


class SetupTests(unittest.TestCase):
    def test_initialize_accepts_mappings(self) -> None:
        state = initialize(
            [
                {"id": 2, "name": "Asha", "pieceType": "stone"},
                {"id": 4, "name": "Ravi", "pieceType": "button"},
            ],
            "innerGadulu",
        )
        self.assertEqual(state.board_type, BoardType.INNER_GADULU)
        self.assertEqual(state.current_turn_player_id, 2)
        self.assertEqual(state.player(4).piece_type, PieceType.BUTTON)
        self.assertTrue(all(p.is_home for pl in state.players for p in pl.pieces))

    def test_snapshot_export(self) -> None:
        state = initialize(default_seating(2))
        data = state.to_dict()
        self.assertEqual(data["phase"], "awaiting-roll")
        self.assertEqual(data["board_type"], "standard")
        self.assertEqual(len(data["players"]), 2)
        self.assertIsNone(data["players"][0]["pieces"][0]["square"])


@pytest.mark.parametrize(
    "players,board",
    [
        ([PlayerSpec(1, "Solo")], "standard"),
        (default_seating(4) + [PlayerSpec(1, "Extra")], "standard"),
        ([PlayerSpec(1, "A"), PlayerSpec(1, "B")], "standard"),
        ([PlayerSpec(1, "A"), PlayerSpec(5, "B")], "standard"),
        (default_seating(2), "hexagonal"),
        ([PlayerSpec(1, "A", "marble"), PlayerSpec(2, "B")], "standard"),
        ([{"name": "no id"}, PlayerSpec(2, "B")], "standard"),
    ],
)
def test_invalid_setup_raises(players, board):
    with pytest.raises(SetupError):
        initialize(players, board)


@pytest.mark.parametrize("count,ids", [(2, [1, 3]), (3, [1, 2, 3]), (4, [1, 2, 3, 4])])
def test_default_seating(count, ids):
    assert [s.player_id for s in default_seating(count)] == ids


def test_default_seating_rejects_bad_count():
    with pytest.raises(ValueError):
        default_seating(5)
