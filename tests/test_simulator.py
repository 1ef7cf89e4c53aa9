from __future__ import annotations

import unittest

import pytest

from ashta_chamma.game import Game
from ashta_chamma.rules import can_move
from ashta_chamma.simulator import Simulator, furthest_chooser, simulate_game
from ashta_chamma.state import iter_pieces
from ashta_chamma.types import EventKind


class PropertyObserver:
    """Checks rule properties on every step a simulator reports."""

    def __init__(self) -> None:
        self.ranks_seen: list[int] = []
        self.captures = 0

    def __call__(self, state, result) -> None:
        for pc in iter_pieces(state):
            assert pc.is_finished == (pc.position == 24)
            if pc.is_home:
                player = state.player(pc.owner_id)
                for points in (1, 2, 3):
                    assert not can_move(pc, points, player, state.board_type)
        for pl in state.players:
            if not pl.has_first_kill:
                assert all(pc.position <= 15 for pc in pl.pieces)

        move = result.move
        if move is None:
            return
        if move.old_position == -1:
            assert result.roll.point_value in (4, 8)
            assert move.new_position == 0
        if move.events.captured:
            self.captures += 1
            victim = move.state.find_piece(move.events.captured_piece_id)[1]
            assert victim.is_home
            assert move.state.player(move.player_id).has_first_kill
        if move.events.rank_assigned is not None:
            self.ranks_seen.append(move.events.rank_assigned)


class SimulatorTests(unittest.TestCase):
    def test_full_game_reaches_game_over(self) -> None:
        game = Game.new(num_players=4, seed=3)
        sim = Simulator.for_game(game, max_turns=20000)
        report = sim.run()
        self.assertTrue(report.finished)
        self.assertEqual(sorted(report.ranks.values()), [1, 2, 3])
        self.assertIsNotNone(report.last_place_id)
        self.assertNotIn(report.last_place_id, report.ranks)
        self.assertGreater(report.rolls, 0)
        self.assertGreater(report.moves, 0)

    def test_turn_cap_stops_unfinished_game(self) -> None:
        game = Game.new(num_players=2, seed=5)
        report = Simulator.for_game(game, max_turns=5).run()
        self.assertFalse(report.finished)
        self.assertFalse(game.is_over)
        self.assertGreaterEqual(report.turns, 5)

    def test_named_chooser(self) -> None:
        game = Game.new(num_players=3, seed=8)
        sim = Simulator.for_game(game, chooser="furthest", max_turns=20000)
        self.assertIs(sim.chooser, furthest_chooser)
        self.assertTrue(sim.run().finished)


@pytest.mark.parametrize("seed", range(12))
@pytest.mark.parametrize("num_players,board", [(2, "standard"), (3, "innerGadulu"), (4, "standard")])
def test_rule_properties_hold_over_whole_games(seed, num_players, board):
    game = Game.new(num_players=num_players, board_type=board, seed=seed)
    sim = Simulator.for_game(game, max_turns=20000)
    observer = PropertyObserver()
    sim.observers.append(observer)
    report = sim.run()

    assert report.finished
    # ranks appear in order 1, 2, ... with no gaps or repeats
    assert observer.ranks_seen == list(range(1, len(observer.ranks_seen) + 1))
    assert len(observer.ranks_seen) == num_players - 1
    assert observer.captures == report.captures
    winner = game.state.game_over.winner_id
    assert game.state.player(winner).rank == 1


def test_two_player_game_ends_with_first_finisher():
    report = simulate_game(num_players=2, seed=21, max_turns=20000)
    assert report.finished
    assert list(report.ranks.values()) == [1]
    assert report.message.startswith("Congratulations!")


def test_captures_are_counted_once_per_event():
    game = Game.new(num_players=4, seed=2)
    sim = Simulator.for_game(game)
    seen = []
    sim.observers.append(
        lambda state, result: seen.extend(ev for ev in result.events if ev.kind == EventKind.CAPTURE)
    )
    report = sim.run()
    assert report.captures == len(seen)
