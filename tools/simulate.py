import argparse
import os
import random
import sys
import time
from collections import Counter
from typing import Optional

import numpy as np
from loguru import logger

from ashta_chamma import BoardType, config
from ashta_chamma.simulator import CHOOSERS, simulate_game


def seed_environ(seed_value: Optional[int] = None):
    random.seed(seed_value)
    np.random.seed(seed_value)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Play a batch of seeded Ashta Chamma games headlessly"
    )
    parser.add_argument(
        "--games", type=int, default=100, help="Number of games to simulate"
    )
    parser.add_argument(
        "--num-players",
        type=int,
        default=int(os.getenv("NUM_PLAYERS", config.NUM_PLAYERS)),
        help="Number of players in each game",
    )
    parser.add_argument(
        "--board",
        type=str,
        default=config.BOARD_TYPE,
        choices=[b.value for b in BoardType],
        help="Board variant",
    )
    parser.add_argument(
        "--chooser",
        type=str,
        default="random",
        choices=sorted(CHOOSERS),
        help="Piece selection policy for every seat",
    )
    parser.add_argument("--seed", type=int, default=42, help="Base seed")
    parser.add_argument(
        "--max-turns", type=int, default=config.MAX_TURNS, help="Turn cap per game"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="loguru level for engine logs (DEBUG shows every roll)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())
    seed_environ(args.seed)

    print(
        f"--- Simulating {args.games} games: {args.num_players} players, "
        f"board={args.board}, chooser={args.chooser} ---"
    )
    start_time = time.time()
    wins: Counter = Counter()
    last_places: Counter = Counter()
    turns, captures, passes = [], [], []
    unfinished = 0

    for i in range(args.games):
        report = simulate_game(
            num_players=args.num_players,
            board_type=args.board,
            seed=args.seed + i,
            chooser=args.chooser,
            max_turns=args.max_turns,
        )
        if not report.finished:
            unfinished += 1
            continue
        wins[report.winner_id] += 1
        if report.last_place_id is not None:
            last_places[report.last_place_id] += 1
        turns.append(report.turns)
        captures.append(report.captures)
        passes.append(report.passes)
        logger.info(f"Game {i}: {report.message} ({report.turns} turns)")

    print("\n--- SIMULATION COMPLETE ---")
    print(f"Simulation Time: {time.time() - start_time:.2f} seconds")
    finished = args.games - unfinished
    print(f"Finished games: {finished}/{args.games}")
    if finished:
        print(f"Mean turns: {np.mean(turns):.1f}")
        print(f"Mean captures: {np.mean(captures):.2f}")
        print(f"Mean passes: {np.mean(passes):.2f}")
        print("Wins by seat:")
        for pid, count in sorted(wins.items()):
            print(f"  Player {pid}: {count} ({count / finished:.1%})")
        if last_places:
            print("Last place by seat:")
            for pid, count in sorted(last_places.items()):
                print(f"  Player {pid}: {count}")


if __name__ == "__main__":
    main()
