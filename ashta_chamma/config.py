import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


@dataclass(slots=True)
class Config:
    # --- Board ---
    BOARD_SIZE: int = 5
    NUM_SQUARES: int = 25
    PIECES_PER_PLAYER: int = 4
    MIN_PLAYERS: int = 2
    MAX_PLAYERS: int = 4

    # --- Progress track ---
    HOME_POSITION: int = -1  # -1=home; 0..15 outer loop; 16..23 inner spiral; 24=center
    MAX_PATH_INDEX: int = 24
    OUTER_LOOP_LENGTH: int = 16
    ENTRY_ROLLS: tuple[int, ...] = (4, 8)
    ENTRY_COST: int = 4

    # --- Simulation ---
    NUM_PLAYERS: int = int(os.getenv("NUM_PLAYERS", 4))
    MAX_TURNS: int = int(os.getenv("MAX_TURNS", 2000))
    BOARD_TYPE: str = os.getenv("BOARD_TYPE", "standard")

    # Derived (populated in __post_init__ due to slots)
    OUTER_LOOP_END: int = 0
    SPIRAL_START: int = 0

    def __post_init__(self):
        self.OUTER_LOOP_END = self.OUTER_LOOP_LENGTH - 1
        self.SPIRAL_START = self.OUTER_LOOP_LENGTH

        if self.NUM_PLAYERS < self.MIN_PLAYERS or self.NUM_PLAYERS > self.MAX_PLAYERS:
            raise ValueError("NUM_PLAYERS must be between 2 and 4")


@dataclass(slots=True)
class RollConfig:
    # Unnormalised bucket weights keyed by point value
    base_weights: dict[int, float] = field(
        default_factory=lambda: {1: 0.2275, 2: 0.364, 3: 0.3185, 4: 0.05, 8: 0.04}
    )
    # Walk order used when sampling a bucket
    sample_order: tuple[int, ...] = (8, 4, 3, 2, 1)

    # Pity: dry streak without a 4 or 8
    pity_threshold: int = int(os.getenv("PITY_THRESHOLD", 5))
    pity_step: float = float(os.getenv("PITY_STEP", 0.02))
    pity_forced: dict[int, float] = field(default_factory=lambda: {4: 0.5, 8: 0.5})

    # Capture-seeking bias per (piece, killing value)
    capture_bias: float = float(os.getenv("CAPTURE_BIAS", 0.15))

    # End-game tension near the center
    tension_penalty: float = float(os.getenv("TENSION_PENALTY", 0.10))
    tension_floor: float = float(os.getenv("TENSION_FLOOR", 0.01))
    tension_attempts: int = int(os.getenv("TENSION_ATTEMPTS", 2))
    tension_distances: tuple[int, ...] = (1, 2, 3)

    def __post_init__(self):
        if self.pity_threshold < 1:
            raise ValueError("PITY_THRESHOLD must be at least 1")
        if self.tension_floor <= 0:
            raise ValueError("TENSION_FLOOR must be positive")


config = Config()
roll_config = RollConfig()
