from __future__ import annotations

from dataclasses import dataclass, replace

from .config import config


def make_piece_id(owner_id: int, ordinal: int) -> str:
    return f"{owner_id}-{ordinal}"


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable piece value. Holds state only.

    Rule logic (legality, captures, finishing) lives in ``rules``; physical
    translation of ``position`` lives in ``board``.
    """

    owner_id: int
    ordinal: int  # 0..3 per player
    position: int = config.HOME_POSITION  # -1 home; 0..23 on path; 24 center
    endgame_attempts: int = 0  # rolls made while 1..3 steps from the center

    @property
    def piece_id(self) -> str:
        return make_piece_id(self.owner_id, self.ordinal)

    @property
    def is_home(self) -> bool:
        return self.position == config.HOME_POSITION

    @property
    def is_finished(self) -> bool:
        return self.position == config.MAX_PATH_INDEX

    @property
    def on_board(self) -> bool:
        """On the path and still able to move (not home, not finished)."""
        return 0 <= self.position < config.MAX_PATH_INDEX

    def moved_to(self, new_position: int) -> "Piece":
        return replace(self, position=new_position)

    def sent_home(self) -> "Piece":
        return replace(self, position=config.HOME_POSITION)

    def to_dict(self) -> dict:
        return {
            "piece_id": self.piece_id,
            "owner_id": self.owner_id,
            "position": self.position,
            "is_finished": self.is_finished,
            "endgame_attempts": self.endgame_attempts,
        }
