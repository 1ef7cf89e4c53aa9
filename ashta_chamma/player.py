from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple

from .config import config
from .exceptions import InvariantViolation
from .piece import Piece


class PieceType(str, Enum):
    """Cosmetic piece tags; no rule depends on them."""

    BANGLE = "bangle"
    STONE = "stone"
    SPLINT = "splint"
    BUTTON = "button"


DEFAULT_PIECE_TYPES: Tuple[PieceType, ...] = (
    PieceType.BANGLE,
    PieceType.STONE,
    PieceType.SPLINT,
    PieceType.BUTTON,
)


@dataclass(frozen=True, slots=True)
class PlayerSpec:
    player_id: int
    name: str
    piece_type: PieceType | str = PieceType.BANGLE


def default_seating(count: int) -> List[PlayerSpec]:
    """Default seats for a 2, 3 or 4 player game.

    Two players sit opposite each other, so the second one takes seat 3.
    """
    if not config.MIN_PLAYERS <= count <= config.MAX_PLAYERS:
        raise ValueError(f"Player count must be between 2 and 4, got {count}")
    ids = [1, 3] if count == 2 else list(range(1, count + 1))
    return [
        PlayerSpec(player_id=pid, name=f"Player {pid}", piece_type=DEFAULT_PIECE_TYPES[i])
        for i, pid in enumerate(ids)
    ]


@dataclass(frozen=True, slots=True)
class Player:
    player_id: int
    name: str
    piece_type: PieceType
    pieces: Tuple[Piece, ...] = field(default=())
    has_first_kill: bool = False  # Golden Rule: a kill unlocks the inner spiral
    rank: Optional[int] = None
    pity_counter: int = 0  # rolls since the last 4 or 8

    @classmethod
    def create(cls, spec: PlayerSpec) -> "Player":
        pieces = tuple(
            Piece(owner_id=spec.player_id, ordinal=i)
            for i in range(config.PIECES_PER_PLAYER)
        )
        return cls(
            player_id=spec.player_id,
            name=spec.name,
            piece_type=PieceType(spec.piece_type),
            pieces=pieces,
        )

    @property
    def all_finished(self) -> bool:
        return all(p.is_finished for p in self.pieces)

    @property
    def is_ranked(self) -> bool:
        return self.rank is not None

    def piece(self, piece_id: str) -> Optional[Piece]:
        for p in self.pieces:
            if p.piece_id == piece_id:
                return p
        return None

    def with_piece(self, piece: Piece) -> "Player":
        """Copy of this player with one piece replaced (matched by ordinal)."""
        if piece.owner_id != self.player_id:
            raise InvariantViolation(
                f"Piece {piece.piece_id} does not belong to player {self.player_id}"
            )
        pieces = tuple(piece if p.ordinal == piece.ordinal else p for p in self.pieces)
        return replace(self, pieces=pieces)

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "piece_type": self.piece_type.value,
            "has_first_kill": self.has_first_kill,
            "rank": self.rank,
            "pity_counter": self.pity_counter,
            "pieces": [p.to_dict() for p in self.pieces],
        }
