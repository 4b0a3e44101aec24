from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Difficulty = Literal["easy", "hard"]
PowerUpKind = Literal["shield", "magnet"]

DIFFICULTIES: tuple[Difficulty, ...] = ("easy", "hard")

Event = dict[str, object]


@dataclass(frozen=True)
class Card:
    id: str
    pair_key: str
    image: str


@dataclass(frozen=True)
class BadgeSpec:
    id: str
    title: str
    description: str
    icon: str


@dataclass(frozen=True)
class ObstacleSpec:
    """Static description of one obstacle lane in the runner."""

    kind: str
    width: float
    height: float
    start_x: float
    respawn_min: float
    respawn_spread: float
    shield_push: float
    miss_push: float


@dataclass(frozen=True)
class CollectibleSpec:
    y: float
    start_x: float
    respawn_min: float
    respawn_spread: float
    width: float = 42.0
    height: float = 42.0


@dataclass
class PowerUp:
    position: float
    kind: PowerUpKind
