"""Headless mini-game engines for Unicorn Hub.

IMPORTANT: This package must never import pygame.
"""

from .pairing import MatchRunState, PairingConfig, PairingEngine, build_deck
from .rewards import DEFAULT_BADGES, RecordingRewards, RewardSink
from .runner import RunnerConfig, RunnerSimulation, RunnerState, rect_hit
from .scheduler import ScheduledCall, Scheduler
from .serialize import match_snapshot, runner_snapshot
from .types import BadgeSpec, Card, CollectibleSpec, Difficulty, ObstacleSpec, PowerUp, PowerUpKind

__all__ = [
    "BadgeSpec",
    "Card",
    "CollectibleSpec",
    "DEFAULT_BADGES",
    "Difficulty",
    "MatchRunState",
    "ObstacleSpec",
    "PairingConfig",
    "PairingEngine",
    "PowerUp",
    "PowerUpKind",
    "RecordingRewards",
    "RewardSink",
    "RunnerConfig",
    "RunnerSimulation",
    "RunnerState",
    "ScheduledCall",
    "Scheduler",
    "build_deck",
    "match_snapshot",
    "rect_hit",
    "runner_snapshot",
]
