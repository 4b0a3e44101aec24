from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Mapping

from .rewards import DEFAULT_BADGES, RewardSink, unlock
from .scheduler import ScheduledCall, Scheduler
from .types import BadgeSpec, CollectibleSpec, Event, ObstacleSpec, PowerUp, PowerUpKind

CLOUD = ObstacleSpec(
    kind="cloud",
    width=60.0,
    height=44.0,
    start_x=900.0,
    respawn_min=880.0,
    respawn_spread=320.0,
    shield_push=120.0,
    miss_push=80.0,
)
SPIKE = ObstacleSpec(
    kind="spike",
    width=44.0,
    height=44.0,
    start_x=1300.0,
    respawn_min=1180.0,
    respawn_spread=440.0,
    shield_push=140.0,
    miss_push=110.0,
)
LOW_STAR = CollectibleSpec(y=175.0, start_x=780.0, respawn_min=900.0, respawn_spread=520.0)
HIGH_STAR = CollectibleSpec(y=215.0, start_x=1180.0, respawn_min=1100.0, respawn_spread=560.0)


@dataclass(frozen=True)
class RunnerConfig:
    tick_interval: float = 0.03
    gravity: float = 0.8
    jump_velocity: float = 12.5
    base_speed: float = 7.2
    speed_ramp_cap: float = 3.6
    speed_ramp_divisor: float = 22.0
    score_per_tick: float = 0.018

    ground_y: float = 120.0
    player_x: float = 0.0
    player_width: float = 48.0
    player_height: float = 48.0
    ground_tolerance: float = 8.0
    recycle_threshold: float = -80.0

    obstacles: tuple[ObstacleSpec, ...] = (CLOUD, SPIKE)
    collectibles: tuple[CollectibleSpec, ...] = (LOW_STAR, HIGH_STAR)
    min_collectible_gap: float = 180.0
    collectible_nudge: float = 220.0

    power_ups_enabled: bool = True
    power_up_start_x: float = 1600.0
    power_up_respawn_min: float = 1500.0
    power_up_respawn_spread: float = 650.0
    power_up_y: float = 190.0
    power_up_size: float = 46.0
    shield_weight: float = 0.55
    max_shield_charges: int = 1
    magnet_duration: float = 6.5
    magnet_radius: float = 180.0

    stars_per_collectible: int = 2
    stars_per_power_up: int = 3
    collectible_badge_threshold: int = 7

    def __post_init__(self) -> None:
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be > 0")
        if self.gravity <= 0 or self.jump_velocity <= 0:
            raise ValueError("gravity and jump_velocity must be > 0")
        if not self.obstacles:
            raise ValueError("At least one obstacle is required.")


@dataclass
class RunnerState:
    vertical_offset: float = 0.0
    vertical_velocity: float = 0.0
    airborne: bool = False
    scroll_speed: float = 0.0
    obstacles: list[float] = field(default_factory=list)
    collectibles: list[float] = field(default_factory=list)
    power_up: PowerUp | None = None
    shield_charges: int = 0
    magnet_active_until: float = 0.0
    score: float = 0.0
    collected_count: int = 0
    miss_count: int = 0
    running: bool = False
    ticks: int = 0
    event_log: list[Event] = field(default_factory=list)


def rect_hit(
    ax: float, ay: float, aw: float, ah: float, bx: float, by: float, bw: float, bh: float
) -> bool:
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


def initial_state(config: RunnerConfig) -> RunnerState:
    power_up = None
    if config.power_ups_enabled:
        power_up = PowerUp(position=config.power_up_start_x, kind="shield")
    return RunnerState(
        scroll_speed=config.base_speed,
        obstacles=[o.start_x for o in config.obstacles],
        collectibles=[c.start_x for c in config.collectibles],
        power_up=power_up,
    )


class RunnerSimulation:
    """Fixed-tick side-scroller: one `tick` per scheduler interval while running."""

    def __init__(
        self,
        scheduler: Scheduler,
        rewards: RewardSink,
        config: RunnerConfig | None = None,
        badges: Mapping[str, BadgeSpec] | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.rewards = rewards
        self.config = config or RunnerConfig()
        self.badges = badges if badges is not None else DEFAULT_BADGES
        self.rng = rng or random.Random()
        self._clock = clock or (lambda: self.scheduler.now)
        self._ticker: ScheduledCall | None = None
        self.state = initial_state(self.config)

    # -------- Lifecycle --------
    def start(self) -> RunnerState:
        if self.state.running:
            return self.state
        if self._ticker is not None:
            self._ticker.cancel()
        self.state.running = True
        self._ticker = self.scheduler.call_every(self.config.tick_interval, self.tick)
        return self.state

    def stop(self) -> RunnerState:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        self.state.running = False
        return self.state

    def reset(self) -> RunnerState:
        self.stop()
        self.state = initial_state(self.config)
        return self.state

    def jump(self) -> RunnerState:
        st = self.state
        if not st.running or st.airborne:
            return st
        st.vertical_velocity = self.config.jump_velocity
        st.airborne = True
        return st

    def magnet_active(self) -> bool:
        return self._clock() < self.state.magnet_active_until

    # -------- Tick --------
    def tick(self) -> RunnerState:
        st = self.state
        if not st.running:
            return st
        st.ticks += 1
        self._integrate()
        self._scroll()
        self._recycle()
        self._collide_obstacles()
        self._collect_power_up()
        self._collect_stars()
        return st

    def _integrate(self) -> None:
        st = self.state
        st.vertical_velocity -= self.config.gravity
        st.vertical_offset += st.vertical_velocity
        if st.vertical_offset <= 0:
            st.vertical_offset = 0.0
            st.vertical_velocity = 0.0
            st.airborne = False

    def _scroll(self) -> None:
        cfg = self.config
        st = self.state
        speed = st.scroll_speed
        st.obstacles = [x - speed for x in st.obstacles]
        st.collectibles = [x - speed for x in st.collectibles]
        if st.power_up is not None:
            st.power_up.position -= speed
        st.score += cfg.score_per_tick
        st.scroll_speed = cfg.base_speed + min(cfg.speed_ramp_cap, st.score / cfg.speed_ramp_divisor)

    def _recycle(self) -> None:
        cfg = self.config
        st = self.state
        for i, spec in enumerate(cfg.obstacles):
            if st.obstacles[i] < cfg.recycle_threshold:
                st.obstacles[i] = spec.respawn_min + self.rng.random() * spec.respawn_spread
        for i in range(len(cfg.collectibles)):
            if st.collectibles[i] < cfg.recycle_threshold:
                st.collectibles[i] = self.safe_collectible_x(i)
        if st.power_up is not None and st.power_up.position < cfg.recycle_threshold:
            st.power_up = self._next_power_up()

    def safe_collectible_x(self, index: int) -> float:
        """Respawn position for a collectible, nudged clear of the obstacles."""
        cfg = self.config
        spec = cfg.collectibles[index]
        x = spec.respawn_min + self.rng.random() * spec.respawn_spread
        for obstacle_x in self.state.obstacles:
            if abs(x - obstacle_x) < cfg.min_collectible_gap:
                x += cfg.collectible_nudge
        return x

    def _next_power_up(self) -> PowerUp:
        cfg = self.config
        position = cfg.power_up_respawn_min + self.rng.random() * cfg.power_up_respawn_spread
        kind: PowerUpKind = "shield" if self.rng.random() < cfg.shield_weight else "magnet"
        return PowerUp(position=position, kind=kind)

    def _player_box(self) -> tuple[float, float, float, float]:
        cfg = self.config
        return (
            cfg.player_x,
            cfg.ground_y + self.state.vertical_offset,
            cfg.player_width,
            cfg.player_height,
        )

    def _collide_obstacles(self) -> None:
        cfg = self.config
        st = self.state
        if st.vertical_offset >= cfg.ground_tolerance:
            return
        px, py, pw, ph = self._player_box()
        for i, spec in enumerate(cfg.obstacles):
            x = st.obstacles[i]
            if not rect_hit(px, py, pw, ph, x, cfg.ground_y, spec.width, spec.height):
                continue
            # A pushed obstacle always ends fully behind the player: one overlap, one hit.
            clear_x = cfg.player_x - spec.width
            if st.shield_charges > 0:
                st.shield_charges -= 1
                st.obstacles[i] = min(x - spec.shield_push, clear_x)
                st.event_log.append({"type": "SHIELD_ABSORBED", "obstacle": spec.kind})
            else:
                st.miss_count += 1
                st.obstacles[i] = min(x - spec.miss_push, clear_x)
                st.event_log.append({"type": "OBSTACLE_HIT", "obstacle": spec.kind, "misses": st.miss_count})

    def _collect_power_up(self) -> None:
        cfg = self.config
        st = self.state
        pu = st.power_up
        if pu is None:
            return
        px, py, pw, ph = self._player_box()
        size = cfg.power_up_size
        if not rect_hit(px, py, pw, ph, pu.position, cfg.power_up_y, size, size):
            return
        if pu.kind == "shield":
            st.shield_charges = min(cfg.max_shield_charges, st.shield_charges + 1)
            badge_id = "runner_shield"
        else:
            st.magnet_active_until = self._clock() + cfg.magnet_duration
            badge_id = "runner_magnet"
        st.event_log.append({"type": "POWER_UP", "kind": pu.kind})
        self.rewards.award_stars(cfg.stars_per_power_up, "Power-up!")
        unlock(self.rewards, self.badges, badge_id)
        st.power_up = self._next_power_up()

    def _collect_stars(self) -> None:
        cfg = self.config
        st = self.state
        px, py, pw, ph = self._player_box()
        magnet = self.magnet_active()
        for i, spec in enumerate(cfg.collectibles):
            x = st.collectibles[i]
            got = rect_hit(px, py, pw, ph, x, spec.y, spec.width, spec.height)
            if not got and magnet:
                got = abs(x - cfg.player_x) < cfg.magnet_radius
            if not got:
                continue
            st.collected_count += 1
            st.collectibles[i] = self.safe_collectible_x(i)
            st.event_log.append({"type": "STAR_COLLECTED", "collected": st.collected_count, "magnet": magnet})
            self.rewards.award_stars(cfg.stars_per_collectible, "Star collected!")
            if st.collected_count >= cfg.collectible_badge_threshold:
                unlock(self.rewards, self.badges, "runner_7")
