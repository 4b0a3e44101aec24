from __future__ import annotations

import random

import pytest

from unicornhub.engine.rewards import RecordingRewards
from unicornhub.engine.runner import RunnerConfig, RunnerSimulation, rect_hit
from unicornhub.engine.scheduler import Scheduler
from unicornhub.engine.types import PowerUp

FAR = 5000.0


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def _sim(config: RunnerConfig | None = None, rng: random.Random | None = None, clock=None):
    sched = Scheduler()
    rewards = RecordingRewards()
    sim = RunnerSimulation(sched, rewards, config=config, rng=rng or random.Random(3), clock=clock)
    sim.start()
    return sim, sched, rewards


def _clear_field(sim: RunnerSimulation) -> None:
    st = sim.state
    st.obstacles = [FAR for _ in st.obstacles]
    st.collectibles = [FAR for _ in st.collectibles]
    if st.power_up is not None:
        st.power_up.position = FAR


def test_rect_hit_edges() -> None:
    assert rect_hit(0, 0, 10, 10, 5, 5, 10, 10)
    # touching edges do not overlap
    assert not rect_hit(0, 0, 10, 10, 10, 0, 10, 10)
    assert not rect_hit(0, 0, 10, 10, 0, 10, 10, 10)


def test_jump_arc_returns_to_ground() -> None:
    sim, _, _ = _sim()
    _clear_field(sim)
    sim.jump()
    assert sim.state.airborne

    offsets = []
    for _ in range(200):
        sim.tick()
        offsets.append(sim.state.vertical_offset)
        if not sim.state.airborne:
            break
    assert min(offsets) >= 0.0
    assert max(offsets) > 50.0
    assert sim.state.vertical_offset == pytest.approx(0.0)
    assert sim.state.vertical_velocity == 0.0
    assert not sim.state.airborne


def test_single_jump_only() -> None:
    sim, _, _ = _sim()
    _clear_field(sim)
    sim.jump()
    sim.tick()
    v = sim.state.vertical_velocity
    sim.jump()
    assert sim.state.vertical_velocity == v


def test_jump_ignored_when_stopped() -> None:
    sim, _, _ = _sim()
    sim.stop()
    sim.jump()
    assert not sim.state.airborne
    assert sim.state.vertical_velocity == 0.0


def test_obstacle_hit_with_shield_is_absorbed() -> None:
    sim, _, _ = _sim()
    _clear_field(sim)
    st = sim.state
    st.scroll_speed = 7.2
    st.obstacles[0] = 0.0
    st.shield_charges = 1

    sim.tick()
    assert st.shield_charges == 0
    assert st.miss_count == 0
    assert st.obstacles[0] == pytest.approx(-7.2 - 120.0)
    assert st.event_log[-1]["type"] == "SHIELD_ABSORBED"


def test_obstacle_hit_without_shield_counts_miss() -> None:
    sim, _, _ = _sim()
    _clear_field(sim)
    st = sim.state
    st.scroll_speed = 7.2
    st.obstacles[0] = 0.0

    sim.tick()
    assert st.miss_count == 1
    assert st.shield_charges == 0
    assert st.obstacles[0] == pytest.approx(-7.2 - 80.0)

    # the retreat clears the overlap, so the same obstacle is not counted twice
    sim.tick()
    assert st.miss_count == 1


def test_obstacle_approaching_from_the_right_counts_one_miss() -> None:
    sim, _, _ = _sim()
    _clear_field(sim)
    st = sim.state
    st.obstacles[0] = 60.0

    for _ in range(30):
        sim.tick()
    assert st.miss_count == 1
    hits = [ev for ev in st.event_log if ev["type"] == "OBSTACLE_HIT"]
    assert len(hits) == 1
    assert hits[0]["misses"] == 1


def test_shielded_obstacle_approaching_from_the_right_is_absorbed_once() -> None:
    sim, _, _ = _sim(RunnerConfig(max_shield_charges=2))
    _clear_field(sim)
    st = sim.state
    st.shield_charges = 2
    st.obstacles[0] = 60.0

    for _ in range(30):
        sim.tick()
    assert st.shield_charges == 1
    assert st.miss_count == 0


def test_no_collision_when_clear_of_ground() -> None:
    sim, _, _ = _sim()
    _clear_field(sim)
    st = sim.state
    st.obstacles[0] = 10.0
    st.vertical_offset = 50.0
    st.airborne = True

    sim.tick()
    assert st.miss_count == 0


def test_scroll_speed_ramps_monotonically_to_cap() -> None:
    cfg = RunnerConfig()
    sim, _, _ = _sim(cfg)
    speeds = [sim.state.scroll_speed]
    for _ in range(1500):
        sim.tick()
        speeds.append(sim.state.scroll_speed)
    assert speeds[0] == cfg.base_speed
    assert all(b >= a for a, b in zip(speeds, speeds[1:]))
    assert speeds[-1] > cfg.base_speed

    sim.state.score = 10_000.0
    sim.tick()
    assert sim.state.scroll_speed == pytest.approx(cfg.base_speed + cfg.speed_ramp_cap)


def test_recycled_entities_respawn_ahead() -> None:
    cfg = RunnerConfig()
    sim, _, _ = _sim(cfg)
    _clear_field(sim)
    st = sim.state
    st.obstacles[1] = -79.0
    st.collectibles[0] = -79.0

    sim.tick()
    spike = cfg.obstacles[1]
    assert spike.respawn_min <= st.obstacles[1] <= spike.respawn_min + spike.respawn_spread
    assert st.collectibles[0] >= cfg.collectibles[0].respawn_min


def test_collectible_respawn_is_nudged_away_from_obstacles() -> None:
    cfg = RunnerConfig()
    sim, _, _ = _sim(cfg, rng=FixedRandom(0.0))
    sim.state.obstacles = [930.0, FAR]
    x = sim.safe_collectible_x(0)
    assert x == pytest.approx(cfg.collectibles[0].respawn_min + cfg.collectible_nudge)
    assert all(abs(x - o) >= cfg.min_collectible_gap for o in sim.state.obstacles)


def test_collectible_pickup_by_overlap() -> None:
    sim, _, rewards = _sim()
    _clear_field(sim)
    st = sim.state
    st.vertical_offset = 40.0
    st.airborne = True
    st.collectibles[0] = 5.0

    sim.tick()
    assert st.collected_count == 1
    assert rewards.stars == 2
    assert st.collectibles[0] > 500.0


def test_collectible_badge_after_threshold() -> None:
    cfg = RunnerConfig(collectible_badge_threshold=2)
    sim, _, rewards = _sim(cfg)
    for _ in range(2):
        _clear_field(sim)
        st = sim.state
        st.vertical_offset = 40.0
        st.vertical_velocity = 0.0
        st.airborne = True
        st.collectibles[0] = 5.0
        sim.tick()
    assert sim.state.collected_count == 2
    assert "runner_7" in rewards.badges


def test_shield_power_up_pickup() -> None:
    sim, _, rewards = _sim()
    _clear_field(sim)
    st = sim.state
    st.vertical_offset = 40.0
    st.airborne = True
    st.power_up = PowerUp(position=10.0, kind="shield")

    sim.tick()
    assert st.shield_charges == 1
    assert "runner_shield" in rewards.badges
    assert rewards.stars == 3
    assert st.power_up is not None
    assert st.power_up.position >= sim.config.power_up_respawn_min


def test_shield_charges_are_capped() -> None:
    sim, _, _ = _sim(RunnerConfig(max_shield_charges=1))
    _clear_field(sim)
    st = sim.state
    st.shield_charges = 1
    st.vertical_offset = 40.0
    st.airborne = True
    st.power_up = PowerUp(position=10.0, kind="shield")
    sim.tick()
    assert st.shield_charges == 1


def test_magnet_window_pulls_nearby_stars() -> None:
    now = [0.0]
    sim, _, rewards = _sim(clock=lambda: now[0])
    _clear_field(sim)
    st = sim.state
    st.vertical_offset = 40.0
    st.airborne = True
    st.power_up = PowerUp(position=10.0, kind="magnet")

    sim.tick()
    assert st.magnet_active_until == pytest.approx(sim.config.magnet_duration)
    assert "runner_magnet" in rewards.badges
    assert sim.magnet_active()

    _clear_field(sim)
    st.collectibles[0] = 150.0
    sim.tick()
    assert st.collected_count == 1
    assert st.event_log[-1]["magnet"] is True

    now[0] = 10.0
    assert not sim.magnet_active()
    _clear_field(sim)
    st.collectibles[0] = 150.0
    sim.tick()
    assert st.collected_count == 1


def test_power_up_rotates_when_scrolled_off() -> None:
    sim, _, _ = _sim(RunnerConfig(shield_weight=0.0))
    _clear_field(sim)
    assert sim.state.power_up is not None
    sim.state.power_up.position = -79.0
    sim.tick()
    pu = sim.state.power_up
    assert pu is not None
    assert pu.kind == "magnet"
    assert pu.position >= sim.config.power_up_respawn_min


def test_power_ups_can_be_disabled() -> None:
    sim, _, _ = _sim(RunnerConfig(power_ups_enabled=False))
    assert sim.state.power_up is None
    for _ in range(50):
        sim.tick()
    assert sim.state.power_up is None


def test_start_stop_reset_lifecycle() -> None:
    sim, sched, _ = _sim()
    sched.advance(0.3)
    assert sim.state.ticks == 10

    sim.start()
    assert sched.pending() == 1

    sim.stop()
    score = sim.state.score
    sched.advance(1.0)
    assert sim.state.score == score
    assert sim.state.ticks == 10
    assert not sim.state.running

    sim.start()
    sched.advance(0.06)
    assert sim.state.ticks == 12

    st = sim.reset()
    assert not st.running
    assert st.ticks == 0
    assert st.score == 0.0
    assert st.obstacles == [o.start_x for o in sim.config.obstacles]
    assert st.scroll_speed == sim.config.base_speed
    assert sched.pending() == 0


def test_tick_is_noop_when_stopped() -> None:
    sim, _, _ = _sim()
    sim.stop()
    before = list(sim.state.obstacles)
    sim.tick()
    assert sim.state.obstacles == before
    assert sim.state.ticks == 0


def test_offset_never_negative_over_long_run() -> None:
    sim, _, _ = _sim()
    for i in range(2000):
        if i % 37 == 0:
            sim.jump()
        sim.tick()
        assert sim.state.vertical_offset >= 0.0
    assert sim.state.miss_count >= 0
