from __future__ import annotations

import random
from collections import Counter, defaultdict

import pytest

from unicornhub.engine.pairing import MatchRunState, PairingConfig, PairingEngine, build_deck, fisher_yates
from unicornhub.engine.rewards import RecordingRewards
from unicornhub.engine.scheduler import Scheduler
from unicornhub.engine.types import Card

IMAGES = ["images/a.png", "images/b.png", "images/c.png"]


def _engine(seed: int = 7, best_times: dict[str, int] | None = None):
    sched = Scheduler()
    rewards = RecordingRewards()
    eng = PairingEngine(IMAGES, sched, rewards, rng=random.Random(seed), best_times=best_times)
    return eng, sched, rewards


def _pairs(state: MatchRunState) -> list[tuple[Card, Card]]:
    by_key: dict[str, list[Card]] = defaultdict(list)
    for c in state.deck:
        by_key[c.pair_key].append(c)
    return [(v[0], v[1]) for v in by_key.values()]


def _mismatch(state: MatchRunState) -> tuple[Card, Card]:
    first = state.deck[0]
    for c in state.deck[1:]:
        if c.pair_key != first.pair_key:
            return first, c
    raise AssertionError("deck has a single pair")


def _solve(eng: PairingEngine, sched: Scheduler) -> None:
    for a, b in _pairs(eng.state):
        eng.flip(a.id)
        eng.flip(b.id)
        sched.advance(0.3)


def test_deck_every_pair_key_twice() -> None:
    cfg = PairingConfig()
    for seed in range(25):
        for difficulty in ("easy", "hard"):
            eng, _, _ = _engine(seed=seed)
            state = eng.start_game(difficulty)
            pairs = cfg.pair_count(difficulty)
            assert len(state.deck) == 2 * pairs
            counts = Counter(c.pair_key for c in state.deck)
            assert len(counts) == pairs
            assert set(counts.values()) == {2}
            assert len({c.id for c in state.deck}) == len(state.deck)


def test_small_image_pool_is_reused_cyclically() -> None:
    deck = build_deck(random.Random(1), ["only.png"], 6)
    assert len(deck) == 12
    assert {c.image for c in deck} == {"only.png"}
    assert set(Counter(c.pair_key for c in deck).values()) == {2}


def test_fisher_yates_is_a_permutation() -> None:
    cards = [Card(id=str(i), pair_key=str(i // 2), image="x") for i in range(12)]
    for seed in range(10):
        shuffled = fisher_yates(random.Random(seed), cards)
        assert sorted(c.id for c in shuffled) == sorted(c.id for c in cards)
    assert [c.id for c in cards] == [str(i) for i in range(12)]


def test_matching_pair_settles_after_delay() -> None:
    eng, sched, rewards = _engine()
    eng.start_game("easy")
    a, b = _pairs(eng.state)[0]

    eng.flip(a.id)
    assert eng.state.flipped_first == a
    eng.flip(b.id)
    assert eng.state.locked
    assert eng.state.matched_count == 0

    sched.advance(0.3)
    st = eng.state
    assert st.matched_count == 1
    assert {a.id, b.id} <= st.matched
    assert not st.flipped
    assert st.flipped_first is None
    assert not st.locked
    assert rewards.stars == 2


def test_flip_while_locked_is_ignored() -> None:
    eng, sched, _ = _engine()
    eng.start_game("easy")
    a, b = _mismatch(eng.state)
    eng.flip(a.id)
    eng.flip(b.id)
    assert eng.state.locked
    before_flips = eng.state.flips
    before_flipped = set(eng.state.flipped)

    third = next(c for c in eng.state.deck if c.id not in (a.id, b.id))
    eng.flip(third.id)
    assert eng.state.flips == before_flips
    assert eng.state.flipped == before_flipped


def test_mismatch_unflips_both_cards() -> None:
    eng, sched, rewards = _engine()
    eng.start_game("easy")
    a, b = _mismatch(eng.state)
    eng.flip(a.id)
    eng.flip(b.id)

    sched.advance(0.3)
    # still inside the resolution window
    assert eng.state.flipped == {a.id, b.id}

    sched.advance(0.3)
    st = eng.state
    assert not st.flipped
    assert st.flipped_first is None
    assert not st.locked
    assert st.matched_count == 0
    assert rewards.stars == 0
    assert st.event_log[-1]["type"] == "PAIR_MISSED"


def test_same_card_twice_counts_once() -> None:
    eng, _, _ = _engine()
    eng.start_game("easy")
    card = eng.state.deck[0]
    eng.flip(card.id)
    eng.flip(card.id)
    assert eng.state.flips == 1
    assert not eng.state.locked


def test_flip_ignored_when_not_running_or_unknown() -> None:
    eng, _, _ = _engine()
    eng.flip("nope")
    assert eng.state.flips == 0

    eng.start_game("easy")
    eng.flip("nope")
    assert eng.state.flips == 0


def test_matched_count_increments_by_one_per_pair() -> None:
    eng, sched, _ = _engine()
    eng.start_game("easy")
    seen = [eng.state.matched_count]
    for a, b in _pairs(eng.state):
        eng.flip(a.id)
        eng.flip(b.id)
        sched.advance(0.3)
        seen.append(eng.state.matched_count)
    assert seen == [0, 1, 2, 3, 4]
    assert eng.state.matched_count <= eng.state.pair_count


def test_matched_cards_cannot_be_flipped_again() -> None:
    eng, sched, _ = _engine()
    eng.start_game("easy")
    a, b = _pairs(eng.state)[0]
    eng.flip(a.id)
    eng.flip(b.id)
    sched.advance(0.3)
    flips = eng.state.flips
    eng.flip(a.id)
    assert eng.state.flips == flips
    assert eng.state.flipped_first is None


def test_hard_win_unlocks_badge_once() -> None:
    eng, sched, rewards = _engine()
    eng.start_game("hard")
    assert eng.state.pair_count == 6
    _solve(eng, sched)

    st = eng.state
    assert st.matched_count == 6
    assert not st.running
    assert st.won
    assert "match_hard" in rewards.badges
    assert rewards.stars == 6 * 2 + 10

    # re-evaluating the win condition must not award again
    eng._check_win()
    sched.advance(5.0)
    assert rewards.unlock_attempts.count("match_hard") == 1
    assert rewards.stars == 6 * 2 + 10


def test_elapsed_clock_ticks_and_stops_on_win() -> None:
    eng, sched, _ = _engine()
    eng.start_game("easy")
    sched.advance(3.0)
    assert eng.state.elapsed_seconds == 3

    _solve(eng, sched)
    assert eng.state.won
    frozen = eng.state.elapsed_seconds
    sched.advance(10.0)
    assert eng.state.elapsed_seconds == frozen
    assert sched.pending() == 0


def test_first_win_records_best_time_without_fast_badge() -> None:
    eng, sched, rewards = _engine()
    eng.start_game("easy")
    _solve(eng, sched)
    assert eng.best_times["easy"] == eng.state.elapsed_seconds
    assert "match_fast" not in rewards.badges
    assert not eng.state.new_best


def test_beating_best_time_unlocks_fast_badge() -> None:
    eng, sched, rewards = _engine(best_times={"easy": 100})
    eng.start_game("easy")
    _solve(eng, sched)
    assert eng.state.new_best
    assert eng.best_times["easy"] == eng.state.elapsed_seconds
    assert "match_fast" in rewards.badges
    assert any(ev["type"] == "BEST_TIME" for ev in eng.state.event_log)


def test_slower_win_keeps_best_time() -> None:
    eng, sched, rewards = _engine(best_times={"easy": 0})
    eng.start_game("easy")
    sched.advance(4.0)
    _solve(eng, sched)
    assert eng.best_times["easy"] == 0
    assert "match_fast" not in rewards.badges


def test_reset_cancels_pending_resolution() -> None:
    eng, sched, rewards = _engine()
    eng.start_game("easy")
    a, b = _pairs(eng.state)[0]
    eng.flip(a.id)
    eng.flip(b.id)

    eng.start_game("easy")
    sched.advance(1.0)
    st = eng.state
    assert st.matched_count == 0
    assert not st.matched
    assert not st.locked
    assert rewards.stars == 0


def test_reset_clears_everything() -> None:
    eng, sched, _ = _engine()
    eng.start_game("hard")
    eng.flip(eng.state.deck[0].id)
    st = eng.reset()
    assert st.deck == []
    assert st.flips == 0
    assert not st.running
    assert sched.pending() == 0


def test_difficulty_switch_mid_run_starts_fresh() -> None:
    eng, sched, _ = _engine()
    eng.start_game("easy")
    a, b = _mismatch(eng.state)
    eng.flip(a.id)
    eng.flip(b.id)

    st = eng.start_game("hard")
    assert st.pair_count == 6
    assert len(st.deck) == 12
    assert st.flips == 0
    assert not st.locked
    # only the elapsed-time clock remains scheduled
    assert sched.pending() == 1


def test_invalid_arguments_raise() -> None:
    sched = Scheduler()
    with pytest.raises(ValueError):
        PairingEngine([], sched, RecordingRewards())
    eng, _, _ = _engine()
    with pytest.raises(ValueError):
        eng.start_game("medium")  # type: ignore[arg-type]
