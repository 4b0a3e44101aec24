from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .rewards import DEFAULT_BADGES, RewardSink, unlock
from .scheduler import ScheduledCall, Scheduler
from .types import DIFFICULTIES, BadgeSpec, Card, Difficulty, Event


@dataclass(frozen=True)
class PairingConfig:
    easy_pairs: int = 4
    hard_pairs: int = 6
    settle_delay: float = 0.22
    mismatch_delay: float = 0.52
    clock_interval: float = 1.0
    stars_per_match: int = 2
    stars_per_win: int = 10

    def pair_count(self, difficulty: Difficulty) -> int:
        if difficulty == "easy":
            return self.easy_pairs
        if difficulty == "hard":
            return self.hard_pairs
        raise ValueError(f"Unknown difficulty: {difficulty!r}")


@dataclass
class MatchRunState:
    difficulty: Difficulty | None = None
    pair_count: int = 0
    deck: list[Card] = field(default_factory=list)
    flipped: set[str] = field(default_factory=set)
    matched: set[str] = field(default_factory=set)
    flipped_first: Card | None = None
    locked: bool = False
    matched_count: int = 0
    flips: int = 0
    elapsed_seconds: int = 0
    running: bool = False
    won: bool = False
    new_best: bool = False
    event_log: list[Event] = field(default_factory=list)

    def card(self, card_id: str) -> Card | None:
        for c in self.deck:
            if c.id == card_id:
                return c
        return None


def fisher_yates(rng: random.Random, items: Sequence[Card]) -> list[Card]:
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out


def build_deck(rng: random.Random, images: Sequence[str], pair_count: int) -> list[Card]:
    """Pick `pair_count` images (cycling through a small pool) and shuffle two cards per image.

    The pair key embeds the pair index, so reusing an image for two pairs
    still yields keys that occur exactly twice.
    """
    if not images:
        raise ValueError("Image pool is empty.")
    if pair_count <= 0:
        raise ValueError("pair_count must be positive.")
    pool = list(images)
    rng.shuffle(pool)
    cards: list[Card] = []
    for i in range(pair_count):
        image = pool[i % len(pool)]
        key = f"p{i}:{image}"
        cards.append(Card(id=f"{key}#a", pair_key=key, image=image))
        cards.append(Card(id=f"{key}#b", pair_key=key, image=image))
    return fisher_yates(rng, cards)


class PairingEngine:
    """Memory-match rules for one game view.

    Resolution of a two-card attempt is deferred through the scheduler; the
    `locked` flag keeps a third flip out while it is pending, and `reset`
    cancels the pending call before touching state.
    """

    def __init__(
        self,
        images: Sequence[str],
        scheduler: Scheduler,
        rewards: RewardSink,
        config: PairingConfig | None = None,
        badges: Mapping[str, BadgeSpec] | None = None,
        rng: random.Random | None = None,
        best_times: Mapping[str, int] | None = None,
    ) -> None:
        if not images:
            raise ValueError("Image pool is empty.")
        self.images = list(images)
        self.scheduler = scheduler
        self.rewards = rewards
        self.config = config or PairingConfig()
        self.badges = badges if badges is not None else DEFAULT_BADGES
        self.rng = rng or random.Random()
        self._best_times: dict[str, int] = dict(best_times or {})
        self._pending: ScheduledCall | None = None
        self._clock: ScheduledCall | None = None
        self.state = MatchRunState()

    @property
    def best_times(self) -> Mapping[str, int]:
        return dict(self._best_times)

    def _cancel_timers(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._clock is not None:
            self._clock.cancel()
            self._clock = None

    def reset(self) -> MatchRunState:
        self._cancel_timers()
        self.state = MatchRunState()
        return self.state

    def start_game(self, difficulty: Difficulty) -> MatchRunState:
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty!r}")
        self.reset()
        pairs = self.config.pair_count(difficulty)
        st = self.state
        st.difficulty = difficulty
        st.pair_count = pairs
        st.deck = build_deck(self.rng, self.images, pairs)
        st.running = True
        self._clock = self.scheduler.call_every(self.config.clock_interval, self._on_clock)
        st.event_log.append({"type": "GAME_STARTED", "difficulty": difficulty, "pairs": pairs})
        return st

    def _on_clock(self) -> None:
        if self.state.running:
            self.state.elapsed_seconds += 1

    def flip(self, card_id: str) -> MatchRunState:
        st = self.state
        if not st.running or st.locked:
            return st
        card = st.card(card_id)
        if card is None or card.id in st.matched or card.id in st.flipped:
            return st

        st.flipped.add(card.id)
        st.flips += 1
        st.event_log.append({"type": "CARD_FLIPPED", "card_id": card.id})

        first = st.flipped_first
        if first is None:
            st.flipped_first = card
            return st

        st.locked = True
        if first.pair_key == card.pair_key:
            self._pending = self.scheduler.call_later(
                self.config.settle_delay, lambda: self._resolve_match(first, card)
            )
        else:
            self._pending = self.scheduler.call_later(
                self.config.mismatch_delay, lambda: self._resolve_miss(first, card)
            )
        return st

    def _resolve_match(self, a: Card, b: Card) -> None:
        st = self.state
        self._pending = None
        st.matched.update((a.id, b.id))
        st.flipped.difference_update((a.id, b.id))
        st.flipped_first = None
        st.locked = False
        st.matched_count += 1
        st.event_log.append({"type": "PAIR_MATCHED", "pair_key": a.pair_key, "matched": st.matched_count})
        self.rewards.award_stars(self.config.stars_per_match, "Match!")
        self._check_win()

    def _resolve_miss(self, a: Card, b: Card) -> None:
        st = self.state
        self._pending = None
        st.flipped.difference_update((a.id, b.id))
        st.flipped_first = None
        st.locked = False
        st.event_log.append({"type": "PAIR_MISSED", "cards": [a.id, b.id]})

    def _check_win(self) -> None:
        st = self.state
        if not st.running or st.matched_count < st.pair_count:
            return
        if self._clock is not None:
            self._clock.cancel()
            self._clock = None
        st.running = False
        st.won = True
        assert st.difficulty is not None
        st.event_log.append(
            {"type": "GAME_WON", "difficulty": st.difficulty, "seconds": st.elapsed_seconds, "flips": st.flips}
        )
        self.rewards.award_stars(self.config.stars_per_win, "Match win!")
        unlock(self.rewards, self.badges, f"match_{st.difficulty}")

        previous = self._best_times.get(st.difficulty)
        if previous is None or st.elapsed_seconds < previous:
            self._best_times[st.difficulty] = st.elapsed_seconds
            st.event_log.append(
                {"type": "BEST_TIME", "difficulty": st.difficulty, "seconds": st.elapsed_seconds, "previous": previous}
            )
        if previous is not None and st.elapsed_seconds < previous:
            st.new_best = True
            unlock(self.rewards, self.badges, "match_fast")
