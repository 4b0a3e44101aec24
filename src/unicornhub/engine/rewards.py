from __future__ import annotations

from typing import Mapping, Protocol

from .types import BadgeSpec


class RewardSink(Protocol):
    """What the engines need from the reward economy."""

    def award_stars(self, amount: int, reason: str = "") -> None: ...

    def unlock_badge(self, badge_id: str, title: str, description: str, icon: str) -> bool: ...


DEFAULT_BADGES: dict[str, BadgeSpec] = {
    b.id: b
    for b in (
        BadgeSpec("match_easy", "Match Winner", "Won Match on Easy!", "🧠"),
        BadgeSpec("match_hard", "Match Master", "Won Match on Hard!", "🧠"),
        BadgeSpec("match_fast", "Speedy Matcher", "Beat your best Match time!", "⏱️"),
        BadgeSpec("runner_7", "Rainbow Sprinter", "Collected 7 stars!", "⭐"),
        BadgeSpec("runner_shield", "Bubble Shield", "Used a shield power-up!", "🫧"),
        BadgeSpec("runner_magnet", "Star Magnet", "Used a magnet power-up!", "🧲"),
    )
}


def unlock(rewards: RewardSink, badges: Mapping[str, BadgeSpec], badge_id: str) -> bool:
    # Unknown ids still unlock, with the id as the title.
    spec = badges.get(badge_id) or BadgeSpec(badge_id, badge_id, "", "🏅")
    return rewards.unlock_badge(spec.id, spec.title, spec.description, spec.icon)


class RecordingRewards:
    """In-memory RewardSink for headless play and tests."""

    def __init__(self) -> None:
        self.stars = 0
        self.awards: list[tuple[int, str]] = []
        self.badges: dict[str, BadgeSpec] = {}
        self.unlock_attempts: list[str] = []

    def award_stars(self, amount: int, reason: str = "") -> None:
        self.awards.append((amount, reason))
        self.stars = max(0, self.stars + amount)

    def unlock_badge(self, badge_id: str, title: str, description: str, icon: str) -> bool:
        self.unlock_attempts.append(badge_id)
        if badge_id in self.badges:
            return False
        self.badges[badge_id] = BadgeSpec(badge_id, title, description, icon)
        return True
