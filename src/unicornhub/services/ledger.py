from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Sequence

from unicornhub.engine.runner import RunnerState
from unicornhub.services.content import Mission
from unicornhub.services.telemetry import TelemetryService


class LedgerError(RuntimeError):
    pass


class ProfileStore:
    """Key/value JSON store backed by a single file.

    Reads never raise: a missing, unreadable or corrupt file yields the
    fallback. Writes raise LedgerError so the caller can decide what to do.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, object]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return {}
        return raw if isinstance(raw, dict) else {}

    def load(self, key: str, fallback: object) -> object:
        return self._read().get(key, fallback)

    def save(self, key: str, value: object) -> None:
        data = self._read()
        data[key] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as e:
            raise LedgerError(f"Could not save {key} to {self._path}: {e}") from e


@dataclass
class BadgeRecord:
    title: str
    description: str
    icon: str
    unlocked_at: str

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "BadgeRecord":
        return BadgeRecord(
            title=str(d.get("title", "")),
            description=str(d.get("description", "")),
            icon=str(d.get("icon", "🏅")),
            unlocked_at=str(d.get("unlocked_at", "")),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "unlocked_at": self.unlocked_at,
        }


@dataclass
class RunnerRecords:
    runs: int = 0
    best_score: int = 0
    total_collected: int = 0
    total_misses: int = 0

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "RunnerRecords":
        def _int(key: str) -> int:
            v = d.get(key, 0)
            return v if isinstance(v, int) and v >= 0 else 0

        return RunnerRecords(
            runs=_int("runs"),
            best_score=_int("best_score"),
            total_collected=_int("total_collected"),
            total_misses=_int("total_misses"),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "runs": self.runs,
            "best_score": self.best_score,
            "total_collected": self.total_collected,
            "total_misses": self.total_misses,
        }


@dataclass
class Profile:
    version: int = 1
    stars: int = 0
    badges: dict[str, BadgeRecord] = field(default_factory=dict)
    mission: Mission | None = None
    best_times: dict[str, int] = field(default_factory=dict)
    runner: RunnerRecords = field(default_factory=RunnerRecords)

    @staticmethod
    def default() -> "Profile":
        return Profile()

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "Profile":
        version_raw = d.get("version", 1)
        version = version_raw if isinstance(version_raw, int) else 1
        stars_raw = d.get("stars", 0)
        stars = max(0, stars_raw) if isinstance(stars_raw, int) else 0

        badges: dict[str, BadgeRecord] = {}
        badges_raw = d.get("badges", {})
        if isinstance(badges_raw, dict):
            for k, v in badges_raw.items():
                if isinstance(k, str) and isinstance(v, dict):
                    badges[k] = BadgeRecord.from_dict(v)

        mission: Mission | None = None
        mission_raw = d.get("mission")
        if isinstance(mission_raw, dict):
            t = mission_raw.get("title")
            desc = mission_raw.get("description")
            if isinstance(t, str) and isinstance(desc, str):
                mission = Mission(title=t, description=desc)

        best_times: dict[str, int] = {}
        best_raw = d.get("best_times", {})
        if isinstance(best_raw, dict):
            for k, v in best_raw.items():
                if isinstance(k, str) and isinstance(v, int) and v >= 0:
                    best_times[k] = v

        runner_raw = d.get("runner", {})
        runner = RunnerRecords.from_dict(runner_raw) if isinstance(runner_raw, dict) else RunnerRecords()

        return Profile(
            version=version,
            stars=stars,
            badges=badges,
            mission=mission,
            best_times=best_times,
            runner=runner,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "stars": self.stars,
            "badges": {k: v.to_dict() for k, v in self.badges.items()},
            "mission": None
            if self.mission is None
            else {"title": self.mission.title, "description": self.mission.description},
            "best_times": dict(self.best_times),
            "runner": self.runner.to_dict(),
        }


PROFILE_KEY = "profile"


class RewardLedger:
    """Stars, badges, missions and personal records for the local player.

    Implements the engines' RewardSink protocol. Every mutation is persisted
    immediately; save failures are logged and otherwise ignored so play is
    never interrupted.
    """

    def __init__(
        self,
        store: ProfileStore,
        telemetry: TelemetryService | None = None,
        badge_bonus_stars: int = 5,
    ) -> None:
        self._store = store
        self._telemetry = telemetry
        self.badge_bonus_stars = badge_bonus_stars
        self.profile = self._load()

    def _load(self) -> Profile:
        raw = self._store.load(PROFILE_KEY, None)
        if not isinstance(raw, dict):
            return Profile.default()
        return Profile.from_dict(raw)

    def save(self) -> bool:
        try:
            self._store.save(PROFILE_KEY, self.profile.to_dict())
        except LedgerError as e:
            self._log("save_failed", {"error": str(e)})
            return False
        return True

    def _log(self, event_type: str, payload: Mapping[str, object]) -> None:
        if self._telemetry is not None:
            self._telemetry.log(event_type, payload)

    # -------- RewardSink --------
    @property
    def stars(self) -> int:
        return self.profile.stars

    def award_stars(self, amount: int, reason: str = "") -> None:
        self.profile.stars = max(0, self.profile.stars + int(amount))
        self.save()

    def has_badge(self, badge_id: str) -> bool:
        return badge_id in self.profile.badges

    def unlock_badge(self, badge_id: str, title: str, description: str, icon: str = "🏅") -> bool:
        if badge_id in self.profile.badges:
            return False
        self.profile.badges[badge_id] = BadgeRecord(
            title=title,
            description=description,
            icon=icon,
            unlocked_at=datetime.now(tz=timezone.utc).isoformat(),
        )
        self._log("badge_unlocked", {"id": badge_id, "title": title})
        # award_stars persists the new badge too
        self.award_stars(self.badge_bonus_stars, f"Badge unlocked: {title}!")
        return True

    # -------- Records --------
    @property
    def best_times(self) -> dict[str, int]:
        return dict(self.profile.best_times)

    def record_best_times(self, best_times: Mapping[str, int]) -> None:
        changed = False
        for k, v in best_times.items():
            current = self.profile.best_times.get(k)
            if current is None or v < current:
                self.profile.best_times[k] = v
                changed = True
        if changed:
            self.save()

    def record_run(self, state: RunnerState) -> None:
        rec = self.profile.runner
        rec.runs += 1
        rec.best_score = max(rec.best_score, int(state.score))
        rec.total_collected += state.collected_count
        rec.total_misses += state.miss_count
        self.save()

    # -------- Missions --------
    @property
    def current_mission(self) -> Mission | None:
        return self.profile.mission

    def new_mission(self, missions: Sequence[Mission], rng: random.Random | None = None) -> Mission | None:
        if not missions:
            return None
        r = rng or random.Random()
        choices = [m for m in missions if m != self.profile.mission] or list(missions)
        self.profile.mission = choices[r.randrange(0, len(choices))]
        self.save()
        return self.profile.mission

    def ensure_mission(self, missions: Sequence[Mission], rng: random.Random | None = None) -> Mission | None:
        if self.profile.mission is not None:
            return self.profile.mission
        return self.new_mission(missions, rng)
