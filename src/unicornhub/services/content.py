from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from unicornhub.engine.pairing import PairingConfig
from unicornhub.engine.runner import RunnerConfig
from unicornhub.engine.types import BadgeSpec, CollectibleSpec, ObstacleSpec


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise ContentError(f"Expected list for {key}")
    return v


def _require_dict(obj: Mapping[str, object], key: str) -> dict[str, object]:
    v = obj.get(key)
    if not isinstance(v, dict):
        raise ContentError(f"Expected object for {key}")
    return v


def _scalar_overrides(cls: type, raw: Mapping[str, object]) -> dict[str, object]:
    # Only plain scalar fields; nested specs are parsed separately.
    out: dict[str, object] = {}
    for f in dataclasses.fields(cls):
        if f.name not in raw:
            continue
        v = raw[f.name]
        if isinstance(v, (bool, int, float)):
            out[f.name] = v
    return out


def _parse_obstacle(raw: Mapping[str, object]) -> ObstacleSpec:
    try:
        return ObstacleSpec(
            kind=_require_str(raw, "kind"),
            width=float(raw["width"]),  # type: ignore[arg-type]
            height=float(raw["height"]),  # type: ignore[arg-type]
            start_x=float(raw["start_x"]),  # type: ignore[arg-type]
            respawn_min=float(raw["respawn_min"]),  # type: ignore[arg-type]
            respawn_spread=float(raw["respawn_spread"]),  # type: ignore[arg-type]
            shield_push=float(raw["shield_push"]),  # type: ignore[arg-type]
            miss_push=float(raw["miss_push"]),  # type: ignore[arg-type]
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ContentError(f"Invalid obstacle: {e}") from e


def _parse_collectible(raw: Mapping[str, object]) -> CollectibleSpec:
    try:
        return CollectibleSpec(
            y=float(raw["y"]),  # type: ignore[arg-type]
            start_x=float(raw["start_x"]),  # type: ignore[arg-type]
            respawn_min=float(raw["respawn_min"]),  # type: ignore[arg-type]
            respawn_spread=float(raw["respawn_spread"]),  # type: ignore[arg-type]
            width=float(raw.get("width", 42.0)),  # type: ignore[arg-type]
            height=float(raw.get("height", 42.0)),  # type: ignore[arg-type]
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ContentError(f"Invalid collectible: {e}") from e


def _parse_runner(raw: Mapping[str, object]) -> RunnerConfig:
    kwargs = _scalar_overrides(RunnerConfig, raw)
    obstacles_raw = raw.get("obstacles")
    if isinstance(obstacles_raw, list):
        kwargs["obstacles"] = tuple(_parse_obstacle(o) for o in obstacles_raw if isinstance(o, dict))
    collectibles_raw = raw.get("collectibles")
    if isinstance(collectibles_raw, list):
        kwargs["collectibles"] = tuple(_parse_collectible(c) for c in collectibles_raw if isinstance(c, dict))
    try:
        return RunnerConfig(**kwargs)  # type: ignore[arg-type]
    except ValueError as e:
        raise ContentError(f"Invalid runner ruleset: {e}") from e


@dataclass(frozen=True)
class ImageRef:
    id: str
    path: str
    caption: str


@dataclass(frozen=True)
class Mission:
    title: str
    description: str


@dataclass(frozen=True)
class Ruleset:
    id: str
    pairing: PairingConfig
    runner: RunnerConfig


@dataclass(frozen=True)
class GameContent:
    images: tuple[ImageRef, ...]
    badges: dict[str, BadgeSpec]
    missions: tuple[Mission, ...]
    rulesets: dict[str, Ruleset]
    default_ruleset: str
    badge_bonus_stars: int

    def ruleset(self, ruleset_id: str | None = None) -> Ruleset:
        rid = ruleset_id or self.default_ruleset
        if rid not in self.rulesets:
            raise ContentError(f"Unknown ruleset: {rid}")
        return self.rulesets[rid]

    def image_paths(self) -> list[str]:
        return [img.path for img in self.images]


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_games(self) -> GameContent:
        path = self._data_dir / "games.json"
        schema = _load_json(self._schema_dir / "games.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("games.json must be an object")

        images: list[ImageRef] = []
        for item in _require_list(raw, "images"):
            if not isinstance(item, dict):
                continue
            images.append(
                ImageRef(
                    id=_require_str(item, "id"),
                    path=_require_str(item, "path"),
                    caption=_require_str(item, "caption"),
                )
            )
        if not images:
            raise ContentError("games.json.images must not be empty")

        badges: dict[str, BadgeSpec] = {}
        for item in _require_list(raw, "badges"):
            if not isinstance(item, dict):
                continue
            b = BadgeSpec(
                id=_require_str(item, "id"),
                title=_require_str(item, "title"),
                description=_require_str(item, "description"),
                icon=_require_str(item, "icon"),
            )
            badges[b.id] = b

        missions = tuple(
            Mission(title=_require_str(m, "title"), description=_require_str(m, "description"))
            for m in _require_list(raw, "missions")
            if isinstance(m, dict)
        )

        rulesets: dict[str, Ruleset] = {}
        for rid, rs in _require_dict(raw, "rulesets").items():
            if not isinstance(rs, dict):
                continue
            pairing_raw = rs.get("pairing", {})
            runner_raw = rs.get("runner", {})
            pairing = PairingConfig(**_scalar_overrides(PairingConfig, pairing_raw if isinstance(pairing_raw, dict) else {}))  # type: ignore[arg-type]
            runner = _parse_runner(runner_raw if isinstance(runner_raw, dict) else {})
            rulesets[rid] = Ruleset(id=rid, pairing=pairing, runner=runner)

        default_ruleset = _require_str(raw, "default_ruleset")
        if default_ruleset not in rulesets:
            raise ContentError(f"default_ruleset {default_ruleset!r} is not defined")

        ledger_raw = raw.get("ledger", {})
        bonus = ledger_raw.get("badge_bonus_stars", 5) if isinstance(ledger_raw, dict) else 5

        return GameContent(
            images=tuple(images),
            badges=badges,
            missions=missions,
            rulesets=rulesets,
            default_ruleset=default_ruleset,
            badge_bonus_stars=int(bonus) if isinstance(bonus, int) else 5,
        )

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_games()
