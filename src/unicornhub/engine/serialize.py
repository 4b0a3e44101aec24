from __future__ import annotations

from .pairing import MatchRunState
from .runner import RunnerState


def match_snapshot(state: MatchRunState) -> dict[str, object]:
    """Return a JSON-serializable render view of a memory-match run."""
    cards = []
    for c in state.deck:
        cards.append(
            {
                "id": c.id,
                "image": c.image,
                "face_up": c.id in state.flipped or c.id in state.matched,
                "matched": c.id in state.matched,
            }
        )
    return {
        "difficulty": state.difficulty,
        "pair_count": state.pair_count,
        "cards": cards,
        "flips": state.flips,
        "matched_count": state.matched_count,
        "elapsed_seconds": state.elapsed_seconds,
        "locked": state.locked,
        "running": state.running,
        "won": state.won,
        "new_best": state.new_best,
    }


def runner_snapshot(state: RunnerState, *, magnet_active: bool = False) -> dict[str, object]:
    pu = state.power_up
    return {
        "vertical_offset": state.vertical_offset,
        "airborne": state.airborne,
        "scroll_speed": state.scroll_speed,
        "obstacles": list(state.obstacles),
        "collectibles": list(state.collectibles),
        "power_up": None if pu is None else {"position": pu.position, "kind": pu.kind},
        "shield_charges": state.shield_charges,
        "magnet_active": magnet_active,
        "score": int(state.score),
        "collected_count": state.collected_count,
        "miss_count": state.miss_count,
        "running": state.running,
    }
