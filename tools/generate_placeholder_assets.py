from __future__ import annotations

import colorsys
import json
import os
from pathlib import Path

# Allow headless generation (CI, terminals without a display)
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame  # type: ignore[import-not-found]


def _repo_root() -> Path:
    # tools/generate_placeholder_assets.py -> parents: [tools, repo_root]
    return Path(__file__).resolve().parents[1]


CARD_SIZE = (256, 256)


def generate_all() -> None:
    root = _repo_root()
    data_dir = root / "src" / "unicornhub" / "data"
    assets_dir = root / "assets"

    games = json.loads((data_dir / "games.json").read_text(encoding="utf-8"))
    images = games["images"]

    pygame.init()
    pygame.font.init()
    font = pygame.font.SysFont(None, 30)

    for i, image in enumerate(images):
        out_path = assets_dir / image["path"]
        out_path.parent.mkdir(parents=True, exist_ok=True)

        hue = i / max(1, len(images))
        r, g, b = colorsys.hsv_to_rgb(hue, 0.35, 1.0)
        surf = pygame.Surface(CARD_SIZE)
        surf.fill((int(r * 255), int(g * 255), int(b * 255)))
        _draw_rainbow(surf)
        pygame.draw.rect(surf, (60, 30, 80), surf.get_rect(), width=6, border_radius=16)

        caption = font.render(image["caption"], True, (60, 30, 80))
        surf.blit(caption, caption.get_rect(midbottom=(CARD_SIZE[0] // 2, CARD_SIZE[1] - 18)))
        pygame.image.save(surf, out_path.as_posix())

    pygame.quit()
    print(f"Generated {len(images)} placeholder images under ./assets/")


def _draw_rainbow(surf: pygame.Surface) -> None:
    w, h = surf.get_size()
    colors = [(255, 90, 90), (255, 170, 60), (255, 230, 80), (90, 210, 120), (90, 150, 255), (170, 110, 240)]
    for i, color in enumerate(colors):
        inset = 30 + i * 12
        rect = pygame.Rect(inset, inset, w - 2 * inset, h - 2 * inset)
        pygame.draw.arc(surf, color, rect, 0.0, 3.1416, width=10)


if __name__ == "__main__":
    generate_all()
