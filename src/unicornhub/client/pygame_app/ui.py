from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import pygame  # type: ignore[import-not-found]


Color = tuple[int, int, int]

BG = (30, 16, 44)
PANEL = (58, 34, 82)
ACCENT = (255, 79, 216)
TEXT = (250, 240, 255)


def draw_text(
    screen: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: tuple[int, int],
    color: Color = TEXT,
) -> None:
    img = font.render(text, True, color)
    screen.blit(img, pos)


def draw_panel(screen: pygame.Surface, rect: pygame.Rect, color: Color = PANEL, border: Color = (0, 0, 0)) -> None:
    pygame.draw.rect(screen, color, rect, border_radius=10)
    pygame.draw.rect(screen, border, rect, width=2, border_radius=10)


@dataclass
class Button:
    rect: pygame.Rect
    text: str
    on_click: Callable[[], None]
    enabled: bool = True

    def handle_event(self, event: pygame.event.Event) -> bool:
        if not self.enabled:
            return False
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.on_click()
                return True
        return False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        bg = (120, 60, 150) if self.enabled else (60, 40, 70)
        pygame.draw.rect(screen, bg, self.rect, border_radius=8)
        pygame.draw.rect(screen, (0, 0, 0), self.rect, width=2, border_radius=8)
        img = font.render(self.text, True, TEXT)
        r = img.get_rect(center=self.rect.center)
        screen.blit(img, r.topleft)


def button_column(
    x: int, y: int, w: int, h: int, gap: int, items: list[tuple[str, Callable[[], None]]]
) -> list[Button]:
    return [
        Button(rect=pygame.Rect(x, y + i * (h + gap), w, h), text=text, on_click=cb)
        for i, (text, cb) in enumerate(items)
    ]
