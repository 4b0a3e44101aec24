from __future__ import annotations

import pygame  # type: ignore[import-not-found]

from ..app import GameContext
from ..scene_base import SceneTransition
from ..ui import BG, Button, draw_panel, draw_text


class BadgesScene:
    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self._next: SceneTransition | None = None
        self.btn_back = Button(rect=pygame.Rect(20, 20, 120, 40), text="Back", on_click=self._on_back)

    def _on_back(self) -> None:
        from .hub import HubScene

        self._next = SceneTransition(HubScene(self.ctx))

    def handle_event(self, event: pygame.event.Event) -> None:
        self.btn_back.handle_event(event)

    def leave(self) -> None:
        pass

    def update(self, dt: float) -> SceneTransition | None:
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(BG)
        fonts = self.ctx.assets.fonts
        self.btn_back.draw(screen, fonts.ui)
        draw_text(screen, fonts.big, "Badges", (40, 80))
        if self.ctx.games is None or self.ctx.ledger is None:
            return
        owned = self.ctx.ledger.profile.badges
        for i, badge in enumerate(self.ctx.games.badges.values()):
            col, row = divmod(i, 6)
            rect = pygame.Rect(40 + col * 480, 140 + row * 90, 460, 76)
            have = badge.id in owned
            draw_panel(screen, rect, color=(90, 50, 120) if have else (45, 30, 55))
            title = f"{badge.icon} {badge.title}{'  ✓' if have else ''}"
            draw_text(screen, fonts.ui, title, (rect.x + 12, rect.y + 12), color=(250, 240, 255) if have else (150, 140, 160))
            draw_text(screen, fonts.small, badge.description, (rect.x + 12, rect.y + 44), color=(200, 190, 210))
