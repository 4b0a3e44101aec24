from __future__ import annotations

import random

import pygame  # type: ignore[import-not-found]

from ..app import GameContext
from ..scene_base import Scene, SceneTransition
from ..ui import BG, button_column, draw_panel, draw_text


class HubScene:
    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self._next: SceneTransition | None = None
        self._rng = random.Random(ctx.seed)
        self._buttons = button_column(
            60,
            200,
            320,
            56,
            14,
            [
                ("Match (Easy)", lambda: self._on_match("easy")),
                ("Match (Hard)", lambda: self._on_match("hard")),
                ("Rainbow Runner", self._on_runner),
                ("Badges", self._on_badges),
                ("New Mission", self._on_new_mission),
                ("Quit", lambda: pygame.event.post(pygame.event.Event(pygame.QUIT))),
            ],
        )

    def _go(self, scene: Scene) -> None:
        self._next = SceneTransition(scene)

    def _on_match(self, difficulty: str) -> None:
        from .match import MatchScene

        self._go(MatchScene(self.ctx, difficulty=difficulty))  # type: ignore[arg-type]

    def _on_runner(self) -> None:
        from .runner import RunnerScene

        self._go(RunnerScene(self.ctx))

    def _on_badges(self) -> None:
        from .badges import BadgesScene

        self._go(BadgesScene(self.ctx))

    def _on_new_mission(self) -> None:
        if self.ctx.ledger is None or self.ctx.games is None:
            return
        self.ctx.ledger.new_mission(self.ctx.games.missions, self._rng)

    def handle_event(self, event: pygame.event.Event) -> None:
        for b in self._buttons:
            if b.handle_event(event):
                return

    def leave(self) -> None:
        pass

    def update(self, dt: float) -> SceneTransition | None:
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(BG)
        fonts = self.ctx.assets.fonts
        draw_text(screen, fonts.big, "Unicorn Hub", (60, 40))
        ledger = self.ctx.ledger
        if ledger is not None:
            draw_text(
                screen,
                fonts.ui,
                f"Stars: {ledger.stars}   Badges: {len(ledger.profile.badges)}",
                (60, 100),
            )
            mission = ledger.current_mission
            panel = pygame.Rect(440, 200, 520, 110)
            draw_panel(screen, panel)
            draw_text(screen, fonts.ui, "Today's mission", (panel.x + 14, panel.y + 12))
            if mission is not None:
                draw_text(screen, fonts.ui, mission.title, (panel.x + 14, panel.y + 44))
                draw_text(screen, fonts.small, mission.description, (panel.x + 14, panel.y + 76))
            best = ledger.best_times
            rec = ledger.profile.runner
            draw_text(
                screen,
                fonts.small,
                f"Best match: easy {best.get('easy', '-')}s / hard {best.get('hard', '-')}s    "
                f"Runner best: {rec.best_score}  ({rec.runs} runs)",
                (60, 130),
            )
        for b in self._buttons:
            b.draw(screen, fonts.ui)
