from __future__ import annotations

import random

import pygame  # type: ignore[import-not-found]

from unicornhub.engine.pairing import PairingEngine
from unicornhub.engine.scheduler import Scheduler
from unicornhub.engine.serialize import match_snapshot
from unicornhub.engine.types import Difficulty

from ..app import GameContext
from ..scene_base import Scene, SceneTransition
from ..ui import ACCENT, BG, Button, draw_text

CARD_SIZE = 130
CARD_GAP = 14
COLUMNS = 4
GRID_ORIGIN = (60, 170)

MESSAGES = {
    "GAME_STARTED": "Find all pairs! ✨",
    "PAIR_MATCHED": "Match! ⭐⭐",
    "PAIR_MISSED": "Not a pair, try again!",
}


class MatchScene:
    def __init__(self, ctx: GameContext, difficulty: Difficulty = "easy") -> None:
        self.ctx = ctx
        assert ctx.games is not None and ctx.ledger is not None
        self._next: SceneTransition | None = None
        self._message = "Press Easy to start!"
        self._seen_events = 0

        self.scheduler = Scheduler()
        self.engine = PairingEngine(
            images=ctx.games.image_paths(),
            scheduler=self.scheduler,
            rewards=ctx.ledger,
            config=ctx.ruleset().pairing,
            badges=ctx.games.badges,
            rng=random.Random(ctx.seed),
            best_times=ctx.ledger.best_times,
        )

        self.btn_easy = Button(rect=pygame.Rect(60, 90, 120, 44), text="Easy", on_click=lambda: self._start("easy"))
        self.btn_hard = Button(rect=pygame.Rect(190, 90, 120, 44), text="Hard", on_click=lambda: self._start("hard"))
        self.btn_reset = Button(rect=pygame.Rect(320, 90, 120, 44), text="Reset", on_click=self._on_reset)
        self.btn_menu = Button(rect=pygame.Rect(860, 20, 140, 40), text="Menu", on_click=self._on_menu)

        self._start(difficulty)

    def _go(self, scene: Scene) -> None:
        self._next = SceneTransition(scene)

    def _on_menu(self) -> None:
        from .hub import HubScene

        self._go(HubScene(self.ctx))

    def _start(self, difficulty: Difficulty) -> None:
        self._seen_events = 0
        self.engine.start_game(difficulty)
        self.ctx.telemetry.log("match_started", {"difficulty": difficulty})

    def _on_reset(self) -> None:
        self.engine.reset()
        self._seen_events = 0
        self._message = "Press Easy to start!"

    def leave(self) -> None:
        self.engine.reset()

    def _card_rect(self, index: int) -> pygame.Rect:
        row, col = divmod(index, COLUMNS)
        x0, y0 = GRID_ORIGIN
        return pygame.Rect(
            x0 + col * (CARD_SIZE + CARD_GAP),
            y0 + row * (CARD_SIZE + CARD_GAP),
            CARD_SIZE,
            CARD_SIZE,
        )

    def handle_event(self, event: pygame.event.Event) -> None:
        for b in (self.btn_easy, self.btn_hard, self.btn_reset, self.btn_menu):
            if b.handle_event(event):
                return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for i, card in enumerate(self.engine.state.deck):
                if self._card_rect(i).collidepoint(event.pos):
                    self.engine.flip(card.id)
                    return

    def _consume_events(self) -> None:
        st = self.engine.state
        for ev in st.event_log[self._seen_events:]:
            etype = str(ev.get("type"))
            if etype in MESSAGES:
                self._message = MESSAGES[etype]
            elif etype == "GAME_WON":
                self._message = f"You won! 🎉 {st.pair_count} pairs in {ev.get('seconds')}s!"
                self.ctx.telemetry.log("match_won", dict(ev))
            elif etype == "BEST_TIME":
                assert self.ctx.ledger is not None
                self.ctx.ledger.record_best_times(self.engine.best_times)
        self._seen_events = len(st.event_log)

    def update(self, dt: float) -> SceneTransition | None:
        self.scheduler.advance(dt)
        self._consume_events()
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(BG)
        fonts = self.ctx.assets.fonts
        snap = match_snapshot(self.engine.state)

        draw_text(screen, fonts.big, "Match Game", (60, 30))
        for b in (self.btn_easy, self.btn_hard, self.btn_reset, self.btn_menu):
            b.draw(screen, fonts.ui)

        best = self.engine.best_times.get(str(snap["difficulty"]), None) if snap["difficulty"] else None
        draw_text(
            screen,
            fonts.ui,
            f"Flips: {snap['flips']}   Matches: {snap['matched_count']}   Time: {snap['elapsed_seconds']}s"
            f"   Best: {best if best is not None else '-'}",
            (470, 100),
        )

        cards = snap["cards"]
        assert isinstance(cards, list)
        for i, card in enumerate(cards):
            rect = self._card_rect(i)
            if card["face_up"]:
                img = self.ctx.assets.get_image(str(card["image"]), size=(CARD_SIZE, CARD_SIZE))
                screen.blit(img, rect.topleft)
                if card["matched"]:
                    pygame.draw.rect(screen, ACCENT, rect, width=4, border_radius=8)
            else:
                pygame.draw.rect(screen, (120, 70, 170), rect, border_radius=8)
                draw_text(screen, fonts.big, "?", (rect.centerx - 8, rect.centery - 14))
            pygame.draw.rect(screen, (0, 0, 0), rect, width=2, border_radius=8)

        draw_text(screen, fonts.ui, self._message, (60, 700), color=(255, 220, 120))
