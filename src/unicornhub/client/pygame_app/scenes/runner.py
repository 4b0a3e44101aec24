from __future__ import annotations

import random

import pygame  # type: ignore[import-not-found]

from unicornhub.engine.runner import RunnerSimulation
from unicornhub.engine.scheduler import Scheduler
from unicornhub.engine.serialize import runner_snapshot

from ..app import GameContext
from ..scene_base import Scene, SceneTransition
from ..ui import BG, Button, draw_text

# World x=0 (the player's point) sits at this screen column; world y grows upward from FLOOR.
SCREEN_PLAYER_X = 120
FLOOR = 560

MESSAGES = {
    "SHIELD_ABSORBED": "🫧 Shield saved you!",
    "OBSTACLE_HIT": "Oops! Jump earlier 😊",
    "STAR_COLLECTED": "Star collected! ⭐⭐",
}


class RunnerScene:
    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        assert ctx.games is not None and ctx.ledger is not None
        self._next: SceneTransition | None = None
        self._message = "Press Start, then Jump!"
        self._seen_events = 0
        self._played = False

        self.scheduler = Scheduler()
        self.sim = RunnerSimulation(
            scheduler=self.scheduler,
            rewards=ctx.ledger,
            config=ctx.ruleset().runner,
            badges=ctx.games.badges,
            rng=random.Random(ctx.seed),
        )

        self.btn_start = Button(rect=pygame.Rect(60, 90, 120, 44), text="Start", on_click=self._on_start)
        self.btn_reset = Button(rect=pygame.Rect(190, 90, 120, 44), text="Reset", on_click=self._on_reset)
        self.btn_jump = Button(rect=pygame.Rect(320, 90, 120, 44), text="Jump", on_click=self.sim.jump)
        self.btn_menu = Button(rect=pygame.Rect(860, 20, 140, 40), text="Menu", on_click=self._on_menu)

    def _go(self, scene: Scene) -> None:
        self._next = SceneTransition(scene)

    def _on_menu(self) -> None:
        from .hub import HubScene

        self._go(HubScene(self.ctx))

    def _on_start(self) -> None:
        if self.sim.state.running:
            return
        self.sim.start()
        self._played = True
        self._message = "Go! Jump + grab stars! 🌈⭐"

    def _record_run(self) -> None:
        if not self._played:
            return
        assert self.ctx.ledger is not None
        st = self.sim.state
        self.ctx.ledger.record_run(st)
        self.ctx.telemetry.log(
            "runner_session",
            {"score": int(st.score), "collected": st.collected_count, "misses": st.miss_count, "ticks": st.ticks},
        )
        self._played = False

    def _on_reset(self) -> None:
        self.sim.stop()
        self._record_run()
        self.sim.reset()
        self._seen_events = 0
        self._message = "Press Start, then Jump!"

    def leave(self) -> None:
        self.sim.stop()
        self._record_run()

    def handle_event(self, event: pygame.event.Event) -> None:
        for b in (self.btn_start, self.btn_reset, self.btn_jump, self.btn_menu):
            if b.handle_event(event):
                return
        if event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
            self.sim.jump()

    def _consume_events(self) -> None:
        st = self.sim.state
        for ev in st.event_log[self._seen_events:]:
            etype = str(ev.get("type"))
            if etype in MESSAGES:
                self._message = MESSAGES[etype]
            elif etype == "POWER_UP":
                self._message = "🫧 Bubble Shield ON!" if ev.get("kind") == "shield" else "🧲 Star Magnet ON!"
        self._seen_events = len(st.event_log)

    def update(self, dt: float) -> SceneTransition | None:
        self.scheduler.advance(dt)
        self._consume_events()
        return self._next

    def _to_screen(self, x: float, y: float, h: float) -> pygame.Rect:
        ground_y = self.sim.config.ground_y
        return pygame.Rect(
            int(SCREEN_PLAYER_X + x),
            int(FLOOR - (y - ground_y) - h),
            1,
            int(h),
        )

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(BG)
        fonts = self.ctx.assets.fonts
        cfg = self.sim.config
        snap = runner_snapshot(self.sim.state, magnet_active=self.sim.magnet_active())

        draw_text(screen, fonts.big, "Rainbow Runner", (60, 30))
        for b in (self.btn_start, self.btn_reset, self.btn_jump, self.btn_menu):
            b.draw(screen, fonts.ui)
        draw_text(
            screen,
            fonts.ui,
            f"Score: {snap['score']}   Stars: {snap['collected_count']}   Oops: {snap['miss_count']}"
            f"   Shield: {snap['shield_charges']}{'   MAGNET' if snap['magnet_active'] else ''}",
            (470, 100),
        )

        pygame.draw.rect(screen, (90, 200, 140), pygame.Rect(0, FLOOR, screen.get_width(), 8))

        player = self._to_screen(0.0, cfg.ground_y + float(snap["vertical_offset"]), cfg.player_height)  # type: ignore[arg-type]
        player.width = int(cfg.player_width)
        pygame.draw.rect(screen, (255, 255, 255), player, border_radius=10)
        if snap["shield_charges"]:
            pygame.draw.ellipse(screen, (140, 220, 255), player.inflate(16, 16), width=3)

        for x, spec in zip(self.sim.state.obstacles, cfg.obstacles):
            r = self._to_screen(x, cfg.ground_y, spec.height)
            r.width = int(spec.width)
            pygame.draw.rect(screen, (200, 200, 230) if spec.kind == "cloud" else (240, 90, 120), r, border_radius=8)

        for x, cspec in zip(self.sim.state.collectibles, cfg.collectibles):
            r = self._to_screen(x, cspec.y, cspec.height)
            r.width = int(cspec.width)
            pygame.draw.ellipse(screen, (255, 220, 80), r)

        pu = self.sim.state.power_up
        if pu is not None:
            r = self._to_screen(pu.position, cfg.power_up_y, cfg.power_up_size)
            r.width = int(cfg.power_up_size)
            color = (140, 220, 255) if pu.kind == "shield" else (230, 80, 80)
            pygame.draw.ellipse(screen, color, r, width=4)

        draw_text(screen, fonts.ui, self._message, (60, 700), color=(255, 220, 120))
