from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pygame  # type: ignore[import-not-found]

from unicornhub.paths import Paths
from unicornhub.services.content import ContentService, GameContent, Ruleset
from unicornhub.services.ledger import RewardLedger
from unicornhub.services.telemetry import TelemetryService

from .asset_manager import AssetManager
from .scene_base import Scene


@dataclass
class GameContext:
    screen: pygame.Surface
    clock: pygame.time.Clock
    paths: Paths
    assets: AssetManager
    content: ContentService
    telemetry: TelemetryService
    ruleset_id: str | None = None
    seed: int | None = None

    # Loaded at boot
    games: Optional[GameContent] = None
    ledger: Optional[RewardLedger] = None

    def ruleset(self) -> Ruleset:
        assert self.games is not None
        return self.games.ruleset(self.ruleset_id)


class App:
    def __init__(self, ctx: GameContext, initial_scene: Scene, fps: int = 60) -> None:
        self.ctx = ctx
        self.scene: Scene = initial_scene
        self.fps = fps
        self.running = True

    def run(self) -> int:
        while self.running:
            dt = self.ctx.clock.tick(self.fps) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                    break
                self.scene.handle_event(event)
            if not self.running:
                break

            tr = self.scene.update(dt)
            if tr is not None:
                self.scene.leave()
                self.scene = tr.next_scene

            self.scene.render(self.ctx.screen)
            pygame.display.flip()

        self.scene.leave()
        return 0
