"""Pygame application bootstrap for the weekly schedule board."""

from __future__ import annotations

import logging

import pygame

from .config import AppConfig
from .events import EventBus
from .resources import ResourceManager
from .store import BlobStore, CardStore, JsonFileBlobStore
from .view import ScheduleView

logger = logging.getLogger(__name__)


class ScheduleApp:
    """Minimal pygame wrapper that hosts the schedule view."""

    def __init__(self, config: AppConfig | None = None, blob_store: BlobStore | None = None) -> None:
        self.config = config or AppConfig()
        self.resources = ResourceManager(self.config.storage)
        self.blob_store = blob_store or JsonFileBlobStore(self.resources.data_path)
        self.screen: pygame.Surface | None = None
        self.clock: pygame.time.Clock | None = None
        self.running = False
        self.bus = EventBus()
        self.store: CardStore | None = None
        self.view: ScheduleView | None = None

    def setup(self) -> None:
        """Initialise pygame and the display surface."""

        pygame.init()
        self.resources.ensure_directories()
        display = self.config.display
        flags = 0
        size = (display.width, display.height)

        if display.fullscreen:
            flags |= pygame.FULLSCREEN
            if display.width <= 0 or display.height <= 0:
                info = pygame.display.Info()
                size = (info.current_w, info.current_h)
        elif display.resizable:
            flags |= pygame.RESIZABLE

        self.screen = pygame.display.set_mode(size, flags)
        pygame.display.set_caption(display.caption)
        pygame.key.set_repeat(400, 40)
        self.clock = pygame.time.Clock()
        self.running = True

    def open_schedule(self) -> ScheduleView:
        """Show the schedule, reusing the open view if there is one."""

        if self.screen is None:
            self.setup()
        assert self.screen is not None

        if self.view is not None and self.view.is_open:
            return self.view

        grid = self.config.grid
        self.store = CardStore(
            self.blob_store,
            palette=grid.palette,
            default_text=grid.default_text,
        )
        self.store.hydrate()
        self.view = ScheduleView(self.store, grid, self.resources)
        self.view.open(self.screen, self.bus)
        pygame.key.start_text_input()
        return self.view

    def close_schedule(self) -> None:
        """Close the view; the persisted copy stays the durable owner."""

        if self.view is not None:
            self.view.close()
        self.view = None
        self.store = None

    def handle_events(self) -> None:
        """Consume pygame events."""

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                continue
            self.bus.dispatch(event)

    def draw(self) -> None:
        """Render the current frame."""

        assert self.screen is not None
        if self.view is not None and self.view.is_open:
            self.view.draw()
        else:
            self.screen.fill((255, 255, 255))
        pygame.display.flip()

    def run(self) -> None:
        """Run the main loop until the window is closed."""

        self.open_schedule()
        assert self.clock is not None
        display = self.config.display

        try:
            while self.running:
                self.handle_events()
                self.clock.tick(display.frame_rate)
                self.draw()
        finally:
            self.close_schedule()
            pygame.quit()
