"""Font and data-file helpers for the schedule board."""

from __future__ import annotations

from pathlib import Path

import pygame

from .config import StorageConfig

PREFERRED_FONTS = (
    "dejavusans",
    "arial",
    "liberationsans",
    "helvetica",
)


class ResourceManager:
    """Locates the data file and loads fonts with sensible fallbacks."""

    def __init__(self, config: StorageConfig | None = None) -> None:
        self.config = config or StorageConfig()
        self._fonts: dict[tuple[int, bool], pygame.font.Font] = {}

    @property
    def data_path(self) -> Path:
        return Path(self.config.path).expanduser()

    def ensure_directories(self) -> None:
        """Create the directory holding the data file if it is missing."""

        self.data_path.parent.mkdir(parents=True, exist_ok=True)

    def font(self, size: int, *, bold: bool = False) -> pygame.font.Font:
        """Return a cached font of *size* pixels."""

        key = (size, bold)
        cached = self._fonts.get(key)
        if cached is not None:
            return cached

        if not pygame.font.get_init():
            pygame.font.init()
        font: pygame.font.Font | None = None
        for name in PREFERRED_FONTS:
            path = pygame.font.match_font(name, bold=bold)
            if path:
                font = pygame.font.Font(path, size)
                break
        if font is None:
            font = pygame.font.Font(None, size)
            font.set_bold(bold)
        self._fonts[key] = font
        return font
