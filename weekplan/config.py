"""Configuration helpers for the weekly schedule board."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_PALETTE = (
    "#a8d8ea",
    "#b8e0d2",
    "#ffd6a5",
    "#ffadad",
    "#caffbf",
    "#e0bbff",
    "#fdffb6",
    "#cfcfcf",
)


@dataclass(frozen=True)
class DisplayConfig:
    """Visual settings for the pygame display."""

    width: int = 1280
    height: int = 800
    caption: str = "Weekplan - Weekly Schedule"
    frame_rate: int = 60
    fullscreen: bool = False
    resizable: bool = True


@dataclass(frozen=True)
class GridConfig:
    """Fixed topology and interaction tuning of the schedule grid."""

    day_names: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
    first_hour: int = 7
    hour_count: int = 12
    header_height: int = 36
    time_column_width: int = 120
    padding: int = 8
    palette: tuple[str, ...] = DEFAULT_PALETTE
    default_text: str = "New card"
    drag_threshold: float = 3.0
    handle_height: int = 8
    edit_delay_ms: int = 50

    @property
    def rows(self) -> int:
        """Header row plus one row per hour."""

        return self.hour_count + 1

    @property
    def columns(self) -> int:
        """Time label column plus one column per day."""

        return len(self.day_names) + 1

    @property
    def default_color(self) -> str:
        return self.palette[0]

    def hour_label(self, row: int) -> str:
        """Return the ``HH:00 - HH:00`` label shown for content *row*."""

        start = self.first_hour + row - 1
        return f"{start:02d}:00 - {start + 1:02d}:00"


@dataclass(frozen=True)
class StorageConfig:
    """Location of the persisted card data."""

    path: Path = Path.home() / ".weekplan" / "data.json"


@dataclass(frozen=True)
class AppConfig:
    """High-level configuration structure for the application."""

    display: DisplayConfig = field(default_factory=DisplayConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
