"""Shared fixtures: a headless pygame and a grid with round numbers.

The synthetic grid is 620 x 1240 px with a 40 px header row and a 120 px
time column, giving rows and day columns of exactly 100 px.

    day column c (1..5): left = 120 + (c - 1) * 100, centre = left + 50
    hour row r (1..12):  top  = 40 + (r - 1) * 100
"""

import itertools
import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from weekplan.config import DEFAULT_PALETTE
from weekplan.geometry import GridLayout, Rect, layout_cells
from weekplan.interaction import InteractionController
from weekplan.store import CardStore, MemoryBlobStore

GRID_BOX = Rect(0, 0, 620, 1240)
HEADER_HEIGHT = 40
TIME_COLUMN_WIDTH = 120
ROW = 100.0


def measured_layout(box: Rect = GRID_BOX) -> GridLayout:
    layout = GridLayout(13, 6)
    layout.measure(
        box,
        layout_cells(
            box,
            rows=13,
            columns=6,
            header_height=HEADER_HEIGHT,
            time_column_width=TIME_COLUMN_WIDTH,
        ),
    )
    return layout


@pytest.fixture
def layout():
    return measured_layout()


@pytest.fixture
def blob():
    return MemoryBlobStore()


@pytest.fixture
def store(blob):
    counter = itertools.count(1)
    card_store = CardStore(
        blob,
        palette=DEFAULT_PALETTE,
        default_text="New card",
        id_factory=lambda: f"card-{next(counter)}",
    )
    card_store.hydrate()
    return card_store


@pytest.fixture
def controller(store, layout):
    return InteractionController(store, layout, drag_threshold=3.0, handle_height=8.0)
