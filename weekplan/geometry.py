"""Grid measurement and card placement geometry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .models import FIRST_DAY_COLUMN, LAST_DAY_COLUMN, MIN_HEIGHT_FRAC, Card

CARD_WIDTH_RATIO = 0.90
VERTICAL_MARGIN_RATIO = 0.10
MIN_VISIBLE_HEIGHT_RATIO = 0.30

CellKey = tuple[int, int]


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle with float coordinates."""

    x: float
    y: float
    w: float
    h: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center_x(self) -> float:
        return self.x + self.w / 2.0

    @property
    def center_y(self) -> float:
        return self.y + self.h / 2.0

    def contains(self, px: float, py: float) -> bool:
        """Return whether a point is inside the rectangle."""

        return self.x <= px < self.x + self.w and self.y <= py < self.y + self.h

    def move(self, dx: float, dy: float) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.w, self.h)

    def with_height(self, height: float) -> "Rect":
        return Rect(self.x, self.y, self.w, height)

    def as_int_tuple(self) -> tuple[int, int, int, int]:
        """Return a rounded ``(x, y, w, h)`` tuple usable as a pygame rect."""

        return (
            int(round(self.x)),
            int(round(self.y)),
            max(1, int(round(self.w))),
            max(1, int(round(self.h))),
        )


def layout_cells(
    box: Rect,
    *,
    rows: int,
    columns: int,
    header_height: float,
    time_column_width: float,
) -> dict[CellKey, Rect]:
    """Split *box* into the cell rectangles of the schedule grid.

    Row 0 and column 0 have fixed sizes; the remaining space is shared
    evenly by the content rows and the day columns.
    """

    if rows < 2 or columns < 2:
        return {}
    content_height = max(0.0, box.h - header_height) / (rows - 1)
    content_width = max(0.0, box.w - time_column_width) / (columns - 1)

    cells: dict[CellKey, Rect] = {}
    for row in range(rows):
        if row == 0:
            top, height = box.y, float(header_height)
        else:
            top, height = box.y + header_height + (row - 1) * content_height, content_height
        for col in range(columns):
            if col == 0:
                left, width = box.x, float(time_column_width)
            else:
                left, width = box.x + time_column_width + (col - 1) * content_width, content_width
            cells[(row, col)] = Rect(left, top, width, height)
    return cells


class GridLayout:
    """Holds the cell rectangles measured during the last layout pass."""

    ROW_REFERENCE: CellKey = (1, 1)
    COLUMN_REFERENCE: CellKey = (0, 1)

    def __init__(self, rows: int = 13, columns: int = 6) -> None:
        self.rows = rows
        self.columns = columns
        self.box: Rect | None = None
        self._cells: dict[CellKey, Rect] = {}

    @property
    def is_measured(self) -> bool:
        return self.box is not None and bool(self._cells)

    def measure(self, box: Rect, cells: Mapping[CellKey, Rect]) -> None:
        """Replace the cached measurements with those of a new layout pass."""

        self.box = box
        self._cells = dict(cells)

    def reset(self) -> None:
        self.box = None
        self._cells = {}

    def row_height(self) -> float:
        """Height of one content row, or ``0.0`` before the first layout."""

        cell = self._cells.get(self.ROW_REFERENCE)
        return cell.h if cell is not None else 0.0

    def col_width(self) -> float:
        """Width of one day column, or ``0.0`` before the first layout."""

        cell = self._cells.get(self.COLUMN_REFERENCE)
        return cell.w if cell is not None else 0.0

    def cell_rect(self, row: int, col: int) -> Rect | None:
        if not (0 <= row < self.rows and 0 <= col < self.columns):
            return None
        return self._cells.get((row, col))

    def cell_at(self, px: float, py: float) -> CellKey | None:
        """Return the ``(row, col)`` under a point, if any."""

        for key, rect in self._cells.items():
            if rect.contains(px, py):
                return key
        return None


def card_rect(
    top_row_frac: float,
    height_frac: float,
    *,
    column_cell: Rect,
    row_height: float,
    col_width: float,
) -> Rect:
    """Return the on-screen rectangle of a card.

    *column_cell* is the first hour row's cell of the card's day column.
    """

    width = col_width * CARD_WIDTH_RATIO
    h_margin = (col_width - width) / 2.0
    v_margin = row_height * VERTICAL_MARGIN_RATIO

    slot_height = max(height_frac, MIN_HEIGHT_FRAC) * row_height
    height = max(slot_height - 2.0 * v_margin, row_height * MIN_VISIBLE_HEIGHT_RATIO)
    top = column_cell.top + top_row_frac * row_height + v_margin
    return Rect(column_cell.left + h_margin, top, width, height)


class CoordinateMapper:
    """Derives pixel rectangles of cards from the current grid measurements."""

    def __init__(self, layout: GridLayout) -> None:
        self.layout = layout

    def column_anchor(self, col: int) -> Rect | None:
        """Return the first hour row's cell of day column *col*."""

        if not FIRST_DAY_COLUMN <= col <= LAST_DAY_COLUMN:
            return None
        return self.layout.cell_rect(1, col)

    def to_pixel_rect(self, card: Card) -> Rect | None:
        """Return where *card* is drawn, or ``None`` when not measurable yet."""

        row_height = self.layout.row_height()
        col_width = self.layout.col_width()
        if not row_height or not col_width:
            return None
        anchor = self.column_anchor(card.col)
        if anchor is None:
            return None
        return card_rect(
            card.top_row_frac,
            card.height_frac,
            column_cell=anchor,
            row_height=row_height,
            col_width=col_width,
        )
