"""Conversion of free pixel geometry back into grid coordinates."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .geometry import GridLayout, Rect
from .models import FIRST_DAY_COLUMN, LAST_DAY_COLUMN, MAX_TOP_ROW_FRAC, MIN_HEIGHT_FRAC


def round_half(value: float) -> float:
    """Round *value* to the nearest multiple of 0.5, halves rounding up."""

    return math.floor(value * 2.0 + 0.5) / 2.0


@dataclass(frozen=True, slots=True)
class SnapResult:
    col: int
    top_row_frac: float


class SnapResolver:
    """Finds the grid position closest to a dropped or resized card."""

    def __init__(self, layout: GridLayout) -> None:
        self.layout = layout

    def nearest_column(self, rect: Rect) -> int | None:
        """Return the day column whose centre is closest to *rect*'s centre.

        The lowest column wins ties.
        """

        best_col: int | None = None
        best_distance = math.inf
        for col in range(FIRST_DAY_COLUMN, LAST_DAY_COLUMN + 1):
            cell = self.layout.cell_rect(1, col)
            if cell is None:
                continue
            distance = abs(cell.center_x - rect.center_x)
            if distance < best_distance:
                best_distance = distance
                best_col = col
        return best_col

    def resolve(self, rect: Rect) -> SnapResult | None:
        """Snap a dragged card rectangle to a column and half-row offset.

        Returns ``None`` when the grid has not been measured.
        """

        row_height = self.layout.row_height()
        col = self.nearest_column(rect)
        if col is None or not row_height:
            return None
        row_one = self.layout.cell_rect(1, col)
        if row_one is None:
            return None

        rows_from_top = (rect.top - row_one.top) / row_height
        top = min(MAX_TOP_ROW_FRAC, max(0.0, round_half(rows_from_top)))
        return SnapResult(col=col, top_row_frac=top)


def resolve_height(pixel_height: float, row_height: float) -> float:
    """Snap a resized pixel height to half-row units, never below half a row."""

    if row_height <= 0:
        return MIN_HEIGHT_FRAC
    return max(MIN_HEIGHT_FRAC, round_half(pixel_height / row_height))
