"""Domain models for the weekly schedule board."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

FIRST_DAY_COLUMN = 1
LAST_DAY_COLUMN = 5
MIN_HEIGHT_FRAC = 0.5
MAX_TOP_ROW_FRAC = 11.5


@dataclass(slots=True)
class Card:
    """A block of free text anchored to one day column.

    ``top_row_frac`` and ``height_frac`` are measured in row units from the
    top edge of the first hour row. The bottom edge is intentionally not
    bounded by the grid.
    """

    id: str
    col: int
    top_row_frac: float
    height_frac: float = 1.0
    text: str = ""
    color: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready record using the persisted field names."""

        return {
            "id": self.id,
            "col": self.col,
            "topRowFrac": self.top_row_frac,
            "heightFrac": self.height_frac,
            "text": self.text,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, default_color: str = "") -> "Card":
        """Build a card from a persisted record.

        Raises ``ValueError`` when the record cannot describe a valid card.
        """

        try:
            identifier = str(data["id"])
            col = int(data["col"])
            top = float(data["topRowFrac"])
            height = float(data.get("heightFrac", 1.0))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed card record: {data!r}") from exc

        if not identifier:
            raise ValueError("Card record has an empty id")
        if not FIRST_DAY_COLUMN <= col <= LAST_DAY_COLUMN:
            raise ValueError(f"Card column out of range: {col}")

        text = data.get("text") or ""
        color = data.get("color") or default_color
        return cls(
            id=identifier,
            col=col,
            top_row_frac=top,
            height_frac=max(height, MIN_HEIGHT_FRAC),
            text=str(text),
            color=str(color),
        )

    def duplicate(self, new_id: str) -> "Card":
        """Return a copy placed half a row below this card."""

        return replace(
            self,
            id=new_id,
            top_row_frac=self.top_row_frac + self.height_frac + 0.5,
        )
