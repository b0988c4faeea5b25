"""Context menus for grid cells and cards."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from .geometry import Rect
from .models import Card
from .store import CardStore

logger = logging.getLogger(__name__)


class MenuKind(Enum):
    CELL = "cell"
    CARD = "card"


class MenuAction(Enum):
    CREATE = "create"
    EDIT = "edit"
    COLOR = "color"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class MenuEntry:
    """One clickable (or purely decorative) area of an open menu."""

    rect: Rect
    label: str = ""
    action: MenuAction | None = None
    color: str | None = None
    selected: bool = False

    @property
    def is_swatch(self) -> bool:
        return self.color is not None


@dataclass(slots=True)
class ContextMenu:
    kind: MenuKind
    rect: Rect
    entries: list[MenuEntry] = field(default_factory=list)
    card_id: str | None = None
    cell: tuple[int, int] | None = None

    def entry_at(self, px: float, py: float) -> MenuEntry | None:
        for entry in self.entries:
            if entry.rect.contains(px, py):
                return entry
        return None


class ContextMenuController:
    """Opens, lays out and executes the cell and card menus.

    At most one menu is open. Every action closes the menu before its
    effect runs.
    """

    WIDTH = 200
    ITEM_HEIGHT = 28
    SEPARATOR_HEIGHT = 9
    PADDING = 6
    SWATCH_SIZE = 18
    SWATCH_GAP = 5

    def __init__(
        self,
        store: CardStore,
        *,
        on_edit: Callable[[str], None] | None = None,
        on_created: Callable[[Card], None] | None = None,
        bounds: Callable[[], Rect | None] | None = None,
    ) -> None:
        self.store = store
        self.on_edit = on_edit
        self.on_created = on_created
        self.bounds = bounds
        self.menu: ContextMenu | None = None

    @property
    def is_open(self) -> bool:
        return self.menu is not None

    def open_cell_menu(self, position: tuple[float, float], row: int, col: int) -> ContextMenu:
        """Show the "new card" menu for an empty grid cell."""

        self.close()
        x, y = self._place(position, self.ITEM_HEIGHT)
        entries = [
            MenuEntry(
                rect=Rect(x + self.PADDING, y + self.PADDING, self.WIDTH - 2 * self.PADDING, self.ITEM_HEIGHT),
                label="New card here",
                action=MenuAction.CREATE,
            )
        ]
        self.menu = ContextMenu(
            kind=MenuKind.CELL,
            rect=Rect(x, y, self.WIDTH, self.ITEM_HEIGHT + 2 * self.PADDING),
            entries=entries,
            cell=(row, col),
        )
        return self.menu

    def open_card_menu(self, position: tuple[float, float], card_id: str) -> ContextMenu | None:
        """Show the edit / color / delete menu and make the card active."""

        self.close()
        card = self.store.get(card_id)
        if card is None:
            return None
        self.store.activate(card_id)

        palette = self.store.palette
        content_height = (
            3 * self.ITEM_HEIGHT + self.SWATCH_SIZE + self.SWATCH_GAP + 2 * self.SEPARATOR_HEIGHT
        )
        x, y = self._place(position, content_height)
        inner_x = x + self.PADDING
        inner_width = self.WIDTH - 2 * self.PADDING
        cursor = y + self.PADDING

        entries = [
            MenuEntry(Rect(inner_x, cursor, inner_width, self.ITEM_HEIGHT), "Edit", MenuAction.EDIT)
        ]
        cursor += self.ITEM_HEIGHT + self.SEPARATOR_HEIGHT
        entries.append(MenuEntry(Rect(inner_x, cursor, inner_width, self.ITEM_HEIGHT), "Color"))
        cursor += self.ITEM_HEIGHT
        for index, color in enumerate(palette):
            left = inner_x + index * (self.SWATCH_SIZE + self.SWATCH_GAP)
            entries.append(
                MenuEntry(
                    rect=Rect(left, cursor, self.SWATCH_SIZE, self.SWATCH_SIZE),
                    action=MenuAction.COLOR,
                    color=color,
                    selected=color == card.color,
                )
            )
        cursor += self.SWATCH_SIZE + self.SWATCH_GAP + self.SEPARATOR_HEIGHT
        entries.append(
            MenuEntry(Rect(inner_x, cursor, inner_width, self.ITEM_HEIGHT), "Delete", MenuAction.DELETE)
        )

        self.menu = ContextMenu(
            kind=MenuKind.CARD,
            rect=Rect(x, y, self.WIDTH, content_height + 2 * self.PADDING),
            entries=entries,
            card_id=card_id,
        )
        return self.menu

    def close(self) -> None:
        self.menu = None

    def contains(self, px: float, py: float) -> bool:
        return self.menu is not None and self.menu.rect.contains(px, py)

    def press(self, px: float, py: float) -> bool:
        """Handle a primary press; returns ``True`` when the menu consumed it.

        A press outside the menu only dismisses it.
        """

        menu = self.menu
        if menu is None:
            return False
        if not menu.rect.contains(px, py):
            self.close()
            return False
        entry = menu.entry_at(px, py)
        if entry is not None and entry.action is not None:
            self.activate(entry)
        return True

    def activate(self, entry: MenuEntry) -> None:
        menu = self.menu
        if menu is None:
            return
        self.close()
        logger.debug("Menu action %s on %s", entry.action, menu.card_id or menu.cell)

        if entry.action is MenuAction.CREATE and menu.cell is not None:
            card = self.store.create(*menu.cell)
            if self.on_created is not None:
                self.on_created(card)
        elif menu.card_id is None:
            return
        elif entry.action is MenuAction.EDIT:
            if self.on_edit is not None:
                self.on_edit(menu.card_id)
        elif entry.action is MenuAction.COLOR and entry.color is not None:
            self.store.set_color(menu.card_id, entry.color)
        elif entry.action is MenuAction.DELETE:
            self.store.delete(menu.card_id)

    def _place(self, position: tuple[float, float], content_height: float) -> tuple[float, float]:
        """Keep a menu opened at *position* inside the visible bounds."""

        x, y = float(position[0]), float(position[1])
        bounds = self.bounds() if self.bounds is not None else None
        if bounds is None:
            return x, y
        height = content_height + 2 * self.PADDING
        max_x = max(bounds.right - self.WIDTH, bounds.left)
        max_y = max(bounds.bottom - height, bounds.top)
        return max(bounds.left, min(x, max_x)), max(bounds.top, min(y, max_y))
