"""Pygame rendering of the schedule grid, its cards and menus."""

from __future__ import annotations

import logging
from typing import Callable

import pygame

from .config import GridConfig
from .events import CARD_EDIT_REQUESTED, EventBus, EventSubscriptions, request_card_edit
from .geometry import GridLayout, Rect, layout_cells
from .interaction import InteractionController
from .menus import ContextMenu
from .models import Card
from .resources import ResourceManager
from .store import CardStore

logger = logging.getLogger(__name__)

BACKGROUND = pygame.Color("#ffffff")
BAND_BACKGROUND = pygame.Color("#f3f4f6")
HEADER_BACKGROUND = pygame.Color("#fafafa")
THIN_LINE = pygame.Color("#dcdcdc")
THICK_LINE = pygame.Color("#9ca3af")
TEXT_COLOR = pygame.Color("#1f2933")
ACTIVE_OUTLINE = pygame.Color("#1e3a8a")
SELECTION_BACKGROUND = pygame.Color("#bfdbfe")
MENU_BACKGROUND = pygame.Color("#ffffff")
MENU_BORDER = pygame.Color("#6b7280")

CARD_RADIUS = 6
CARD_TEXT_SIZE = 22
LABEL_TEXT_SIZE = 15
TEXT_PADDING = 6


def wrap_text(font: pygame.font.Font, text: str, width: float) -> list[str]:
    """Break *text* into lines no wider than *width* where words allow."""

    lines: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if current and font.size(candidate)[0] > width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def text_area(rect: Rect) -> pygame.Rect:
    return pygame.Rect(rect.as_int_tuple()).inflate(-2 * TEXT_PADDING, -2 * TEXT_PADDING)


def text_overflow(font: pygame.font.Font, text: str, rect: Rect) -> int:
    """How many pixels of wrapped *text* do not fit inside a card at *rect*."""

    area = text_area(rect)
    if area.width <= 0 or area.height <= 0:
        return 0
    height = len(wrap_text(font, text, area.width)) * font.get_linesize()
    return max(0, height - area.height)


def shade(color: pygame.Color, factor: float) -> pygame.Color:
    return pygame.Color(
        int(color.r * factor),
        int(color.g * factor),
        int(color.b * factor),
    )


class CardWidget:
    """Drawable state of one card, rebuilt whenever the store changes."""

    def __init__(self, card: Card, *, active: bool, fallback_color: str) -> None:
        self.card_id = card.id
        self.text = card.text
        self.active = active
        try:
            self.color = pygame.Color(card.color or fallback_color)
        except ValueError:
            self.color = pygame.Color(fallback_color)

    def draw(
        self,
        surface: pygame.Surface,
        rect: Rect,
        font: pygame.font.Font,
        *,
        handle: Rect,
        text: str | None = None,
        editing: bool = False,
        select_all: bool = False,
        scroll: float = 0.0,
    ) -> int:
        """Draw the card and return the text scroll offset actually used.

        While editing, the text is scrolled to its end so the caret line
        stays in view; otherwise *scroll* is clamped to the overflow.
        """

        box = pygame.Rect(rect.as_int_tuple())
        pygame.draw.rect(surface, self.color, box, border_radius=CARD_RADIUS)
        pygame.draw.rect(
            surface,
            shade(self.color, 0.8),
            pygame.Rect(handle.as_int_tuple()),
            border_bottom_left_radius=CARD_RADIUS,
            border_bottom_right_radius=CARD_RADIUS,
        )
        if self.active or editing:
            pygame.draw.rect(surface, ACTIVE_OUTLINE, box, width=2, border_radius=CARD_RADIUS)

        content = self.text if text is None else text
        if editing and not select_all:
            content += "|"
        area = text_area(rect)
        if area.width <= 0 or area.height <= 0:
            return 0

        line_height = font.get_linesize()
        lines = wrap_text(font, content, area.width)
        overflow = max(0, len(lines) * line_height - area.height)
        offset = overflow if editing else int(min(max(0.0, scroll), overflow))

        previous_clip = surface.get_clip()
        surface.set_clip(area)
        y = area.top - offset
        for line in lines:
            if y > area.bottom:
                break
            if y + line_height >= area.top:
                rendered = font.render(line, True, TEXT_COLOR)
                line_rect = rendered.get_rect(midtop=(area.centerx, y))
                if editing and select_all and line:
                    pygame.draw.rect(surface, SELECTION_BACKGROUND, line_rect)
                surface.blit(rendered, line_rect)
            y += line_height
        surface.set_clip(previous_clip)
        return offset


class ScheduleView:
    """The weekly grid drawn into a pygame surface.

    Opening the view subscribes its handlers on the event bus; closing it
    removes them again, so no shortcut outlives the view.
    """

    def __init__(
        self,
        store: CardStore,
        config: GridConfig | None = None,
        resources: ResourceManager | None = None,
    ) -> None:
        self.store = store
        self.config = config or GridConfig()
        self.resources = resources or ResourceManager()
        self.layout = GridLayout(self.config.rows, self.config.columns)
        self.controller = InteractionController(
            store,
            self.layout,
            drag_threshold=self.config.drag_threshold,
            handle_height=self.config.handle_height,
            request_edit=self._request_edit,
        )
        self.surface: pygame.Surface | None = None
        self.subscriptions: EventSubscriptions | None = None
        self.widgets: dict[str, CardWidget] = {}
        self.scroll_offsets: dict[str, float] = {}
        self._unsubscribe_store: Callable[[], None] | None = None

    @property
    def is_open(self) -> bool:
        return self.surface is not None

    # Lifecycle ---------------------------------------------------------

    def open(self, surface: pygame.Surface, bus: EventBus) -> None:
        """Start rendering into *surface* and listening on *bus*."""

        if self.is_open:
            return
        self.surface = surface
        subscriptions = bus.open()
        subscriptions.subscribe(pygame.MOUSEBUTTONDOWN, self._on_mouse_down)
        subscriptions.subscribe(pygame.MOUSEBUTTONUP, self._on_mouse_up)
        subscriptions.subscribe(pygame.MOUSEMOTION, self._on_mouse_motion)
        subscriptions.subscribe(pygame.MOUSEWHEEL, self._on_mouse_wheel)
        subscriptions.subscribe(pygame.KEYDOWN, self._on_key_down)
        subscriptions.subscribe(pygame.TEXTINPUT, self._on_text_input)
        subscriptions.subscribe(pygame.VIDEORESIZE, self._on_resize)
        subscriptions.subscribe(pygame.WINDOWFOCUSLOST, self._on_focus_lost)
        subscriptions.subscribe(CARD_EDIT_REQUESTED, self._on_edit_requested)
        self.subscriptions = subscriptions
        self._unsubscribe_store = self.store.subscribe(self.rebuild)
        self.relayout()
        logger.info("Schedule view opened with %d card(s)", len(self.store))

    def close(self) -> None:
        if not self.is_open:
            return
        self.controller.reset()
        if self.subscriptions is not None:
            self.subscriptions.close()
            self.subscriptions = None
        if self._unsubscribe_store is not None:
            self._unsubscribe_store()
            self._unsubscribe_store = None
        self.widgets = {}
        self.scroll_offsets = {}
        self.layout.reset()
        self.surface = None
        logger.info("Schedule view closed")

    # Layout ------------------------------------------------------------

    def relayout(self) -> None:
        """Measure the grid for the current surface size and rebuild cards."""

        if self.surface is None:
            return
        width, height = self.surface.get_size()
        padding = self.config.padding
        box = Rect(padding, padding, max(0, width - 2 * padding), max(0, height - 2 * padding))
        cells = layout_cells(
            box,
            rows=self.config.rows,
            columns=self.config.columns,
            header_height=self.config.header_height,
            time_column_width=self.config.time_column_width,
        )
        self.layout.measure(box, cells)
        self.rebuild()

    def rebuild(self) -> None:
        """Throw away every card widget and create them again from the store."""

        active_id = self.store.active_id
        self.widgets = {
            card.id: CardWidget(
                card,
                active=card.id == active_id,
                fallback_color=self.config.default_color,
            )
            for card in self.store
        }
        self.scroll_offsets = {
            card_id: offset
            for card_id, offset in self.scroll_offsets.items()
            if card_id in self.widgets
        }

    def scroll_card_at(self, position: tuple[float, float], steps: float) -> bool:
        """Scroll the text of the card under *position* by wheel *steps*.

        Positive steps scroll towards the start of the text. Returns whether
        a card was under the pointer.
        """

        card_id = self.controller.hit_test(*position).card_id
        card = self.store.get(card_id)
        rect = self.controller.card_rect(card) if card is not None else None
        if card is None or rect is None:
            return False
        font = self.resources.font(CARD_TEXT_SIZE, bold=True)
        overflow = text_overflow(font, card.text, rect)
        offset = self.scroll_offsets.get(card.id, 0.0) - steps * font.get_linesize()
        self.scroll_offsets[card.id] = min(max(0.0, offset), overflow)
        return True

    # Drawing -----------------------------------------------------------

    def draw(self) -> None:
        surface = self.surface
        if surface is None:
            return
        surface.fill(BACKGROUND)
        self._draw_grid(surface)
        self._draw_cards(surface)
        if self.controller.menus.menu is not None:
            self._draw_menu(surface, self.controller.menus.menu)

    def _draw_grid(self, surface: pygame.Surface) -> None:
        layout = self.layout
        label_font = self.resources.font(LABEL_TEXT_SIZE, bold=True)
        config = self.config

        for row in range(config.rows):
            for col in range(config.columns):
                cell = layout.cell_rect(row, col)
                if cell is None:
                    continue
                box = pygame.Rect(cell.as_int_tuple())
                if row == 0:
                    surface.fill(HEADER_BACKGROUND, box)
                    if col > 0:
                        self._blit_centered(surface, label_font, config.day_names[col - 1], box)
                elif col == 0:
                    self._blit_centered(surface, label_font, config.hour_label(row), box)
                elif ((row - 1) // 2) % 2 == 1:
                    surface.fill(BAND_BACKGROUND, box)

        for row in range(1, config.rows):
            cell = layout.cell_rect(row, 1)
            box = layout.box
            if cell is None or box is None:
                continue
            thick = row == 1 or (row - 1) % 2 == 0
            y = int(round(cell.top))
            pygame.draw.line(
                surface,
                THICK_LINE if thick else THIN_LINE,
                (int(box.left), y),
                (int(box.right), y),
                2 if thick else 1,
            )

        for col in range(1, config.columns):
            cell = layout.cell_rect(0, col)
            box = layout.box
            if cell is None or box is None:
                continue
            x = int(round(cell.left))
            pygame.draw.line(surface, THICK_LINE, (x, int(box.top)), (x, int(box.bottom)), 2)

    def _draw_cards(self, surface: pygame.Surface) -> None:
        controller = self.controller
        font = self.resources.font(CARD_TEXT_SIZE, bold=True)
        edit = controller.edit
        dragged = controller.session.card_id if controller.session is not None else None

        ordered = sorted(self.store, key=lambda card: card.id == dragged)
        for card in ordered:
            widget = self.widgets.get(card.id)
            rect = controller.card_rect(card)
            if widget is None or rect is None:
                continue
            editing = edit is not None and edit.card_id == card.id
            widget.draw(
                surface,
                rect,
                font,
                handle=controller.handle_rect(rect),
                text=edit.buffer if editing and edit is not None else None,
                editing=editing,
                select_all=editing and edit is not None and edit.select_all,
                scroll=self.scroll_offsets.get(card.id, 0.0),
            )

    def _draw_menu(self, surface: pygame.Surface, menu: ContextMenu) -> None:
        font = self.resources.font(LABEL_TEXT_SIZE)
        box = pygame.Rect(menu.rect.as_int_tuple())
        pygame.draw.rect(surface, MENU_BACKGROUND, box, border_radius=4)
        pygame.draw.rect(surface, MENU_BORDER, box, width=1, border_radius=4)

        for entry in menu.entries:
            entry_box = pygame.Rect(entry.rect.as_int_tuple())
            if entry.is_swatch and entry.color is not None:
                pygame.draw.rect(surface, pygame.Color(entry.color), entry_box, border_radius=3)
                pygame.draw.rect(
                    surface,
                    ACTIVE_OUTLINE if entry.selected else MENU_BORDER,
                    entry_box,
                    width=3 if entry.selected else 1,
                    border_radius=3,
                )
                continue
            rendered = font.render(entry.label, True, TEXT_COLOR)
            surface.blit(rendered, rendered.get_rect(midleft=(entry_box.left + 4, entry_box.centery)))

    @staticmethod
    def _blit_centered(
        surface: pygame.Surface, font: pygame.font.Font, text: str, box: pygame.Rect
    ) -> None:
        rendered = font.render(text, True, TEXT_COLOR)
        surface.blit(rendered, rendered.get_rect(center=box.center))

    # Event handlers ----------------------------------------------------

    def _request_edit(self, card_id: str) -> None:
        request_card_edit(card_id, self.config.edit_delay_ms)

    def _on_mouse_down(self, event: pygame.event.Event) -> None:
        self.controller.pointer_down(event.pos, event.button)
        self.rebuild()

    def _on_mouse_up(self, event: pygame.event.Event) -> None:
        self.controller.pointer_up(event.pos, event.button)
        self.rebuild()

    def _on_mouse_motion(self, event: pygame.event.Event) -> None:
        self.controller.pointer_move(event.pos)

    def _on_mouse_wheel(self, event: pygame.event.Event) -> None:
        self.scroll_card_at(pygame.mouse.get_pos(), event.y)

    def _on_key_down(self, event: pygame.event.Event) -> None:
        self.controller.key_down(event.key, event.mod)

    def _on_text_input(self, event: pygame.event.Event) -> None:
        self.controller.text_input(event.text)

    def _on_focus_lost(self, event: pygame.event.Event) -> None:
        self.controller.focus_lost()

    def _on_edit_requested(self, event: pygame.event.Event) -> None:
        self.controller.begin_edit(event.card_id)
        self.rebuild()

    def _on_resize(self, event: pygame.event.Event) -> None:
        self.controller.cancel_drag()
        surface = pygame.display.get_surface()
        if surface is not None:
            self.surface = surface
        self.relayout()
