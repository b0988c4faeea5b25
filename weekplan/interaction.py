"""Pointer and keyboard state machine for moving, resizing and editing cards."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import pygame

from .geometry import CoordinateMapper, GridLayout, Rect
from .menus import ContextMenuController
from .models import MIN_HEIGHT_FRAC, Card
from .snapping import SnapResolver, resolve_height
from .store import CardStore

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 1
SECONDARY_BUTTON = 3
SHORTCUT_MODIFIERS = pygame.KMOD_CTRL | pygame.KMOD_META


class InteractionState(Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    DRAGGING_MOVE = "dragging-move"
    DRAGGING_RESIZE = "dragging-resize"
    EDITING_TEXT = "editing-text"
    MENU_OPEN = "menu-open"


class HitKind(Enum):
    NONE = "none"
    MENU = "menu"
    CARD = "card"
    HANDLE = "handle"
    CELL = "cell"


@dataclass(frozen=True, slots=True)
class HitTarget:
    kind: HitKind
    card_id: str | None = None
    cell: tuple[int, int] | None = None


NOTHING = HitTarget(HitKind.NONE)


@dataclass(slots=True)
class PointerSession:
    """A primary press on a card that has not been released yet."""

    card_id: str
    start: pygame.Vector2
    anchor: Rect
    live: Rect


@dataclass(slots=True)
class EditSession:
    """Text being typed into a card; the store sees it on commit only."""

    card_id: str
    buffer: str
    select_all: bool = True

    def insert(self, text: str) -> None:
        if self.select_all:
            self.buffer = text
            self.select_all = False
        else:
            self.buffer += text

    def backspace(self) -> None:
        if self.select_all:
            self.buffer = ""
            self.select_all = False
        else:
            self.buffer = self.buffer[:-1]


class InteractionController:
    """Turns pointer and key input into card store mutations.

    The controller never renders. It exposes the live rectangle of a card
    while a drag is in progress; everything else is drawn from the store.
    """

    def __init__(
        self,
        store: CardStore,
        layout: GridLayout,
        *,
        drag_threshold: float = 3.0,
        handle_height: float = 8.0,
        request_edit: Callable[[str], None] | None = None,
    ) -> None:
        self.store = store
        self.layout = layout
        self.mapper = CoordinateMapper(layout)
        self.snapper = SnapResolver(layout)
        self.drag_threshold = drag_threshold
        self.handle_height = handle_height
        self.request_edit = request_edit
        self.menus = ContextMenuController(
            store,
            on_edit=self.begin_edit,
            on_created=self._card_created,
            bounds=lambda: layout.box,
        )
        self.state = InteractionState.IDLE
        self.session: PointerSession | None = None
        self.edit: EditSession | None = None

    # Queries -----------------------------------------------------------

    def card_rect(self, card: Card) -> Rect | None:
        """Return where *card* is shown right now, following an active drag."""

        session = self.session
        if (
            session is not None
            and session.card_id == card.id
            and self.state in (InteractionState.DRAGGING_MOVE, InteractionState.DRAGGING_RESIZE)
        ):
            return session.live
        return self.mapper.to_pixel_rect(card)

    def handle_rect(self, card_rect: Rect) -> Rect:
        height = min(self.handle_height, card_rect.h)
        return Rect(card_rect.x, card_rect.bottom - height, card_rect.w, height)

    def hit_test(self, px: float, py: float) -> HitTarget:
        if self.menus.contains(px, py):
            return HitTarget(HitKind.MENU)

        for card in reversed(list(self.store)):
            rect = self.card_rect(card)
            if rect is None or not rect.contains(px, py):
                continue
            if self.handle_rect(rect).contains(px, py):
                return HitTarget(HitKind.HANDLE, card_id=card.id)
            return HitTarget(HitKind.CARD, card_id=card.id)

        cell = self.layout.cell_at(px, py)
        if cell is not None and cell[0] >= 1 and cell[1] >= 1:
            return HitTarget(HitKind.CELL, cell=cell)
        return NOTHING

    # Pointer input -----------------------------------------------------

    def pointer_down(self, position: tuple[float, float], button: int = PRIMARY_BUTTON) -> None:
        pointer = pygame.Vector2(position)
        if button == SECONDARY_BUTTON:
            self.context_click(pointer)
            return
        if button != PRIMARY_BUTTON:
            return

        if self.state is InteractionState.MENU_OPEN or self.menus.is_open:
            consumed = self.menus.press(pointer.x, pointer.y)
            if self.edit is not None:
                self._set_state(InteractionState.EDITING_TEXT)
            else:
                self._set_state(InteractionState.IDLE)
            if consumed:
                return

        hit = self.hit_test(pointer.x, pointer.y)
        if self.edit is not None:
            if hit.kind is HitKind.CARD and hit.card_id == self.edit.card_id:
                return
            self.end_edit()

        if hit.kind is HitKind.CARD and hit.card_id is not None:
            self._begin_session(hit.card_id, pointer, InteractionState.SELECTING)
        elif hit.kind is HitKind.HANDLE and hit.card_id is not None:
            self._begin_session(hit.card_id, pointer, InteractionState.DRAGGING_RESIZE)

    def pointer_move(self, position: tuple[float, float]) -> None:
        session = self.session
        if session is None:
            return
        delta = pygame.Vector2(position) - session.start

        if self.state is InteractionState.SELECTING:
            if abs(delta.x) < self.drag_threshold and abs(delta.y) < self.drag_threshold:
                return
            self._set_state(InteractionState.DRAGGING_MOVE)

        if self.state is InteractionState.DRAGGING_MOVE:
            session.live = session.anchor.move(delta.x, delta.y)
        elif self.state is InteractionState.DRAGGING_RESIZE:
            floor = self.layout.row_height() * MIN_HEIGHT_FRAC
            session.live = session.anchor.with_height(max(floor, session.anchor.h + delta.y))

    def pointer_up(self, position: tuple[float, float], button: int = PRIMARY_BUTTON) -> None:
        if button != PRIMARY_BUTTON:
            return
        session = self.session
        if session is None:
            return

        self.pointer_move(position)
        state = self.state
        self.session = None
        self._set_state(InteractionState.IDLE)

        if state is InteractionState.SELECTING:
            self.store.activate(session.card_id)
            self.begin_edit(session.card_id)
        elif state is InteractionState.DRAGGING_MOVE:
            snapped = self.snapper.resolve(session.live)
            if snapped is not None:
                self.store.move(session.card_id, snapped.col, snapped.top_row_frac)
        elif state is InteractionState.DRAGGING_RESIZE:
            row_height = self.layout.row_height()
            if row_height:
                self.store.resize(session.card_id, resolve_height(session.live.h, row_height))

    def context_click(self, position: tuple[float, float]) -> None:
        """Open the menu that belongs to whatever is under *position*."""

        pointer = pygame.Vector2(position)
        hit = self.hit_test(pointer.x, pointer.y)
        if hit.kind is HitKind.MENU:
            return

        if self.session is not None:
            self.cancel_drag()
        if self.edit is not None:
            self.end_edit()

        if hit.kind in (HitKind.CARD, HitKind.HANDLE) and hit.card_id is not None:
            self.menus.open_card_menu((pointer.x, pointer.y), hit.card_id)
        elif hit.kind is HitKind.CELL and hit.cell is not None:
            self.menus.open_cell_menu((pointer.x, pointer.y), *hit.cell)

        if self.menus.is_open:
            self._set_state(InteractionState.MENU_OPEN)

    def cancel_drag(self) -> None:
        """Abandon the current press without touching the store."""

        self.session = None
        if self.state in (
            InteractionState.SELECTING,
            InteractionState.DRAGGING_MOVE,
            InteractionState.DRAGGING_RESIZE,
        ):
            self._set_state(InteractionState.IDLE)

    # Keyboard input ----------------------------------------------------

    def key_down(self, key: int, mod: int = 0) -> bool:
        """Handle a key press; returns whether it was used.

        Delete and Ctrl/Cmd+C act on the active card even while its text
        is being edited; the pending text is committed first.
        """

        is_delete = key == pygame.K_DELETE
        is_copy = key == pygame.K_c and bool(mod & SHORTCUT_MODIFIERS)
        if (is_delete or is_copy) and self.store.active_id is not None:
            self.end_edit()
            active_id = self.store.active_id
            if active_id is None:
                return True
            if is_delete:
                self.store.delete(active_id)
            else:
                self.store.copy(active_id)
            return True

        if self.edit is not None:
            if key == pygame.K_ESCAPE:
                self.end_edit()
            elif key == pygame.K_BACKSPACE:
                self.edit.backspace()
            elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self.edit.insert("\n")
            return True
        return False

    def text_input(self, text: str) -> None:
        if self.edit is not None and text:
            self.edit.insert(text)

    def focus_lost(self) -> None:
        self.cancel_drag()
        if self.edit is not None:
            self.end_edit()

    # Editing -----------------------------------------------------------

    def begin_edit(self, card_id: str) -> None:
        """Start editing *card_id* with its whole text selected."""

        card = self.store.get(card_id)
        if card is None or self.session is not None:
            return
        if self.edit is not None:
            self.end_edit()
        self.menus.close()
        self.store.activate(card_id)
        self.edit = EditSession(card_id=card_id, buffer=card.text)
        self._set_state(InteractionState.EDITING_TEXT)

    def end_edit(self, *, commit: bool = True) -> None:
        edit = self.edit
        if edit is None:
            return
        self.edit = None
        if self.state is InteractionState.EDITING_TEXT:
            self._set_state(InteractionState.IDLE)
        if commit:
            self.store.set_text(edit.card_id, edit.buffer)

    def reset(self) -> None:
        """Drop every transient session, committing pending text."""

        self.cancel_drag()
        self.end_edit()
        self.menus.close()
        self._set_state(InteractionState.IDLE)

    # Internal helpers --------------------------------------------------

    def _begin_session(self, card_id: str, pointer: pygame.Vector2, state: InteractionState) -> None:
        card = self.store.get(card_id)
        rect = self.mapper.to_pixel_rect(card) if card is not None else None
        if rect is None:
            return
        self.session = PointerSession(
            card_id=card_id,
            start=pygame.Vector2(pointer),
            anchor=rect,
            live=rect,
        )
        self._set_state(state)

    def _card_created(self, card: Card) -> None:
        if self.request_edit is not None:
            self.request_edit(card.id)
        else:
            self.begin_edit(card.id)

    def _set_state(self, state: InteractionState) -> None:
        if state is not self.state:
            logger.debug("Interaction %s -> %s", self.state.value, state.value)
            self.state = state
