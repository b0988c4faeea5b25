"""
tests/test_view.py

Covers:
  - Scoped event subscriptions and the event bus
  - Opening and closing the view against an off-screen surface
  - Pointer, keyboard and deferred-edit events routed through the bus
  - Widgets rebuilt from the store after every mutation
  - Mouse-wheel scrolling of card text that does not fit
  - Window resizes abandon a press and measure the grid once
  - Drawing the grid, cards and menus without errors
"""

import pygame
import pytest

from weekplan.config import GridConfig
from weekplan.events import CARD_EDIT_REQUESTED, EventBus, EventSubscriptions
from weekplan.interaction import InteractionState
from weekplan.view import CardWidget, ScheduleView, text_overflow, wrap_text


@pytest.fixture
def pygame_session():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def view(pygame_session, store, bus):
    # 620 x 1240 minus 8 px padding on each side
    surface = pygame.Surface((636, 1256))
    schedule = ScheduleView(store, GridConfig(header_height=40, time_column_width=120))
    schedule.open(surface, bus)
    yield schedule
    schedule.close()


def mouse(kind, pos, button=1):
    return pygame.event.Event(kind, pos=pos, button=button)


def key(code, mod=0):
    return pygame.event.Event(pygame.KEYDOWN, key=code, mod=mod, unicode="")


# ── Subscriptions ─────────────────────────────────────────────────────────────

class TestSubscriptions:

    def test_dispatch_and_close(self):
        seen = []
        with EventSubscriptions() as subscriptions:
            subscriptions.subscribe(pygame.KEYDOWN, seen.append)
            assert subscriptions.dispatch(key(pygame.K_a))
            assert not subscriptions.dispatch(pygame.event.Event(pygame.KEYUP, key=pygame.K_a))
        assert subscriptions.closed
        assert not subscriptions.dispatch(key(pygame.K_a))
        assert len(seen) == 1

    def test_closed_subscriptions_reject_handlers(self):
        subscriptions = EventSubscriptions()
        subscriptions.close()
        with pytest.raises(RuntimeError):
            subscriptions.subscribe(pygame.KEYDOWN, print)

    def test_bus_drops_closed_sets(self, bus):
        first = bus.open()
        bus.open()
        first.close()
        assert len(bus) == 1


# ── Lifecycle ─────────────────────────────────────────────────────────────────

class TestLifecycle:

    def test_open_measures_grid(self, view):
        assert view.is_open
        assert view.layout.row_height() == pytest.approx(100)
        assert view.layout.col_width() == pytest.approx(100)

    def test_close_unsubscribes(self, view, bus, store):
        card = store.create(2, 1)
        view.close()
        assert len(bus) == 0
        bus.dispatch(key(pygame.K_DELETE))
        assert card.id in store

    def test_close_commits_pending_edit(self, view, store):
        card = store.create(2, 1)
        view.controller.begin_edit(card.id)
        view.controller.text_input("Music")
        view.close()
        assert store.get(card.id).text == "Music"

    def test_store_changes_rebuild_widgets(self, view, store):
        card = store.create(2, 1)
        assert set(view.widgets) == {card.id}
        store.delete(card.id)
        assert view.widgets == {}


# ── Event routing ─────────────────────────────────────────────────────────────

class TestEvents:

    def test_drag_through_bus(self, view, bus, store):
        card = store.create(3, 2)
        # grid origin is at (8, 8); card body around (268, 288)
        bus.dispatch(mouse(pygame.MOUSEBUTTONDOWN, (268, 288)))
        bus.dispatch(pygame.event.Event(pygame.MOUSEMOTION, pos=(368, 408), rel=(100, 120), buttons=(1, 0, 0)))
        bus.dispatch(mouse(pygame.MOUSEBUTTONUP, (368, 408)))
        moved = store.get(card.id)
        assert (moved.col, moved.top_row_frac) == (3, 3.5)

    def test_keyboard_edit_through_bus(self, view, bus, store):
        card = store.create(3, 2)
        bus.dispatch(pygame.event.Event(CARD_EDIT_REQUESTED, card_id=card.id))
        assert view.controller.state is InteractionState.EDITING_TEXT
        bus.dispatch(pygame.event.Event(pygame.TEXTINPUT, text="Art"))
        bus.dispatch(pygame.event.Event(pygame.WINDOWFOCUSLOST))
        assert store.get(card.id).text == "Art"

    def test_delete_shortcut_through_bus(self, view, bus, store):
        card = store.create(3, 2)
        bus.dispatch(key(pygame.K_DELETE))
        assert card.id not in store

    def test_click_marks_widget_active(self, view, bus, store):
        first = store.create(3, 2)
        store.create(5, 4)
        bus.dispatch(mouse(pygame.MOUSEBUTTONDOWN, (268, 288)))
        bus.dispatch(mouse(pygame.MOUSEBUTTONUP, (268, 288)))
        assert view.widgets[first.id].active

    def test_click_then_delete_through_bus(self, view, bus, store):
        card = store.create(3, 2)
        bus.dispatch(mouse(pygame.MOUSEBUTTONDOWN, (268, 288)))
        bus.dispatch(mouse(pygame.MOUSEBUTTONUP, (268, 288)))
        assert view.controller.state is InteractionState.EDITING_TEXT
        bus.dispatch(key(pygame.K_DELETE))
        assert card.id not in store
        assert card.id not in view.widgets

    def test_resize_abandons_drag(self, view, bus, store):
        card = store.create(3, 2)
        bus.dispatch(mouse(pygame.MOUSEBUTTONDOWN, (268, 288)))
        bus.dispatch(pygame.event.Event(pygame.MOUSEMOTION, pos=(368, 408), rel=(100, 120), buttons=(1, 0, 0)))
        assert view.controller.state is InteractionState.DRAGGING_MOVE

        bus.dispatch(pygame.event.Event(pygame.VIDEORESIZE, size=(636, 1256), w=636, h=1256))
        assert view.controller.session is None
        assert view.controller.state is InteractionState.IDLE
        bus.dispatch(mouse(pygame.MOUSEBUTTONUP, (368, 408)))
        assert (store.get(card.id).col, store.get(card.id).top_row_frac) == (2, 2.0)

    def test_single_resize_event_subscribed(self, view):
        assert view.subscriptions.handles(pygame.VIDEORESIZE)
        assert not view.subscriptions.handles(pygame.WINDOWSIZECHANGED)


# ── Text scrolling ────────────────────────────────────────────────────────────

CARD_BODY = (268, 288)


@pytest.fixture
def long_card(store):
    card = store.create(3, 2)
    store.set_text(card.id, "\n".join(f"line {n}" for n in range(10)))
    return store.get(card.id)


def card_font(view):
    return view.resources.font(22, bold=True)


class TestScroll:

    def test_wheel_scrolls_within_overflow(self, view, long_card):
        font = card_font(view)
        overflow = text_overflow(font, long_card.text, view.controller.card_rect(long_card))
        assert overflow > font.get_linesize()

        assert view.scroll_card_at(CARD_BODY, -1)
        assert view.scroll_offsets[long_card.id] == font.get_linesize()
        view.scroll_card_at(CARD_BODY, -100)
        assert view.scroll_offsets[long_card.id] == overflow
        view.scroll_card_at(CARD_BODY, 100)
        assert view.scroll_offsets[long_card.id] == 0

    def test_text_that_fits_does_not_scroll(self, view, store):
        card = store.create(3, 2)
        store.set_text(card.id, "Hi")
        assert view.scroll_card_at(CARD_BODY, -3)
        assert view.scroll_offsets[card.id] == 0

    def test_wheel_outside_cards(self, view, long_card):
        assert not view.scroll_card_at((468, 708), -1)
        assert view.scroll_offsets == {}

    def test_wheel_event_through_bus(self, view, bus, long_card, monkeypatch):
        monkeypatch.setattr(pygame.mouse, "get_pos", lambda: CARD_BODY)
        bus.dispatch(pygame.event.Event(pygame.MOUSEWHEEL, x=0, y=-1, flipped=False))
        assert view.scroll_offsets[long_card.id] > 0

    def test_deleted_card_drops_offset(self, view, store, long_card):
        view.scroll_card_at(CARD_BODY, -1)
        store.delete(long_card.id)
        assert long_card.id not in view.scroll_offsets

    def test_editing_shows_caret_line(self, view, long_card):
        font = card_font(view)
        rect = view.controller.card_rect(long_card)
        widget = view.widgets[long_card.id]
        handle = view.controller.handle_rect(rect)

        offset = widget.draw(
            view.surface, rect, font, handle=handle, text=long_card.text, editing=True
        )
        assert offset == text_overflow(font, long_card.text + "|", rect)
        assert offset > 0
        assert widget.draw(view.surface, rect, font, handle=handle, scroll=-5.0) == 0

    def test_scroll_offset_used_when_drawing(self, view, long_card):
        font = card_font(view)
        rect = view.controller.card_rect(long_card)
        widget = CardWidget(long_card, active=False, fallback_color="#ffffff")
        handle = view.controller.handle_rect(rect)
        overflow = text_overflow(font, long_card.text, rect)
        assert widget.draw(view.surface, rect, font, handle=handle, scroll=10.0) == 10
        assert widget.draw(view.surface, rect, font, handle=handle, scroll=1e6) == overflow


# ── Drawing ───────────────────────────────────────────────────────────────────

class TestDraw:

    def test_draw_with_cards_edit_and_menu(self, view, store):
        card = store.create(3, 2)
        store.set_color(card.id, "not-a-color")
        other = store.create(6, 5)
        view.controller.begin_edit(other.id)
        view.controller.context_click((268, 288))
        view.draw()
        assert view.surface.get_at((240, 270)) != pygame.Color("#ffffff")

    def test_draw_closed_view_is_noop(self, pygame_session, store):
        ScheduleView(store).draw()

    def test_wrap_text(self, view):
        font = view.resources.font(22)
        lines = wrap_text(font, "one two three\nfour", font.size("one two")[0] + 1)
        assert lines == ["one two", "three", "four"]
