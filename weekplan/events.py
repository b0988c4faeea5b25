"""Custom pygame events and scoped event subscriptions."""

from __future__ import annotations

from typing import Callable

import pygame

# Reserve a block of user events for the schedule board.
USER_EVENT_BASE = pygame.USEREVENT + 1
CARD_EDIT_REQUESTED = USER_EVENT_BASE + 0

Handler = Callable[[pygame.event.Event], None]


class EventSubscriptions:
    """Handlers registered by one owner, removed together on :meth:`close`."""

    def __init__(self) -> None:
        self._handlers: dict[int, list[Handler]] = {}
        self.closed = False

    def subscribe(self, event_type: int, handler: Handler) -> None:
        if self.closed:
            raise RuntimeError("Cannot subscribe on closed subscriptions")
        self._handlers.setdefault(event_type, []).append(handler)

    def handles(self, event_type: int) -> bool:
        return bool(self._handlers.get(event_type))

    def dispatch(self, event: pygame.event.Event) -> bool:
        """Run every handler for *event*; returns whether any ran."""

        if self.closed:
            return False
        handlers = list(self._handlers.get(event.type, ()))
        for handler in handlers:
            handler(event)
        return bool(handlers)

    def close(self) -> None:
        self._handlers.clear()
        self.closed = True

    def __enter__(self) -> "EventSubscriptions":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class EventBus:
    """Routes pygame events to the subscription sets that are still open."""

    def __init__(self) -> None:
        self._subscriptions: list[EventSubscriptions] = []

    def open(self) -> EventSubscriptions:
        subscriptions = EventSubscriptions()
        self._subscriptions.append(subscriptions)
        return subscriptions

    def dispatch(self, event: pygame.event.Event) -> bool:
        self._subscriptions = [subs for subs in self._subscriptions if not subs.closed]
        handled = False
        for subscriptions in list(self._subscriptions):
            handled = subscriptions.dispatch(event) or handled
        return handled

    def __len__(self) -> int:
        return sum(1 for subs in self._subscriptions if not subs.closed)


def request_card_edit(card_id: str, delay_ms: int) -> None:
    """Post a one-shot :data:`CARD_EDIT_REQUESTED` event after *delay_ms*."""

    event = pygame.event.Event(CARD_EDIT_REQUESTED, card_id=card_id)
    if delay_ms <= 0:
        pygame.event.post(event)
        return
    pygame.time.set_timer(event, delay_ms, loops=1)
