"""Card storage and its persistence collaborators."""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Iterator, Protocol

from .config import DEFAULT_PALETTE
from .models import FIRST_DAY_COLUMN, LAST_DAY_COLUMN, MAX_TOP_ROW_FRAC, MIN_HEIGHT_FRAC, Card

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class BlobStore(Protocol):
    """Opaque load/save of the single persisted document."""

    def load(self) -> dict[str, Any] | None: ...

    def save(self, blob: dict[str, Any]) -> None: ...


class JsonFileBlobStore:
    """Keeps the document in a UTF-8 JSON file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any] | None:
        try:
            with self.path.open("r", encoding="utf-8") as data_file:
                data = json.load(data_file)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable data file %s: %s", self.path, exc)
            return None
        return data if isinstance(data, dict) else None

    def save(self, blob: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as data_file:
            json.dump(blob, data_file, ensure_ascii=False, indent=2)


class MemoryBlobStore:
    """Keeps the document in memory; nothing survives the process."""

    def __init__(self, blob: dict[str, Any] | None = None) -> None:
        self.blob = blob
        self.saves = 0

    def load(self) -> dict[str, Any] | None:
        return json.loads(json.dumps(self.blob)) if self.blob is not None else None

    def save(self, blob: dict[str, Any]) -> None:
        self.blob = json.loads(json.dumps(blob))
        self.saves += 1


class CardStore:
    """Single source of truth for the cards on the board.

    Every mutation is written through to the blob store immediately. Unknown
    ids are ignored. The active card is tracked here but never persisted.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        *,
        palette: tuple[str, ...] = DEFAULT_PALETTE,
        default_text: str = "",
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.blob_store = blob_store
        self.palette = palette
        self.default_text = default_text
        self.active_id: str | None = None
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._cards: dict[str, Card] = {}
        self._issued_ids: set[str] = set()
        self._extra: dict[str, Any] = {}
        self._listeners: list[Listener] = []

    # Lifecycle ---------------------------------------------------------

    def hydrate(self) -> None:
        """Load the persisted cards, replacing anything held in memory."""

        blob = self.blob_store.load()
        cards: dict[str, Card] = {}
        extra: dict[str, Any] = {}
        if isinstance(blob, dict):
            extra = {key: value for key, value in blob.items() if key != "cards"}
            raw_cards = blob.get("cards", {})
            if not isinstance(raw_cards, dict):
                logger.warning("Ignoring malformed card mapping of type %s", type(raw_cards).__name__)
                raw_cards = {}
            for key, record in raw_cards.items():
                if not isinstance(record, dict):
                    logger.warning("Skipping malformed card record %r", key)
                    continue
                try:
                    card = Card.from_dict(record, default_color=self.palette[0])
                except ValueError as exc:
                    logger.warning("Skipping card %r: %s", key, exc)
                    continue
                cards[card.id] = card

        self._cards = cards
        self._issued_ids = set(cards)
        self._extra = extra
        self.active_id = None
        logger.info("Loaded %d card(s)", len(cards))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every mutation; returns an unsubscribe hook."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Queries -----------------------------------------------------------

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._cards.values()))

    def __len__(self) -> int:
        return len(self._cards)

    def get(self, card_id: str | None) -> Card | None:
        if card_id is None:
            return None
        return self._cards.get(card_id)

    @property
    def active(self) -> Card | None:
        return self.get(self.active_id)

    def to_blob(self) -> dict[str, Any]:
        blob = dict(self._extra)
        blob["cards"] = {card_id: card.to_dict() for card_id, card in self._cards.items()}
        return blob

    # Mutations ---------------------------------------------------------

    def create(self, row: int, col: int) -> Card:
        """Add a one-row card at grid cell (*row*, *col*) and activate it."""

        if not FIRST_DAY_COLUMN <= col <= LAST_DAY_COLUMN:
            raise ValueError(f"Cards can only be created in day columns, got {col}")
        if row < 1:
            raise ValueError(f"Cards can only be created in hour rows, got {row}")

        card = Card(
            id=self._new_id(),
            col=col,
            top_row_frac=float(row - 1),
            height_frac=1.0,
            text=self.default_text,
            color=self.palette[0],
        )
        self._cards[card.id] = card
        self.active_id = card.id
        self._commit()
        return card

    def move(self, card_id: str, col: int, top_row_frac: float) -> Card | None:
        """Place a card in day column *col*, its top clamped into the grid."""

        if not FIRST_DAY_COLUMN <= col <= LAST_DAY_COLUMN:
            raise ValueError(f"Cards can only be moved to day columns, got {col}")
        card = self._cards.get(card_id)
        if card is None:
            return None
        card.col = col
        card.top_row_frac = min(MAX_TOP_ROW_FRAC, max(0.0, top_row_frac))
        self._commit()
        return card

    def resize(self, card_id: str, height_frac: float) -> Card | None:
        card = self._cards.get(card_id)
        if card is None:
            return None
        card.height_frac = max(MIN_HEIGHT_FRAC, height_frac)
        self._commit()
        return card

    def set_color(self, card_id: str, color: str) -> Card | None:
        card = self._cards.get(card_id)
        if card is None:
            return None
        card.color = color
        self._commit()
        return card

    def set_text(self, card_id: str, text: str) -> Card | None:
        card = self._cards.get(card_id)
        if card is None:
            return None
        card.text = text
        self._commit()
        return card

    def delete(self, card_id: str) -> bool:
        if self._cards.pop(card_id, None) is None:
            return False
        if self.active_id == card_id:
            self.active_id = None
        self._commit()
        return True

    def copy(self, card_id: str) -> Card | None:
        """Duplicate a card half a row below itself and activate the copy."""

        original = self._cards.get(card_id)
        if original is None:
            return None
        duplicate = original.duplicate(self._new_id())
        self._cards[duplicate.id] = duplicate
        self.active_id = duplicate.id
        self._commit()
        return duplicate

    def activate(self, card_id: str | None) -> None:
        """Mark *card_id* as the active card; unknown ids are ignored."""

        if card_id is None or card_id in self._cards:
            self.active_id = card_id

    # Internal helpers --------------------------------------------------

    def _new_id(self) -> str:
        while True:
            candidate = self._id_factory()
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def _commit(self) -> None:
        self.persist()
        for listener in list(self._listeners):
            listener()

    def persist(self) -> bool:
        """Write the whole card mapping; failures are logged, not raised."""

        try:
            self.blob_store.save(self.to_blob())
        except (OSError, TypeError, ValueError):
            logger.warning("Could not save %d card(s)", len(self._cards), exc_info=True)
            return False
        return True
