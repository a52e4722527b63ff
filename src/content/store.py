"""Key-value backed content store.

Holds the authoritative, insertion-ordered collection of ContentItems.
The whole collection is serialised as one JSON array under a single
storage key, loaded by ``initialize()`` and written back after every
mutation before the mutating call returns.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import RootModel

from randpick.content.models import Category, ContentItem
from randpick.content.storage import KeyValueStorage
from randpick.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

STORAGE_KEY = "contentData"


class _StoreData(RootModel[list[ContentItem]]):
    """Internal wrapper for JSON serialization."""


def format_display_label(moment: datetime, label_format: str = "") -> str:
    """Render a timestamp for display in local time.

    With no ``label_format`` the result looks like ``3/7/2025, 4:05:09 PM``.
    """
    local = moment.astimezone()
    if label_format:
        return local.strftime(label_format)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{local.month}/{local.day}/{local.year}, "
        f"{hour}:{local.minute:02d}:{local.second:02d} {meridiem}"
    )


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class ContentStore:
    """Insertion-ordered store of content items over a key-value provider.

    Not thread-safe; callers must serialise access to one instance.

    Args:
        storage: Provider the collection is read from and written to.
        key: Storage key holding the serialised collection.
        strict: Raise PersistenceError when a write fails.  Otherwise the
            failure is logged, the in-memory change is kept and
            ``persisted`` turns False until the next successful write.
        label_format: strftime pattern for display labels; empty selects
            the default rendering.
        clock: Source of creation timestamps.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = STORAGE_KEY,
        strict: bool = False,
        label_format: str = "",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._storage = storage
        self._key = key
        self._strict = strict
        self._label_format = label_format
        self._clock = clock
        self._items: list[ContentItem] = []
        self._last_id = 0
        self._persisted = True

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> list[ContentItem]:
        raw = self._storage.get(self._key)
        if not raw:
            return []
        try:
            data = _StoreData.model_validate_json(raw)
        except ValueError:
            logger.warning("Malformed content data under %r, starting empty", self._key)
            return []

        items: list[ContentItem] = []
        seen: set[int] = set()
        for item in data.root:
            if item.id in seen:
                logger.warning("Dropping duplicate content id %d", item.id)
                continue
            seen.add(item.id)
            items.append(item)
        return items

    def _save(self) -> bool:
        payload = _StoreData(self._items).model_dump_json(by_alias=True)
        try:
            ok = self._storage.set(self._key, payload)
        except OSError as exc:
            logger.warning("Storage provider raised while saving %r: %s", self._key, exc)
            ok = False

        self._persisted = ok
        if ok:
            return True
        logger.warning(
            "Content under %r not persisted; in-memory state has %d item(s)",
            self._key,
            len(self._items),
        )
        if self._strict:
            raise PersistenceError(self._key, "storage provider rejected the write")
        return False

    def _next_id(self, moment: datetime) -> int:
        candidate = int(moment.timestamp() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    # ── Lifecycle ────────────────────────────────────────────────

    def initialize(self) -> None:
        """Replace the in-memory collection with the persisted one.

        Missing, empty or malformed data yields an empty collection.
        """
        self._items = self._load()
        self._last_id = max((item.id for item in self._items), default=0)
        self._persisted = True
        logger.info("Loaded %d content item(s) from %r", len(self._items), self._key)

    def flush(self) -> bool:
        """Write the current collection again, e.g. after a failed save."""
        return self._save()

    @property
    def persisted(self) -> bool:
        """False while the last write failed and storage lags memory."""
        return self._persisted

    @property
    def key(self) -> str:
        return self._key

    # ── Write operations ─────────────────────────────────────────

    def add(self, text: str, category: Category | str) -> ContentItem:
        """Append a new item and persist the collection.

        Raises ValidationError if the text is blank or the category is
        unknown; the collection is left untouched in that case.
        """
        cleaned = text.strip()
        if not cleaned:
            raise ValidationError("content text must not be empty")
        try:
            category = Category(category)
        except ValueError:
            raise ValidationError(f"unknown category: {category!r}") from None

        moment = self._clock()
        item = ContentItem(
            id=self._next_id(moment),
            text=cleaned,
            category=category,
            created_at=moment,
            display_label=format_display_label(moment, self._label_format),
        )
        self._items.append(item)
        self._save()
        return item

    def remove(self, item_id: int) -> bool:
        """Remove the item with ``item_id`` and persist the collection.

        Removing an unknown id is not an error.  Returns whether an item
        was removed.
        """
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        removed = len(self._items) != before
        self._save()
        return removed

    # ── Read operations ──────────────────────────────────────────

    def all(self) -> tuple[ContentItem, ...]:
        """Return a snapshot of the collection in insertion order."""
        return tuple(self._items)

    def get(self, item_id: int) -> ContentItem | None:
        """Return an item by id, or None if not found."""
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def __len__(self) -> int:
        return len(self._items)
