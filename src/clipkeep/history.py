import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from clipkeep.capture import capture, restore_items
from clipkeep.config import MAX_HISTORY_ITEMS
from clipkeep.models import CapturedPayload, ClipboardEntry, ContentType
from clipkeep.pasteboard import Pasteboard
from clipkeep.storage import StorageManager
from clipkeep.suppressor import ChangeSuppressor
from clipkeep.utils import new_entry_id

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


def order_entries(entries: Iterable[ClipboardEntry]) -> list[ClipboardEntry]:
    """Pinned entries first, then newest first within each group.

    Entries are expected in insertion order; equal timestamps keep the most
    recently inserted entry first.
    """
    return sorted(reversed(list(entries)), key=lambda e: (e.pinned, e.timestamp), reverse=True)


def _same_content(entry: ClipboardEntry, payload: CapturedPayload) -> bool:
    if payload.content_type == ContentType.IMAGE:
        return entry.content_type == ContentType.IMAGE and entry.image_bytes == payload.image_bytes
    return entry.content_type != ContentType.IMAGE and entry.primary_text == payload.primary_text


class HistoryStore:
    def __init__(
        self,
        storage: StorageManager,
        pasteboard: Pasteboard,
        suppressor: ChangeSuppressor,
        max_items: int = MAX_HISTORY_ITEMS,
        on_change: Listener | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if max_items < 0:
            raise ValueError("max_items must not be negative")
        self._storage = storage
        self._pasteboard = pasteboard
        self._suppressor = suppressor
        self._max_items = max_items
        self._clock = clock
        self._listeners: list[Listener] = [on_change] if on_change else []
        # Insertion order is oldest first; display order is computed on demand.
        self._entries: dict[str, ClipboardEntry] = {}
        for entry in reversed(self._storage.load()):
            self._entries[entry.id] = entry
        if self.apply_capacity_policy(self._max_unpinned()):
            self._storage.save(self.get_ordered())

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def max_items(self) -> int:
        return self._max_items

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_ordered(self) -> list[ClipboardEntry]:
        return order_entries(self._entries.values())

    def search(self, query: str) -> list[ClipboardEntry]:
        """Entries whose text contains ``query`` (case-insensitive), in display order."""
        needle = query.strip().casefold()
        if not needle:
            return []
        return [e for e in self.get_ordered() if needle in e.primary_text.casefold()]

    def get_entry(self, entry_id: str) -> ClipboardEntry | None:
        return self._entries.get(entry_id)

    def add_entry(self, payload: CapturedPayload) -> ClipboardEntry:
        existing = next((e for e in self._entries.values() if _same_content(e, payload)), None)
        if existing is not None:
            del self._entries[existing.id]
            entry = ClipboardEntry.from_payload(payload, existing.id, self._clock(), pinned=existing.pinned)
            logger.debug("Merged duplicate clipboard entry %s", entry.id)
        else:
            entry = ClipboardEntry.from_payload(payload, new_entry_id(), self._clock())
        self._entries[entry.id] = entry

        self.apply_capacity_policy(self._max_unpinned())
        self._commit()
        return entry

    def add_from_observation(self, board: Pasteboard) -> ClipboardEntry | None:
        payload = capture(board)
        if payload is None:
            return None
        entry = self.add_entry(payload)
        logger.info("Captured %s entry: %.30s", entry.content_type.value, entry.primary_text)
        return entry

    def toggle_pin(self, entry_id: str) -> bool | None:
        entry = self._entries.get(entry_id)
        if entry is None:
            return None
        entry.pinned = not entry.pinned
        self._commit()
        return entry.pinned

    def delete(self, entry_id: str) -> bool:
        if self._entries.pop(entry_id, None) is None:
            return False
        self._commit()
        return True

    def update_content(self, entry_id: str, new_text: str) -> bool:
        entry = self._entries.get(entry_id)
        if entry is None or entry.content_type != ContentType.TEXT:
            return False

        recent_unpinned = next((e for e in self.get_ordered() if not e.pinned), None)
        entry.primary_text = new_text
        # Every captured flavor still describes the old text; restore plain text only.
        entry.format_bundle = None

        # The edited text may now collide with another entry's content identity.
        for other in [e for e in self._entries.values() if e is not entry and e.content_type != ContentType.IMAGE]:
            if other.primary_text == new_text:
                entry.pinned = entry.pinned or other.pinned
                del self._entries[other.id]

        if entry.pinned or entry is recent_unpinned:
            self.copy_to_system_clipboard(entry.id)
        self._commit()
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._commit()

    def apply_capacity_policy(self, max_unpinned: int) -> int:
        unpinned = [e for e in self.get_ordered() if not e.pinned]
        evicted = unpinned[max(0, max_unpinned):]
        for entry in evicted:
            del self._entries[entry.id]
        if evicted:
            logger.debug("Evicted %d entries (keeping %d unpinned)", len(evicted), max_unpinned)
        return len(evicted)

    def set_max_items(self, max_items: int) -> None:
        if max_items < 0:
            raise ValueError("max_items must not be negative")
        self._max_items = max_items
        if self.apply_capacity_policy(self._max_unpinned()):
            self._commit()

    def copy_to_system_clipboard(self, entry_id: str) -> bool:
        entry = self._entries.get(entry_id)
        if entry is None:
            return False
        self._suppressor.arm()
        try:
            self._pasteboard.write(restore_items(entry))
        except Exception:
            logger.exception("Error copying entry to clipboard")
            self._suppressor.reset()
            return False
        return True

    def suppress_next_observation(self) -> None:
        self._suppressor.arm()

    def _max_unpinned(self) -> int:
        pinned = sum(1 for e in self._entries.values() if e.pinned)
        return max(0, self._max_items - pinned)

    def _commit(self) -> None:
        self._storage.save(self.get_ordered())
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("History listener failed")
