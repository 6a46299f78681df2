import struct
from datetime import datetime, timedelta

import pytest

from clipkeep.history import HistoryStore
from clipkeep.models import CapturedPayload, ClipboardEntry, FormatItem
from clipkeep.pasteboard import TYPE_STRING
from clipkeep.storage import StorageManager
from clipkeep.suppressor import ChangeSuppressor


class FakePasteboard:
    """In-memory stand-in for the system clipboard."""

    def __init__(self):
        self.formats: dict[str, bytes] = {}
        self.failing: set[str] = set()
        self.writes: list[list[FormatItem]] = []

    def set_text(self, text: str) -> None:
        self.formats = {TYPE_STRING: text.encode("utf-8")}

    def set_formats(self, formats: dict[str, bytes]) -> None:
        self.formats = dict(formats)

    def types(self) -> list[str]:
        return list(self.formats)

    def read(self, format_id: str) -> bytes | None:
        if format_id in self.failing:
            raise RuntimeError(f"cannot read {format_id}")
        return self.formats.get(format_id)

    def write(self, items) -> None:
        items = list(items)
        self.writes.append(items)
        self.formats = {item.format_id: item.data for item in items}


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TickingClock:
    """Returns strictly increasing datetimes, one second apart."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self._next = start

    def __call__(self) -> datetime:
        current = self._next
        self._next += timedelta(seconds=1)
        return current


def _png_bytes(width: int, height: int) -> bytes:
    header = b"\x89PNG\r\n\x1a\n"
    ihdr_type = b"\x00\x00\x00\rIHDR"
    return header + ihdr_type + struct.pack(">I", width) + struct.pack(">I", height) + b"\x00" * 32


@pytest.fixture
def make_png():
    return _png_bytes


@pytest.fixture
def pasteboard():
    return FakePasteboard()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def suppressor(clock):
    return ChangeSuppressor(timeout=1.0, clock=clock)


@pytest.fixture
def storage(tmp_path):
    return StorageManager(tmp_path / "history.json")


@pytest.fixture
def make_store(storage, pasteboard, suppressor):
    def _make_store(max_items: int = 50, **kwargs) -> HistoryStore:
        kwargs.setdefault("clock", TickingClock())
        return HistoryStore(storage, pasteboard, suppressor, max_items=max_items, **kwargs)

    return _make_store


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture
def text_payload():
    def _text_payload(text: str = "hello world") -> CapturedPayload:
        return CapturedPayload(primary_text=text)

    return _text_payload


@pytest.fixture
def make_entry():
    """Factory fixture to create ClipboardEntry instances for testing."""

    def _make_entry(
        text: str = "hello world",
        entry_id: str = "entry-1",
        timestamp: datetime | None = None,
        pinned: bool = False,
        image_bytes: bytes | None = None,
        rich_text_bytes: bytes | None = None,
        format_bundle: list[FormatItem] | None = None,
    ) -> ClipboardEntry:
        return ClipboardEntry(
            id=entry_id,
            primary_text=text,
            timestamp=timestamp or datetime(2024, 1, 1, 12, 0, 0),
            pinned=pinned,
            image_bytes=image_bytes,
            rich_text_bytes=rich_text_bytes,
            format_bundle=format_bundle,
        )

    return _make_entry
