import base64
import json
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from clipkeep.config import HISTORY_PATH
from clipkeep.models import ClipboardEntry, FormatItem

logger = logging.getLogger(__name__)


def _encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _decode_bytes(value: str) -> bytes:
    return base64.b64decode(value.encode("ascii"), validate=True)


def _parse_timestamp(value: str) -> datetime:
    timestamp = datetime.fromisoformat(value)
    if timestamp.tzinfo is not None:
        # Stored history uses naive local time; normalize aware values to match.
        timestamp = timestamp.astimezone().replace(tzinfo=None)
    return timestamp


def entry_to_dict(entry: ClipboardEntry) -> dict:
    data = {
        "id": entry.id,
        "primaryText": entry.primary_text,
        "timestamp": entry.timestamp.isoformat(),
        "pinned": entry.pinned,
    }
    if entry.image_bytes is not None:
        data["imageBytes"] = _encode_bytes(entry.image_bytes)
    if entry.rich_text_bytes is not None:
        data["richTextBytes"] = _encode_bytes(entry.rich_text_bytes)
    if entry.format_bundle:
        data["formatBundle"] = [
            {"formatId": item.format_id, "bytes": _encode_bytes(item.data)} for item in entry.format_bundle
        ]
    return data


def entry_from_dict(data: dict) -> ClipboardEntry:
    image_bytes = data.get("imageBytes")
    rich_text_bytes = data.get("richTextBytes")
    bundle = [FormatItem(str(item["formatId"]), _decode_bytes(item["bytes"])) for item in data.get("formatBundle") or []]
    return ClipboardEntry(
        id=str(data["id"]),
        primary_text=str(data["primaryText"]),
        timestamp=_parse_timestamp(data["timestamp"]),
        pinned=bool(data.get("pinned", False)),
        image_bytes=_decode_bytes(image_bytes) if image_bytes is not None else None,
        rich_text_bytes=_decode_bytes(rich_text_bytes) if rich_text_bytes is not None else None,
        format_bundle=bundle or None,
    )


class StorageManager:
    """Reads and writes the history file.

    Failures never propagate: a broken or unreadable file loads as an empty
    history, and a failed write leaves the in-memory history authoritative.
    """

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path) if path else HISTORY_PATH

    @property
    def path(self) -> Path:
        return self._path

    def save(self, entries: Iterable[ClipboardEntry]) -> bool:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            document = json.dumps([entry_to_dict(e) for e in entries], indent=2)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(document, encoding="utf-8")
            tmp_path.replace(self._path)
        except (OSError, TypeError, ValueError):
            logger.exception("Error saving history to %s", self._path)
            return False
        return True

    def load(self) -> list[ClipboardEntry]:
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise ValueError("history file does not contain a list")
            entries = [entry_from_dict(item) for item in raw]
        except Exception:
            logger.exception("Error loading history from %s, starting empty", self._path)
            return []
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        logger.info("Loaded %d history entries", len(entries))
        return entries
