from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ContentType(str, Enum):
    TEXT = "text"
    RICH_TEXT = "rich_text"
    IMAGE = "image"


@dataclass(frozen=True)
class FormatItem:
    """One raw clipboard representation, keyed by its pasteboard type."""

    format_id: str
    data: bytes


def _classify(image_bytes: bytes | None, rich_text_bytes: bytes | None) -> ContentType:
    if rich_text_bytes is not None:
        return ContentType.RICH_TEXT
    if image_bytes is not None:
        return ContentType.IMAGE
    return ContentType.TEXT


@dataclass
class CapturedPayload:
    primary_text: str
    image_bytes: bytes | None = None
    rich_text_bytes: bytes | None = None
    format_bundle: list[FormatItem] | None = None

    @property
    def content_type(self) -> ContentType:
        return _classify(self.image_bytes, self.rich_text_bytes)


@dataclass
class ClipboardEntry:
    id: str
    primary_text: str
    timestamp: datetime
    pinned: bool = False
    image_bytes: bytes | None = None
    rich_text_bytes: bytes | None = None
    format_bundle: list[FormatItem] | None = None

    @property
    def content_type(self) -> ContentType:
        return _classify(self.image_bytes, self.rich_text_bytes)

    @classmethod
    def from_payload(
        cls,
        payload: CapturedPayload,
        entry_id: str,
        timestamp: datetime,
        pinned: bool = False,
    ) -> "ClipboardEntry":
        return cls(
            id=entry_id,
            primary_text=payload.primary_text,
            timestamp=timestamp,
            pinned=pinned,
            image_bytes=payload.image_bytes,
            rich_text_bytes=payload.rich_text_bytes,
            format_bundle=list(payload.format_bundle) if payload.format_bundle else None,
        )
