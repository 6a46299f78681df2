import logging

from clipkeep.config import MAX_IMAGE_SIZE, MAX_TEXT_SIZE
from clipkeep.models import CapturedPayload, ClipboardEntry, ContentType, FormatItem
from clipkeep.pasteboard import IMAGE_TYPES, RICH_TEXT_TYPES, TYPE_PNG, TYPE_RTF, TYPE_RTFD, TYPE_STRING, TYPE_TIFF, Pasteboard
from clipkeep.utils import get_image_dimensions, is_png

logger = logging.getLogger(__name__)

RICH_TEXT_PLACEHOLDER = "[Rich Text]"


def _read(board: Pasteboard, format_id: str) -> bytes | None:
    try:
        data = board.read(format_id)
    except Exception:
        logger.debug("Could not read clipboard format %s", format_id, exc_info=True)
        return None
    return data or None


def _read_formats(board: Pasteboard, types: list[str]) -> dict[str, bytes]:
    formats: dict[str, bytes] = {}
    for format_id in types:
        if format_id in formats:
            continue
        data = _read(board, format_id)
        if data is not None:
            formats[format_id] = data
    return formats


def _decode_text(data: bytes | None) -> str | None:
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Plain text flavor is not valid UTF-8")
        return None


def _first_of(formats: dict[str, bytes], candidates: tuple[str, ...]) -> bytes | None:
    for format_id in candidates:
        if format_id in formats:
            return formats[format_id]
    return None


def _image_description(image_bytes: bytes) -> str:
    width, height = get_image_dimensions(image_bytes)
    if width > 0 and height > 0:
        return f"[Image] {width}x{height}"
    return "[Image]"


def capture(board: Pasteboard) -> CapturedPayload | None:
    """Classify the current clipboard contents into a payload.

    Rich text wins over images, images over plain text. When the clipboard
    offers more than one format, every readable format is kept in the
    payload's format bundle so the exact paste can be restored later.
    """
    types = board.types()
    if not types:
        return None

    # Primary bytes come from the same reads as the bundle, so the bundle always holds them.
    formats = _read_formats(board, types)
    payload = _classify(formats)
    if payload is not None and len(types) > 1 and formats:
        payload.format_bundle = [FormatItem(format_id, data) for format_id, data in formats.items()]
    return payload


def _classify(formats: dict[str, bytes]) -> CapturedPayload | None:
    rich_text = _first_of(formats, RICH_TEXT_TYPES)
    if rich_text is not None:
        text = _decode_text(formats.get(TYPE_STRING)) or RICH_TEXT_PLACEHOLDER
        return CapturedPayload(primary_text=text, rich_text_bytes=rich_text)

    image = _first_of(formats, IMAGE_TYPES)
    if image is not None:
        if len(image) > MAX_IMAGE_SIZE:
            logger.warning("Image too large (%d bytes), skipping", len(image))
            return None
        return CapturedPayload(primary_text=_image_description(image), image_bytes=image)

    text_bytes = formats.get(TYPE_STRING)
    text = _decode_text(text_bytes)
    if not text:
        return None
    if len(text_bytes) > MAX_TEXT_SIZE:
        logger.warning("Text too large (%d bytes), skipping", len(text_bytes))
        return None
    return CapturedPayload(primary_text=text)


def peek(board: Pasteboard) -> tuple[ContentType, bytes] | None:
    """Read only the payload that decides whether the clipboard changed."""
    types = board.types()
    if not types:
        return None
    for content_type, candidates in (
        (ContentType.RICH_TEXT, RICH_TEXT_TYPES),
        (ContentType.IMAGE, IMAGE_TYPES),
        (ContentType.TEXT, (TYPE_STRING,)),
    ):
        for format_id in candidates:
            if format_id in types:
                data = _read(board, format_id)
                if data is not None:
                    return (content_type, data)
    return None


def restore_items(entry: ClipboardEntry) -> list[FormatItem]:
    """Representations to put back on the clipboard for an entry, richest first."""
    if entry.format_bundle:
        return list(entry.format_bundle)

    text_item = FormatItem(TYPE_STRING, entry.primary_text.encode("utf-8"))
    if entry.rich_text_bytes is not None:
        rich_type = TYPE_RTF if entry.rich_text_bytes.startswith(b"{\\rtf") else TYPE_RTFD
        items = [FormatItem(rich_type, entry.rich_text_bytes)]
        if entry.primary_text != RICH_TEXT_PLACEHOLDER:
            items.append(text_item)
        return items
    if entry.image_bytes is not None:
        image_type = TYPE_PNG if is_png(entry.image_bytes) else TYPE_TIFF
        return [FormatItem(image_type, entry.image_bytes)]
    return [text_item]
