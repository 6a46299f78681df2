"""Access to the system clipboard.

The engine only talks to the ``Pasteboard`` protocol. ``MacPasteboard`` is the
AppKit-backed implementation; AppKit is imported when it is constructed so the
rest of the package stays importable without pyobjc.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from clipkeep.models import FormatItem

logger = logging.getLogger(__name__)

TYPE_STRING = "public.utf8-plain-text"
TYPE_RTF = "public.rtf"
TYPE_RTFD = "com.apple.flat-rtfd"
TYPE_TIFF = "public.tiff"
TYPE_PNG = "public.png"

RICH_TEXT_TYPES = (TYPE_RTF, TYPE_RTFD)
IMAGE_TYPES = (TYPE_TIFF, TYPE_PNG)


class Pasteboard(Protocol):
    def types(self) -> list[str]:
        """Format identifiers currently on the clipboard, in clipboard order."""
        ...

    def read(self, format_id: str) -> bytes | None:
        """Raw bytes for one format, or None if it is not available."""
        ...

    def write(self, items: Iterable[FormatItem]) -> None:
        """Replace the clipboard contents with the given representations."""
        ...


class MacPasteboard:
    def __init__(self):
        from AppKit import NSPasteboard

        self._pasteboard = NSPasteboard.generalPasteboard()

    def types(self) -> list[str]:
        types = self._pasteboard.types()
        if types is None:
            return []
        return [str(t) for t in types]

    def read(self, format_id: str) -> bytes | None:
        data = self._pasteboard.dataForType_(format_id)
        if data is None:
            return None
        return bytes(data)

    def write(self, items: Iterable[FormatItem]) -> None:
        from Foundation import NSData

        items = list(items)
        self._pasteboard.clearContents()
        for item in items:
            ns_data = NSData.dataWithBytes_length_(item.data, len(item.data))
            if not self._pasteboard.setData_forType_(ns_data, item.format_id):
                logger.warning("Pasteboard rejected format %s", item.format_id)
