import struct
import uuid

from clipkeep.config import DATA_DIR

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
TIFF_SIGNATURES = (b"II*\x00", b"MM\x00*")

_TIFF_WIDTH_TAG = 256
_TIFF_HEIGHT_TAG = 257
_TIFF_SHORT = 3
_TIFF_LONG = 4


def new_entry_id() -> str:
    return str(uuid.uuid4())


def truncate_text(text: str, max_len: int) -> str:
    single_line = " ".join(text.split())
    if len(single_line) <= max_len:
        return single_line
    return single_line[: max_len - 3] + "..."


def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def is_png(data: bytes) -> bool:
    return data[:8] == PNG_SIGNATURE


def is_tiff(data: bytes) -> bool:
    return data[:4] in TIFF_SIGNATURES


def get_image_dimensions(image_bytes: bytes) -> tuple[int, int]:
    """Read pixel dimensions from a PNG or TIFF header, (0, 0) if unknown."""
    if is_png(image_bytes):
        if len(image_bytes) < 24:
            return (0, 0)
        width = struct.unpack(">I", image_bytes[16:20])[0]
        height = struct.unpack(">I", image_bytes[20:24])[0]
        return (width, height)
    if is_tiff(image_bytes):
        return _get_tiff_dimensions(image_bytes)
    return (0, 0)


def _get_tiff_dimensions(data: bytes) -> tuple[int, int]:
    # Only the first IFD is inspected; that is the primary image.
    endian = "<" if data[:2] == b"II" else ">"
    try:
        (ifd_offset,) = struct.unpack_from(endian + "I", data, 4)
        (count,) = struct.unpack_from(endian + "H", data, ifd_offset)
        width = height = 0
        for index in range(count):
            base = ifd_offset + 2 + index * 12
            tag, field_type = struct.unpack_from(endian + "HH", data, base)
            if field_type == _TIFF_SHORT:
                (value,) = struct.unpack_from(endian + "H", data, base + 8)
            elif field_type == _TIFF_LONG:
                (value,) = struct.unpack_from(endian + "I", data, base + 8)
            else:
                continue
            if tag == _TIFF_WIDTH_TAG:
                width = value
            elif tag == _TIFF_HEIGHT_TAG:
                height = value
    except struct.error:
        return (0, 0)
    return (width, height)
