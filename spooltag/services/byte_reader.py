"""Low-level field readers for tag memory images.

Every reader takes a logical (block, offset, length) triple and a layout.
Ranges that fall outside the buffer or on a sector trailer read as zeros:
sectors that failed authentication come back as zeros too, and one bad
sector must not stop the remaining fields from decoding.
"""

import struct
from datetime import datetime

from spooltag.services.tag_layout import DEFAULT_LAYOUT, TagLayout

DATETIME_FORMAT = "%Y_%m_%d_%H_%M"  # yyyy_MM_dd_HH_mm

_UINT_FORMATS = {2: "<H", 4: "<I"}
_FLOAT_FORMATS = {4: "<f", 8: "<d"}


def byte_slice(buffer: bytes, block: int, offset: int, length: int, layout: TagLayout = DEFAULT_LAYOUT) -> bytes:
    start = layout.offset(block, offset)
    if start is None or start < 0 or start + length > len(buffer):
        return bytes(length)
    return bytes(buffer[start : start + length])


def read_hex(buffer: bytes, block: int, offset: int, length: int, layout: TagLayout = DEFAULT_LAYOUT) -> str:
    return byte_slice(buffer, block, offset, length, layout).hex().upper()


def read_string(buffer: bytes, block: int, offset: int, length: int, layout: TagLayout = DEFAULT_LAYOUT) -> str:
    """UTF-8 text with every NUL byte removed, not only the trailing ones."""
    raw = byte_slice(buffer, block, offset, length, layout)
    return raw.decode("utf-8", errors="replace").replace("\x00", "")


def read_uint(buffer: bytes, block: int, offset: int, length: int = 2, layout: TagLayout = DEFAULT_LAYOUT) -> int:
    """Little-endian unsigned integer. Only 2- and 4-byte widths exist on the tag."""
    fmt = _UINT_FORMATS.get(length)
    if fmt is None:
        raise ValueError(f"Unsupported integer width: {length} bytes")
    return struct.unpack(fmt, byte_slice(buffer, block, offset, length, layout))[0]


def read_float(
    buffer: bytes, block: int, offset: int, length: int = 4, layout: TagLayout = DEFAULT_LAYOUT
) -> float | None:
    """Little-endian IEEE-754 value.

    Returns None for widths other than 4 or 8 so callers can tell "not
    readable" apart from a stored 0.0.
    """
    fmt = _FLOAT_FORMATS.get(length)
    if fmt is None:
        return None
    return struct.unpack(fmt, byte_slice(buffer, block, offset, length, layout))[0]


def parse_datetime(text: str) -> datetime | None:
    try:
        return datetime.strptime(text.strip(), DATETIME_FORMAT)
    except ValueError:
        return None


def read_datetime(
    buffer: bytes, block: int, offset: int, length: int = 16, layout: TagLayout = DEFAULT_LAYOUT
) -> datetime | None:
    return parse_datetime(read_string(buffer, block, offset, length, layout))
