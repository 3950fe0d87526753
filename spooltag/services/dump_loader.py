"""Load MIFARE Classic tag dumps from disk.

Supported formats:
    - Proxmark3 JSON (``{"Card": {"UID": ...}, "blocks": {"0": "<hex>", ...}}``)
    - Block-list JSON (``{"uid": ..., "blocks": [{"index": 0, "data": "<hex>"}, ...]}``)
    - Flipper Zero ``.nfc`` text (``Block 4: 50 4C 41 ...``, unread bytes as ``??``)
    - Raw binary: 1024 bytes with sector trailers, or 768 bytes without
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from spooltag.services.tag_layout import (
    BYTES_PER_BLOCK,
    DATA_BYTES,
    TOTAL_BLOCKS,
    TOTAL_BYTES,
    TagLayout,
    get_layout,
    is_sector_trailer,
)

logger = logging.getLogger(__name__)

_FLIPPER_BLOCK = re.compile(r"^Block\s+(\d+)\s*:\s*(.+)$", re.IGNORECASE)
_FLIPPER_UID = re.compile(r"^UID\s*:\s*(.+)$", re.IGNORECASE)


class DumpFormatError(Exception):
    """Raised when a dump file cannot be parsed."""


@dataclass
class TagDump:
    uid: str
    blocks: dict[int, bytes] = field(default_factory=dict)
    source: str | None = None

    def to_buffer(self, layout: TagLayout) -> bytes:
        """Render the data blocks into the byte image ``layout`` expects."""
        buf = bytearray(layout.buffer_size())
        for block, data in self.blocks.items():
            if is_sector_trailer(block):
                continue
            start = layout.offset(block, 0)
            if start is None or start + BYTES_PER_BLOCK > len(buf):
                continue
            buf[start : start + BYTES_PER_BLOCK] = data[:BYTES_PER_BLOCK].ljust(BYTES_PER_BLOCK, b"\x00")
        return bytes(buf)

    @classmethod
    def from_buffer(cls, data: bytes, layout: TagLayout, uid: str | None = None, source: str | None = None):
        blocks = {}
        for block in range(TOTAL_BLOCKS):
            if is_sector_trailer(block):
                continue
            start = layout.offset(block, 0)
            if start is None or start + BYTES_PER_BLOCK > len(data):
                continue
            blocks[block] = bytes(data[start : start + BYTES_PER_BLOCK])
        return cls(uid=uid or _uid_from_blocks(blocks), blocks=blocks, source=source)


def load_dump(path: str | Path) -> TagDump:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DumpFormatError(f"Cannot read {path}: {e}") from e

    suffix = path.suffix.lower()
    if suffix == ".json":
        dump = parse_json_dump(raw.decode("utf-8", errors="replace"))
    elif suffix == ".nfc":
        dump = parse_flipper_dump(raw.decode("utf-8", errors="replace"))
    elif suffix in (".bin", ".dump", ".mfd"):
        dump = parse_binary_dump(raw)
    else:
        dump = _sniff(raw)

    dump.source = str(path)
    logger.debug("Loaded %s: uid=%s, %d blocks", path, dump.uid, len(dump.blocks))
    return dump


def parse_json_dump(text: str) -> TagDump:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise DumpFormatError(f"Invalid JSON dump: {e}") from e
    if not isinstance(doc, dict) or "blocks" not in doc:
        raise DumpFormatError('JSON dump has no "blocks" entry')

    entries = doc["blocks"]
    if isinstance(entries, dict):
        items = entries.items()
    elif isinstance(entries, list):
        items = ((e.get("index"), e.get("data")) for e in entries if isinstance(e, dict))
    else:
        raise DumpFormatError('"blocks" must be a mapping or a list')

    blocks = {}
    for index, data in items:
        try:
            blocks[int(index)] = _hex_block(str(data))
        except (TypeError, ValueError) as e:
            raise DumpFormatError(f"Invalid block {index!r}: {e}") from e

    uid = doc.get("uid") or (doc.get("Card") or {}).get("UID") or _uid_from_blocks(blocks)
    return TagDump(uid=str(uid).replace(" ", "").upper(), blocks=blocks)


def parse_flipper_dump(text: str) -> TagDump:
    uid = ""
    blocks = {}
    for line in text.splitlines():
        line = line.strip()
        uid_match = _FLIPPER_UID.match(line)
        if uid_match:
            uid = uid_match.group(1).replace(" ", "").upper()
            continue
        block_match = _FLIPPER_BLOCK.match(line)
        if not block_match:
            continue
        # "??" marks bytes the reader could not authenticate
        hex_data = " ".join("00" if b == "??" else b for b in block_match.group(2).split())
        try:
            blocks[int(block_match.group(1))] = _hex_block(hex_data)
        except ValueError as e:
            raise DumpFormatError(f"Invalid block line {line!r}: {e}") from e
    if not blocks:
        raise DumpFormatError("No 'Block N:' lines found in Flipper dump")
    return TagDump(uid=uid or _uid_from_blocks(blocks), blocks=blocks)


def parse_binary_dump(data: bytes) -> TagDump:
    if len(data) == TOTAL_BYTES:
        return TagDump.from_buffer(data, get_layout("linear"))
    if len(data) == DATA_BYTES:
        return TagDump.from_buffer(data, get_layout("sector"))
    raise DumpFormatError(
        f"Unexpected binary dump size {len(data)} bytes, expected {TOTAL_BYTES} (full) or {DATA_BYTES} (no trailers)"
    )


def _sniff(raw: bytes) -> TagDump:
    text = raw.lstrip()
    if text.startswith(b"{"):
        return parse_json_dump(raw.decode("utf-8", errors="replace"))
    if b"Block 0:" in raw or b"Filetype: Flipper" in raw:
        return parse_flipper_dump(raw.decode("utf-8", errors="replace"))
    return parse_binary_dump(raw)


def _hex_block(hex_data: str) -> bytes:
    data = bytes.fromhex("".join(hex_data.split()))
    if len(data) != BYTES_PER_BLOCK:
        raise ValueError(f"expected {BYTES_PER_BLOCK} bytes, got {len(data)}")
    return data


def _uid_from_blocks(blocks: dict[int, bytes]) -> str:
    # Block 0 starts with the 4-byte UID on MIFARE Classic 1K
    block0 = blocks.get(0)
    return block0[:4].hex().upper() if block0 else ""
