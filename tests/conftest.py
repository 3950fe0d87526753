"""Shared fixtures for tag decoder tests."""

from pathlib import Path

import pytest

from spooltag.services.dump_loader import TagDump, load_dump
from spooltag.services.tag_layout import get_layout

FIXTURES_DIR = Path(__file__).parent / "fixtures"
EXAMPLE_DUMP = FIXTURES_DIR / "pla_basic_orange-dump.json"


def build_buffer(blocks: dict[int, bytes | str], layout_name: str = "sector", size: int | None = None) -> bytes:
    """Build a tag image with ``blocks`` (block -> bytes or hex) placed for ``layout_name``."""
    dump = TagDump(
        uid="",
        blocks={n: bytes.fromhex(b) if isinstance(b, str) else bytes(b).ljust(16, b"\x00") for n, b in blocks.items()},
    )
    buffer = dump.to_buffer(get_layout(layout_name))
    return buffer if size is None else buffer[:size].ljust(size, b"\x00")


@pytest.fixture
def example_dump() -> TagDump:
    """RFID-Tag-Guide example dump of a PLA Basic (orange) spool."""
    return load_dump(EXAMPLE_DUMP)


@pytest.fixture
def example_buffer(example_dump) -> bytes:
    return example_dump.to_buffer(get_layout("sector"))
