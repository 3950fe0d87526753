"""MIFARE Classic 1K geometry and block addressing strategies.

A Bambu tag is 16 sectors x 4 blocks x 16 bytes. The last block of every
sector (3, 7, 11, ...) is a sector trailer holding keys and access bits,
never filament data.

Dumps reach us in different shapes, so the mapping from a logical block
number to a byte offset in the buffer is a swappable strategy:

- ``SectorLayout``: the reader emits the three data blocks of each sector
  back to back (48 bytes per sector). Trailer blocks read as zeros.
- ``CompressedLayout``: trailers were stripped before the buffer reached us;
  the offset is computed from the block number alone.
- ``LinearLayout``: a full 1024-byte image with trailers still in place.
"""

from typing import Protocol

NUM_SECTORS = 16
BLOCKS_PER_SECTOR = 4
BYTES_PER_BLOCK = 16
DATA_BLOCKS_PER_SECTOR = BLOCKS_PER_SECTOR - 1
BYTES_PER_SECTOR = DATA_BLOCKS_PER_SECTOR * BYTES_PER_BLOCK  # 48
TOTAL_BLOCKS = NUM_SECTORS * BLOCKS_PER_SECTOR  # 64
TOTAL_BYTES = TOTAL_BLOCKS * BYTES_PER_BLOCK  # 1024
DATA_BYTES = NUM_SECTORS * BYTES_PER_SECTOR  # 768


def block_to_sector(block: int) -> int:
    return block // BLOCKS_PER_SECTOR


def is_sector_trailer(block: int) -> bool:
    return block % BLOCKS_PER_SECTOR == BLOCKS_PER_SECTOR - 1


def data_blocks_for_sector(sector: int) -> list[int]:
    """Return the data block numbers (non-trailer) for a given sector."""
    first = sector * BLOCKS_PER_SECTOR
    return [first + i for i in range(DATA_BLOCKS_PER_SECTOR)]


class TagLayout(Protocol):
    name: str

    def offset(self, block: int, local_offset: int) -> int | None:
        """Physical byte offset of ``local_offset`` inside ``block``, or None if the block holds no data."""
        ...

    def buffer_size(self) -> int:
        """Size of a complete image in this layout."""
        ...


class SectorLayout:
    name = "sector"

    def offset(self, block: int, local_offset: int) -> int | None:
        if block < 0 or is_sector_trailer(block):
            return None
        sector = block_to_sector(block)
        block_in_sector = block % BLOCKS_PER_SECTOR
        return sector * BYTES_PER_SECTOR + block_in_sector * BYTES_PER_BLOCK + local_offset

    def buffer_size(self) -> int:
        return DATA_BYTES


class CompressedLayout:
    name = "compressed"

    def offset(self, block: int, local_offset: int) -> int | None:
        if block < 0:
            return None
        return (block - block // BLOCKS_PER_SECTOR) * BYTES_PER_BLOCK + local_offset

    def buffer_size(self) -> int:
        return DATA_BYTES


class LinearLayout:
    name = "linear"

    def offset(self, block: int, local_offset: int) -> int | None:
        if block < 0 or is_sector_trailer(block):
            return None
        return block * BYTES_PER_BLOCK + local_offset

    def buffer_size(self) -> int:
        return TOTAL_BYTES


LAYOUTS: dict[str, TagLayout] = {
    layout.name: layout for layout in (SectorLayout(), CompressedLayout(), LinearLayout())
}

DEFAULT_LAYOUT: TagLayout = LAYOUTS["sector"]


def get_layout(name: str) -> TagLayout:
    """Resolve a layout by name ("sector", "compressed" or "linear")."""
    try:
        return LAYOUTS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown tag layout {name!r}, expected one of: {', '.join(LAYOUTS)}") from None
