"""Bambu Lab tag field map.

Block layout from the community RFID-Tag-Guide
(https://github.com/Bambu-Research-Group/RFID-Tag-Guide). All multi-byte
numbers are little-endian. Adding a tag-format variant means adding rows,
not code.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from spooltag.services.byte_reader import byte_slice, read_datetime, read_float, read_hex, read_string, read_uint
from spooltag.services.tag_layout import DEFAULT_LAYOUT, TagLayout, block_to_sector


class FieldKind(str, Enum):
    STRING = "string"
    HEX = "hex"
    BYTES = "bytes"
    UINT = "uint"
    FLOAT = "float"
    DATETIME = "datetime"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    block: int
    offset: int
    length: int
    kind: FieldKind
    description: str = ""
    optional: bool = False

    def __post_init__(self):
        if self.offset < 0 or self.length <= 0 or self.offset + self.length > 16:
            raise ValueError(f"Field {self.name!r} does not fit in a 16-byte block")
        if self.kind is FieldKind.UINT and self.length not in (2, 4):
            raise ValueError(f"Field {self.name!r}: unsigned integers must be 2 or 4 bytes")

    @property
    def sector(self) -> int:
        return block_to_sector(self.block)

    def read(self, buffer: bytes, layout: TagLayout = DEFAULT_LAYOUT) -> Any:
        args = (buffer, self.block, self.offset, self.length, layout)
        if self.kind is FieldKind.STRING:
            return read_string(*args)
        if self.kind is FieldKind.HEX:
            return read_hex(*args)
        if self.kind is FieldKind.UINT:
            return read_uint(*args)
        if self.kind is FieldKind.FLOAT:
            return read_float(*args)
        if self.kind is FieldKind.DATETIME:
            return read_datetime(*args)
        return byte_slice(*args)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "block": self.block,
            "offset": self.offset,
            "length": self.length,
            "kind": self.kind.value,
            "description": self.description,
            "optional": self.optional,
        }


FIELD_MAP: tuple[FieldSpec, ...] = (
    # Sector 0
    FieldSpec("material_variant_id", 1, 0, 8, FieldKind.STRING, "Material variant id, e.g. A00-K0"),
    FieldSpec("material_id", 1, 8, 8, FieldKind.STRING, "Material id, e.g. GFA00"),
    FieldSpec("filament_type", 2, 0, 16, FieldKind.STRING, "Material type, e.g. PLA"),
    # Sector 1
    FieldSpec("detailed_filament_type", 4, 0, 16, FieldKind.STRING, "Detailed type, e.g. PLA Basic"),
    FieldSpec("color_rgba", 5, 0, 4, FieldKind.BYTES, "Primary color RGBA"),
    FieldSpec("spool_weight", 5, 4, 2, FieldKind.UINT, "Spool weight (g)"),
    FieldSpec("filament_diameter", 5, 8, 4, FieldKind.FLOAT, "Filament diameter (mm)"),
    FieldSpec("drying_temperature", 6, 0, 2, FieldKind.UINT, "Drying temperature (C)"),
    FieldSpec("drying_time", 6, 2, 2, FieldKind.UINT, "Drying time (h)"),
    FieldSpec("bed_temperature_type", 6, 4, 2, FieldKind.UINT, "Bed temperature type"),
    FieldSpec("bed_temperature", 6, 6, 2, FieldKind.UINT, "Bed temperature (C)"),
    FieldSpec("max_temperature", 6, 8, 2, FieldKind.UINT, "Max hotend temperature (C)"),
    FieldSpec("min_temperature", 6, 10, 2, FieldKind.UINT, "Min hotend temperature (C)"),
    # Sector 2
    FieldSpec("x_cam_info", 8, 0, 12, FieldKind.BYTES, "X-cam info (opaque)"),
    FieldSpec("nozzle_diameter", 8, 12, 4, FieldKind.FLOAT, "Nozzle diameter (mm)"),
    FieldSpec("tray_uid", 9, 0, 16, FieldKind.HEX, "Tray UID, shared by both tags of a spool"),
    FieldSpec("spool_width", 10, 4, 2, FieldKind.UINT, "Spool width (mm x 100)"),
    # Sector 3
    FieldSpec("production_date", 12, 0, 16, FieldKind.DATETIME, "Production date, yyyy_MM_dd_HH_mm"),
    FieldSpec("short_production_date", 13, 0, 16, FieldKind.STRING, "Short production date"),
    FieldSpec("short_production_date_hex", 13, 0, 16, FieldKind.HEX, "Short production date, raw"),
    FieldSpec("filament_length", 14, 4, 2, FieldKind.UINT, "Filament length (m)"),
    # Sector 4
    FieldSpec("color_format", 16, 0, 2, FieldKind.UINT, "Format identifier", optional=True),
    FieldSpec("color_count", 16, 2, 2, FieldKind.UINT, "Raw color count", optional=True),
    FieldSpec("second_color_abgr", 16, 4, 4, FieldKind.BYTES, "Second color, stored ABGR", optional=True),
    FieldSpec("unknown_block_17", 17, 0, 2, FieldKind.BYTES, "Unknown, kept for diagnostics", optional=True),
)


def extract_fields(
    buffer: bytes, layout: TagLayout = DEFAULT_LAYOUT, field_map: tuple[FieldSpec, ...] = FIELD_MAP
) -> dict[str, Any]:
    """Read every field of ``field_map`` independently."""
    return {spec.name: spec.read(buffer, layout) for spec in field_map}


def referenced_blocks(field_map: tuple[FieldSpec, ...] = FIELD_MAP) -> list[int]:
    return sorted({spec.block for spec in field_map})


def required_sectors(field_map: tuple[FieldSpec, ...] = FIELD_MAP) -> list[int]:
    """Sectors holding at least one field every tag carries."""
    return sorted({spec.sector for spec in field_map if not spec.optional})


def required_blocks(field_map: tuple[FieldSpec, ...] = FIELD_MAP) -> list[int]:
    return sorted({spec.block for spec in field_map if not spec.optional})


def replace_field(field_map: tuple[FieldSpec, ...], name: str, **changes) -> tuple[FieldSpec, ...]:
    """Copy of ``field_map`` with the row ``name`` changed."""
    if not any(spec.name == name for spec in field_map):
        raise KeyError(name)
    return tuple(replace(spec, **changes) if spec.name == name else spec for spec in field_map)


# Tags that store the filament diameter as a float64 across block 5 bytes 8-15
FIELD_MAP_F64_DIAMETER = replace_field(FIELD_MAP, "filament_diameter", length=8)
