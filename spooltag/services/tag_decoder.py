"""Decode a Bambu Lab spool tag memory image into FilamentInfo.

decode() is a pure function: it reads the buffer in one pass, never raises
for data problems and returns a DecodeResult. Fields that cannot be read
degrade to zero/absent values; only a short buffer or an unexpected
exception fails the whole decode.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from spooltag.schemas.filament import FilamentInfo
from spooltag.services.byte_reader import byte_slice, read_hex
from spooltag.services.colors import color_name, combine_colors
from spooltag.services.diagnostics import DiagnosticSink
from spooltag.services.field_map import (
    FIELD_MAP,
    FieldSpec,
    extract_fields,
    referenced_blocks,
    required_blocks,
    required_sectors,
)
from spooltag.services.rfid_codes import color_code_name, material_name, series_name, split_variant_id
from spooltag.services.tag_layout import DEFAULT_LAYOUT, TagLayout, data_blocks_for_sector

logger = logging.getLogger(__name__)

MIN_BUFFER_LENGTH = 240

DEFAULT_FILAMENT_DIAMETER = 1.75
DEFAULT_NOZZLE_DIAMETER = 0.4
UNKNOWN_DATE = "Unknown"


class DecodeErrorKind(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    DECODE_EXCEPTION = "decode_exception"


@dataclass(frozen=True)
class DecodeError:
    kind: DecodeErrorKind
    message: str


class TagDecodeError(Exception):
    def __init__(self, error: DecodeError):
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> DecodeErrorKind:
        return self.error.kind


@dataclass(frozen=True)
class DecodeResult:
    info: FilamentInfo | None = None
    error: DecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> FilamentInfo:
        if self.error is not None:
            raise TagDecodeError(self.error)
        return self.info


def decode(
    buffer: bytes,
    uid: str,
    sink: DiagnosticSink | None = None,
    *,
    layout: TagLayout = DEFAULT_LAYOUT,
    technology: str | None = None,
    field_map: tuple[FieldSpec, ...] = FIELD_MAP,
) -> DecodeResult:
    """Decode ``buffer`` (laid out as ``layout``) read from tag ``uid``.

    Args:
        buffer: Tag memory image, at least MIN_BUFFER_LENGTH bytes.
        uid: Tag UID, copied into the result unchanged.
        sink: Optional diagnostic sink; observes, never alters the result.
        layout: Block addressing strategy the buffer was produced with.
        technology: Reader technology descriptor, logged only.
        field_map: Protocol table to decode with.

    Returns:
        DecodeResult holding either a FilamentInfo or a DecodeError.
    """
    logger.debug(
        "Decoding tag %s (%d bytes, layout=%s, technology=%s)", uid, len(buffer), layout.name, technology or "n/a"
    )

    if len(buffer) < MIN_BUFFER_LENGTH:
        message = f"Insufficient tag data: {len(buffer)} bytes, need at least {MIN_BUFFER_LENGTH}"
        logger.info("Tag %s: %s", uid, message)
        _notify(sink, "record_error", message)
        return DecodeResult(error=DecodeError(DecodeErrorKind.INSUFFICIENT_DATA, message))

    try:
        fields = extract_fields(buffer, layout, field_map)
        _record_blocks(buffer, layout, field_map, sink)
        _check_zeroed_blocks(buffer, layout, field_map, uid, sink)
        info = _build_filament_info(uid, fields, sink)
    except Exception as e:
        message = f"Failed to decode tag {uid}: {e}"
        logger.exception("Failed to decode tag %s", uid)
        _notify(sink, "record_error", message)
        return DecodeResult(error=DecodeError(DecodeErrorKind.DECODE_EXCEPTION, message))

    logger.debug("Decoded tag %s: %s %s", uid, info.detailed_filament_type or info.filament_type, info.color_hex)
    return DecodeResult(info=info)


def _build_filament_info(uid: str, fields: dict[str, Any], sink: DiagnosticSink | None) -> FilamentInfo:
    color_rgba = fields["color_rgba"]
    _notify(sink, "record_color_bytes", color_rgba)

    raw_color_count = fields["color_count"]
    color_count = raw_color_count or 1
    color_hex, primary_hex, secondary_hex = combine_colors(color_rgba, fields["second_color_abgr"], raw_color_count)

    production = fields["production_date"]
    production_date = production.isoformat(timespec="minutes") if production else UNKNOWN_DATE

    series_code, color_code = split_variant_id(fields["material_variant_id"])

    details = {
        "raw_color_count": raw_color_count,
        "color_format": fields["color_format"],
        "raw_filament_diameter": fields["filament_diameter"],
        "raw_nozzle_diameter": fields["nozzle_diameter"],
        "raw_spool_width": fields["spool_width"],
        "raw_filament_length_m": fields["filament_length"],
        "second_color_abgr": fields["second_color_abgr"],
        "unknown_block_17": fields["unknown_block_17"],
        "production_date_parsed": production is not None,
    }
    for name, value in details.items():
        _notify(sink, "record_parsing_detail", name, value)

    return FilamentInfo(
        uid=uid,
        tray_uid=fields["tray_uid"],
        filament_type=fields["filament_type"],
        detailed_filament_type=fields["detailed_filament_type"],
        material_variant_id=fields["material_variant_id"],
        material_id=fields["material_id"],
        material_name=material_name(fields["material_id"]),
        series_name=series_name(series_code),
        color_code_name=color_code_name(color_code, fields["material_id"]),
        color_hex=color_hex,
        primary_color_hex=primary_hex,
        secondary_color_hex=secondary_hex,
        color_alpha=color_rgba[3],
        color_name=color_name(primary_hex),
        color_count=color_count,
        color_format=fields["color_format"],
        spool_weight=fields["spool_weight"],
        filament_diameter=_float_or_default(fields["filament_diameter"], DEFAULT_FILAMENT_DIAMETER),
        filament_length=fields["filament_length"] * 1000,
        spool_width=round(fields["spool_width"] / 100.0, 2),
        nozzle_diameter=_float_or_default(fields["nozzle_diameter"], DEFAULT_NOZZLE_DIAMETER),
        drying_temperature=fields["drying_temperature"],
        drying_time=fields["drying_time"],
        bed_temperature_type=fields["bed_temperature_type"],
        bed_temperature=fields["bed_temperature"],
        max_temperature=fields["max_temperature"],
        min_temperature=fields["min_temperature"],
        x_cam_info_hex=fields["x_cam_info"].hex().upper(),
        production_date=production_date,
        short_production_date=fields["short_production_date"],
        short_production_date_hex=fields["short_production_date_hex"],
        unknown_block_17_hex=fields["unknown_block_17"].hex().upper(),
    )


def _float_or_default(value: float | None, default: float) -> float:
    # Absent, zero and non-finite values all mean "not written on the tag"
    if value is None or value == 0.0 or not math.isfinite(value):
        return default
    return round(value, 3)


def _record_blocks(buffer: bytes, layout: TagLayout, field_map: tuple[FieldSpec, ...], sink: DiagnosticSink | None):
    if sink is None:
        return
    for block in referenced_blocks(field_map):
        _notify(sink, "record_block_data", block, read_hex(buffer, block, 0, 16, layout))


def _check_zeroed_blocks(
    buffer: bytes, layout: TagLayout, field_map: tuple[FieldSpec, ...], uid: str, sink: DiagnosticSink | None
):
    """Warn about sectors and blocks that read back as all zeros (usually a failed authentication).

    A fully zeroed sector gets one sector-level message. Otherwise each
    zeroed block that holds a required field is reported on its own.
    """
    needed = set(required_blocks(field_map))
    for sector in required_sectors(field_map):
        blocks = data_blocks_for_sector(sector)
        zeroed = [block for block in blocks if not any(byte_slice(buffer, block, 0, 16, layout))]
        if len(zeroed) == len(blocks):
            _warn(
                uid,
                sink,
                f"Sector {sector} (blocks {', '.join(str(b) for b in blocks)}) is all zeros; "
                "authentication likely failed, dependent fields read as 0",
            )
            continue
        for block in zeroed:
            if block in needed:
                _warn(uid, sink, f"Block {block} is all zeros; dependent fields read as 0")


def _warn(uid: str, sink: DiagnosticSink | None, message: str):
    logger.warning("Tag %s: %s", uid, message)
    _notify(sink, "record_error", message)


def _notify(sink: DiagnosticSink | None, method: str, *args):
    if sink is None:
        return
    handler = getattr(sink, method, None)
    if handler is None:
        return
    try:
        handler(*args)
    except Exception as e:
        logger.warning("Diagnostic sink %s.%s failed: %s", type(sink).__name__, method, e)
