"""Unit tests for the tag decoder."""

import struct
from unittest.mock import patch

import pytest

from spooltag.services.diagnostics import DiagnosticCollector
from spooltag.services.field_map import FIELD_MAP, FIELD_MAP_F64_DIAMETER
from spooltag.services.tag_decoder import (
    MIN_BUFFER_LENGTH,
    DecodeErrorKind,
    DecodeResult,
    TagDecodeError,
    decode,
)
from spooltag.services.tag_layout import get_layout
from tests.conftest import build_buffer


class TestInsufficientData:
    """Buffers shorter than the minimum never decode."""

    @pytest.mark.parametrize("length", [0, 1, 50, 80, MIN_BUFFER_LENGTH - 1])
    def test_short_buffer_fails(self, length):
        result = decode(bytes(length), "12345678")

        assert not result.ok
        assert result.info is None
        assert result.error.kind is DecodeErrorKind.INSUFFICIENT_DATA

    def test_short_buffer_fails_regardless_of_content(self, example_buffer):
        result = decode(example_buffer[: MIN_BUFFER_LENGTH - 1], "75886B1D")
        assert result.error.kind is DecodeErrorKind.INSUFFICIENT_DATA

    def test_short_buffer_is_reported_to_sink(self):
        collector = DiagnosticCollector()
        decode(bytes(10), "AA", collector)
        assert len(collector.errors) == 1
        assert "Insufficient" in collector.errors[0]

    def test_exact_minimum_length_decodes(self):
        assert decode(bytes(MIN_BUFFER_LENGTH), "00000000").ok

    def test_unwrap_raises_tag_decode_error(self):
        with pytest.raises(TagDecodeError) as exc_info:
            decode(bytes(10), "AA").unwrap()
        assert exc_info.value.kind is DecodeErrorKind.INSUFFICIENT_DATA


class TestExampleDump:
    """Golden values from the RFID-Tag-Guide example dump."""

    @pytest.fixture
    def info(self, example_buffer):
        result = decode(example_buffer, "75886B1D")
        assert result.ok, result.error
        return result.info

    def test_uid_is_passed_through(self, info):
        assert info.uid == "75886B1D"

    def test_material_fields(self, info):
        assert info.material_variant_id == "A00-A0"
        assert info.material_id == "GFA00"
        assert info.filament_type == "PLA"
        assert info.detailed_filament_type == "PLA Basic"

    def test_color(self, info):
        assert info.color_hex == "#FF6A13"
        assert info.primary_color_hex == "#FF6A13"
        assert info.secondary_color_hex is None
        assert info.color_alpha == 0xFF
        assert info.color_name == "Reddish"
        assert info.color_count == 1

    def test_weight_and_dimensions(self, info):
        assert info.spool_weight == 250
        assert info.filament_diameter == pytest.approx(1.75)
        assert info.nozzle_diameter == pytest.approx(0.2)
        assert info.spool_width == pytest.approx(66.25)
        assert info.filament_length == 82000

    def test_temperatures(self, info):
        assert info.drying_temperature == 55
        assert info.drying_time == 8
        assert info.bed_temperature_type == 1
        assert info.bed_temperature == 45
        assert info.max_temperature == 220
        assert info.min_temperature == 220

    def test_tray_uid_and_opaque_blocks(self, info):
        assert info.tray_uid == "D7AC3B89A16B47C4B061728044E1F2D5"
        assert info.x_cam_info_hex == "8813100EE803E8039A99193F"
        assert info.unknown_block_17_hex == "0000"

    def test_production_dates(self, info):
        assert info.production_date == "2022-10-15T08:26"
        assert info.short_production_date == "6092202"
        assert info.short_production_date_hex == "36303932323032000000000000000000"

    def test_decoding_is_deterministic(self, example_buffer):
        first = decode(example_buffer, "75886B1D")
        second = decode(example_buffer, "75886B1D")
        assert first == second
        assert first.info.model_dump() == second.info.model_dump()


class TestMinimalBuffer:
    def test_red_spool_of_1000g(self):
        buffer = build_buffer({5: bytes([0xFF, 0x00, 0x00, 0xFF, 0xE8, 0x03])}, size=MIN_BUFFER_LENGTH)

        info = decode(buffer, "01020304").unwrap()

        assert info.color_hex == "#FF0000"
        assert info.color_name == "Red"
        assert info.spool_weight == 1000


class TestFloatDefaults:
    @pytest.mark.parametrize("field_map,fmt", [(FIELD_MAP, "<f"), (FIELD_MAP_F64_DIAMETER, "<d")])
    def test_zero_filament_diameter_defaults_to_1_75(self, field_map, fmt):
        buffer = build_buffer({5: bytes(8) + struct.pack(fmt, 0.0)})
        assert decode(buffer, "AA", field_map=field_map).unwrap().filament_diameter == 1.75

    @pytest.mark.parametrize("field_map,fmt", [(FIELD_MAP, "<f"), (FIELD_MAP_F64_DIAMETER, "<d")])
    def test_stored_filament_diameter_is_used(self, field_map, fmt):
        buffer = build_buffer({5: bytes(8) + struct.pack(fmt, 2.85)})
        assert decode(buffer, "AA", field_map=field_map).unwrap().filament_diameter == pytest.approx(2.85)

    def test_float64_diameter_reads_all_eight_bytes(self):
        # A float32 read only sees the low half of the mantissa
        buffer = build_buffer({5: bytes(8) + struct.pack("<d", 2.85)})
        assert decode(buffer, "AA").unwrap().filament_diameter != pytest.approx(2.85)
        assert decode(buffer, "AA", field_map=FIELD_MAP_F64_DIAMETER).unwrap().filament_diameter == pytest.approx(2.85)

    def test_zero_nozzle_diameter_defaults_to_0_4(self):
        buffer = build_buffer({8: bytes(12) + struct.pack("<f", 0.0)})
        assert decode(buffer, "AA").unwrap().nozzle_diameter == 0.4

    def test_nan_nozzle_diameter_defaults_to_0_4(self):
        buffer = build_buffer({8: bytes(12) + struct.pack("<f", float("nan"))})
        assert decode(buffer, "AA").unwrap().nozzle_diameter == 0.4


class TestColorCount:
    @pytest.mark.parametrize("raw_count", [0, 1])
    def test_single_color(self, raw_count):
        block16 = struct.pack("<HH", 2, raw_count) + bytes([0xFF, 0x00, 0xFF, 0x00])
        buffer = build_buffer({5: bytes([0x12, 0x34, 0x56, 0xFF]), 16: block16})

        info = decode(buffer, "AA").unwrap()

        assert info.color_hex == "#123456"
        assert info.secondary_color_hex is None
        assert info.color_count == 1

    def test_dual_color_reverses_abgr(self):
        # Stored A, B, G, R -> red = 0x11, green = 0x22, blue = 0x33
        block16 = struct.pack("<HH", 2, 2) + bytes([0xFF, 0x33, 0x22, 0x11])
        buffer = build_buffer({5: bytes([0xFF, 0x6A, 0x13, 0xFF]), 16: block16})

        info = decode(buffer, "AA").unwrap()

        assert info.color_count == 2
        assert info.color_format == 2
        assert info.secondary_color_hex == "#112233"
        assert info.color_hex == "#FF6A13 / #112233"
        assert info.color_name == "Reddish"


class TestProductionDate:
    def test_unparseable_date_is_unknown(self):
        buffer = build_buffer({12: b"not a date"})
        assert decode(buffer, "AA").unwrap().production_date == "Unknown"

    def test_empty_date_is_unknown(self):
        assert decode(bytes(MIN_BUFFER_LENGTH), "AA").unwrap().production_date == "Unknown"


class TestAuthenticationFailure:
    """A sector that failed authentication reads back as zeros."""

    def test_zeroed_sector_decodes_with_zero_fields(self, example_dump):
        for block in (4, 5, 6):
            example_dump.blocks[block] = bytes(16)
        buffer = example_dump.to_buffer(get_layout("sector"))
        collector = DiagnosticCollector()

        result = decode(buffer, "75886B1D", collector)

        assert result.ok
        info = result.info
        assert info.spool_weight == 0
        assert info.drying_temperature == 0
        assert info.bed_temperature == 0
        assert info.min_temperature == 0
        assert info.max_temperature == 0
        assert info.detailed_filament_type == ""
        # Fields outside the failed sector are unaffected
        assert info.filament_type == "PLA"
        assert info.tray_uid == "D7AC3B89A16B47C4B061728044E1F2D5"
        assert any("Sector 1" in message for message in collector.errors)

    def test_zeroed_sector_is_reported_once(self, example_dump):
        for block in (4, 5, 6):
            example_dump.blocks[block] = bytes(16)
        collector = DiagnosticCollector()

        decode(example_dump.to_buffer(get_layout("sector")), "75886B1D", collector)

        assert len(collector.errors) == 1
        assert collector.errors[0].startswith("Sector 1 (blocks 4, 5, 6)")

    def test_single_zeroed_block_is_reported(self, example_dump):
        example_dump.blocks[6] = bytes(16)
        collector = DiagnosticCollector()

        info = decode(example_dump.to_buffer(get_layout("sector")), "75886B1D", collector).unwrap()

        assert (info.drying_temperature, info.bed_temperature, info.max_temperature) == (0, 0, 0)
        # The rest of the sector still decodes
        assert info.detailed_filament_type == "PLA Basic"
        assert info.spool_weight == 250
        assert collector.errors == ["Block 6 is all zeros; dependent fields read as 0"]

    def test_zeroed_optional_block_is_not_reported(self, example_buffer):
        # Block 16 is all zeros on the example tag, which is single-color
        collector = DiagnosticCollector()
        decode(example_buffer, "75886B1D", collector)
        assert not any("Block 16" in message for message in collector.errors)

    def test_intact_tag_records_no_sector_warning(self, example_buffer):
        collector = DiagnosticCollector()
        decode(example_buffer, "75886B1D", collector)
        assert not any("all zeros" in message for message in collector.errors)


class TestDiagnostics:
    def test_sink_does_not_change_result(self, example_buffer):
        without_sink = decode(example_buffer, "75886B1D")
        with_sink = decode(example_buffer, "75886B1D", DiagnosticCollector())
        assert without_sink == with_sink

    def test_collector_receives_color_bytes_and_blocks(self, example_buffer):
        collector = DiagnosticCollector()
        decode(example_buffer, "75886B1D", collector)

        assert collector.color_bytes == "FF6A13FF"
        assert collector.block_data[6] == "3700080001002D00DC00DC0000000000"
        assert collector.parsing_details["raw_color_count"] == 0
        assert collector.parsing_details["production_date_parsed"] is True

    def test_failing_sink_is_ignored(self, example_buffer):
        class BrokenSink:
            def record_color_bytes(self, data):
                raise RuntimeError("display gone")

            def record_parsing_detail(self, name, value):
                raise RuntimeError("display gone")

            def record_error(self, message):
                raise RuntimeError("display gone")

        result = decode(example_buffer, "75886B1D", BrokenSink())

        assert result == decode(example_buffer, "75886B1D")

    def test_sink_without_block_recording_is_supported(self, example_buffer):
        class MinimalSink:
            def __init__(self):
                self.errors = []

            def record_color_bytes(self, data):
                pass

            def record_parsing_detail(self, name, value):
                pass

            def record_error(self, message):
                self.errors.append(message)

        sink = MinimalSink()
        assert decode(example_buffer, "75886B1D", sink).ok
        assert sink.errors == []


class TestDecodeException:
    def test_unexpected_exception_fails_whole_decode(self, example_buffer):
        collector = DiagnosticCollector()
        with patch("spooltag.services.tag_decoder.combine_colors", side_effect=ValueError("boom")):
            result = decode(example_buffer, "75886B1D", collector)

        assert isinstance(result, DecodeResult)
        assert result.info is None
        assert result.error.kind is DecodeErrorKind.DECODE_EXCEPTION
        assert "boom" in result.error.message
        assert any("boom" in message for message in collector.errors)

    def test_incomplete_field_map_fails_whole_decode(self, example_buffer):
        from spooltag.services.field_map import FIELD_MAP

        partial = tuple(spec for spec in FIELD_MAP if spec.name != "tray_uid")
        result = decode(example_buffer, "75886B1D", field_map=partial)

        assert result.error.kind is DecodeErrorKind.DECODE_EXCEPTION


class TestProductCodeNames:
    def test_example_tag_names(self, example_buffer):
        info = decode(example_buffer, "75886B1D").unwrap()

        assert info.material_name == "PLA Basic"
        assert info.series_name == "PLA Standard A00"
        assert info.color_code_name == "Orange"

    def test_unknown_codes_keep_the_raw_code(self):
        buffer = build_buffer({1: b"Z99-Q9\x00\x00GFZ99\x00\x00\x00"})

        info = decode(buffer, "AA").unwrap()

        assert info.material_name == "Unknown Material (GFZ99)"
        assert info.series_name == "Unknown Series (Z99)"
        assert info.color_code_name == "Unknown Colour (Q9)"

    def test_blank_block_has_no_names(self):
        info = decode(bytes(MIN_BUFFER_LENGTH), "AA").unwrap()

        assert info.material_name is None
        assert info.series_name is None
        assert info.color_code_name is None
