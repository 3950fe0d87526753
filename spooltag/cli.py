"""Command-line tag dump decoder.

Usage:
    spooltag decode dump.json [dump2.nfc ...] [--layout sector] [--json] [--debug]
"""

import argparse
import json
import logging
import sys

from spooltag.core.config import settings
from spooltag.services.diagnostics import DiagnosticCollector
from spooltag.services.dump_loader import DumpFormatError, load_dump
from spooltag.services.tag_decoder import decode
from spooltag.services.tag_layout import LAYOUTS, get_layout

logger = logging.getLogger(__name__)

_FIELD_LABELS = [
    ("uid", "Tag UID"),
    ("tray_uid", "Tray UID"),
    ("filament_type", "Material"),
    ("detailed_filament_type", "Detailed type"),
    ("material_variant_id", "Variant ID"),
    ("material_id", "Material ID"),
    ("material_name", "Material name"),
    ("series_name", "Series"),
    ("color_code_name", "Color code name"),
    ("color_hex", "Color"),
    ("color_name", "Color name"),
    ("color_count", "Colors"),
    ("spool_weight", "Spool weight (g)"),
    ("filament_diameter", "Diameter (mm)"),
    ("filament_length", "Length (mm)"),
    ("spool_width", "Spool width (mm)"),
    ("nozzle_diameter", "Nozzle (mm)"),
    ("drying_temperature", "Drying temp (C)"),
    ("drying_time", "Drying time (h)"),
    ("bed_temperature_type", "Bed temp type"),
    ("bed_temperature", "Bed temp (C)"),
    ("min_temperature", "Hotend min (C)"),
    ("max_temperature", "Hotend max (C)"),
    ("production_date", "Produced"),
    ("short_production_date", "Produced (short)"),
]


def _print_hex_dump(data: bytes, label: str, bytes_per_line: int = 16):
    """Print a hex dump with ASCII sidebar."""
    for i in range(0, len(data), bytes_per_line):
        chunk = data[i : i + bytes_per_line]
        hex_str = " ".join(f"{b:02X}" for b in chunk)
        ascii_str = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        print(f"    {label}{i:3d}: {hex_str:<{bytes_per_line * 3}}|{ascii_str}|")


def _print_info(info, collector: DiagnosticCollector | None):
    data = info.model_dump()
    for key, label in _FIELD_LABELS:
        print(f"    {label:<18} {data[key]}")

    if collector is None:
        return
    print("    --- blocks ---")
    for block, hex_data in sorted(collector.block_data.items()):
        _print_hex_dump(bytes.fromhex(hex_data), f"block {block:2d} @")
    if collector.errors:
        print("    --- warnings ---")
        for message in collector.errors:
            print(f"    ! {message}")


def cmd_decode(args) -> int:
    layout = get_layout(args.layout or settings.tag_layout)
    failures = 0
    results = []

    for path in args.files:
        try:
            dump = load_dump(path)
        except DumpFormatError as e:
            logger.error("%s: %s", path, e)
            failures += 1
            continue

        collector = DiagnosticCollector() if args.debug else None
        result = decode(dump.to_buffer(layout), dump.uid, collector, layout=layout)
        if not result.ok:
            logger.error("%s: %s", path, result.error.message)
            failures += 1
            continue

        if args.json:
            entry = {"file": str(path), "layout": layout.name, "filament": result.info.model_dump()}
            if collector is not None:
                entry["diagnostics"] = collector.to_dict()
            results.append(entry)
        else:
            print("=" * 60)
            print(f"{path} (layout={layout.name})")
            print("=" * 60)
            _print_info(result.info, collector)

    if args.json:
        print(json.dumps(results, indent=2))
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spooltag", description="Decode Bambu Lab filament spool RFID tag dumps")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_decode = sub.add_parser("decode", help="Decode one or more tag dump files")
    p_decode.add_argument("files", nargs="+", help="Dump files (.json, .nfc, .bin)")
    p_decode.add_argument("--layout", choices=sorted(LAYOUTS), help=f"Addressing layout (default: {settings.tag_layout})")
    p_decode.add_argument("--json", action="store_true", help="Print results as JSON")
    p_decode.add_argument("--debug", action="store_true", help="Show block dumps and decoder warnings")
    p_decode.set_defaults(func=cmd_decode)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose or settings.debug else settings.log_level.upper(),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
