"""Diagnostic sinks for the tag decoder.

A sink observes intermediate values of a decode (color bytes, parsed
fields, block dumps, errors). It never changes the decode outcome.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class DiagnosticSink(Protocol):
    def record_color_bytes(self, data: bytes) -> None: ...

    def record_parsing_detail(self, name: str, value: Any) -> None: ...

    def record_error(self, message: str) -> None: ...

    def record_block_data(self, block: int, hex_data: str) -> None: ...


class LoggingDiagnosticSink:
    """Forwards every diagnostic to a logger."""

    def __init__(self, log: logging.Logger | None = None, level: int = logging.DEBUG):
        self._log = log or logger
        self._level = level

    def record_color_bytes(self, data: bytes) -> None:
        self._log.log(self._level, "Color bytes: %s", data.hex().upper())

    def record_parsing_detail(self, name: str, value: Any) -> None:
        self._log.log(self._level, "%s = %r", name, value)

    def record_error(self, message: str) -> None:
        self._log.warning(message)

    def record_block_data(self, block: int, hex_data: str) -> None:
        self._log.log(self._level, "Block %2d: %s", block, hex_data)


class DiagnosticCollector:
    """Buffers diagnostics for display after the decode."""

    def __init__(self):
        self.color_bytes = ""
        self.parsing_details: dict[str, Any] = {}
        self.errors: list[str] = []
        self.block_data: dict[int, str] = {}

    def record_color_bytes(self, data: bytes) -> None:
        self.color_bytes = data.hex().upper()

    def record_parsing_detail(self, name: str, value: Any) -> None:
        self.parsing_details[name] = value

    def record_error(self, message: str) -> None:
        self.errors.append(message)

    def record_block_data(self, block: int, hex_data: str) -> None:
        self.block_data[block] = hex_data

    def reset(self):
        self.color_bytes = ""
        self.parsing_details.clear()
        self.errors.clear()
        self.block_data.clear()

    def to_dict(self) -> dict:
        return {
            "color_bytes": self.color_bytes,
            "parsing_details": {k: _jsonable(v) for k, v in self.parsing_details.items()},
            "errors": list(self.errors),
            "block_data": dict(self.block_data),
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex().upper()
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)
