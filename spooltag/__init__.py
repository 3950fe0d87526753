"""Bambu Lab filament spool RFID tag decoder."""

__version__ = "0.1.0"
