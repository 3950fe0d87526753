from spooltag.schemas.filament import FilamentInfo
from spooltag.schemas.tags import (
    DecodeRequest,
    DecodeResponse,
    DiagnosticsResponse,
    FieldSpecResponse,
)

__all__ = [
    "FilamentInfo",
    "DecodeRequest",
    "DecodeResponse",
    "DiagnosticsResponse",
    "FieldSpecResponse",
]
