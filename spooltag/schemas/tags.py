from typing import Literal

from pydantic import BaseModel, Field, field_validator

from spooltag.schemas.filament import FilamentInfo

# --- Decode schemas ---


class DecodeRequest(BaseModel):
    uid: str = Field(..., min_length=1, description="Tag UID, passed through unchanged")
    data: str = Field(..., min_length=1, description="Tag memory image as a hex string")
    layout: Literal["sector", "compressed", "linear"] | None = None
    technology: str | None = None
    debug: bool = False

    @field_validator("data")
    @classmethod
    def _data_is_hex(cls, value: str) -> str:
        cleaned = "".join(value.split())
        try:
            bytes.fromhex(cleaned)
        except ValueError:
            raise ValueError("data must be a hex string") from None
        return cleaned

    @property
    def buffer(self) -> bytes:
        return bytes.fromhex(self.data)


class DiagnosticsResponse(BaseModel):
    color_bytes: str = ""
    parsing_details: dict = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    block_data: dict[int, str] = Field(default_factory=dict)


class DecodeResponse(BaseModel):
    layout: str
    filament: FilamentInfo
    diagnostics: DiagnosticsResponse | None = None


# --- Field map schemas ---


class FieldSpecResponse(BaseModel):
    name: str
    block: int
    offset: int
    length: int
    kind: str
    description: str = ""
    optional: bool = False
