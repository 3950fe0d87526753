from pydantic import BaseModel, Field


class FilamentInfo(BaseModel):
    """Filament attributes decoded from one Bambu Lab spool tag."""

    uid: str = Field(description="Tag UID as supplied by the reader")
    tray_uid: str = Field(description="Tray UID, shared by both tags on a spool")

    filament_type: str
    detailed_filament_type: str
    material_variant_id: str
    material_id: str
    material_name: str | None = Field(default=None, description="Display name for material_id")
    series_name: str | None = Field(default=None, description="Display name for the series code in material_variant_id")
    color_code_name: str | None = Field(default=None, description="Display name for the color code in material_variant_id")

    color_hex: str = Field(description='Display color, "#RRGGBB" or "#RRGGBB / #RRGGBB"')
    primary_color_hex: str
    secondary_color_hex: str | None = None
    color_alpha: int
    color_name: str
    color_count: int = Field(ge=1)
    color_format: int

    spool_weight: int = Field(description="Spool weight in grams")
    filament_diameter: float = Field(description="Filament diameter in mm")
    filament_length: int = Field(description="Filament length in mm")
    spool_width: float = Field(description="Spool width in mm")
    nozzle_diameter: float = Field(description="Nozzle diameter in mm")

    drying_temperature: int
    drying_time: int
    bed_temperature_type: int
    bed_temperature: int
    max_temperature: int
    min_temperature: int

    x_cam_info_hex: str
    production_date: str = Field(description='ISO date to the minute, or "Unknown"')
    short_production_date: str
    short_production_date_hex: str
    unknown_block_17_hex: str

    class Config:
        frozen = True
