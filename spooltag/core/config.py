from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "SpoolTag"
    debug: bool = False
    log_level: str = "INFO"

    # Addressing layout used when a caller does not pick one
    tag_layout: Literal["sector", "compressed", "linear"] = "sector"

    # API
    api_prefix: str = "/api/v1"

    class Config:
        env_prefix = "SPOOLTAG_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
