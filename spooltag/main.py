"""FastAPI application exposing the tag decoder."""

import logging

from fastapi import FastAPI

from spooltag.api.routes import tags
from spooltag.core.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)
    app.include_router(tags.router, prefix=settings.api_prefix)
    return app


app = create_app()
