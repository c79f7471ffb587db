"""FastAPI application factory and CORS setup."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lorelink.config import get_settings
from lorelink.routers.context import router as context_router
from lorelink.utils.logging_config import get_logger

_logger = get_logger("lorelink.app")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="lorelink Context Engine", version="1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(context_router)
    _logger.info("application created", extra={"metadata": {"app_name": settings.app_name}})
    return app


app = create_app()
