"""
FastAPI application entry point for the heritage backend.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from heritage.config import get_settings
from heritage.routes import pages_router, router

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Heritage Backend", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(pages_router)

    # Mounted last so API routes and pages take precedence.
    if os.path.isdir(settings.data_dir):
        app.mount("/data", StaticFiles(directory=settings.data_dir), name="data")
    if os.path.isdir(settings.public_dir):
        app.mount("/", StaticFiles(directory=settings.public_dir), name="public")

    if not settings.unsplash_access_key:
        logger.info(
            "No UNSPLASH_ACCESS_KEY set; using source.unsplash.com fallback for images."
        )
    return app


app = create_app()
