"""FastAPI application factory."""

from __future__ import annotations
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wallaxis.api.routes import router
from wallaxis.utils.logging_config import configure_logging


def create_app(debug: bool | None = None) -> FastAPI:
    if debug is None:
        debug = os.environ.get("DEBUG", "false").lower() == "true"
    configure_logging(debug_mode=debug, log_dir=os.environ.get("WALLAXIS_LOG_DIR"))

    app = FastAPI(
        title="Wall Axis Engine",
        description="Wall centerline reconstruction and structural frame mapping",
        version="0.1.0",
    )

    # CORS — allow the drawing front-end
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    return app


app = create_app()
