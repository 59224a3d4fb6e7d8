"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from svgraster import __version__
from svgraster.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.svgraster_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="svgraster",
        description="SVG-to-raster rendering engine with animation and hit-testing",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import all element modules to trigger registration
    _register_elements()

    from svgraster.api.router import api_router

    app.include_router(api_router)

    return app


def _register_elements() -> None:
    """Import all element modules so @element decorators fire."""
    from svgraster.svg.elements import register_elements

    count = register_elements()
    logging.getLogger(__name__).debug("%d element tags registered", count)


app = create_app()
