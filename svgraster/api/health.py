"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from svgraster import __version__
from svgraster.models.responses import HealthResponse
from svgraster.svg.elements import register_elements

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        elements_registered=register_elements(),
    )
