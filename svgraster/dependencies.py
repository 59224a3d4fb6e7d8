"""FastAPI dependency injection."""

from __future__ import annotations

from svgraster.config import settings


def get_settings():
    return settings
