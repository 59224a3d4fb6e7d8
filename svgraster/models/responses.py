"""API response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    elements_registered: int = 0


class HitTarget(BaseModel):
    type: str
    id: Optional[str] = None


class HitTestResponse(BaseModel):
    hit: bool
    target_chain: list[HitTarget] = Field(default_factory=list, description="Hit element first, root last")
    cursor: str = ""
