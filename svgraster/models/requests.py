"""API request models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class RenderRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG markup")
    width: Optional[float] = Field(default=None, gt=0, description="Scale the document to this width")
    height: Optional[float] = Field(default=None, gt=0, description="Scale the document to this height")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Render options, snake_case or camelCase (e.g. ignoreClear=True)",
    )


class HitTestRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG markup")
    x: float = Field(..., description="Pointer x in canvas pixels")
    y: float = Field(..., description="Pointer y in canvas pixels")
    event: str = Field(default="click", pattern="^(click|mousemove)$", description="Pointer event kind")
