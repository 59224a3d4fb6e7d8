"""POST /api/render and /api/hit-test — rasterize SVG markup, resolve pointer hits."""

from __future__ import annotations

import asyncio
import logging
import time

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from svgraster.config import Settings
from svgraster.dependencies import get_settings
from svgraster.engine.config import RenderOptions
from svgraster.engine.events import CLICK
from svgraster.engine.painter import Canvas
from svgraster.engine.scheduler import RenderScheduler, render
from svgraster.models.requests import HitTestRequest, RenderRequest
from svgraster.models.responses import HitTarget, HitTestResponse
from svgraster.svg.parser import SvgLoadError, load_document

logger = logging.getLogger(__name__)

router = APIRouter()


def _render_png(req: RenderRequest) -> bytes:
    options = RenderOptions.from_dict(req.options)
    canvas = render(req.svg, width=req.width, height=req.height, options=options)
    return canvas.to_png()


def _hit_test(req: HitTestRequest, settings: Settings) -> HitTestResponse:
    document = load_document(req.svg, RenderOptions(ignore_animation=True))
    try:
        session = document.session
        scheduler = RenderScheduler(document, Canvas(max_virtual_pixels=settings.max_virtual_pixels))
        session.wait_for_images()
        scheduler.start()
        if req.event == CLICK:
            scheduler.on_click(req.x, req.y)
        else:
            scheduler.on_mousemove(req.x, req.y)
        scheduler.tick()
    finally:
        document.close()

    chain: list[HitTarget] = []
    for event in scheduler.last_dispatched:
        node = event.target
        while node is not None:
            element_id = node.attribute("id")
            chain.append(HitTarget(type=node.type, id=element_id.value if element_id.has_value() else None))
            node = node.parent
    return HitTestResponse(hit=bool(chain), target_chain=chain, cursor=session.cursor)


@router.post("/render")
async def render_svg(req: RenderRequest) -> Response:
    """Rasterize the SVG and return a PNG."""
    start = time.perf_counter()
    loop = asyncio.get_running_loop()
    try:
        png = await loop.run_in_executor(None, _render_png, req)
    except SvgLoadError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    elapsed = (time.perf_counter() - start) * 1000
    logger.info("Rendered %d bytes of SVG in %.1f ms", len(req.svg), elapsed)
    return Response(content=png, media_type="image/png", headers={"X-Render-Time-Ms": f"{elapsed:.1f}"})


@router.post("/hit-test", response_model=HitTestResponse)
async def hit_test(req: HitTestRequest, settings: Settings = Depends(get_settings)) -> HitTestResponse:
    """Draw one frame and report which element a pointer event lands on."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, _hit_test, req, settings)
    except SvgLoadError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
