"""svgraster command line — render SVG files (or a folder of them) to PNG.

    svgraster drawing.svg -o drawing.png --width 512
    svgraster icons/ -o icons_png/ --frames 15
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from svgraster.config import settings
from svgraster.engine.config import RenderOptions
from svgraster.engine.painter import Canvas
from svgraster.engine.scheduler import RenderScheduler
from svgraster.svg.parser import SvgLoadError, load_document

logger = logging.getLogger(__name__)


def render_file(
    in_path: str,
    out_path: str,
    width: Optional[float] = None,
    height: Optional[float] = None,
    frames: int = 0,
) -> bool:
    """Render one file. ``frames`` ticks animations before exporting."""
    options = RenderOptions(scale_width=width, scale_height=height, ignore_mouse=True)
    try:
        document = load_document(in_path, options)
    except SvgLoadError as e:
        print(f"  ERROR: {e}")
        return False

    try:
        canvas = Canvas(max_virtual_pixels=document.session.max_virtual_pixels)
        scheduler = RenderScheduler(document, canvas)
        document.session.wait_for_images()
        scheduler.start()
        for _ in range(frames):
            scheduler.tick()
        canvas.to_png(out_path)
    finally:
        document.close()

    print(f"  {canvas.width}x{canvas.height} → {out_path}")
    return True


def _png_name(path: str) -> str:
    return os.path.splitext(path)[0] + ".png"


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="svgraster — render SVG to PNG")
    parser.add_argument("input", help="SVG file or folder of SVGs")
    parser.add_argument("-o", "--output", help="Output file or folder")
    parser.add_argument("--width", type=float, help="Scale to this width in pixels")
    parser.add_argument("--height", type=float, help="Scale to this height in pixels")
    parser.add_argument("--frames", type=int, default=0, help="Animation frames to advance before export")
    parser.add_argument("--log-level", default=settings.svgraster_log_level, help="Logging level")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if os.path.isdir(args.input):
        # Batch mode
        svg_files = [f for f in os.listdir(args.input) if f.lower().endswith(".svg")]
        if not svg_files:
            print("No .svg files found in folder.")
            return 1

        out_dir = args.output or args.input.rstrip("/") + "_png"
        os.makedirs(out_dir, exist_ok=True)

        print(f"Rendering {len(svg_files)} files...\n")
        success = 0
        for fname in sorted(svg_files):
            print(f"[{fname}]")
            out_path = os.path.join(out_dir, _png_name(fname))
            if render_file(os.path.join(args.input, fname), out_path, args.width, args.height, args.frames):
                success += 1

        print(f"\nDone: {success}/{len(svg_files)} rendered → {out_dir}")
        return 0 if success == len(svg_files) else 1

    if not os.path.exists(args.input):
        print(f"File not found: {args.input}")
        return 1

    print(f"[{os.path.basename(args.input)}]")
    ok = render_file(args.input, args.output or _png_name(args.input), args.width, args.height, args.frames)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
