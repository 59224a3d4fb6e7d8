"""Resource loading — data URIs, local files and http(s) URLs for images and fonts.

Loads run on the session's worker pool; the scheduler polls completion at
tick boundaries, so no callback ever re-enters a frame.
"""

from __future__ import annotations

import base64
import gzip
import io
import logging
import os
from concurrent.futures import Executor, Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional
from urllib.parse import unquote_to_bytes, urljoin, urlparse
from urllib.request import url2pathname

import cairocffi
import httpx
from PIL import Image, UnidentifiedImageError

from svgraster.utils.rasterizer import image_to_surface

logger = logging.getLogger(__name__)

_SVG_MAGIC = (b"<svg", b"<?xml", b"<!DOC")


def open_data_url(url: str) -> bytes:
    """Decode a ``data:`` URL into bytes."""
    # dataurl := "data:" [ mediatype ] [ ";base64" ] "," data
    try:
        header, data = url.split(",", 1)
    except ValueError:
        raise OSError("bad data URL") from None
    header = header[5:]
    encoding = ""
    if header:
        semi = header.rfind(";")
        if semi >= 0 and "=" not in header[semi:]:
            encoding = header[semi + 1 :]

    raw = unquote_to_bytes(data)
    if encoding == "base64":
        raw = b"".join(raw.split())
        raw += b"=" * (-len(raw) % 4)
        return base64.b64decode(raw)
    return raw


def resolve_url(href: str, base_url: Optional[str] = None) -> str:
    if base_url and not href.startswith("data:"):
        return urljoin(base_url, href)
    return href


def origin_of(url: Optional[str]) -> str:
    """The ``scheme://host[:port]`` origin of an http(s) URL, else ``"null"``."""
    parsed = urlparse(url or "")
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return "null"


def fetch(url: str, timeout: float = 10.0, origin: Optional[str] = None) -> bytes:
    """GET an http(s) URL. Raises OSError on any transport or status error.

    With ``origin`` set the request is made as an anonymous cross-origin
    request: an ``Origin`` header is sent and a response from another
    origin must grant access through ``Access-Control-Allow-Origin``.
    """
    headers = {"Origin": origin} if origin is not None else None
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True, headers=headers)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise OSError(f"fetch failed: {e}") from e

    if origin is not None and origin_of(str(response.url)) != origin:
        allowed = response.headers.get("access-control-allow-origin")
        if allowed not in ("*", origin):
            raise OSError(f"cross-origin response does not allow {origin}")
    return response.content


def read_bytes(
    href: str,
    base_url: Optional[str] = None,
    timeout: float = 10.0,
    use_cors: bool = False,
) -> bytes:
    """Fetch the bytes behind ``href``. Raises OSError on failure."""
    url = resolve_url(href, base_url)
    if url.startswith("data:"):
        return open_data_url(url)
    parsed = urlparse(url)
    if parsed.scheme in ("http", "https"):
        return fetch(url, timeout, origin_of(base_url) if use_cors else None)
    if parsed.scheme == "file":
        url = url2pathname(parsed.path)
    with open(os.path.expanduser(url), "rb") as fd:
        return fd.read()


def is_svg_bytes(data: bytes) -> bool:
    head = data.lstrip()[:5]
    return data[:2] == b"\x1f\x8b" or any(head.startswith(m) for m in _SVG_MAGIC)


def svg_text(data: bytes) -> str:
    if data[:2] == b"\x1f\x8b":
        data = gzip.GzipFile(fileobj=io.BytesIO(data)).read()
    return data.decode("utf-8", errors="replace")


def decode_raster(data: bytes) -> cairocffi.ImageSurface:
    """Decode PNG/JPEG/GIF/... bytes into a cairo surface via Pillow."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return image_to_surface(img)
    except UnidentifiedImageError as e:
        raise OSError(f"unsupported image data: {e}") from e


class PendingResource:
    """A load running on the worker pool. Failures count as loaded, with no value."""

    def __init__(self, href: str, future: Future) -> None:
        self.href = href
        self._future = future
        self._value: Any = None
        self._resolved = False

    @property
    def loaded(self) -> bool:
        return self._future.done()

    @property
    def value(self) -> Any:
        if not self._resolved and self._future.done():
            self._resolved = True
            try:
                self._value = self._future.result()
            except (OSError, ValueError) as e:
                logger.warning("Failed to load %s: %s", _short(self.href), e)
        return self._value

    def wait(self, timeout: Optional[float] = None) -> Any:
        try:
            self._future.exception(timeout=timeout)
        except FutureTimeoutError:
            logger.warning("Timed out loading %s", _short(self.href))
        return self.value


def load(
    executor: Executor,
    href: str,
    decode: Callable[[bytes], Any],
    base_url: Optional[str] = None,
    timeout: float = 10.0,
    use_cors: bool = False,
) -> PendingResource:
    """Schedule ``decode(read_bytes(href))`` on ``executor``."""

    def _job() -> Any:
        return decode(read_bytes(href, base_url, timeout, use_cors))

    return PendingResource(href, executor.submit(_job))


def _short(href: str) -> str:
    return href if len(href) < 80 else href[:77] + "..."
