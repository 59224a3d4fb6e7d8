"""RenderSession — all per-document mutable state, threaded through every element.

Definitions, style tables, animations, pending resources, the viewport stack
and the active painter belong to one document load, so several documents can
render side by side.
"""

from __future__ import annotations

import contextlib
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable, Optional

from svgraster.config import settings
from svgraster.engine import resources
from svgraster.engine.config import RenderOptions
from svgraster.engine.events import Mouse
from svgraster.engine.viewport import ViewPort
from svgraster.svg.properties import DEFAULT_FONT

if TYPE_CHECKING:
    from svgraster.engine.painter import Painter
    from svgraster.svg.elements.base import Element

logger = logging.getLogger(__name__)


class RenderSession:
    """Shared state for one loaded document."""

    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self.options = options or RenderOptions()
        self.max_virtual_pixels = settings.max_virtual_pixels

        # id → element; the first element registered under an id wins
        self.definitions: dict[str, "Element"] = {}
        # selector → {name → Property}, selector → "abc", selector → compiled
        self.styles: dict[str, dict] = {}
        self.styles_specificity: dict[str, str] = {}
        self.selectors: dict[str, Any] = {}

        self.animations: list["Element"] = []
        # elements with a pending resource (they expose ``loaded``)
        self.images: list[Any] = []
        # (family, pending font document)
        self.pending_fonts: list[tuple[str, resources.PendingResource]] = []

        self.viewport = ViewPort()
        self.painter: Optional["Painter"] = None
        self.mouse = Mouse()
        self.cursor = ""
        self.root: Optional["Element"] = None
        # use elements whose reference is being resolved right now
        self.active_uses: set["Element"] = set()

        self._unique_id = 0
        self._executor: Optional[ThreadPoolExecutor] = None

        if self.options.log:
            logging.getLogger("svgraster").setLevel(logging.DEBUG)

    def current_font(self) -> str:
        if self.painter is None:
            return DEFAULT_FONT
        return self.painter.font

    @contextlib.contextmanager
    def active_painter(self, painter: "Painter"):
        """Make ``painter`` the session painter while drawing offscreen."""
        previous = self.painter
        self.painter = painter
        try:
            yield painter
        finally:
            self.painter = previous

    def unique_id(self) -> str:
        self._unique_id += 1
        return f"svgraster{self._unique_id}"

    # ── resources ──

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=settings.loader_workers, thread_name_prefix="svgraster-load"
            )
        return self._executor

    def load(self, href: str, decode: Callable[[bytes], Any]) -> resources.PendingResource:
        return resources.load(
            self.executor,
            href,
            decode,
            self.options.base_url,
            timeout=settings.load_timeout,
            use_cors=self.options.use_cors,
        )

    def images_loaded(self) -> bool:
        return all(image.loaded for image in self.images) and all(
            pending.loaded for _, pending in self.pending_fonts
        )

    def wait_for_images(self, timeout: Optional[float] = None) -> bool:
        """Block until every pending resource settles. Returns ``images_loaded()``."""
        timeout = settings.load_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        pending = [image.pending for image in self.images if getattr(image, "pending", None) is not None]
        pending.extend(p for _, p in self.pending_fonts)
        for resource in pending:
            resource.wait(max(0.0, deadline - time.monotonic()))
        return self.images_loaded()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    # ── lookup ──

    def get_element_by_id(self, element_id: str) -> Optional["Element"]:
        return self.definitions.get(element_id)
