"""Element registry — every SVG element class is registered by tag via decorator.

Usage:
    @element("rect")
    class RectElement(PathElement):
        ...

Adding a new element = one class with the decorator. Unknown tags build the
childless placeholder element.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from svgraster.svg.elements.base import Element

logger = logging.getLogger(__name__)


class ElementRegistry:
    """Tag → element class."""

    def __init__(self) -> None:
        self._elements: dict[str, type["Element"]] = {}

    def register(self, tag: str, cls: type["Element"]) -> None:
        if tag in self._elements:
            raise ValueError(f"Duplicate element tag: {tag}")
        self._elements[tag] = cls
        logger.debug("Registered element <%s> (%s)", tag, cls.__name__)

    def get(self, tag: str) -> Optional[type["Element"]]:
        return self._elements.get(tag)

    def tags(self) -> list[str]:
        return sorted(self._elements)

    @property
    def count(self) -> int:
        return len(self._elements)


# Module-level singleton
_registry = ElementRegistry()


def get_registry() -> ElementRegistry:
    return _registry


def element(*tags: str):
    """Decorator to register an element class under one or more tags."""

    def decorator(cls):
        for tag in tags:
            _registry.register(tag, cls)
        return cls

    return decorator
