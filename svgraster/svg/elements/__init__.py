"""SVG element classes. Importing a module registers its tags."""

from __future__ import annotations

import importlib
import pkgutil


def register_elements() -> int:
    """Import every element module so the @element decorators fire.

    Returns the number of registered tags.
    """
    from svgraster.engine.registry import get_registry

    for _, module_name, _ in pkgutil.iter_modules(__path__):
        importlib.import_module(f"{__name__}.{module_name}")
    return get_registry().count
