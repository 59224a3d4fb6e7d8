"""Tests for the element registry."""

from __future__ import annotations

import pytest

from svgraster.engine.registry import ElementRegistry, get_registry


def test_register_and_lookup():
    registry = ElementRegistry()

    class Dummy:
        pass

    registry.register("dummy", Dummy)
    assert registry.get("dummy") is Dummy
    assert registry.get("missing") is None
    assert registry.count == 1


def test_duplicate_tag_raises():
    registry = ElementRegistry()
    registry.register("x", object)
    with pytest.raises(ValueError):
        registry.register("x", object)


def test_builtin_elements_registered():
    tags = get_registry().tags()
    for tag in ("svg", "g", "rect", "path", "text", "linearGradient", "mask", "animate", "feGaussianBlur"):
        assert tag in tags
