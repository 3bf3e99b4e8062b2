from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from . import arrays, geometry

logger = logging.getLogger(__name__)

KINDS = ("array", "geometry")


@dataclass(frozen=True)
class PatternRecord:
    name: str
    kind: str
    fn: Callable[..., Any]


class PatternRegistry:
    """Name -> callback tables for array and geometry patterns.

    Rendering code takes a registry explicitly; ``default_registry`` is the
    process-wide instance used when none is given.
    """

    def __init__(self) -> None:
        self.array_funcs: dict[str, Callable[..., Any]] = {}
        self.geometry_funcs: dict[str, Callable[..., Any]] = {}

    def _table(self, kind: str) -> dict[str, Callable[..., Any]]:
        if kind == "array":
            return self.array_funcs
        if kind == "geometry":
            return self.geometry_funcs
        raise ValueError(f"Unknown pattern kind='{kind}'. Options: {list(KINDS)}")

    def register(self, name: str, fn: Callable[..., Any], kind: str = "array", *, overwrite: bool = True) -> Callable[..., Any]:
        table = self._table(kind)
        if not callable(fn):
            raise TypeError(f"pattern '{name}' must be callable, got {type(fn).__name__}")
        if not overwrite and name in self:
            raise ValueError(f"pattern '{name}' is already registered")
        # a name lives in one table only
        self.array_funcs.pop(name, None)
        self.geometry_funcs.pop(name, None)
        table[name] = fn
        logger.debug("[registry] registered %s pattern '%s'", kind, name)
        return fn

    def unregister(self, name: str) -> None:
        if name in self.geometry_funcs:
            del self.geometry_funcs[name]
        elif name in self.array_funcs:
            del self.array_funcs[name]
        else:
            raise KeyError(name)

    def lookup(self, name: str) -> PatternRecord:
        fn = self.geometry_funcs.get(name)
        if fn is not None:
            return PatternRecord(name, "geometry", fn)
        fn = self.array_funcs.get(name)
        if fn is not None:
            return PatternRecord(name, "array", fn)
        raise ValueError(f"Unknown pattern='{name}'. Options: {self.names()}")

    def names(self, kind: str | None = None) -> list[str]:
        if kind is None:
            return sorted(set(self.array_funcs) | set(self.geometry_funcs))
        return sorted(self._table(kind))

    def copy(self) -> PatternRegistry:
        other = PatternRegistry()
        other.array_funcs.update(self.array_funcs)
        other.geometry_funcs.update(self.geometry_funcs)
        return other

    def __contains__(self, name: object) -> bool:
        return name in self.array_funcs or name in self.geometry_funcs


def build_default_registry() -> PatternRegistry:
    """Create a registry holding the built-in patterns."""
    reg = PatternRegistry()

    reg.register("simple", arrays.simple, "array")
    reg.register("solid", arrays.solid, "array")
    reg.register("gradient", arrays.gradient, "array")
    reg.register("plasma", arrays.plasma, "array")
    reg.register("image", arrays.image, "array")

    reg.register("stripe", geometry.stripe, "geometry")
    reg.register("crosshatch", geometry.crosshatch, "geometry")
    reg.register("circle", geometry.circle, "geometry")
    reg.register("none", geometry.none, "geometry")

    return reg


default_registry = build_default_registry()


def _register(kind: str, name: str, fn: Callable[..., Any] | None, overwrite: bool):
    if fn is not None:
        return default_registry.register(name, fn, kind, overwrite=overwrite)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        return default_registry.register(name, func, kind, overwrite=overwrite)

    return decorator


def register_array_pattern(name: str, fn: Callable[..., Any] | None = None, *, overwrite: bool = True):
    """Register an array pattern on the default registry; usable as a decorator."""
    return _register("array", name, fn, overwrite)


def register_geometry_pattern(name: str, fn: Callable[..., Any] | None = None, *, overwrite: bool = True):
    """Register a geometry pattern on the default registry; usable as a decorator."""
    return _register("geometry", name, fn, overwrite)


def get_pattern(name: str) -> PatternRecord:
    return default_registry.lookup(name)


def list_patterns(kind: str | None = None) -> list[str]:
    return default_registry.names(kind)


def options() -> Mapping[str, Mapping[str, Callable[..., Any]]]:
    """Read-only snapshot of the default registry's tables."""
    return MappingProxyType(
        {
            "array_funcs": MappingProxyType(dict(default_registry.array_funcs)),
            "geometry_funcs": MappingProxyType(dict(default_registry.geometry_funcs)),
        }
    )
