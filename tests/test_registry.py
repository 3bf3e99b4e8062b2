from __future__ import annotations

import numpy as np
import pytest

from patternfill import arrays, geometry
from patternfill.registry import (
    PatternRegistry,
    build_default_registry,
    default_registry,
    get_pattern,
    list_patterns,
    options,
    register_array_pattern,
    register_geometry_pattern,
)


def test_builtins_are_registered_by_kind():
    assert {"simple", "solid", "gradient", "plasma", "image"} <= set(list_patterns("array"))
    assert {"stripe", "crosshatch", "circle", "none"} <= set(list_patterns("geometry"))
    rec = get_pattern("gradient")
    assert rec.kind == "array" and rec.fn is arrays.gradient
    assert get_pattern("stripe").fn is geometry.stripe


def test_unknown_name_lists_options():
    with pytest.raises(ValueError, match="Options"):
        default_registry.lookup("does-not-exist")


def test_register_and_unregister():
    reg = PatternRegistry()
    reg.register("mine", arrays.solid)
    assert "mine" in reg
    assert reg.lookup("mine").kind == "array"
    reg.unregister("mine")
    assert "mine" not in reg
    with pytest.raises(KeyError):
        reg.unregister("mine")


def test_register_validation():
    reg = PatternRegistry()
    with pytest.raises(ValueError, match="kind"):
        reg.register("x", arrays.solid, kind="raster")
    with pytest.raises(TypeError):
        reg.register("x", "not callable")  # type: ignore[arg-type]
    reg.register("x", arrays.solid)
    with pytest.raises(ValueError, match="already registered"):
        reg.register("x", arrays.gradient, overwrite=False)
    reg.register("x", arrays.gradient)
    assert reg.lookup("x").fn is arrays.gradient


def test_reregistering_under_other_kind_moves_the_name():
    reg = PatternRegistry()
    reg.register("dual", arrays.solid, "array")
    reg.register("dual", geometry.stripe, "geometry")
    assert reg.names("array") == []
    assert reg.lookup("dual").kind == "geometry"


def test_copy_is_independent():
    reg = build_default_registry()
    other = reg.copy()
    other.register("extra", arrays.solid)
    assert "extra" in other and "extra" not in reg


def test_decorator_registers_on_default_registry(restore_default_registry):
    @register_array_pattern("checker")
    def checker(width, height, params, legend):
        out = np.zeros((height, width, 4))
        out[::2, ::2] = 1.0
        out[..., 3] = 1.0
        return out

    assert get_pattern("checker").fn is checker
    assert "checker" in options()["array_funcs"]

    register_geometry_pattern("nothing", geometry.none)
    assert get_pattern("nothing").kind == "geometry"


def test_restore_fixture_removes_test_patterns():
    assert "checker" not in default_registry
    assert "nothing" not in default_registry


def test_options_snapshot_is_read_only():
    snapshot = options()
    with pytest.raises(TypeError):
        snapshot["array_funcs"]["x"] = arrays.solid  # type: ignore[index]
