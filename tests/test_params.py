from __future__ import annotations

import numpy as np
import pytest

from patternfill.params import DEFAULT_PARAMS, PatternParams, make_params, param_value, recycle


def test_make_params_layers_over_defaults():
    params = make_params({"pattern": "simple", "my_key": 3})
    assert params["pattern"] == "simple"
    assert params["pattern_density"] == DEFAULT_PARAMS["pattern_density"]
    # unknown keys reach user callbacks unchanged
    assert params["my_key"] == 3


def test_params_are_read_only():
    params = make_params()
    with pytest.raises(TypeError):
        params["pattern"] = "circle"  # type: ignore[index]
    with pytest.raises(TypeError):
        params.anything = 1  # type: ignore[attr-defined]


def test_replace_returns_new_bag():
    params = make_params({"pattern_angle": 10.0})
    other = params.replace(pattern_angle=80.0)
    assert params["pattern_angle"] == 10.0
    assert other["pattern_angle"] == 80.0
    assert isinstance(other, PatternParams)


@pytest.mark.parametrize("value", [None, float("nan"), [None]])
def test_param_value_missing_falls_back(value):
    assert param_value({"k": value}, "k", "fallback") == "fallback"
    assert param_value({}, "k", "fallback") == "fallback"


def test_param_value_unwraps_scalars():
    assert param_value({"k": [4]}, "k") == 4
    assert param_value({"k": np.array(["b"])}, "k") == "b"
    value = param_value({"k": np.float64(0.25)}, "k")
    assert value == 0.25 and type(value) is float


def test_recycle_repeats_cyclically():
    np.testing.assert_array_equal(recycle([1, 2, 3], 7), [1, 2, 3, 1, 2, 3, 1])
    np.testing.assert_array_equal(recycle([1, 2, 3], 2), [1, 2])
    assert recycle([1], 0).size == 0


def test_recycle_rejects_empty_input():
    with pytest.raises(ValueError):
        recycle([], 4)
