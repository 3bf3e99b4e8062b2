from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import numpy as np

DEFAULT_PARAMS: dict[str, Any] = {
    "pattern": "stripe",
    "pattern_type": None,
    "pattern_subtype": None,
    "pattern_fill": "grey",
    "pattern_fill2": "#4169E1",
    "pattern_colour": "#333333",
    "pattern_alpha": 1.0,
    "pattern_angle": 30.0,
    "pattern_density": 0.2,
    "pattern_spacing": 0.05,
    "pattern_xoffset": 0.0,
    "pattern_yoffset": 0.0,
    "pattern_linewidth": 0.5,
    "pattern_orientation": "vertical",
    "pattern_res": None,
    "pattern_key_scale_factor": 1.0,
    "pattern_seed": None,
    "pattern_frequency": 0.1,
    "pattern_filename": "",
}


class PatternParams(Mapping[str, Any]):
    """Read-only parameter bag handed to pattern callbacks."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None):
        object.__setattr__(self, "_data", dict(data or {}))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __setattr__(self, name: str, value: Any) -> None:
        raise TypeError("PatternParams is read-only")

    def __repr__(self) -> str:
        return f"PatternParams({self._data!r})"

    def replace(self, **changes: Any) -> PatternParams:
        """Return a new bag with ``changes`` applied."""
        return PatternParams({**self._data, **changes})


def make_params(overrides: Mapping[str, Any] | None = None, defaults: Mapping[str, Any] | None = None) -> PatternParams:
    """Layer ``overrides`` over ``defaults`` (``DEFAULT_PARAMS`` when omitted).

    Unknown keys pass through so user callbacks can read their own parameters.
    """
    base = dict(DEFAULT_PARAMS if defaults is None else defaults)
    if overrides:
        base.update(overrides)
    return PatternParams(base)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def param_value(params: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Read a scalar parameter; missing, None and NaN fall back to ``default``."""
    value = params.get(key)
    # length-1 vectors are scalars
    if isinstance(value, (list, tuple, np.ndarray)) and len(value) == 1:
        value = value[0]
    if isinstance(value, np.generic):
        value = value.item()
    return default if _is_missing(value) else value


def recycle(values: Sequence[float] | np.ndarray, length: int) -> np.ndarray:
    """Repeat ``values`` cyclically until exactly ``length`` elements exist."""
    arr = np.asarray(values, dtype=np.float64).ravel()
    if arr.size == 0:
        raise ValueError("cannot recycle an empty sequence")
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")
    return np.resize(arr, int(length))
