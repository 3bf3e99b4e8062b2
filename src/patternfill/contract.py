"""Calling conventions and the image-buffer contract for pattern callbacks.

Array patterns return an RGBA buffer of shape ``(height, width, 4)`` with every
value in ``[0, 1]``. Geometry patterns return matplotlib artists in the
coordinate system of the boundary they were given.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

import numpy as np
from matplotlib.artist import Artist

N_CHANNELS = 4


class PatternContractError(ValueError):
    """A pattern callback returned something the renderer cannot draw."""


class ArrayPatternFn(Protocol):
    def __call__(self, width: int, height: int, params: Mapping[str, Any], legend: bool) -> np.ndarray: ...


class GeometryPatternFn(Protocol):
    def __call__(self, params: Mapping[str, Any], boundary: np.ndarray, aspect_ratio: float, legend: bool) -> list[Artist]: ...


def validate_pattern_array(array: Any, width: int, height: int, name: str = "<anonymous>") -> np.ndarray:
    """Check an array pattern's return value against the buffer contract.

    Parameters
    ----------
    array : Any
        Value returned by the callback
    width, height : int
        Dimensions the callback was invoked with
    name : str
        Pattern name, used in error messages

    Returns
    -------
    np.ndarray
        The buffer as float64, shape ``(height, width, 4)``

    Raises
    ------
    PatternContractError
        On wrong shape, non-numeric data, NaN, or values outside ``[0, 1]``
    """
    expected = (int(height), int(width), N_CHANNELS)
    if array is None:
        raise PatternContractError(f"pattern '{name}' returned None; expected an array of shape {expected}")
    try:
        arr = np.asarray(array, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise PatternContractError(f"pattern '{name}' returned non-numeric data: {e}") from e

    if arr.shape != expected:
        raise PatternContractError(f"pattern '{name}' returned shape {arr.shape}; expected {expected}")
    if np.isnan(arr).any():
        raise PatternContractError(f"pattern '{name}' returned NaN values")
    lo, hi = float(arr.min(initial=0.0)), float(arr.max(initial=0.0))
    if lo < 0.0 or hi > 1.0:
        raise PatternContractError(f"pattern '{name}' returned values in [{lo:.4g}, {hi:.4g}]; expected [0, 1]")
    return arr
