"""Built-in array patterns.

Each function follows the array calling convention
``(width, height, params, legend) -> ndarray[height, width, 4]``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import matplotlib
import matplotlib.image as mpimg
import numpy as np
from matplotlib.colors import to_rgba

from .contract import N_CHANNELS
from .params import param_value, recycle

# Source sequences for the `simple` pattern, keyed by pattern_type
SIMPLE_SEQUENCES: dict[str, np.ndarray] = {
    "a": np.repeat([0, 1, 0, 1, 1, 0, 0, 1, 1, 1], 3).astype(np.float64),
    "b": np.repeat([1, 0, 0, 1, 0.5, 0.6, 1, 1, 0.5, 0.5], 3).astype(np.float64),
    "c": np.repeat(np.round(np.arange(0, 21) * 0.05, 2), 7).astype(np.float64),
}

GRADIENT_ORIENTATIONS = ("vertical", "horizontal", "radial")
IMAGE_PLACEMENTS = ("stretch", "tile", "none")


def simple(width: int, height: int, params: Mapping[str, Any], legend: bool) -> np.ndarray:
    """Fill the buffer by recycling a short sequence chosen by ``pattern_type``.

    The sequence length rarely divides ``height * width * 4``, so the visible
    banding shifts whenever the dimensions change. Unknown types fall back to ``a``.
    """
    choice = param_value(params, "pattern_type")
    # vectors and other non-tag values count as unrecognised
    if not isinstance(choice, str) or choice not in SIMPLE_SEQUENCES:
        choice = "a"
    values = recycle(SIMPLE_SEQUENCES[choice], height * width * N_CHANNELS)
    return values.reshape(height, width, N_CHANNELS)


def solid(width: int, height: int, params: Mapping[str, Any], legend: bool) -> np.ndarray:
    rgba = np.asarray(to_rgba(param_value(params, "pattern_fill", "grey")))
    return np.broadcast_to(rgba, (height, width, N_CHANNELS)).copy()


def _gradient_weights(width: int, height: int, orientation: str) -> np.ndarray:
    # weight 0 -> pattern_fill, 1 -> pattern_fill2; row 0 is the top of the shape
    if orientation == "vertical":
        col = np.linspace(1.0, 0.0, height) if height > 1 else np.zeros(1)
        return np.broadcast_to(col[:, None], (height, width))
    if orientation == "horizontal":
        row = np.linspace(0.0, 1.0, width) if width > 1 else np.zeros(1)
        return np.broadcast_to(row[None, :], (height, width))
    if orientation == "radial":
        yy = (np.arange(height) + 0.5) / height - 0.5
        xx = (np.arange(width) + 0.5) / width - 0.5
        dist = np.sqrt(xx[None, :] ** 2 + yy[:, None] ** 2)
        return np.clip(dist / np.sqrt(0.5), 0.0, 1.0)
    raise ValueError(f"Unknown pattern_orientation='{orientation}'. Options: {list(GRADIENT_ORIENTATIONS)}")


def gradient(width: int, height: int, params: Mapping[str, Any], legend: bool) -> np.ndarray:
    """Blend ``pattern_fill`` into ``pattern_fill2`` along ``pattern_orientation``."""
    orientation = str(param_value(params, "pattern_orientation", "vertical"))
    start = np.asarray(to_rgba(param_value(params, "pattern_fill", "grey")))
    end = np.asarray(to_rgba(param_value(params, "pattern_fill2", "#4169E1")))
    w = _gradient_weights(width, height, orientation)[..., None]
    out = start * (1.0 - w) + end * w
    return np.clip(out, 0.0, 1.0)


def _value_noise(width: int, height: int, frequency: float, rng: np.random.Generator) -> np.ndarray:
    # random lattice, bilinearly interpolated with smoothstep easing
    cells_x = max(1, int(round(width * frequency)))
    cells_y = max(1, int(round(height * frequency)))
    lattice = rng.random((cells_y + 1, cells_x + 1))

    gx = np.linspace(0.0, cells_x, width, endpoint=False) if width > 1 else np.zeros(1)
    gy = np.linspace(0.0, cells_y, height, endpoint=False) if height > 1 else np.zeros(1)
    x0 = np.floor(gx).astype(int)
    y0 = np.floor(gy).astype(int)
    tx = gx - x0
    ty = gy - y0
    tx = tx * tx * (3 - 2 * tx)
    ty = ty * ty * (3 - 2 * ty)

    top = lattice[y0][:, x0] * (1 - tx) + lattice[y0][:, x0 + 1] * tx
    bottom = lattice[y0 + 1][:, x0] * (1 - tx) + lattice[y0 + 1][:, x0 + 1] * tx
    return top * (1 - ty[:, None]) + bottom * ty[:, None]


def plasma(width: int, height: int, params: Mapping[str, Any], legend: bool) -> np.ndarray:
    """Two octaves of seeded value noise mapped through a colormap."""
    seed = param_value(params, "pattern_seed")
    rng = np.random.default_rng(None if seed is None else int(seed))
    frequency = float(param_value(params, "pattern_frequency", 0.1))
    cmap = matplotlib.colormaps[str(param_value(params, "pattern_type", "viridis"))]

    field = _value_noise(width, height, frequency, rng) + 0.5 * _value_noise(width, height, frequency * 2, rng)
    lo, hi = field.min(), field.max()
    field = (field - lo) / (hi - lo) if hi > lo else np.zeros_like(field)
    return np.clip(cmap(field), 0.0, 1.0)


def _as_rgba(img: np.ndarray) -> np.ndarray:
    if img.dtype == np.uint8:
        img = img.astype(np.float64) / 255.0
    img = np.asarray(img, dtype=np.float64)
    if img.ndim == 2:
        img = np.stack([img, img, img], axis=-1)
    if img.shape[-1] == 3:
        img = np.concatenate([img, np.ones(img.shape[:2] + (1,))], axis=-1)
    return np.clip(img, 0.0, 1.0)


def image(width: int, height: int, params: Mapping[str, Any], legend: bool) -> np.ndarray:
    """Place the image at ``pattern_filename`` according to ``pattern_type``."""
    filename = str(param_value(params, "pattern_filename", ""))
    if not filename or not Path(filename).is_file():
        raise FileNotFoundError(f"pattern image not found: '{filename}'")
    placement = str(param_value(params, "pattern_type", "stretch"))
    if placement not in IMAGE_PLACEMENTS:
        raise ValueError(f"Unknown pattern_type='{placement}' for image. Options: {list(IMAGE_PLACEMENTS)}")

    src = _as_rgba(mpimg.imread(filename))
    src_h, src_w = src.shape[:2]

    if placement == "stretch":
        rows = np.minimum((np.arange(height) * src_h) // height, src_h - 1)
        cols = np.minimum((np.arange(width) * src_w) // width, src_w - 1)
        return src[rows][:, cols]
    if placement == "tile":
        rows = np.arange(height) % src_h
        cols = np.arange(width) % src_w
        return src[rows][:, cols]

    out = np.zeros((height, width, N_CHANNELS))
    h, w = min(height, src_h), min(width, src_w)
    out[:h, :w] = src[:h, :w]
    return out
