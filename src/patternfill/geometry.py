"""Built-in geometry patterns.

Each function follows the geometry calling convention
``(params, boundary, aspect_ratio, legend) -> list[Artist]``. ``boundary`` is an
``(N, 2)`` vertex array; returned artists use the same coordinates and carry no
transform, so the caller decides where they land (data axes or a legend key).

Shapes are laid out in a normalised frame where the boundary's bbox is
``1 x aspect_ratio`` so stripes and circles look isotropic on screen.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np
from matplotlib.artist import Artist
from matplotlib.collections import PolyCollection
from matplotlib.colors import to_rgba

from .params import param_value

CIRCLE_SEGMENTS = 24


class _Frame:
    """Maps between data coordinates and the normalised layout frame."""

    def __init__(self, boundary: np.ndarray, aspect_ratio: float):
        pts = np.asarray(boundary, dtype=np.float64).reshape(-1, 2)
        self.x0, self.y0 = pts.min(axis=0)
        x1, y1 = pts.max(axis=0)
        self.w = max(float(x1 - self.x0), 1e-12)
        self.h = max(float(y1 - self.y0), 1e-12)
        self.aspect = float(aspect_ratio) if aspect_ratio and aspect_ratio > 0 else 1.0

    @property
    def corners(self) -> np.ndarray:
        return np.array([[0.0, 0.0], [1.0, 0.0], [1.0, self.aspect], [0.0, self.aspect]])

    @property
    def size(self) -> float:
        return max(1.0, self.aspect)

    def to_data(self, uv: np.ndarray) -> np.ndarray:
        out = np.empty_like(uv, dtype=np.float64)
        out[..., 0] = self.x0 + uv[..., 0] * self.w
        out[..., 1] = self.y0 + uv[..., 1] / self.aspect * self.h
        return out


def _spacing(params: Mapping[str, Any], frame: _Frame, legend: bool) -> float:
    spacing = float(param_value(params, "pattern_spacing", 0.05)) * frame.size
    if legend:
        spacing *= float(param_value(params, "pattern_key_scale_factor", 1.0))
    return max(spacing, 1e-6)


def _style(params: Mapping[str, Any], fill_key: str = "pattern_fill") -> dict[str, Any]:
    alpha = float(param_value(params, "pattern_alpha", 1.0))
    return {
        "facecolors": [to_rgba(param_value(params, fill_key, "grey"), alpha)],
        "edgecolors": [to_rgba(param_value(params, "pattern_colour", "#333333"), alpha)],
        "linewidths": [float(param_value(params, "pattern_linewidth", 0.5))],
    }


def stripe_polygons(params: Mapping[str, Any], frame: _Frame, angle: float, legend: bool) -> list[np.ndarray]:
    """Band polygons (data coordinates) covering the frame at ``angle`` degrees."""
    spacing = _spacing(params, frame, legend)
    density = float(np.clip(param_value(params, "pattern_density", 0.2), 0.0, 1.0))
    theta = np.deg2rad(angle)
    along = np.array([np.cos(theta), np.sin(theta)])
    normal = np.array([-np.sin(theta), np.cos(theta)])
    origin = np.array(
        [
            float(param_value(params, "pattern_xoffset", 0.0)),
            float(param_value(params, "pattern_yoffset", 0.0)) * frame.aspect,
        ]
    )

    rel = frame.corners - origin
    p = rel @ normal
    d = rel @ along
    k_lo = int(np.floor(p.min() / spacing)) - 1
    k_hi = int(np.ceil(p.max() / spacing)) + 1
    d_lo, d_hi = d.min() - spacing, d.max() + spacing
    band = density * spacing

    polys = []
    for k in range(k_lo, k_hi + 1):
        p0 = k * spacing - band / 2
        p1 = p0 + band
        uv = np.array(
            [
                origin + normal * p0 + along * d_lo,
                origin + normal * p0 + along * d_hi,
                origin + normal * p1 + along * d_hi,
                origin + normal * p1 + along * d_lo,
            ]
        )
        polys.append(frame.to_data(uv))
    return polys


def stripe(params: Mapping[str, Any], boundary: np.ndarray, aspect_ratio: float, legend: bool) -> list[Artist]:
    frame = _Frame(boundary, aspect_ratio)
    angle = float(param_value(params, "pattern_angle", 30.0))
    return [PolyCollection(stripe_polygons(params, frame, angle, legend), **_style(params))]


def crosshatch(params: Mapping[str, Any], boundary: np.ndarray, aspect_ratio: float, legend: bool) -> list[Artist]:
    """Stripes at ``pattern_angle`` under a second layer rotated by 90 degrees."""
    frame = _Frame(boundary, aspect_ratio)
    angle = float(param_value(params, "pattern_angle", 30.0))
    lower = PolyCollection(stripe_polygons(params, frame, angle, legend), **_style(params))
    upper = PolyCollection(stripe_polygons(params, frame, angle + 90.0, legend), **_style(params, "pattern_fill2"))
    return [lower, upper]


def circle(params: Mapping[str, Any], boundary: np.ndarray, aspect_ratio: float, legend: bool) -> list[Artist]:
    frame = _Frame(boundary, aspect_ratio)
    spacing = _spacing(params, frame, legend)
    density = float(np.clip(param_value(params, "pattern_density", 0.2), 0.0, 1.0))
    radius = density * spacing / 2
    x_off = float(param_value(params, "pattern_xoffset", 0.0))
    y_off = float(param_value(params, "pattern_yoffset", 0.0)) * frame.aspect

    t = np.linspace(0.0, 2 * np.pi, CIRCLE_SEGMENTS, endpoint=False)
    unit = np.stack([np.cos(t), np.sin(t)], axis=-1) * radius

    # grid anchored at the offset, extended one cell past each edge
    xs = x_off + spacing * np.arange(np.floor(-x_off / spacing) - 1, np.ceil((1.0 - x_off) / spacing) + 2)
    ys = y_off + spacing * np.arange(np.floor(-y_off / spacing) - 1, np.ceil((frame.aspect - y_off) / spacing) + 2)
    polys = [frame.to_data(unit + np.array([cx, cy])) for cy in ys for cx in xs]
    return [PolyCollection(polys, **_style(params))]


def none(params: Mapping[str, Any], boundary: np.ndarray, aspect_ratio: float, legend: bool) -> list[Artist]:
    return []
