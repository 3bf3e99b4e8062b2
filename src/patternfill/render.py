from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import numpy as np
from matplotlib.artist import Artist
from matplotlib.axes import Axes
from matplotlib.collections import Collection
from matplotlib.patches import Patch
from omegaconf import DictConfig

from .config import load_config
from .contract import validate_pattern_array
from .params import PatternParams, param_value
from .registry import PatternRegistry, default_registry

logger = logging.getLogger(__name__)


def resolve_res(params: Mapping[str, Any], cfg: DictConfig) -> float:
    """Pixels per inch for array buffers: ``pattern_res`` first, then ``cfg.render.res``."""
    res = param_value(params, "pattern_res")
    if res is None:
        res = cfg.render.get("res", 72)
    return float(res)


def pattern_pixel_size(ax: Axes, patch: Patch, res: float, scale: float = 1.0) -> tuple[int, int]:
    """Pixel dimensions ``(width, height)`` of ``patch`` at ``res`` pixels per inch."""
    bbox = patch.get_window_extent()
    dpi = ax.figure.dpi
    width = int(round(abs(bbox.width) / dpi * res * scale))
    height = int(round(abs(bbox.height) / dpi * res * scale))
    return max(width, 1), max(height, 1)


def patch_boundary(ax: Axes, patch: Patch) -> np.ndarray:
    """Vertices of ``patch`` in data coordinates, shape ``(N, 2)``."""
    return ax.transData.inverted().transform(patch.get_verts())


def patch_aspect_ratio(patch: Patch) -> float:
    bbox = patch.get_window_extent()
    if bbox.width == 0:
        return 1.0
    return abs(bbox.height / bbox.width)


def apply_alpha(buffer: np.ndarray, params: Mapping[str, Any]) -> np.ndarray:
    alpha = float(param_value(params, "pattern_alpha", 1.0))
    if alpha != 1.0:
        buffer = buffer.copy()
        buffer[..., 3] *= np.clip(alpha, 0.0, 1.0)
    return buffer


def _add_artist(ax: Axes, artist: Artist) -> Artist:
    if isinstance(artist, Collection):
        return ax.add_collection(artist, autolim=False)
    if isinstance(artist, Patch):
        return ax.add_patch(artist)
    return ax.add_artist(artist)


def draw_pattern(
    ax: Axes,
    patch: Patch,
    params: Mapping[str, Any],
    *,
    registry: PatternRegistry | None = None,
    cfg: DictConfig | Mapping[str, Any] | None = None,
) -> list[Artist]:
    """Fill ``patch`` (already on ``ax``) with the pattern named by ``params["pattern"]``.

    Parameters
    ----------
    ax : Axes
        Axes holding the patch
    patch : Patch
        Shape to fill; pattern artists are clipped to it
    params : Mapping[str, Any]
        Parameter bag; must contain ``pattern``
    registry : PatternRegistry | None
        Lookup table, ``default_registry`` when omitted
    cfg : DictConfig | Mapping | None
        Render settings merged over the package defaults

    Returns
    -------
    list[Artist]
        Artists added to ``ax``
    """
    cfg = cfg if isinstance(cfg, DictConfig) and "render" in cfg else load_config(cfg)
    registry = default_registry if registry is None else registry
    params = params if isinstance(params, PatternParams) else PatternParams(params)

    name = str(param_value(params, "pattern", "none"))
    record = registry.lookup(name)
    zorder = patch.get_zorder() + float(cfg.render.get("zorder_offset", 0.5))

    if record.kind == "array":
        width, height = pattern_pixel_size(ax, patch, resolve_res(params, cfg))
        buffer = validate_pattern_array(record.fn(width, height, params, False), width, height, name)
        buffer = apply_alpha(buffer, params)

        boundary = patch_boundary(ax, patch)
        (x0, y0), (x1, y1) = boundary.min(axis=0), boundary.max(axis=0)
        # imshow snaps the view limits to its extent while autoscaling is on
        autoscale = ax.get_autoscalex_on(), ax.get_autoscaley_on()
        ax.set_autoscale_on(False)
        im = ax.imshow(
            buffer,
            extent=(x0, x1, y0, y1),
            origin="upper",
            aspect=ax.get_aspect(),
            interpolation=str(cfg.render.get("interpolation", "nearest")),
            zorder=zorder,
        )
        ax.set_autoscalex_on(autoscale[0])
        ax.set_autoscaley_on(autoscale[1])
        # the shape's own sticky edges already apply; the image must not add more
        im.sticky_edges.x[:] = []
        im.sticky_edges.y[:] = []
        im.set_clip_path(patch)
        logger.debug("[patterns] array pattern='%s' size=%dx%d", name, width, height)
        return [im]

    boundary = patch_boundary(ax, patch)
    artists = list(record.fn(params, boundary, patch_aspect_ratio(patch), False) or [])
    for artist in artists:
        artist.set_zorder(zorder)
        _add_artist(ax, artist)
        artist.set_clip_path(patch)
    logger.debug("[patterns] geometry pattern='%s' artists=%d", name, len(artists))
    return artists
