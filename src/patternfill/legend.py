from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
from matplotlib.artist import Artist
from matplotlib.axes import Axes
from matplotlib.image import BboxImage
from matplotlib.legend import Legend
from matplotlib.legend_handler import HandlerPatch
from matplotlib.patches import Rectangle
from matplotlib.transforms import Bbox, TransformedBbox
from omegaconf import DictConfig

from .config import load_config
from .contract import validate_pattern_array
from .params import PatternParams, param_value
from .registry import PatternRegistry, default_registry
from .render import apply_alpha, resolve_res

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0


class PatternKey(Rectangle):
    """Legend proxy carrying the parameter bag of the shape it stands for."""

    def __init__(self, params: Mapping[str, Any], **kwargs: Any):
        kwargs.setdefault("facecolor", "white")
        kwargs.setdefault("edgecolor", "black")
        super().__init__((0, 0), 1, 1, **kwargs)
        self.params = params if isinstance(params, PatternParams) else PatternParams(params)


class HandlerPattern(HandlerPatch):
    """Draws a legend key by invoking the pattern callback with ``legend=True``."""

    def __init__(self, registry: PatternRegistry | None = None, cfg: DictConfig | Mapping[str, Any] | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.registry = default_registry if registry is None else registry
        self.cfg = cfg if isinstance(cfg, DictConfig) and "render" in cfg else load_config(cfg)

    def key_scale(self, params: Mapping[str, Any]) -> float:
        """Per-key scale factor combined with the configured ``legend.key_scale``."""
        return float(param_value(params, "pattern_key_scale_factor", 1.0)) * float(self.cfg.legend.get("key_scale", 1.0))

    def key_pixel_size(self, params: Mapping[str, Any], width: float, height: float) -> tuple[int, int]:
        # handle box sizes are in points
        res = resolve_res(params, self.cfg)
        scale = self.key_scale(params)
        px_w = int(round(width / POINTS_PER_INCH * res * scale))
        px_h = int(round(height / POINTS_PER_INCH * res * scale))
        return max(px_w, 1), max(px_h, 1)

    def create_artists(self, legend, orig_handle, xdescent, ydescent, width, height, fontsize, trans) -> list[Artist]:
        key = Rectangle(xy=(-xdescent, -ydescent), width=width, height=height)
        self.update_prop(key, orig_handle, legend)
        key.set_transform(trans)

        params = getattr(orig_handle, "params", None)
        if params is None:
            return [key]
        name = str(param_value(params, "pattern", "none"))
        record = self.registry.lookup(name)

        if record.kind == "array":
            px_w, px_h = self.key_pixel_size(params, width, height)
            buffer = validate_pattern_array(record.fn(px_w, px_h, params, True), px_w, px_h, name)
            bbox = TransformedBbox(Bbox.from_bounds(-xdescent, -ydescent, width, height), trans)
            image = BboxImage(bbox, origin="upper", interpolation=str(self.cfg.render.get("interpolation", "nearest")))
            image.set_data(apply_alpha(buffer, params))
            logger.debug("[patterns] legend array pattern='%s' size=%dx%d", name, px_w, px_h)
            return [key, image]

        boundary = np.array(
            [
                [-xdescent, -ydescent],
                [-xdescent + width, -ydescent],
                [-xdescent + width, -ydescent + height],
                [-xdescent, -ydescent + height],
            ]
        )
        aspect = height / width if width else 1.0
        key_params = PatternParams(params).replace(pattern_key_scale_factor=self.key_scale(params))
        artists = list(record.fn(key_params, boundary, aspect, True) or [])
        for artist in artists:
            artist.set_transform(trans)
            artist.set_clip_path(key)
        return [key, *artists]


def pattern_legend(
    ax: Axes,
    handles: Sequence[Artist],
    labels: Sequence[str],
    *,
    registry: PatternRegistry | None = None,
    cfg: DictConfig | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> Legend:
    """Add a legend whose ``PatternKey`` handles are drawn by their pattern callbacks."""
    handler_map = dict(kwargs.pop("handler_map", None) or {})
    handler_map[PatternKey] = HandlerPattern(registry=registry, cfg=cfg)
    return ax.legend(list(handles), list(labels), handler_map=handler_map, **kwargs)
