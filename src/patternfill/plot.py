"""Declarative pattern layers on top of matplotlib.

A ``PatternLayer`` is pure data: a geom name, a DataFrame, an aesthetic mapping
(aesthetic -> column) and constant aesthetics. ``draw_layer`` turns it into
matplotlib patches, fills each one through the pattern registry and collects
legend entries for every mapped (non-positional) column.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.artist import Artist
from matplotlib.axes import Axes
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure
from matplotlib.patches import Patch, Polygon, Rectangle
from omegaconf import DictConfig

from .config import load_config
from .legend import PatternKey, pattern_legend
from .params import PatternParams, make_params
from .registry import PatternRegistry
from .render import draw_pattern

logger = logging.getLogger(__name__)

GEOMS = ("col", "rect", "polygon")
POSITION_AES = {"x", "y", "xmin", "xmax", "ymin", "ymax", "group"}
COLOUR_AES = {"fill", "colour", "pattern_fill", "pattern_fill2", "pattern_colour"}
# missing values form their own level
NA_LABEL = "NA"
NA_COLOUR = "#7F7F7F"
REQUIRED_AES = {
    "col": ("x", "y"),
    "rect": ("xmin", "xmax", "ymin", "ymax"),
    "polygon": ("x", "y"),
}


@dataclass
class PatternLayer:
    geom: str
    data: pd.DataFrame
    mapping: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class LegendEntry:
    title: str
    label: str
    params: PatternParams


@dataclass
class LayerResult:
    patches: list[Patch]
    artists: list[Artist]
    legend_entries: list[LegendEntry]


def _palette(palette: str | Sequence[Any] | None) -> list[tuple[float, float, float, float]]:
    if palette is None:
        palette = "tab10"
    if isinstance(palette, str):
        cmap = matplotlib.colormaps[palette]
        n = getattr(cmap, "N", 10)
        return [to_rgba(cmap(i)) for i in range(min(n, 256))]
    return [to_rgba(c) for c in palette]


class _Missing:
    def __repr__(self) -> str:
        return NA_LABEL


_NA = _Missing()


def _key(value: Any) -> Any:
    # None, NaN, NaT and pd.NA all collapse onto one hashable level
    if np.ndim(value) == 0 and pd.isna(value):
        return _NA
    return value


def _levels(series: pd.Series) -> list[Any]:
    """Distinct values in first-seen order; missing values share the ``_NA`` level."""
    return list(dict.fromkeys(_key(v) for v in series))


def _label(level: Any) -> str:
    return NA_LABEL if level is _NA else str(level)


def scale_column(aes: str, series: pd.Series, palette: str | Sequence[Any] | None = None) -> list[Any]:
    """Map one column's values onto aesthetic values."""
    if aes in COLOUR_AES:
        colours = _palette(palette)
        levels = [level for level in _levels(series) if level is not _NA]
        lookup = {level: colours[i % len(colours)] for i, level in enumerate(levels)}
        lookup[_NA] = to_rgba(NA_COLOUR)
        return [lookup[_key(v)] for v in series]
    # missing values become None so callbacks fall back to their defaults
    if aes in ("pattern", "pattern_type") or not pd.api.types.is_numeric_dtype(series):
        return [None if _key(v) is _NA else str(v) for v in series]
    return [np.nan if _key(v) is _NA else float(v) for v in series]


def _shape_positions(layer: PatternLayer) -> np.ndarray:
    # polygons take their aesthetics from the first row of each group
    if layer.geom == "polygon" and "group" in layer.mapping:
        return np.flatnonzero(~layer.data[layer.mapping["group"]].duplicated().to_numpy())
    return np.arange(len(layer.data))


def _shape_rows(layer: PatternLayer) -> pd.DataFrame:
    return layer.data.iloc[_shape_positions(layer)]


def _check_layer(layer: PatternLayer) -> None:
    if layer.geom not in GEOMS:
        raise ValueError(f"Unknown geom='{layer.geom}'. Options: {list(GEOMS)}")
    missing_aes = [a for a in REQUIRED_AES[layer.geom] if a not in layer.mapping]
    if missing_aes:
        raise ValueError(f"geom='{layer.geom}' requires aesthetics {missing_aes}")
    missing_cols = [c for c in layer.mapping.values() if c not in layer.data.columns]
    if missing_cols:
        raise KeyError(f"mapped columns not in data: {missing_cols}")


def build_layer_params(layer: PatternLayer, palette: str | Sequence[Any] | None = None) -> list[PatternParams]:
    """One parameter bag per drawn shape: defaults < constants < mapped columns."""
    _check_layer(layer)
    positions = _shape_positions(layer)
    scaled: dict[str, list[Any]] = {}
    for aes, col in layer.mapping.items():
        if aes in POSITION_AES:
            continue
        # scale over the full column so levels match the legend
        full = scale_column(aes, layer.data[col], palette)
        scaled[aes] = [full[p] for p in positions]

    bags = []
    for i in range(len(positions)):
        values = dict(layer.params)
        values.update({aes: vals[i] for aes, vals in scaled.items()})
        bags.append(make_params(values))
    return bags


def legend_entries(layer: PatternLayer, palette: str | Sequence[Any] | None = None) -> list[LegendEntry]:
    """One entry per distinct value of each mapped non-positional column."""
    _check_layer(layer)
    by_column: dict[str, list[str]] = {}
    for aes, col in layer.mapping.items():
        if aes not in POSITION_AES:
            by_column.setdefault(col, []).append(aes)

    entries = []
    for col, aes_list in by_column.items():
        scaled = {aes: scale_column(aes, layer.data[col], palette) for aes in aes_list}
        keys = [_key(v) for v in layer.data[col]]
        for level in dict.fromkeys(keys):
            pos = keys.index(level)
            values = dict(layer.params)
            values.update({aes: vals[pos] for aes, vals in scaled.items()})
            entries.append(LegendEntry(title=col, label=_label(level), params=make_params(values)))
    return entries


def _x_positions(ax: Axes, series: pd.Series) -> np.ndarray:
    if pd.api.types.is_numeric_dtype(series):
        return series.to_numpy(dtype=float, na_value=np.nan)
    levels = _levels(series)
    lookup = {level: i for i, level in enumerate(levels)}
    ax.set_xticks(range(len(levels)))
    ax.set_xticklabels([_label(level) for level in levels])
    return np.array([lookup[_key(v)] for v in series], dtype=float)


def _base_patches(ax: Axes, layer: PatternLayer, bags: list[PatternParams]) -> list[Patch]:
    m = layer.mapping
    data = _shape_rows(layer)
    edge = layer.params.get("colour", "black")

    if layer.geom == "col":
        x = _x_positions(ax, data[m["x"]])
        bars = ax.bar(
            x,
            data[m["y"]].to_numpy(dtype=float),
            width=float(layer.params.get("width", 0.8)),
            color=[bag.get("fill", "white") for bag in bags],
            edgecolor=edge,
        )
        return list(bars.patches)

    patches: list[Patch] = []
    if layer.geom == "rect":
        for (_, row), bag in zip(data.iterrows(), bags):
            x0, x1 = float(row[m["xmin"]]), float(row[m["xmax"]])
            y0, y1 = float(row[m["ymin"]]), float(row[m["ymax"]])
            rect = Rectangle((x0, y0), x1 - x0, y1 - y0, facecolor=bag.get("fill", "white"), edgecolor=edge)
            patches.append(ax.add_patch(rect))
        return patches

    groups = layer.data.groupby(m["group"], sort=False) if "group" in m else [(None, layer.data)]
    for (_, grp), bag in zip(groups, bags):
        xy = grp[[m["x"], m["y"]]].to_numpy(dtype=float)
        patches.append(ax.add_patch(Polygon(xy, closed=True, facecolor=bag.get("fill", "white"), edgecolor=edge)))
    return patches


def draw_layer(
    ax: Axes,
    layer: PatternLayer,
    *,
    registry: PatternRegistry | None = None,
    cfg: DictConfig | Mapping[str, Any] | None = None,
    palette: str | Sequence[Any] | None = None,
) -> LayerResult:
    """Draw a layer's shapes and fill each with its pattern."""
    cfg = load_config(cfg)
    bags = build_layer_params(layer, palette)
    patches = _base_patches(ax, layer, bags)
    # settle view limits so pixel sizes match the final layout
    ax.autoscale_view()

    artists: list[Artist] = []
    for patch, bag in zip(patches, bags):
        artists.extend(draw_pattern(ax, patch, bag, registry=registry, cfg=cfg))
    logger.info("[patterns] drew geom=%s shapes=%d artists=%d", layer.geom, len(patches), len(artists))
    return LayerResult(patches=patches, artists=artists, legend_entries=legend_entries(layer, palette))


def pattern_plot(
    layers: Sequence[PatternLayer],
    *,
    ax: Axes | None = None,
    title: str | None = None,
    registry: PatternRegistry | None = None,
    cfg: DictConfig | Mapping[str, Any] | None = None,
    palette: str | Sequence[Any] | None = None,
    legend: bool = True,
) -> Figure:
    """Build a figure from ``layers`` with a pattern-aware legend."""
    cfg = load_config(cfg)
    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    entries: list[LegendEntry] = []
    for layer in layers:
        result = draw_layer(ax, layer, registry=registry, cfg=cfg, palette=palette)
        entries.extend(result.legend_entries)

    if title:
        ax.set_title(title)
    if legend and entries:
        titles = {e.title for e in entries}
        handles = [PatternKey(e.params, facecolor=e.params.get("fill", "white")) for e in entries]
        if len(titles) == 1:
            labels = [e.label for e in entries]
            pattern_legend(ax, handles, labels, registry=registry, cfg=cfg, title=entries[0].title)
        else:
            labels = [f"{e.title}: {e.label}" for e in entries]
            pattern_legend(ax, handles, labels, registry=registry, cfg=cfg)
    return fig
