"""Example figures for the built-in patterns.

Run ``python -m patternfill.gallery`` (Hydra config: ``conf/gallery.yaml``) to
render every figure listed under ``gallery.figures``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import hydra
import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.figure import Figure
from omegaconf import DictConfig

from .arrays import GRADIENT_ORIENTATIONS
from .config import get_fig_config, load_config
from .io_utils import build_filename, ensure_figures_dir, save_figure
from .plot import PatternLayer, pattern_plot

logger = logging.getLogger(__name__)


def _demo_data() -> pd.DataFrame:
    return pd.DataFrame({"trt": ["a", "b", "c"], "outcome": [2.3, 1.9, 3.2]})


def array_demo(cfg: DictConfig) -> Figure:
    """Columns filled by the ``simple`` array pattern, one pattern_type per column."""
    layer = PatternLayer(
        geom="col",
        data=_demo_data(),
        mapping={"x": "trt", "y": "outcome", "pattern_type": "trt"},
        params={"pattern": "simple", "fill": "white"},
    )
    return pattern_plot([layer], title="Array pattern: simple", cfg=cfg)


def geometry_demo(cfg: DictConfig) -> Figure:
    df = _demo_data().assign(pattern=["stripe", "crosshatch", "circle"])
    layer = PatternLayer(
        geom="col",
        data=df,
        mapping={"x": "trt", "y": "outcome", "pattern": "pattern", "pattern_fill": "trt"},
        params={"fill": "white", "pattern_density": 0.35, "pattern_spacing": 0.08, "pattern_angle": 45.0},
    )
    return pattern_plot([layer], title="Geometry patterns", cfg=cfg)


def gradient_demo(cfg: DictConfig) -> Figure:
    """One panel per gradient orientation."""
    fig, axes = plt.subplots(1, len(GRADIENT_ORIENTATIONS), figsize=(4 * len(GRADIENT_ORIENTATIONS), 4))
    for ax, orientation in zip(axes, GRADIENT_ORIENTATIONS):
        layer = PatternLayer(
            geom="col",
            data=_demo_data(),
            mapping={"x": "trt", "y": "outcome", "pattern_fill2": "trt"},
            params={"pattern": "gradient", "pattern_fill": "white", "pattern_orientation": orientation},
        )
        pattern_plot([layer], ax=ax, title=f"pattern_orientation='{orientation}'", cfg=cfg)
    return fig


FIGURES: dict[str, Callable[[DictConfig], Figure]] = {
    "array_demo": array_demo,
    "geometry_demo": geometry_demo,
    "gradient_demo": gradient_demo,
}


def build_gallery(cfg: DictConfig, out_dir: str | Path) -> list[Path]:
    """Render and save every figure named in ``cfg.gallery.figures``.

    A failing figure is logged and skipped so the rest still render.
    """
    cfg = load_config(cfg)
    fig_cfg = get_fig_config(cfg)
    figures_dir = ensure_figures_dir(out_dir, fig_cfg)

    saved: list[Path] = []
    for name in cfg.gallery.get("figures", []):
        builder = FIGURES.get(str(name))
        if builder is None:
            logger.warning("[gallery] skip unknown figure=%s options=%s", name, list(FIGURES))
            continue
        open_before = set(plt.get_fignums())
        try:
            fig = builder(cfg)
            path = save_figure(fig, figures_dir, build_filename(fig_cfg=fig_cfg, figure=str(name)), fig_cfg)
        except Exception as e:  # friendly failure: keep rendering the others
            logger.error("[gallery] figure=%s failed: %s", name, e)
            continue
        finally:
            # close whatever the builder opened, including half-built figures
            for num in set(plt.get_fignums()) - open_before:
                plt.close(num)
        logger.info("[gallery] saved %s", path)
        saved.append(path)
    return saved


@hydra.main(config_path="conf", config_name="gallery", version_base="1.3")
def main(cfg: DictConfig) -> None:
    out_dir = cfg.outputs.get("output_root")
    if not out_dir:
        raise ValueError("Missing 'outputs.output_root' in config")
    build_gallery(cfg, out_dir)


if __name__ == "__main__":
    main()
