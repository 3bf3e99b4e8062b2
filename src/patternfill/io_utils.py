from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any


def ensure_figures_dir(out_dir: str | Path, fig_cfg: Mapping[str, Any]) -> Path:
    """Ensure the figures directory exists under ``out_dir``.

    Parameters
    ----------
    out_dir : str | Path
        Output root
    fig_cfg : Mapping[str, Any]
        Figure settings (see ``config.get_fig_config``)

    Returns
    -------
    Path
        Path to the figures directory
    """
    out = Path(out_dir) / str(fig_cfg.get("figures_subdir", "figures"))
    out.mkdir(parents=True, exist_ok=True)
    return out


def build_filename(*, fig_cfg: Mapping[str, Any], figure: str) -> str:
    """Filename (without extension) for a named figure, from the ``file_naming`` template."""
    return str(fig_cfg.get("file_naming", "{figure}")).format(figure=figure)


def save_figure(fig, figures_dir: Path, base_name: str, fig_cfg: Mapping[str, Any]) -> Path:
    """Write ``fig`` as ``<figures_dir>/<base_name>.<fig_format>``.

    The bbox is fitted to the drawn content so legends placed outside the
    axes are kept.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
        Figure to save
    figures_dir : Path
        Directory to save to
    base_name : str
        Base filename (without extension)
    fig_cfg : Mapping[str, Any]
        Figure settings (format, DPI, padding)

    Returns
    -------
    Path
        Path to saved figure
    """
    fmt = str(fig_cfg.get("fig_format", "png"))
    dpi = int(fig_cfg.get("dpi", 150))
    path = figures_dir / f"{base_name}.{fmt}"
    fig.savefig(path, dpi=dpi, bbox_inches="tight", pad_inches=float(fig_cfg.get("pad_inches", 0.1)))
    return path
