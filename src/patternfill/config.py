from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf

DEFAULTS: dict[str, Any] = {
    "render": {
        # pixels per inch for array buffers; params["pattern_res"] wins when set
        "res": 72,
        # pattern artists sit this far above the shape they fill
        "zorder_offset": 0.5,
        "interpolation": "nearest",
    },
    "legend": {
        "key_scale": 1.0,
    },
    "outputs": {
        "figures_subdir": "figures",
        "fig_format": "png",
        "dpi": 150,
        "file_naming": "{figure}",
        "pad_inches": 0.1,
    },
    "gallery": {
        "figures": ["array_demo", "geometry_demo", "gradient_demo"],
    },
}


def load_config(cfg: DictConfig | Mapping[str, Any] | str | Path | None = None) -> DictConfig:
    """Merge a user config over the package defaults.

    ``cfg`` may be a DictConfig, a plain mapping, or a path to a YAML file.
    """
    base = OmegaConf.create(DEFAULTS)
    if cfg is None:
        return base
    if isinstance(cfg, (str, Path)):
        user = OmegaConf.load(cfg)
    elif isinstance(cfg, DictConfig):
        user = cfg
    else:
        user = OmegaConf.create(dict(cfg))
    return OmegaConf.merge(base, user)


def get_fig_config(cfg: DictConfig) -> dict[str, Any]:
    """Extract figure save settings from config"""
    return {
        "fig_format": str(cfg.outputs.get("fig_format", "png")),
        "dpi": int(cfg.outputs.get("dpi", 150)),
        "figures_subdir": str(cfg.outputs.get("figures_subdir", "figures")),
        "file_naming": str(cfg.outputs.get("file_naming", "{figure}")),
        "pad_inches": float(cfg.outputs.get("pad_inches", 0.1)),
    }
