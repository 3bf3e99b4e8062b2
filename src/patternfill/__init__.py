"""Pattern fills for matplotlib shapes.

Pattern callbacks are registered by name and invoked by the renderer with a
fixed signature. Array patterns return an RGBA buffer; geometry patterns return
artists clipped to the shape. See `registry.py` for the built-ins.
"""

from .contract import PatternContractError, validate_pattern_array
from .legend import HandlerPattern, PatternKey, pattern_legend
from .params import DEFAULT_PARAMS, PatternParams, make_params
from .plot import PatternLayer, draw_layer, pattern_plot
from .registry import (
    PatternRegistry,
    default_registry,
    get_pattern,
    list_patterns,
    options,
    register_array_pattern,
    register_geometry_pattern,
)
from .render import draw_pattern

__all__ = [
    "DEFAULT_PARAMS",
    "HandlerPattern",
    "PatternContractError",
    "PatternKey",
    "PatternLayer",
    "PatternParams",
    "PatternRegistry",
    "default_registry",
    "draw_layer",
    "draw_pattern",
    "get_pattern",
    "list_patterns",
    "make_params",
    "options",
    "pattern_legend",
    "pattern_plot",
    "register_array_pattern",
    "register_geometry_pattern",
    "validate_pattern_array",
]
