from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from patternfill.registry import default_registry  # noqa: E402


@pytest.fixture
def restore_default_registry():
    """Snapshot the process-wide registry and put it back after the test."""
    array_funcs = dict(default_registry.array_funcs)
    geometry_funcs = dict(default_registry.geometry_funcs)
    yield default_registry
    default_registry.array_funcs.clear()
    default_registry.array_funcs.update(array_funcs)
    default_registry.geometry_funcs.clear()
    default_registry.geometry_funcs.update(geometry_funcs)


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")
