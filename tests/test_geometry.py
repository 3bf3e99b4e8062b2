from __future__ import annotations

import numpy as np
import pytest
from matplotlib.collections import PolyCollection
from matplotlib.colors import to_rgba

from patternfill import geometry
from patternfill.params import make_params

BOX = np.array([[0.0, 0.0], [2.0, 0.0], [2.0, 10.0], [0.0, 10.0]])


def _extent(coll: PolyCollection) -> tuple[float, float, float, float]:
    verts = np.concatenate([p.vertices for p in coll.get_paths()])
    return verts[:, 0].min(), verts[:, 0].max(), verts[:, 1].min(), verts[:, 1].max()


def test_stripe_returns_one_collection_covering_the_box():
    params = make_params({"pattern_angle": 0.0, "pattern_spacing": 0.1, "pattern_density": 0.5})
    artists = geometry.stripe(params, BOX, aspect_ratio=2.0, legend=False)
    assert len(artists) == 1
    coll = artists[0]
    assert isinstance(coll, PolyCollection)
    x0, x1, y0, y1 = _extent(coll)
    assert x0 <= 0.0 and x1 >= 2.0
    assert y0 <= 0.0 and y1 >= 10.0


def test_stripe_spacing_controls_band_count():
    coarse = geometry.stripe(make_params({"pattern_spacing": 0.2}), BOX, 1.0, False)[0]
    fine = geometry.stripe(make_params({"pattern_spacing": 0.05}), BOX, 1.0, False)[0]
    assert len(fine.get_paths()) > len(coarse.get_paths())


def test_stripe_uses_fill_colour_and_alpha():
    params = make_params({"pattern_fill": "red", "pattern_alpha": 0.5})
    coll = geometry.stripe(params, BOX, 1.0, False)[0]
    np.testing.assert_allclose(coll.get_facecolor()[0], to_rgba("red", 0.5))


def test_crosshatch_has_two_layers_with_second_fill():
    params = make_params({"pattern_fill": "white", "pattern_fill2": "navy"})
    lower, upper = geometry.crosshatch(params, BOX, 1.0, False)
    np.testing.assert_allclose(lower.get_facecolor()[0], to_rgba("white"))
    np.testing.assert_allclose(upper.get_facecolor()[0], to_rgba("navy"))


def test_circle_grid_polygons():
    params = make_params({"pattern_spacing": 0.25, "pattern_density": 0.5})
    (coll,) = geometry.circle(params, BOX, aspect_ratio=1.0, legend=False)
    paths = coll.get_paths()
    assert len(paths) >= 16
    assert all(len(p.vertices) >= geometry.CIRCLE_SEGMENTS for p in paths)


def test_legend_scale_factor_widens_spacing():
    params = make_params({"pattern_spacing": 0.05, "pattern_key_scale_factor": 4.0})
    in_place = geometry.stripe(params, BOX, 1.0, False)[0]
    key = geometry.stripe(params, BOX, 1.0, True)[0]
    assert len(key.get_paths()) < len(in_place.get_paths())


def test_none_pattern_draws_nothing():
    assert geometry.none(make_params(), BOX, 1.0, False) == []


@pytest.mark.parametrize("aspect", [0.0, -1.0, None])
def test_degenerate_aspect_ratio_is_treated_as_square(aspect):
    coll = geometry.stripe(make_params(), BOX, aspect, False)[0]
    assert len(coll.get_paths()) > 0


@pytest.mark.parametrize("fn", [geometry.stripe, geometry.crosshatch, geometry.circle])
def test_default_params_give_dark_grey_outlines(fn):
    artists = fn(make_params(), BOX, 1.0, False)
    assert artists
    for coll in artists:
        np.testing.assert_allclose(coll.get_edgecolor()[0], to_rgba("#333333"))
