from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
import pytest
from matplotlib.collections import PolyCollection
from matplotlib.image import AxesImage
from matplotlib.patches import Polygon, Rectangle

from patternfill.contract import PatternContractError
from patternfill.params import PatternParams, make_params
from patternfill.registry import build_default_registry
from patternfill.render import draw_pattern, pattern_pixel_size


def assert_clipped_to(artist, patch):
    # rectangles clip through a bbox, other patches through a path
    if isinstance(patch, Rectangle):
        assert artist.get_clip_path() is None
        np.testing.assert_allclose(artist.get_clip_box().bounds, patch.get_window_extent().bounds)
    else:
        clip = artist.get_clip_path()
        assert clip is not None
        np.testing.assert_allclose(clip.get_fully_transformed_path().get_extents().bounds, patch.get_window_extent().bounds)


@pytest.fixture
def ax_with_rect():
    fig, ax = plt.subplots(figsize=(4, 4), dpi=100)
    ax.set_xlim(0, 4)
    ax.set_ylim(0, 4)
    rect = ax.add_patch(Rectangle((1, 1), 2, 1, facecolor="white"))
    return ax, rect


def test_array_pattern_is_drawn_as_clipped_image(ax_with_rect):
    ax, rect = ax_with_rect
    artists = draw_pattern(ax, rect, make_params({"pattern": "simple", "pattern_type": "b"}))
    assert len(artists) == 1
    im = artists[0]
    assert isinstance(im, AxesImage)
    assert_clipped_to(im, rect)
    assert im.get_zorder() > rect.get_zorder()
    w, h = pattern_pixel_size(ax, rect, 72)
    assert im.get_array().shape == (h, w, 4)
    np.testing.assert_allclose(im.get_extent(), (1, 3, 1, 2))
    ax.figure.canvas.draw()


def test_callback_receives_contract_arguments(ax_with_rect):
    ax, rect = ax_with_rect
    calls = []

    def recorder(width, height, params, legend):
        calls.append((width, height, params, legend))
        return np.zeros((height, width, 4))

    registry = build_default_registry()
    registry.register("recorder", recorder)
    draw_pattern(ax, rect, {"pattern": "recorder"}, registry=registry)

    (width, height, params, legend) = calls[0]
    assert isinstance(width, int) and isinstance(height, int)
    assert width > height
    assert isinstance(params, PatternParams)
    assert legend is False


def test_pattern_res_overrides_config(ax_with_rect):
    ax, rect = ax_with_rect
    sizes = {}

    def recorder(width, height, params, legend):
        sizes[params["pattern_res"]] = (width, height)
        return np.zeros((height, width, 4))

    registry = build_default_registry()
    registry.register("recorder", recorder)
    draw_pattern(ax, rect, make_params({"pattern": "recorder", "pattern_res": 36}), registry=registry)
    draw_pattern(ax, rect, make_params({"pattern": "recorder", "pattern_res": 144}), registry=registry)
    (w36, h36), (w144, h144) = sizes[36], sizes[144]
    assert abs(w144 - 4 * w36) <= 4
    assert abs(h144 - 4 * h36) <= 4


def test_cfg_res_is_used_without_pattern_res(ax_with_rect):
    ax, rect = ax_with_rect
    low = draw_pattern(ax, rect, make_params({"pattern": "solid"}), cfg={"render": {"res": 10}})[0]
    high = draw_pattern(ax, rect, make_params({"pattern": "solid"}), cfg={"render": {"res": 100}})[0]
    assert low.get_array().shape[1] < high.get_array().shape[1]


def test_pattern_alpha_scales_alpha_channel(ax_with_rect):
    ax, rect = ax_with_rect
    (im,) = draw_pattern(ax, rect, make_params({"pattern": "solid", "pattern_fill": "red", "pattern_alpha": 0.5}))
    np.testing.assert_allclose(np.asarray(im.get_array())[..., 3], 0.5)


def test_contract_breach_propagates(ax_with_rect):
    ax, rect = ax_with_rect
    registry = build_default_registry()
    registry.register("wrong", lambda width, height, params, legend: np.zeros((width, height, 3)))
    with pytest.raises(PatternContractError):
        draw_pattern(ax, rect, {"pattern": "wrong"}, registry=registry)


def test_unknown_pattern_raises(ax_with_rect):
    ax, rect = ax_with_rect
    with pytest.raises(ValueError, match="Unknown pattern"):
        draw_pattern(ax, rect, {"pattern": "nope"})


def test_geometry_pattern_artists_are_added_and_clipped(ax_with_rect):
    ax, rect = ax_with_rect
    artists = draw_pattern(ax, rect, make_params({"pattern": "crosshatch"}))
    assert len(artists) == 2
    for artist in artists:
        assert isinstance(artist, PolyCollection)
        assert artist in ax.collections
        assert_clipped_to(artist, rect)
        assert artist.get_zorder() > rect.get_zorder()
    ax.figure.canvas.draw()


def test_geometry_callback_gets_data_boundary_and_aspect(ax_with_rect):
    ax, rect = ax_with_rect
    seen = {}

    def spy(params, boundary, aspect_ratio, legend):
        seen.update(boundary=boundary, aspect=aspect_ratio, legend=legend)
        return []

    registry = build_default_registry()
    registry.register("spy", spy, "geometry")
    draw_pattern(ax, rect, {"pattern": "spy"}, registry=registry)
    np.testing.assert_allclose(seen["boundary"].min(axis=0), [1, 1], atol=1e-9)
    np.testing.assert_allclose(seen["boundary"].max(axis=0), [3, 2], atol=1e-9)
    assert seen["aspect"] == pytest.approx(0.5, rel=0.05)
    assert seen["legend"] is False


def test_view_limits_survive_array_fill():
    fig, ax = plt.subplots()
    bars = ax.bar([0, 1, 2], [3.0, 1.0, 2.0])
    ax.autoscale_view()
    before = ax.get_xlim(), ax.get_ylim()
    for bar in bars.patches:
        draw_pattern(ax, bar, make_params({"pattern": "gradient"}))
    assert (ax.get_xlim(), ax.get_ylim()) == before


def test_pixel_size_is_at_least_one():
    fig, ax = plt.subplots()
    ax.set_xlim(0, 1e6)
    ax.set_ylim(0, 1e6)
    rect = ax.add_patch(Rectangle((0, 0), 1e-3, 1e-3))
    assert pattern_pixel_size(ax, rect, 72) == (1, 1)


def test_array_pattern_is_clipped_to_polygon(ax_with_rect):
    ax, _ = ax_with_rect
    tri = ax.add_patch(Polygon([(1, 1), (3, 1), (1, 3)], closed=True, facecolor="white", edgecolor="none"))
    (im,) = draw_pattern(ax, tri, make_params({"pattern": "solid", "pattern_fill": "red"}))
    assert_clipped_to(im, tri)

    fig = ax.figure
    fig.canvas.draw()
    buf = np.asarray(fig.canvas.buffer_rgba())

    def pixel(x, y):
        px, py = ax.transData.transform((x, y))
        return buf[int(buf.shape[0] - py), int(px)]

    inside = pixel(1.4, 1.4)
    assert inside[0] > 200 and inside[1] < 60 and inside[2] < 60
    # inside the image extent but outside the triangle
    outside = pixel(2.7, 2.7)
    assert outside[0] > 200 and outside[1] > 200 and outside[2] > 200


@pytest.mark.parametrize("name", ["stripe", "crosshatch", "circle"])
def test_geometry_patterns_render_with_default_params(ax_with_rect, name):
    ax, rect = ax_with_rect
    artists = draw_pattern(ax, rect, make_params({"pattern": name}))
    assert artists
    ax.figure.canvas.draw()
