"""Tests for the rendering sink."""

# pylint: disable=missing-function-docstring

import numpy as np
import pytest

from vegindx.indices.evaluator import IndexResult, evaluate
from vegindx.indices.registry import get_index
from vegindx.visualization.render import (
    NO_DATA_COLOR,
    build_colormap,
    render_png,
    resolve_display_range,
)


def _result(raster, display_range=None):
    return IndexResult(
        name="TEST",
        raster=np.asarray(raster, dtype=float),
        display_range=display_range,
        palette=("black", "yellow", "green"),
    )


def test_fixed_range_is_used_verbatim(scene):
    assert resolve_display_range(evaluate(get_index("NDVI"), scene)) == (-1.0, 1.0)


def test_auto_range_ignores_non_finite():
    result = _result([[0.2, np.nan], [np.inf, -0.4]])
    assert resolve_display_range(result) == (pytest.approx(-0.4), pytest.approx(0.2))


def test_auto_range_fallbacks():
    assert resolve_display_range(_result([[np.nan, np.inf]])) == (0.0, 1.0)
    assert resolve_display_range(_result([[0.3, 0.3]])) == (
        pytest.approx(-0.2),
        pytest.approx(0.8),
    )


def test_colormap_ramp():
    cmap = build_colormap(["black", "yellow", "green"])
    assert cmap(0.0)[:3] == pytest.approx((0.0, 0.0, 0.0))
    assert cmap(0.5)[:3] == pytest.approx((1.0, 1.0, 0.0), abs=0.01)
    assert tuple(cmap(np.ma.masked_invalid([np.nan]))[0]) == pytest.approx(NO_DATA_COLOR)
    with pytest.raises(ValueError):
        build_colormap(["black"])


def test_render_png(scene, tmp_path):
    result = evaluate(get_index("SAVI"), scene)
    out = tmp_path / "maps" / "savi.png"
    path = render_png(result, str(out), title="SAVI test")
    assert path == str(out)
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_render_png_with_degenerate_pixels(make_pixel, tmp_path):
    result = evaluate(get_index("SR"), make_pixel(RED=0.0, NIR=0.0))
    out = tmp_path / "sr.png"
    render_png(result, str(out), legend=False)
    assert out.exists()
