import pytest
from mpmath import mp, mpf

from deepzoom.core.viewport import Viewport, parse_center, pixel_to_complex


def _viewport(zoom=1.0, center=("-0.75", "0.1"), width=640, height=480, increment=0.0):
    return Viewport(
        width=width,
        height=height,
        iterations=100,
        zoom=zoom,
        center=parse_center(center[0], center[1], 128),
        zoom_increment=increment,
    )


@pytest.mark.parametrize("zoom", [1.0, 3.5, 1e4, 1e9, 1e15])
def test_central_pixel_maps_to_center_exactly(zoom):
    vp = _viewport(zoom=zoom, center=("-1.7492046334590113301", "0.00028684660234660531403"))
    assert vp.pixel_to_complex(vp.width / 2, vp.height / 2) == vp.center_float


def test_corner_pixel_at_unit_zoom():
    x0, y0 = pixel_to_complex(0, 0, 640, 480, 1.0, (0.0, 0.0))
    assert x0 == -1.75
    assert y0 == 1.0


def test_rows_grow_downward():
    _, top = pixel_to_complex(10, 0, 64, 64, 1.0, (0.0, 0.0))
    _, bottom = pixel_to_complex(10, 63, 64, 64, 1.0, (0.0, 0.0))
    assert top > bottom


def test_range_shrinks_with_zoom():
    x_wide, _ = pixel_to_complex(0, 0, 64, 64, 1.0, (0.0, 0.0))
    x_tight, _ = pixel_to_complex(0, 0, 64, 64, 100.0, (0.0, 0.0))
    assert abs(x_tight) == pytest.approx(abs(x_wide) / 100.0)


def test_advance_adds_increment_and_keeps_center():
    vp = _viewport(zoom=1.0, increment=10000.0)
    nxt = vp.advance().advance()
    assert nxt.zoom == 20001.0
    assert nxt.center is vp.center
    assert (nxt.width, nxt.height, nxt.iterations) == (vp.width, vp.height, vp.iterations)


def test_viewport_is_immutable():
    vp = _viewport()
    with pytest.raises(AttributeError):
        vp.zoom = 2.0


def test_parse_center_keeps_digits_beyond_double():
    re, _ = parse_center("-1.7492046334590113301", "0", 128)
    with mp.workprec(128):
        assert re == mpf("-1.7492046334590113301")
        assert re != mpf(float("-1.7492046334590113301"))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"width": 0},
        {"height": 0},
        {"iterations": -1},
        {"zoom": 0.0},
        {"zoom_increment": -1.0},
    ],
)
def test_invalid_viewport_rejected(kwargs):
    args = dict(width=4, height=4, iterations=10, zoom=1.0, center=parse_center("0", "0", 128))
    args.update(kwargs)
    with pytest.raises(ValueError):
        Viewport(**args)
