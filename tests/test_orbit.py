import logging

import numpy as np
import pytest

from deepzoom.core.orbit import ReferenceOrbitCache, compute_reference_orbit
from deepzoom.core.viewport import parse_center


def test_length_and_first_element():
    orbit = compute_reference_orbit(("-0.75", "0.1"), 25)
    assert len(orbit) == 26
    assert orbit.re[0] == -0.75
    assert orbit.im[0] == 0.1


def test_orbit_is_stored_as_doubles_with_exact_center():
    center = parse_center("-0.75", "0.1", 128)
    orbit = compute_reference_orbit(center, 10)
    assert orbit.re.dtype == np.float64
    assert orbit.im.dtype == np.float64
    assert orbit.center == center
    assert float(orbit.center[1]) == 0.1


def test_zero_iterations_is_just_the_center():
    orbit = compute_reference_orbit(("0.3", "-0.2"), 0)
    assert len(orbit) == 1
    assert (orbit.re[0], orbit.im[0]) == (0.3, -0.2)


def test_period_two_orbit_is_exact():
    orbit = compute_reference_orbit(("-1", "0"), 9)
    assert list(orbit.re) == [-1.0, 0.0] * 5
    assert list(orbit.im) == [0.0] * 10
    assert not orbit.escaped


def test_follows_the_recurrence():
    c = complex(-0.75, 0.1)
    orbit = compute_reference_orbit(("-0.75", "0.1"), 12)
    z = c
    for k in range(13):
        assert orbit.re[k] == pytest.approx(z.real, rel=1e-12, abs=1e-12)
        assert orbit.im[k] == pytest.approx(z.imag, rel=1e-12, abs=1e-12)
        z = z * z + c


def test_escaping_reference_is_flagged_not_truncated(caplog):
    caplog.set_level(logging.WARNING, logger="deepzoom")
    # 1, 2, 5, 26, 677: |677|^2 is past 2^16.
    orbit = compute_reference_orbit(("1", "0"), 20)
    assert len(orbit) == 21
    assert orbit.escape_index == 4
    assert orbit.escaped
    assert "escapes at step 4" in caplog.text


def test_invalid_arguments():
    with pytest.raises(ValueError):
        compute_reference_orbit(("0", "0"), -1)
    with pytest.raises(ValueError):
        compute_reference_orbit(("0", "0"), 10, precision_bits=32)


def test_cache_reuses_orbit_until_inputs_change():
    cache = ReferenceOrbitCache(precision_bits=128)
    center = parse_center("-0.75", "0.1", 128)

    first = cache.get(center, 50)
    assert cache.get(center, 50) is first
    assert cache.get(parse_center("-0.75", "0.1", 128), 50) is first
    assert cache.misses == 1

    longer = cache.get(center, 60)
    assert longer is not first
    assert len(longer) == 61

    moved = cache.get(parse_center("-0.7", "0.1", 128), 60)
    assert moved.re[0] == -0.7
    assert cache.misses == 3


def test_cache_invalidate():
    cache = ReferenceOrbitCache()
    center = parse_center("0", "0", 128)
    cache.get(center, 5)
    cache.invalidate()
    cache.get(center, 5)
    assert cache.misses == 2
