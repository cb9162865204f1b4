import numpy as np
import pytest

from dynamicwalking.terrain import (
    flat_deltas, ramp_deltas, up_down_deltas, rough_deltas, elevations, foothold_positions
)


def test_flat():
    np.testing.assert_array_equal(flat_deltas(4), np.zeros(4))


def test_ramp_default_is_centered():
    deltas = ramp_deltas(15, angle=0.1)
    assert np.count_nonzero(deltas) == 5
    np.testing.assert_array_equal(np.nonzero(deltas)[0], np.arange(5, 10))
    assert np.all(deltas[deltas != 0] == 0.1)


def test_ramp_down():
    deltas = ramp_deltas(6, start=1, length=2, angle=0.1, down=True)
    np.testing.assert_allclose(deltas, [0, -0.1, -0.1, 0, 0, 0])


def test_ramp_must_fit():
    with pytest.raises(ValueError):
        ramp_deltas(5, start=3, length=4)


def test_up_down_returns_to_start_height():
    deltas = up_down_deltas(12, length=3, angle=0.05)
    z = elevations(deltas, 0.7)
    assert z[-1] == pytest.approx(0.0, abs=1e-12)
    assert z.max() == pytest.approx(3 * 0.7 * np.sin(0.05))


def test_rough_is_smoothed_and_reproducible():
    a = rough_deltas(50, scale=0.05, rng=np.random.default_rng(3))
    b = rough_deltas(50, scale=0.05, rng=np.random.default_rng(3))
    raw = np.random.default_rng(3).uniform(-0.05, 0.05, 50)
    np.testing.assert_array_equal(a, b)
    assert np.all(np.abs(a) <= 0.05)
    assert np.std(np.diff(a)) < np.std(np.diff(raw))


def test_elevations_and_positions():
    deltas = [0.0, 0.1, 0.1]
    z = elevations(deltas, 1.0)
    x = foothold_positions(deltas, 1.0)
    assert len(z) == len(x) == 4
    np.testing.assert_allclose(z, [0, 0, np.sin(0.1), 2 * np.sin(0.1)])
    np.testing.assert_allclose(x, [0, 1, 1 + np.cos(0.1), 1 + 2 * np.cos(0.1)])
