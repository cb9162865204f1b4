import numpy as np
from scipy import ndimage

# Slope profiles are per-step ground angles in radians, uphill positive.

DEFAULT_RAMP_ANGLE = 0.08


def flat_deltas(numsteps):
    return np.zeros(numsteps)


def ramp_deltas(numsteps=15, start=None, length=None, angle=DEFAULT_RAMP_ANGLE, down=False):
    """
    Level ground with a single ramp of constant slope.

    Args:
        numsteps: total number of steps
        start: first step on the ramp, defaults to centering it
        length: number of steps on the ramp, defaults to a third of the walk
        angle: ramp slope magnitude
        down: descend the ramp instead of climbing it
    """
    length = max(1, numsteps // 3) if length is None else length
    start = (numsteps - length) // 2 if start is None else start
    if start < 0 or start + length > numsteps:
        raise ValueError(f"Ramp of {length} steps at {start} does not fit in {numsteps} steps")

    deltas = np.zeros(numsteps)
    deltas[start:start + length] = -angle if down else angle
    return deltas


def up_down_deltas(numsteps=15, length=None, angle=DEFAULT_RAMP_ANGLE):
    """Climb a ramp, then descend one of the same length right after."""
    length = max(1, numsteps // 4) if length is None else length
    start = (numsteps - 2 * length) // 2
    if start < 0:
        raise ValueError(f"Two ramps of {length} steps do not fit in {numsteps} steps")

    deltas = np.zeros(numsteps)
    deltas[start:start + length] = angle
    deltas[start + length:start + 2 * length] = -angle
    return deltas


def rough_deltas(numsteps, scale=0.05, sigma=1.0, rng=None):
    """Random slopes, smoothed across neighbouring steps"""
    rng = np.random.default_rng() if rng is None else rng
    raw = rng.uniform(-scale, scale, numsteps)
    return ndimage.gaussian_filter1d(raw, sigma=sigma, mode='nearest')


def elevations(deltas, step_length):
    """Foothold heights, starting from zero, for steps of the given length"""
    rises = step_length * np.sin(np.asarray(deltas, dtype=float))
    return np.append(0.0, np.cumsum(rises))


def foothold_positions(deltas, step_length):
    """Horizontal foothold positions, starting from zero"""
    runs = step_length * np.cos(np.asarray(deltas, dtype=float))
    return np.append(0.0, np.cumsum(runs))
