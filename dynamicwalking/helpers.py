import numpy as np
from pydrake.symbolic import Expression, Variable
from pydrake import symbolic


# SCALAR MATH
# Each function accepts floats, numpy arrays or pydrake symbolic values, so the
# same step relations serve simulation and program construction.

def is_symbolic(x):
    if isinstance(x, (Expression, Variable)):
        return True
    if isinstance(x, np.ndarray) and x.dtype == object:
        return any(isinstance(xi, (Expression, Variable)) for xi in x.flat)
    return False

def sqrt(x):
    if is_symbolic(x):
        return symbolic.sqrt(x)
    return np.sqrt(x)

def asinh(x):
    if is_symbolic(x):
        return symbolic.log(x + symbolic.sqrt(x * x + 1))
    return np.arcsinh(x)

def atanh(x):
    if is_symbolic(x):
        return 0.5 * symbolic.log((1 + x) / (1 - x))
    return np.arctanh(x)

def sinh(x):
    if is_symbolic(x):
        return symbolic.sinh(x)
    return np.sinh(x)

def cosh(x):
    if is_symbolic(x):
        return symbolic.cosh(x)
    return np.cosh(x)

def tanh(x):
    if is_symbolic(x):
        return symbolic.tanh(x)
    return np.tanh(x)


# PENDULUM PHASES

def natural_frequency(walker):
    return float(np.sqrt(walker.g / walker.L))

def transition_angles(walker, delta=0.0):
    """
    Stance leg angle from vertical at the end of a stance (theta_end) and at
    the start of the next one (theta_start), for a step onto ground of slope
    delta (uphill positive) on a walker with downhill slope gamma.
    """
    theta_end = float(walker.alpha + walker.gamma - delta)
    theta_start = float(-walker.alpha + walker.gamma - delta)
    return theta_end, theta_start

def phase_one_speed(walker, vm, tau):
    # speed at time tau after mid-stance, theta(tau) = (vm / (w L)) sinh(w tau)
    w = natural_frequency(walker)
    return vm * cosh(w * tau)

def phase_two_speed(walker, v_plus, theta_start, tau):
    # speed at time tau after the step-to-step transition
    w = natural_frequency(walker)
    L = walker.L
    return np.abs(w * L * theta_start * sinh(w * tau) + v_plus * cosh(w * tau))


# SEQUENCES

def as_deltas(deltas, numsteps):
    if deltas is None:
        return np.zeros(numsteps)
    deltas = np.asarray(deltas, dtype=float)
    if deltas.ndim == 0:
        return np.full(numsteps, float(deltas))
    if len(deltas) != numsteps:
        raise ValueError(f"Expected {numsteps} slope angles, got {len(deltas)}")
    return deltas

def triangle_coefficients(numsteps):
    """Unit triangle over the numsteps + 1 mid-stances, zero at the virtual rest points."""
    i = np.arange(numsteps + 1)
    return 1.0 - np.abs(2.0 * (i + 1) / (numsteps + 2) - 1.0)
