import logging
from dataclasses import replace
from typing import Optional, Tuple

import numpy as np
from scipy import optimize

from dynamicwalking.walker import WalkRW2l, onestep, step_length

logger = logging.getLogger(__name__)

VARYING_PARAMETERS = ('P', 'alpha', 'vm')
TARGET_QUANTITIES = ('speed', 'tf', 'step_length', 'step_frequency', 'vm', 'P')


class GaitNotFound(RuntimeError):
    pass


def gait_quantity(walker: WalkRW2l, name: str, delta: float = 0.0) -> float:
    """Evaluate a named quantity of one step taken from the walker's own vm and P."""
    if name == 'vm':
        return walker.vm
    if name == 'P':
        return walker.P
    if name == 'step_length':
        return step_length(walker)

    step = onestep(walker, delta=delta, safety=True)
    if name == 'speed':
        return step.speed
    if name == 'tf':
        return step.tf
    if name == 'step_frequency':
        return 1.0 / step.tf
    raise ValueError(f"Unknown gait quantity '{name}', expected one of {TARGET_QUANTITIES}")


def findgait(walker: WalkRW2l, target: Optional[Tuple[str, float]] = None,
             varying: str = 'P', delta: float = 0.0, xtol: float = 1e-10) -> WalkRW2l:
    """
    Find a periodic gait, where each step returns to the same mid-stance speed.

    Args:
        walker: starting guess, its parameters seed the root-finder
        target: optional (quantity, value) the gait must also achieve,
            e.g. ('speed', 0.4)
        varying: parameter adjusted for periodicity, one of P, alpha, vm.
            With a target, vm is solved for together with it.
        delta: ground slope of every step

    Returns:
        a new walker holding the periodic gait parameters
    """
    if varying not in VARYING_PARAMETERS:
        raise ValueError(f"Cannot vary '{varying}', expected one of {VARYING_PARAMETERS}")
    if target is not None and target[0] not in TARGET_QUANTITIES:
        raise ValueError(f"Unknown target '{target[0]}', expected one of {TARGET_QUANTITIES}")

    if target is None:
        # periodicity alone at the remaining parameters
        unknowns = [varying]
    elif varying == 'vm':
        raise ValueError("A target needs a varying parameter other than vm")
    else:
        unknowns = ['vm', varying]

    def candidate(x):
        return replace(walker, **{name: float(xi) for name, xi in zip(unknowns, x)})

    def residuals(x):
        w = candidate(x)
        step = onestep(w, delta=delta, safety=True)
        res = [step.vm_next - w.vm]
        if target is not None:
            res.append(gait_quantity(w, target[0], delta) - target[1])
        return np.array(res, dtype=float)

    x0 = np.array([getattr(walker, name) for name in unknowns], dtype=float)
    logger.info("Finding gait varying %s, target %s", unknowns, target)
    sol = optimize.root(residuals, x0, method='hybr', options={'xtol': xtol})

    if not sol.success or not np.all(np.isfinite(sol.fun)) or np.max(np.abs(sol.fun)) > 1e-6:
        raise GaitNotFound(f"No periodic gait found varying {unknowns}: {sol.message}")

    found = candidate(sol.x)
    logger.info("Found gait vm=%.5f P=%.5f alpha=%.5f", found.vm, found.P, found.alpha)
    return found
