import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from dynamicwalking.helpers import (
    sqrt, asinh, atanh, tanh, natural_frequency, transition_angles, as_deltas
)
from dynamicwalking.results import StepResult, MultiStepResult

logger = logging.getLogger(__name__)


@dataclass
class WalkRW2l:
    """
    Simplest walking model: a point mass on massless legs, linearized
    inverted pendulum stance, impulsive push-off right before heel-strike.
    Dimensionless by default (L = g = 1).
    """
    # Gait parameters
    vm: float = 0.4       # mid-stance speed
    P: float = 0.15       # push-off impulse
    alpha: float = 0.35   # half inter-leg angle at heel-strike

    # Environment and physical parameters
    gamma: float = 0.0    # global slope, downhill positive
    L: float = 1.0
    g: float = 1.0

    # Return NaN for failed steps instead of raising
    safety: bool = True


def step_length(walker: WalkRW2l) -> float:
    return 2 * walker.L * np.sin(walker.alpha)


def step_expressions(walker: WalkRW2l, vm, P, delta=0.0):
    """
    Step relations for mid-stance speed vm and push-off P. Works with floats
    and with pydrake symbolic variables.

    Returns a dict with t_transition, v_minus, v_plus, vm_next_sq, vm_next,
    t_after, tf, pwork and cwork.
    """
    w = natural_frequency(walker)
    L = float(walker.L)
    theta_end, theta_start = transition_angles(walker, delta)
    c2, s2 = float(np.cos(2 * walker.alpha)), float(np.sin(2 * walker.alpha))

    # mid-stance to end of stance
    t_transition = asinh(w * L * theta_end / vm) / w
    v_minus = sqrt(vm**2 + (w * L * theta_end)**2)

    # push-off then collision
    v_plus = v_minus * c2 + P * s2
    pwork = 0.5 * P**2
    cwork = -0.5 * (v_minus * s2 - P * c2)**2

    # start of new stance to mid-stance
    vm_next_sq = v_plus**2 - (w * L * theta_start)**2
    vm_next = sqrt(vm_next_sq)
    t_after = atanh(-w * L * theta_start / v_plus) / w

    return {
        't_transition': t_transition,
        'v_minus': v_minus,
        'v_plus': v_plus,
        'vm_next_sq': vm_next_sq,
        'vm_next': vm_next,
        't_after': t_after,
        'tf': t_transition + t_after,
        'pwork': pwork,
        'cwork': cwork,
    }


def onestep(walker: WalkRW2l, vm: Optional[float] = None, P: Optional[float] = None,
            delta: float = 0.0, safety: Optional[bool] = None) -> StepResult:
    """
    Take one step from mid-stance to the next mid-stance.

    If the walker does not reach the next mid-stance, the step's speeds and
    times are NaN when safety is on, otherwise ValueError is raised.
    """
    vm = walker.vm if vm is None else float(vm)
    P = walker.P if P is None else float(P)
    safety = walker.safety if safety is None else safety

    theta_end, theta_start = transition_angles(walker, delta)
    sl = step_length(walker)

    if vm <= 0 or theta_end <= 0:
        if not safety:
            raise ValueError(
                f"Cannot start a step with vm={vm} and end-of-stance angle {theta_end}")
        return StepResult(vm=vm, vm_next=np.nan, push_off=P, delta=delta,
                          pwork=0.5 * P**2, step_length=sl)

    with np.errstate(invalid='ignore', divide='ignore'):
        e = step_expressions(walker, vm, P, delta)

    reached = e['v_plus'] > 0 and e['vm_next_sq'] > 0
    if not reached:
        if not safety:
            raise ValueError(
                f"Walker fails to reach mid-stance: v+={e['v_plus']:.4g}, "
                f"theta_start={theta_start:.4g}")
        return StepResult(vm=vm, vm_next=np.nan, push_off=P, delta=delta,
                          t_transition=e['t_transition'], v_minus=e['v_minus'],
                          v_plus=e['v_plus'], pwork=e['pwork'], cwork=e['cwork'],
                          step_length=sl)

    tf = float(e['tf'])
    return StepResult(
        vm=vm,
        vm_next=float(e['vm_next']),
        push_off=P,
        delta=delta,
        tf=tf,
        t_transition=float(e['t_transition']),
        v_minus=float(e['v_minus']),
        v_plus=float(e['v_plus']),
        pwork=float(e['pwork']),
        cwork=float(e['cwork']),
        step_length=sl,
        speed=sl / tf,
    )


def nominal_step_time(walker: WalkRW2l, delta: float = 0.0) -> float:
    return onestep(walker, delta=delta).tf


def periodic_pushoff(walker: WalkRW2l, vm: Optional[float] = None, delta: float = 0.0) -> float:
    """Push-off that returns the walker to the same mid-stance speed vm."""
    vm = walker.vm if vm is None else vm
    w = natural_frequency(walker)
    L = walker.L
    theta_end, theta_start = transition_angles(walker, delta)
    v_minus = np.sqrt(vm**2 + (w * L * theta_end)**2)
    v_plus = np.sqrt(vm**2 + (w * L * theta_start)**2)
    return (v_plus - v_minus * np.cos(2 * walker.alpha)) / np.sin(2 * walker.alpha)


def steady_step_phases(walker: WalkRW2l, vm: Optional[float] = None,
                       delta: float = 0.0) -> Tuple[float, float]:
    """Times before and after the transition of a step that starts and ends at vm."""
    vm = walker.vm if vm is None else vm
    w = natural_frequency(walker)
    L = walker.L
    theta_end, theta_start = transition_angles(walker, delta)
    v_plus = np.sqrt(vm**2 + (w * L * theta_start)**2)
    return np.arcsinh(w * L * theta_end / vm) / w, np.arctanh(-w * L * theta_start / v_plus) / w


def steady_step_time(walker: WalkRW2l, vm: Optional[float] = None, delta: float = 0.0) -> float:
    """Step time when the step starts and ends at mid-stance speed vm."""
    t_transition, t_after = steady_step_phases(walker, vm, delta)
    return t_transition + t_after


def step_time_residuals(walker: WalkRW2l, vm, P, t_transition, t_after, delta=0.0):
    """
    Residuals that vanish when t_transition and t_after are the pendulum phase
    times of a step, from tanh(w t) = w L theta / v on each side of the
    transition.
    """
    w = natural_frequency(walker)
    L = float(walker.L)
    theta_end, theta_start = transition_angles(walker, delta)
    c2, s2 = float(np.cos(2 * walker.alpha)), float(np.sin(2 * walker.alpha))

    v_minus = sqrt(vm**2 + (w * L * theta_end)**2)
    v_plus = v_minus * c2 + P * s2
    return (v_minus * tanh(w * t_transition) - w * L * theta_end,
            v_plus * tanh(w * t_after) + w * L * theta_start)


def boundary_work(vm0: float, boundaryvels: Optional[Tuple[float, float]]) -> float:
    """Work to bring the walker from the starting boundary speed to vm0."""
    if boundaryvels is None:
        return 0.0
    return 0.5 * (vm0**2 - boundaryvels[0]**2)


def multistep(walker: WalkRW2l, Ps: Sequence[float], deltas: Optional[Sequence[float]] = None,
              vm0: Optional[float] = None, boundaryvels: Optional[Tuple[float, float]] = None,
              boundarywork: bool = False, safety: Optional[bool] = None) -> MultiStepResult:
    """
    Simulate consecutive steps with push-offs Ps starting at mid-stance speed
    vm0. Once a step fails, the remaining steps are NaN.
    """
    Ps = np.atleast_1d(np.asarray(Ps, dtype=float))
    numsteps = len(Ps)
    deltas = as_deltas(deltas, numsteps)
    vm0 = walker.vm if vm0 is None else float(vm0)

    steps = []
    vm = vm0
    t = 0.0
    for i in range(numsteps):
        if np.isfinite(vm):
            step = onestep(walker, vm=vm, P=Ps[i], delta=deltas[i], safety=safety)
        else:
            step = StepResult(vm=vm, vm_next=np.nan, push_off=Ps[i], delta=deltas[i],
                              pwork=0.5 * Ps[i]**2, step_length=step_length(walker))
        step.tstart = t
        steps.append(step)
        t += step.tf
        vm = step.vm_next

    if not np.isfinite(vm):
        logger.warning("Walk failed before completing %d steps", numsteps)

    bwork = boundary_work(vm0, boundaryvels) if boundarywork else 0.0
    pwork = float(np.sum([s.pwork for s in steps]))
    return MultiStepResult(
        steps=steps,
        vm0=vm0,
        boundaryvels=boundaryvels,
        boundarywork=bwork,
        totalcost=pwork + bwork,
        totaltime=t,
        success=bool(np.isfinite(vm)),
    )
