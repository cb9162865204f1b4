from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from dynamicwalking.helpers import (
    transition_angles, phase_one_speed, phase_two_speed
)


@dataclass
class StepResult:
    """One step, mid-stance to mid-stance."""
    vm: float               # mid-stance speed at the start of the step
    vm_next: float          # mid-stance speed at the end of the step
    push_off: float
    delta: float = 0.0      # ground slope of the step, uphill positive
    tf: float = np.nan      # step time
    t_transition: float = np.nan  # mid-stance to step-to-step transition
    v_minus: float = np.nan
    v_plus: float = np.nan
    pwork: float = 0.0
    cwork: float = 0.0
    step_length: float = np.nan
    speed: float = np.nan
    tstart: float = 0.0

    @property
    def valid(self) -> bool:
        return bool(np.isfinite(self.vm_next) and np.isfinite(self.tf))


@dataclass
class MultiStepResult:
    steps: List[StepResult] = field(default_factory=list)
    vm0: float = np.nan
    boundaryvels: Optional[Tuple[float, float]] = None
    boundarywork: float = 0.0
    totalcost: float = 0.0
    totaltime: float = 0.0
    objective: str = "simulation"
    objective_value: float = np.nan
    success: bool = True
    solver: Optional[str] = None
    # objective-specific values: vpeak for the triangle profile, ctime when total time is free
    extras: Dict[str, float] = field(default_factory=dict)

    def __len__(self):
        return len(self.steps)

    def _field(self, name):
        return np.array([getattr(s, name) for s in self.steps], dtype=float)

    @property
    def numsteps(self) -> int:
        return len(self.steps)

    @property
    def vms(self) -> np.ndarray:
        # numsteps + 1 mid-stance speeds including the final one
        if not self.steps:
            return np.array([self.vm0])
        return np.append(self._field('vm'), self.steps[-1].vm_next)

    @property
    def pushoffs(self) -> np.ndarray:
        return self._field('push_off')

    @property
    def pworks(self) -> np.ndarray:
        return self._field('pwork')

    @property
    def cworks(self) -> np.ndarray:
        return self._field('cwork')

    @property
    def tfs(self) -> np.ndarray:
        return self._field('tf')

    @property
    def speeds(self) -> np.ndarray:
        return self._field('speed')

    @property
    def deltas(self) -> np.ndarray:
        return self._field('delta')

    @property
    def tstarts(self) -> np.ndarray:
        return self._field('tstart')

    @property
    def midstance_times(self) -> np.ndarray:
        return np.append(0.0, np.cumsum(self.tfs))

    @property
    def total_pwork(self) -> float:
        return float(np.sum(self.pworks))

    @property
    def total_distance(self) -> float:
        return float(np.sum(self._field('step_length')))

    @property
    def average_speed(self) -> float:
        if self.totaltime <= 0:
            return np.nan
        return self.total_distance / self.totaltime

    def summary(self) -> str:
        return (f"{self.objective}: {self.numsteps} steps, "
                f"total cost {self.totalcost:.5f}, total time {self.totaltime:.4f}, "
                f"boundary velocities {self.boundaryvels}")


def speed_trajectory(walker, result: MultiStepResult, npts: int = 20):
    """
    Sample the center of mass speed over the whole walk.

    Within a step the speed rises from mid-stance to the transition, drops at
    the transition and falls again until the next mid-stance. Between two
    transitions the trace dips to a vee at mid-stance.

    Returns:
        t: sample times
        v: speeds at those times, with a vertical drop at each transition
    """
    ts, vs = [], []
    for step in result.steps:
        if not step.valid:
            continue
        _, theta_start = transition_angles(walker, step.delta)
        t1 = step.t_transition
        t2 = step.tf - t1

        tau1 = np.linspace(0, t1, npts)
        ts.append(step.tstart + tau1)
        vs.append(phase_one_speed(walker, step.vm, tau1))

        tau2 = np.linspace(0, t2, npts)
        ts.append(step.tstart + t1 + tau2)
        vs.append(phase_two_speed(walker, step.v_plus, theta_start, tau2))

    if not ts:
        return np.array([]), np.array([])
    return np.concatenate(ts), np.concatenate(vs)
