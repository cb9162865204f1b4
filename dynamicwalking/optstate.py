from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np
from pydrake.all import MathematicalProgram
from pydrake.solvers import MathematicalProgramResult

from dynamicwalking.config import SolverSettings, DEFAULT_WEIGHTS, VM_MIN, VM_MAX, P_MAX, STEP_TIME_MAX
from dynamicwalking.walker import WalkRW2l, step_expressions


@dataclass
class WalkOptState:
    # Model and horizon
    walker: WalkRW2l = field(default_factory=WalkRW2l)
    numsteps: int = 5
    deltas: np.ndarray = None

    # Boundary conditions
    boundaryvels: Tuple[float, float] = None
    boundarywork: bool = False
    totaltime: float = None  # None leaves total time free

    # Bounds
    vm_min: float = VM_MIN
    vm_max: float = VM_MAX
    p_max: float = P_MAX
    t_max: float = STEP_TIME_MAX

    # Objective
    objective: str = 'work'
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    settings: SolverSettings = field(default_factory=SolverSettings)

    # Optimization variables
    prog: MathematicalProgram = None
    v: np.ndarray = None        # mid-stance speeds, numsteps + 1
    P: np.ndarray = None        # push-offs, numsteps
    t_transition: np.ndarray = None  # mid-stance to transition, numsteps
    t_after: np.ndarray = None       # transition to mid-stance, numsteps
    vpeak: object = None        # triangle profile peak, only for that objective
    steps: List[dict] = None    # symbolic step relations
    tfs: List[object] = None    # step times, t_transition + t_after

    # Bindings kept for reporting
    dynamics_constraints: List = field(default_factory=list)
    boundary_constraints: List = field(default_factory=list)
    step_time_constraints: List = field(default_factory=list)
    time_constraints: List = field(default_factory=list)

    # Optimization results
    result: MathematicalProgramResult = None
    solver_error: str = None    # message of an exception raised inside the solver
    optimal_vms: np.ndarray = None
    optimal_pushoffs: np.ndarray = None


def setup_variables(state: WalkOptState):
    """Setup optimization variables and the symbolic step relations"""
    if state.numsteps < 1:
        raise ValueError(f"Need at least one step, got {state.numsteps}")
    if state.deltas is None:
        state.deltas = np.zeros(state.numsteps)
    if len(state.deltas) != state.numsteps:
        raise ValueError(f"Expected {state.numsteps} slope angles, got {len(state.deltas)}")

    state.prog = MathematicalProgram()

    state.v = state.prog.NewContinuousVariables(state.numsteps + 1, 'v')
    state.P = state.prog.NewContinuousVariables(state.numsteps, 'P')
    state.t_transition = state.prog.NewContinuousVariables(state.numsteps, 't_transition')
    state.t_after = state.prog.NewContinuousVariables(state.numsteps, 't_after')

    state.steps = [
        step_expressions(state.walker, state.v[i], state.P[i], state.deltas[i])
        for i in range(state.numsteps)
    ]
    state.tfs = [state.t_transition[i] + state.t_after[i] for i in range(state.numsteps)]


def total_time_expression(state: WalkOptState):
    return sum(state.tfs[1:], state.tfs[0])
