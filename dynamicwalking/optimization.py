import logging
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from scipy import optimize
from pydrake.all import Solve
from pydrake.solvers import SnoptSolver, IpoptSolver

from dynamicwalking.config import SolverSettings
from dynamicwalking.constraints import (
    add_variable_bounds,
    add_step_dynamics_constraints,
    add_step_time_constraints,
    add_boundary_constraints,
    add_total_time_constraint,
    constraint_violations,
)
from dynamicwalking.costs import (
    add_pushoff_work_cost,
    add_boundary_work_cost,
    add_time_cost,
    add_variance_cost,
    add_triangle_cost,
)
from dynamicwalking.helpers import as_deltas, triangle_coefficients
from dynamicwalking.optstate import WalkOptState, setup_variables
from dynamicwalking.results import MultiStepResult
from dynamicwalking.terrain import ramp_deltas
from dynamicwalking.walker import (
    WalkRW2l, multistep, periodic_pushoff, steady_step_phases, steady_step_time
)

logger = logging.getLogger(__name__)

REST = (0.0, 0.0)


class OptimizationFailure(RuntimeError):
    def __init__(self, message, state: Optional[WalkOptState] = None):
        super().__init__(message)
        self.state = state


# SOLVER

def get_solver(settings: SolverSettings):
    """Solver named in the settings, None to let pydrake choose"""
    if settings.solver is None:
        return None
    solver = SnoptSolver() if settings.solver == 'snopt' else IpoptSolver()
    if not (solver.available() and solver.enabled()):
        logger.warning("Solver %s is not available, falling back to automatic choice",
                       settings.solver)
        return None
    return solver

def apply_solver_options(state: WalkOptState):
    settings = state.settings
    snopt_id = SnoptSolver().solver_id()
    ipopt_id = IpoptSolver().solver_id()

    if settings.print_file:
        open(settings.print_file, 'w').close()
        state.prog.SetSolverOption(snopt_id, "Print file", settings.print_file)
    state.prog.SetSolverOption(snopt_id, "Major feasibility tolerance",
                               settings.major_feasibility_tolerance)
    state.prog.SetSolverOption(snopt_id, "Major optimality tolerance",
                               settings.major_optimality_tolerance)
    state.prog.SetSolverOption(snopt_id, "Major iterations limit",
                               int(settings.major_iterations_limit))

    state.prog.SetSolverOption(ipopt_id, "tol", settings.tol)
    state.prog.SetSolverOption(ipopt_id, "max_iter", int(settings.max_iter))

    if settings.extra_options:
        if settings.solver is None:
            logger.warning("Extra solver options need a named solver, ignoring %s",
                           list(settings.extra_options))
        else:
            solver_id = snopt_id if settings.solver == 'snopt' else ipopt_id
            for name, value in settings.extra_options.items():
                state.prog.SetSolverOption(solver_id, name, value)


# WARM START

def steady_speed_for_time(walker: WalkRW2l, deltas, totaltime, vm_min, vm_max):
    """Constant mid-stance speed whose periodic steps add up to totaltime"""
    def excess(vm):
        return sum(steady_step_time(walker, vm, d) for d in deltas) - totaltime

    try:
        return optimize.brentq(excess, vm_min, vm_max)
    except ValueError:
        logger.debug("No steady speed walks %d steps in %.4f", len(deltas), totaltime)
        return float(np.clip(walker.vm, vm_min, vm_max))

def set_initial_guess(state: WalkOptState):
    """Warm start every step at a periodic gait, so the dynamics hold from the start"""
    if state.totaltime is not None:
        vm = steady_speed_for_time(state.walker, state.deltas, state.totaltime,
                                   state.vm_min, state.vm_max)
    else:
        vm = float(np.clip(state.walker.vm, state.vm_min, state.vm_max))

    pushoffs = np.array([periodic_pushoff(state.walker, vm, d) for d in state.deltas])
    pushoffs = np.clip(pushoffs, 0.0, state.p_max)

    state.prog.SetInitialGuess(state.v, np.full(state.numsteps + 1, vm))
    state.prog.SetInitialGuess(state.P, pushoffs)
    phases = np.array([steady_step_phases(state.walker, vm, d) for d in state.deltas])
    state.prog.SetInitialGuess(state.t_transition, np.clip(phases[:, 0], 0.0, state.t_max))
    state.prog.SetInitialGuess(state.t_after, np.clip(phases[:, 1], -state.t_max, state.t_max))
    if state.vpeak is not None:
        state.prog.SetInitialGuess(state.vpeak, vm / np.max(triangle_coefficients(state.numsteps)))


# SOLVE

def run_single_optimization(state: WalkOptState) -> bool:
    if state.prog is None:
        raise ValueError("Program not set up")

    solver = get_solver(state.settings)
    apply_solver_options(state)

    logger.info("Starting solve: %s objective, %d steps", state.objective, state.numsteps)
    state.solver_error = None
    try:
        state.result = solver.Solve(state.prog) if solver is not None else Solve(state.prog)
    except RuntimeError as e:
        # raised when a cost or constraint cannot be evaluated at an iterate
        logger.warning("Solver stopped with an error: %s", e)
        state.result = None
        state.solver_error = str(e)
        return False

    if state.result.is_success():
        logger.info("Optimization problem is feasible (%s).",
                    state.result.get_solver_id().name())
        state.optimal_vms = state.result.GetSolution(state.v)
        state.optimal_pushoffs = state.result.GetSolution(state.P)
        return True

    logger.warning("Optimization problem is not feasible.")
    logger.warning("Solver result: %s", state.result.get_solution_result())
    logger.warning("Violated constraints: %s", constraint_violations(state))
    return False

def collect_result(state: WalkOptState) -> MultiStepResult:
    """Simulate the optimal push-offs and package the walk"""
    msr = multistep(
        state.walker,
        state.optimal_pushoffs,
        deltas=state.deltas,
        vm0=state.optimal_vms[0],
        boundaryvels=state.boundaryvels,
        boundarywork=state.boundarywork,
    )
    msr.objective = state.objective
    msr.objective_value = state.result.get_optimal_cost()
    msr.solver = state.result.get_solver_id().name()
    if state.vpeak is not None:
        msr.extras['vpeak'] = float(state.result.GetSolution(state.vpeak))
    if state.totaltime is None:
        msr.extras['ctime'] = state.weights['time']

    drift = np.nanmax(np.abs(msr.vms - state.optimal_vms))
    if not np.isfinite(drift) or drift > 1e-4:
        logger.warning("Simulated walk departs from the optimized speeds by %s", drift)
    logger.info(msr.summary())
    return msr

def solve(state: WalkOptState) -> MultiStepResult:
    set_initial_guess(state)
    if not run_single_optimization(state):
        reason = state.solver_error or state.result.get_solution_result()
        raise OptimizationFailure(
            f"{state.objective} optimization of {state.numsteps} steps failed: "
            f"{reason}, violated {constraint_violations(state)}",
            state)
    return collect_result(state)


# PROBLEMS

def setup_walk(walker: WalkRW2l, numsteps: int, objective: str,
               boundaryvels: Optional[Tuple[float, float]], boundarywork: bool,
               totaltime: Optional[float], deltas, settings: Optional[SolverSettings],
               weights: Optional[Dict[str, float]]) -> WalkOptState:
    """Common variables, dynamics and boundary handling of every walk"""
    deltas = as_deltas(deltas, numsteps)
    if boundaryvels is None:
        boundaryvels = (walker.vm, walker.vm)

    state = WalkOptState(
        walker=walker,
        numsteps=numsteps,
        deltas=deltas,
        boundaryvels=tuple(float(b) for b in boundaryvels),
        boundarywork=boundarywork,
        totaltime=totaltime,
        objective=objective,
        settings=settings or SolverSettings(),
    )
    if weights:
        state.weights.update(weights)

    setup_variables(state)
    add_variable_bounds(state)
    add_step_dynamics_constraints(state)
    add_step_time_constraints(state)

    if boundarywork:
        add_boundary_work_cost(state)
    else:
        add_boundary_constraints(state)

    if totaltime is not None:
        add_total_time_constraint(state)
    return state

def default_total_time(walker: WalkRW2l, numsteps: int, deltas=None) -> float:
    """Time of numsteps periodic steps at the walker's mid-stance speed"""
    deltas = as_deltas(deltas, numsteps)
    return float(sum(steady_step_time(walker, walker.vm, d) for d in deltas))


def optwalk(walker: WalkRW2l, numsteps: int = 5, boundaryvels: Optional[Tuple[float, float]] = None,
            boundarywork: bool = False, totaltime: Optional[float] = None,
            deltas: Optional[Sequence[float]] = None, settings: Optional[SolverSettings] = None,
            weights: Optional[Dict[str, float]] = None) -> MultiStepResult:
    """
    Minimum push-off work walk of numsteps steps in a fixed total time.

    Args:
        walker: model parameters, its vm is the default boundary speed
        boundaryvels: mid-stance speeds before the first and after the last step
        boundarywork: if true the boundary speeds are not imposed; the work to
            reach the first mid-stance speed is charged instead
        totaltime: defaults to numsteps periodic steps at walker.vm
        deltas: per-step ground slope, uphill positive
    """
    if totaltime is None:
        totaltime = default_total_time(walker, numsteps, deltas)
    state = setup_walk(walker, numsteps, 'work', boundaryvels, boundarywork,
                       totaltime, deltas, settings, weights)
    add_pushoff_work_cost(state)
    return solve(state)

def optwalktime(walker: WalkRW2l, numsteps: int = 5, ctime: float = 0.05,
                boundaryvels: Optional[Tuple[float, float]] = REST, boundarywork: bool = True,
                deltas: Optional[Sequence[float]] = None, settings: Optional[SolverSettings] = None,
                weights: Optional[Dict[str, float]] = None) -> MultiStepResult:
    """Minimize push-off work plus ctime times total time, total time is free."""
    state = setup_walk(walker, numsteps, 'time', boundaryvels, boundarywork,
                       None, deltas, settings, weights)
    add_pushoff_work_cost(state)
    add_time_cost(state, ctime)
    return solve(state)

def optwalkvar(walker: WalkRW2l, numsteps: int = 5,
               boundaryvels: Optional[Tuple[float, float]] = REST, boundarywork: bool = True,
               totaltime: Optional[float] = None, deltas: Optional[Sequence[float]] = None,
               settings: Optional[SolverSettings] = None,
               weights: Optional[Dict[str, float]] = None) -> MultiStepResult:
    """Minimum variance of mid-stance speeds in a fixed total time."""
    if totaltime is None:
        totaltime = default_total_time(walker, numsteps, deltas)
    state = setup_walk(walker, numsteps, 'variance', boundaryvels, boundarywork,
                       totaltime, deltas, settings, weights)
    add_variance_cost(state)
    return solve(state)

def optwalktriangle(walker: WalkRW2l, numsteps: int = 5,
                    boundaryvels: Optional[Tuple[float, float]] = REST, boundarywork: bool = True,
                    totaltime: Optional[float] = None, deltas: Optional[Sequence[float]] = None,
                    settings: Optional[SolverSettings] = None,
                    weights: Optional[Dict[str, float]] = None) -> MultiStepResult:
    """
    Follow a triangular speed profile, constant acceleration up to a peak at
    the middle of the walk and constant deceleration after, in a fixed total
    time. The peak speed is optimized.
    """
    if totaltime is None:
        totaltime = default_total_time(walker, numsteps, deltas)
    state = setup_walk(walker, numsteps, 'triangle', boundaryvels, boundarywork,
                       totaltime, deltas, settings, weights)
    add_triangle_cost(state)
    return solve(state)

def optwalkslope(walker: WalkRW2l, numsteps: Optional[int] = None,
                 deltas: Optional[Sequence[float]] = None, ctime: Optional[float] = None,
                 boundaryvels: Optional[Tuple[float, float]] = None, boundarywork: bool = False,
                 totaltime: Optional[float] = None, settings: Optional[SolverSettings] = None,
                 weights: Optional[Dict[str, float]] = None) -> MultiStepResult:
    """
    Walk over a sloped ramp. Without ctime this is a minimum work walk in a
    fixed total time; with ctime the total time is free and charged instead.

    Args:
        numsteps: defaults to len(deltas), or 15 with the default ramp
        deltas: per-step ground slope, defaults to terrain.ramp_deltas
    """
    if deltas is None:
        numsteps = 15 if numsteps is None else numsteps
        deltas = ramp_deltas(numsteps)
    elif numsteps is None:
        numsteps = len(deltas)
    deltas = as_deltas(deltas, numsteps)

    if ctime is None:
        if totaltime is None:
            totaltime = default_total_time(walker, numsteps, deltas)
        state = setup_walk(walker, numsteps, 'slope', boundaryvels, boundarywork,
                           totaltime, deltas, settings, weights)
        add_pushoff_work_cost(state)
    else:
        state = setup_walk(walker, numsteps, 'slope', boundaryvels, boundarywork,
                           None, deltas, settings, weights)
        add_pushoff_work_cost(state)
        add_time_cost(state, ctime)
    return solve(state)
