import logging

import numpy as np

from dynamicwalking.helpers import natural_frequency, transition_angles
from dynamicwalking.optstate import WalkOptState, total_time_expression
from dynamicwalking.walker import step_time_residuals

logger = logging.getLogger(__name__)


def _describe(binding, description):
    binding.evaluator().set_description(description)
    return binding


def add_variable_bounds(state: WalkOptState):
    """Speeds stay positive so every step reaches mid-stance, push-offs only push"""
    logger.debug("Adding variable bounds...")
    state.prog.AddBoundingBoxConstraint(state.vm_min, state.vm_max, state.v)
    state.prog.AddBoundingBoxConstraint(0.0, state.p_max, state.P)
    # a step that passes mid-stance before its transition has negative t_after
    state.prog.AddBoundingBoxConstraint(0.0, state.t_max, state.t_transition)
    state.prog.AddBoundingBoxConstraint(-state.t_max, state.t_max, state.t_after)


def add_step_dynamics_constraints(state: WalkOptState):
    """Each step maps its mid-stance speed and push-off to the next mid-stance speed"""
    logger.debug("Adding step dynamics constraints...")
    if state.steps is None:
        raise ValueError("Variables not set up")

    w = natural_frequency(state.walker)
    L = state.walker.L
    state.dynamics_constraints = []

    for i, step in enumerate(state.steps):
        _, theta_start = transition_angles(state.walker, state.deltas[i])

        # squared form of vm_next = sqrt(v+^2 - (w L theta_start)^2)
        c = state.prog.AddConstraint(
            state.v[i + 1]**2 == step['v_plus']**2 - (w * L * theta_start)**2
        )
        state.dynamics_constraints.append(_describe(c, f"step_dynamics_{i}"))

        # keep the positive root, the walker moves forward after the collision
        c = state.prog.AddConstraint(step['v_plus'] >= 0)
        state.dynamics_constraints.append(_describe(c, f"forward_transition_{i}"))


def add_step_time_constraints(state: WalkOptState):
    """Phase time variables match the pendulum motion on each side of every transition"""
    logger.debug("Adding step time constraints...")
    if state.t_transition is None:
        raise ValueError("Variables not set up")

    state.step_time_constraints = []
    for i in range(state.numsteps):
        before, after = step_time_residuals(
            state.walker, state.v[i], state.P[i],
            state.t_transition[i], state.t_after[i], state.deltas[i])

        c = state.prog.AddConstraint(before == 0)
        state.step_time_constraints.append(_describe(c, f"time_to_transition_{i}"))
        c = state.prog.AddConstraint(after == 0)
        state.step_time_constraints.append(_describe(c, f"time_after_transition_{i}"))


def add_boundary_constraints(state: WalkOptState):
    """Fix the first and last mid-stance speeds to the boundary velocities"""
    logger.debug("Adding boundary constraints...")
    if state.boundaryvels is None:
        raise ValueError("Boundary velocities not set")

    vstart, vend = state.boundaryvels
    state.boundary_constraints = []
    for var, value, name in ((state.v[0], vstart, 'start'), (state.v[-1], vend, 'end')):
        if value < state.vm_min:
            raise ValueError(
                f"Boundary {name} velocity {value} is below {state.vm_min}; "
                "walks from rest need boundarywork=True")
        c = state.prog.AddLinearConstraint(var == value)
        state.boundary_constraints.append(_describe(c, f"boundary_{name}"))


def add_total_time_constraint(state: WalkOptState):
    """Steps must add up to the total time"""
    logger.debug("Adding total time constraint...")
    if state.totaltime is None:
        raise ValueError("Total time not set")
    if state.totaltime <= 0:
        raise ValueError(f"Total time must be positive, got {state.totaltime}")

    c = state.prog.AddConstraint(total_time_expression(state) == state.totaltime)
    state.time_constraints = [_describe(c, "total_time")]


def constraint_violations(state: WalkOptState, tol: float = 1e-6):
    """Names of constraints the current result violates beyond tol"""
    if state.result is None:
        return []
    bindings = (state.dynamics_constraints + state.step_time_constraints
                + state.boundary_constraints + state.time_constraints)
    names = []
    for binding in bindings:
        value = state.result.EvalBinding(binding)
        lb = binding.evaluator().lower_bound()
        ub = binding.evaluator().upper_bound()
        if np.any(value < lb - tol) or np.any(value > ub + tol):
            names.append(binding.evaluator().get_description())
    return names
