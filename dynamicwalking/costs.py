import logging

from dynamicwalking.helpers import triangle_coefficients
from dynamicwalking.optstate import WalkOptState, total_time_expression

logger = logging.getLogger(__name__)


def add_pushoff_work_cost(state: WalkOptState):
    """Positive work of all push-offs"""
    logger.debug("Adding push-off work cost...")
    weight = state.weights['pushoff_work']
    total_cost = sum(0.5 * state.P[i]**2 for i in range(state.numsteps))
    state.prog.AddQuadraticCost(weight * total_cost)


def add_boundary_work_cost(state: WalkOptState):
    """Work to get from the starting boundary speed up to the first mid-stance speed"""
    logger.debug("Adding boundary work cost...")
    if state.boundaryvels is None:
        raise ValueError("Boundary velocities not set")

    weight = state.weights['boundary_work']
    vstart = state.boundaryvels[0]
    state.prog.AddQuadraticCost(weight * 0.5 * (state.v[0]**2 - vstart**2))


def add_time_cost(state: WalkOptState, ctime: float):
    """Cost proportional to total walking time"""
    logger.debug("Adding time cost...")
    if ctime <= 0:
        raise ValueError(f"Time cost coefficient must be positive, got {ctime}")
    state.weights['time'] = ctime
    state.prog.AddCost(ctime * total_time_expression(state))


def speed_sequence(state: WalkOptState):
    """Mid-stance speeds, bracketed by the boundary speeds when those are not fixed"""
    speeds = list(state.v)
    if state.boundarywork and state.boundaryvels is not None:
        speeds = [state.boundaryvels[0]] + speeds + [state.boundaryvels[1]]
    return speeds


def add_variance_cost(state: WalkOptState):
    """Spread of the mid-stance speeds around their mean"""
    logger.debug("Adding speed variance cost...")
    weight = state.weights['variance']

    speeds = speed_sequence(state)
    n = len(speeds)
    mean = sum(speeds[1:], speeds[0]) / n
    total_cost = sum((s - mean)**2 for s in speeds) / n

    state.prog.AddQuadraticCost(weight * total_cost)


def add_triangle_cost(state: WalkOptState):
    """Track a speed profile that ramps up linearly to a peak and back down"""
    logger.debug("Adding triangle profile cost...")
    weight = state.weights['triangle']

    state.vpeak = state.prog.NewContinuousVariables(1, 'vpeak')[0]
    state.prog.AddBoundingBoxConstraint(0.0, state.vm_max, state.vpeak)

    coeffs = triangle_coefficients(state.numsteps)
    total_cost = 0
    for i in range(state.numsteps + 1):
        total_cost += (state.v[i] - float(coeffs[i]) * state.vpeak)**2

    state.prog.AddQuadraticCost(weight * total_cost)
