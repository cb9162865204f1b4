"""Optimal walking trajectories for the simplest walking model."""
from dynamicwalking.config import SolverSettings
from dynamicwalking.gait import findgait, gait_quantity, GaitNotFound
from dynamicwalking.logging_config import setup_logging
from dynamicwalking.optimization import (
    optwalk, optwalktime, optwalkvar, optwalktriangle, optwalkslope, OptimizationFailure
)
from dynamicwalking.results import StepResult, MultiStepResult, speed_trajectory
from dynamicwalking.walker import (
    WalkRW2l, onestep, multistep, nominal_step_time, periodic_pushoff,
    steady_step_time, step_length
)

__version__ = "0.1.0"
