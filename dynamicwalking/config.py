"""
Solver configuration.

SolverSettings picks the nonlinear solver used by the walking optimizations
and carries the options handed to it. With solver=None pydrake chooses the
best available solver for the program.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

SOLVERS = (None, 'snopt', 'ipopt')


@dataclass
class SolverSettings:
    solver: Optional[str] = None

    # SNOPT
    major_feasibility_tolerance: float = 1e-6
    major_optimality_tolerance: float = 1e-6
    major_iterations_limit: int = 1000
    print_file: Optional[str] = None  # e.g. 'snopt.out'

    # IPOPT
    tol: float = 1e-8
    max_iter: int = 3000

    # passed through unchanged, keyed by option name
    extra_options: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if self.solver not in SOLVERS:
            raise ValueError(f"Unknown solver '{self.solver}', expected one of {SOLVERS}")


DEFAULT_WEIGHTS = {
    'pushoff_work': 1.0,
    'boundary_work': 1.0,
    'time': 0.05,
    'variance': 1.0,
    'triangle': 1.0,
}

# decision variable bounds
VM_MIN = 0.02
VM_MAX = 3.0
P_MAX = 2.0
STEP_TIME_MAX = 10.0  # either pendulum phase of one step
