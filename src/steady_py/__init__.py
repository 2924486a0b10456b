"""steady_py — Steady-state computation for dynamic economic models.

This package computes the deterministic steady state of a DSGE model given
its static equilibrium equations.  It dispatches between a user-supplied
closed-form steady state, the Ramsey optimal-policy problem, a single
Newton step for linear models, ``scipy.optimize.root`` for nonlinear
models and a block-decomposed solver, and validates the result against
non-convergence, NaN, complex values and static/dynamic inconsistencies.
Outcomes are reported as status codes compatible with Dynare's ``info``
vector.

Key references:
    Adjemian, Bastani, Juillard, Karame, Maih, Mihoubi, Perendia, Pfeifer,
    Ratto and Villemot (2011), Dynare: Reference Manual, Version 4.
    Duff and Reid (1978), ACM TOMS 4(2), 137-147 (block triangular form).
"""

from .block import Block, block_decomposition, solve_block_structured
from .derivative_backends import (
    complex_step_jacobian,
    finite_difference_jacobian,
    numerical_jacobian,
)
from .model import AuxVarSpec, OutputState, StaticEvaluator, SteadyStateModel
from .nonlinear import solve_nonlinear, static_problem
from .options import SolveOptions, load_options
from .ramsey import solve_ramsey_static
from .residuals import (
    ResidualReport,
    evaluate_dynamic_at_steady_state,
    evaluate_static_model,
    static_residual_report,
)
from .serialization import load_steady_state, save_steady_state
from .status import (
    StatusCode,
    SteadyStateError,
    SteadyStateFileError,
    SteadyStateStatus,
)
from .steady_state import (
    LINEAR_ACCEPT_TOL,
    LINEAR_PRESOLVED_TOL,
    SteadyStateResult,
    evaluate_steady_state,
    solve_steady_state,
)
from .steady_state_file import evaluate_steady_state_file
from .strategy import SolveStrategy
from .timing import LeadLagIncidence, build_lead_lag_incidence, dynamic_selection
from .version import __version__

__all__ = [
    "__version__",
    "AuxVarSpec",
    "Block",
    "LeadLagIncidence",
    "OutputState",
    "ResidualReport",
    "SolveOptions",
    "SolveStrategy",
    "StaticEvaluator",
    "StatusCode",
    "SteadyStateError",
    "SteadyStateFileError",
    "SteadyStateModel",
    "SteadyStateResult",
    "SteadyStateStatus",
    "LINEAR_ACCEPT_TOL",
    "LINEAR_PRESOLVED_TOL",
    "block_decomposition",
    "build_lead_lag_incidence",
    "complex_step_jacobian",
    "dynamic_selection",
    "evaluate_dynamic_at_steady_state",
    "evaluate_static_model",
    "evaluate_steady_state",
    "evaluate_steady_state_file",
    "finite_difference_jacobian",
    "load_options",
    "load_steady_state",
    "numerical_jacobian",
    "save_steady_state",
    "solve_block_structured",
    "solve_nonlinear",
    "solve_ramsey_static",
    "solve_steady_state",
    "static_problem",
    "static_residual_report",
]
