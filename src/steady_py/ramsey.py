"""Default static solver for the Ramsey optimal-policy steady state.

The static model of a Ramsey problem stacks the first-order conditions of
the planner (``model.ramsey_eq_nbr`` equations, linear in the Lagrange
multipliers) on top of the private-sector equilibrium conditions.  The
default solver treats the stacked system as one square problem and solves
it jointly for the original variables and the multipliers.  When a
steady-state function is configured, its conditional steady state seeds
the solve; entries it leaves non-finite (typically the multipliers) fall
back to the initial guess.

Any callable with the same signature can be passed to
:func:`~steady_py.steady_state.evaluate_steady_state` instead.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from .model import OutputState, SteadyStateModel
from .nonlinear import solve_nonlinear
from .options import SolveOptions
from .residuals import evaluate_static_model, sum_of_squares
from .status import StatusCode, SteadyStateStatus
from .steady_state_file import evaluate_steady_state_file

Array = np.ndarray
RamseySolver = Callable[
    [Array, SteadyStateModel, SolveOptions, OutputState],
    tuple[Array, Array, SteadyStateStatus],
]


def solve_ramsey_static(
    ys_init: Array,
    model: SteadyStateModel,
    options: SolveOptions,
    outputs: OutputState,
    conditional_steady_state: Array | None = None,
) -> tuple[Array, Array, SteadyStateStatus]:
    """Jointly solve the Ramsey first-order conditions and model equations.

    Parameters
    ----------
    conditional_steady_state : Array or None
        Output of the steady-state function when the caller has already
        evaluated it.  Otherwise the function is called here if
        ``options.steadystate_flag`` is set.

    Returns
    -------
    ys : Array
        Joint steady state (original variables and multipliers).
    params : Array
        ``model.params``, possibly updated by the steady-state function.
    status : SteadyStateStatus
        Success, the steady-state function's own failure, or
        ``NON_CONVERGENCE`` with the sum of squared residuals.
    """
    exo_ss = outputs.exogenous_steady_state()
    start = np.asarray(ys_init, dtype=float).reshape(-1).copy()

    ys_file = conditional_steady_state
    if ys_file is None and options.steadystate_flag:
        ys_file, _, status = evaluate_steady_state_file(start, exo_ss, model, options)
        if not status.ok:
            return start, model.params, status
    if ys_file is not None:
        ys_file = np.real_if_close(np.asarray(ys_file).reshape(-1))
        if not np.iscomplexobj(ys_file):
            usable = np.isfinite(ys_file)
            start[usable] = ys_file[usable]

    params = model.params

    def func(y: Array) -> tuple[Array, Array]:
        r, j = model.static(y, exo_ss, params)
        r = np.asarray(r, dtype=float).reshape(-1)
        return r, np.asarray(j, dtype=float).reshape(r.size, -1)

    ys, unsolved = solve_nonlinear(func, start, options)
    if unsolved:
        magnitude = sum_of_squares(evaluate_static_model(ys, exo_ss, params, model))
        return ys, params, SteadyStateStatus.failure(StatusCode.NON_CONVERGENCE, magnitude)
    return ys, params, SteadyStateStatus.success()
