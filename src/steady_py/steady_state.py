"""Steady-state evaluation for dynamic economic models.

Computes a vector :math:`\\bar{y}` such that the static model

.. math::

    f(\\bar{y}, \\bar{x}, \\theta) = 0

holds, where :math:`\\bar{x}` are the steady-state values of the exogenous
variables and :math:`\\theta` the parameters.  Exactly one strategy is
used per call (see :class:`~steady_py.strategy.SolveStrategy`):

* Ramsey optimal policy, with or without a user steady-state function;
* a user steady-state function (closed form);
* a single Newton step for linear models;
* ``scipy.optimize.root`` on the original variables for nonlinear models;
* block-decomposed or bytecode solution.

The result is validated (non-convergence, static/dynamic mismatch, complex
values, NaN) and failures are reported through
:class:`~steady_py.status.SteadyStateStatus` instead of exceptions.
Diagnostics for human operators go to the ``steady_py.steady_state``
logger.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
import logging
from typing import Iterator, Sequence

import numpy as np
from scipy.linalg import LinAlgError, solve

from .block import solve_block_structured
from .model import OutputState, SteadyStateModel
from .nonlinear import solve_nonlinear, static_problem
from .options import SolveOptions
from .ramsey import RamseySolver, solve_ramsey_static
from .residuals import (
    evaluate_dynamic_at_steady_state,
    evaluate_static_model,
    evaluate_static_with_jacobian,
    sum_of_squares,
)
from .status import StatusCode, SteadyStateError, SteadyStateStatus
from .steady_state_file import evaluate_steady_state_file
from .strategy import SolveStrategy

Array = np.ndarray

logger = logging.getLogger(__name__)

# Initial residual below which a linear model is taken as already solved.
LINEAR_PRESOLVED_TOL = 1e-12
# Residual accepted after the Newton step of a linear model.
LINEAR_ACCEPT_TOL = 1e-6

_LINEAR_HINT = (
    "Check whether your model is truly linear; evaluate the static residuals "
    "at the initial values to see the problematic equations."
)


@dataclass(frozen=True)
class SteadyStateResult:
    """Result of :func:`evaluate_steady_state`.

    Unpacks as ``steady_state, params, status``.

    Attributes
    ----------
    steady_state : Array, shape (endo_nbr,)
        Steady state, or the point where the evaluation stopped.
    params : Array
        The model's parameter vector (``model.params``), possibly updated
        by a steady-state function.
    status : SteadyStateStatus
        Outcome; ``status.ok`` on success.
    strategy : SolveStrategy
        Strategy that produced the result.
    """

    steady_state: Array
    params: Array
    status: SteadyStateStatus
    strategy: SolveStrategy

    @property
    def ok(self) -> bool:
        return self.status.ok

    def __iter__(self) -> Iterator:
        return iter((self.steady_state, self.params, self.status))


def evaluate_steady_state(
    initial_guess: Sequence[float] | Array,
    model: SteadyStateModel,
    options: SolveOptions,
    outputs: OutputState,
    *,
    ramsey_solver: RamseySolver | None = None,
) -> SteadyStateResult:
    """Compute the steady state of *model*.

    Parameters
    ----------
    initial_guess : array_like, shape (endo_nbr,)
        Starting values.  Auxiliary entries may be NaN; they are filled
        from the original variables unless a steady-state function is
        used.
    model : SteadyStateModel
        The model.  ``model.params`` may be updated in place.
    options : SolveOptions
        Mode flags and tolerances.
    outputs : OutputState
        Exogenous steady state; ``decision_rule`` may be updated by the
        block solver.
    ramsey_solver : callable or None
        Ramsey static solver; defaults to
        :func:`~steady_py.ramsey.solve_ramsey_static`.

    Returns
    -------
    SteadyStateResult

    Raises
    ------
    ValueError
        If the guess or the exogenous values have the wrong size, or a
        steady-state function is requested but not configured.
    SteadyStateFileError
        If the steady-state function returns a row vector.
    """
    strategy = SolveStrategy.from_options(options)
    if strategy.uses_file and model.steady_state_function is None:
        raise ValueError("steadystate_flag is set but the model has no steady_state_function")

    exo_ss = outputs.exogenous_steady_state()
    if exo_ss.size != model.exo_nbr + model.exo_det_nbr:
        raise ValueError(
            f"Expected {model.exo_nbr + model.exo_det_nbr} exogenous steady-state values, "
            f"got {exo_ss.size}"
        )
    ys_init = np.asarray(initial_guess, dtype=float).reshape(-1)
    if ys_init.size != model.endo_nbr:
        raise ValueError(f"Expected initial guess of size {model.endo_nbr}, got {ys_init.size}")

    if model.aux_vars and not options.steadystate_flag:
        ys_init = np.asarray(
            model.set_auxiliary_variables(ys_init.copy(), exo_ss, model.params), dtype=float
        ).reshape(-1)

    def finish(ys: Array, status: SteadyStateStatus) -> SteadyStateResult:
        return SteadyStateResult(
            steady_state=ys, params=model.params, status=status, strategy=strategy
        )

    unsolved = False
    if strategy.is_ramsey:
        ys, failure = _ramsey_steady_state(
            ys_init,
            exo_ss,
            model,
            options,
            outputs,
            strategy,
            ramsey_solver,
        )
        if failure is not None:
            return finish(ys, failure)
    elif strategy is SolveStrategy.EXPLICIT_FILE:
        ys, _, status = evaluate_steady_state_file(ys_init, exo_ss, model, options)
        if not status.ok:
            return finish(ys, status)
        if not options.steadystate_nocheck:
            failure = _check_steady_state_file(ys, exo_ss, model, options)
            if failure is not None:
                return finish(ys, failure)
    elif strategy is SolveStrategy.LINEAR_DIRECT:
        ys, unsolved = _linear_steady_state(ys_init, exo_ss, model, options)
    elif strategy is SolveStrategy.NONLINEAR_GENERIC:
        func, expand = static_problem(model, exo_ss, model.params, ys_init)
        x, unsolved = solve_nonlinear(func, ys_init[: model.orig_endo_nbr], options)
        ys = expand(x)
    elif strategy is SolveStrategy.BLOCK_STRUCTURED:
        ys, unsolved = solve_block_structured(
            ys_init, exo_ss, model.params, options, model, outputs
        )
    else:
        raise AssertionError(f"unhandled strategy {strategy}")

    if unsolved:
        resid = evaluate_static_model(ys, exo_ss, model.params, model)
        magnitude = sum_of_squares(resid)
        if np.isnan(magnitude):
            return finish(ys, SteadyStateStatus.failure(StatusCode.NAN_IN_RESULT, magnitude))
        return finish(ys, SteadyStateStatus.failure(StatusCode.NON_CONVERGENCE, magnitude))

    if model.static_and_dynamic_models_differ:
        # Equations tagged [static]/[dynamic]: the static solution must
        # also solve the dynamic model along a constant path.
        r = evaluate_dynamic_at_steady_state(ys, exo_ss, model.params, model)
        if not np.all(np.abs(r) <= options.solve_tolf):
            offending = np.flatnonzero(~(np.abs(r) <= options.solve_tolf))
            logger.warning(
                "The steady state of the static model does not solve the dynamic model "
                "in equation(s) %s",
                _equation_list(offending),
            )
            return finish(ys, SteadyStateStatus.failure(StatusCode.STATIC_DYNAMIC_MISMATCH))

    ys = np.asarray(ys)
    if np.iscomplexobj(ys):
        imag = np.imag(ys)
        if np.any(imag != 0):
            return finish(
                np.real(ys).copy(),
                SteadyStateStatus.failure(
                    StatusCode.COMPLEX_STEADY_STATE, float(np.sum(imag**2))
                ),
            )
        ys = np.real(ys).copy()

    if np.any(np.isnan(ys)):
        return finish(ys, SteadyStateStatus.failure(StatusCode.NAN_IN_RESULT, float("nan")))

    return finish(ys, SteadyStateStatus.success())


def solve_steady_state(
    model: SteadyStateModel,
    options: SolveOptions | None = None,
    outputs: OutputState | None = None,
    initial_guess: Sequence[float] | Array | None = None,
    *,
    ramsey_solver: RamseySolver | None = None,
) -> SteadyStateResult:
    """Compute the steady state and raise if it cannot be found.

    Convenience wrapper around :func:`evaluate_steady_state`.  Missing
    arguments default to the model's ``initval``, zero exogenous values,
    and default options (using the model's steady-state function when it
    has one).

    Raises
    ------
    SteadyStateError
        If the evaluation returns a non-zero status.
    """
    if options is None:
        options = SolveOptions(steadystate_flag=model.steady_state_function is not None)
    if outputs is None:
        outputs = OutputState.for_model(model)
    if initial_guess is None:
        initial_guess = model.initial_guess()

    result = evaluate_steady_state(
        initial_guess, model, options, outputs, ramsey_solver=ramsey_solver
    )
    if not result.ok:
        raise SteadyStateError(result.status, result.steady_state)
    return result


def _check_steady_state_file(
    ys: Array, exo_ss: Array, model: SteadyStateModel, options: SolveOptions
) -> SteadyStateStatus | None:
    resids = evaluate_static_model(ys, exo_ss, model.params, model)
    if np.all(np.abs(resids) <= options.dynatol_f):
        return None
    logger.warning("The steady-state function does not solve the static model.")
    _log_residuals(resids, model, options.dynatol_f)
    return SteadyStateStatus.failure(
        StatusCode.STEADY_STATE_FILE_FAILED, sum_of_squares(resids)
    )


def _ramsey_steady_state(
    ys_init: Array,
    exo_ss: Array,
    model: SteadyStateModel,
    options: SolveOptions,
    outputs: OutputState,
    strategy: SolveStrategy,
    ramsey_solver: RamseySolver | None,
) -> tuple[Array, SteadyStateStatus | None]:
    n_mult = model.ramsey_eq_nbr
    if ramsey_solver is None:
        ramsey_solver = solve_ramsey_static

    if strategy is SolveStrategy.RAMSEY_WITH_FILE:
        ys, params, status = evaluate_steady_state_file(ys_init, exo_ss, model, options)
        if not status.ok:
            return ys, status
        # Conditional on the instruments the file must solve every equation
        # except the multiplier block.
        resids = evaluate_static_model(ys, exo_ss, params, model)
        core = resids[n_mult:]
        nan_indices = np.flatnonzero(np.isnan(core))
        if nan_indices.size:
            logger.warning(
                "The steady-state function for the Ramsey problem resulted in NaNs."
            )
            _log_instruments(
                "The steady state was computed conditional on the following initial "
                "instrument values:",
                ys_init,
                model,
                options,
            )
            logger.warning("The problem occurred in equation(s) %s", _equation_list(nan_indices))
            logger.warning(
                "If those initial values are not admissible, change them in initval."
            )
            return ys, SteadyStateStatus.failure(
                StatusCode.RAMSEY_FILE_NAN, sum_of_squares(resids)
            )
        if core.size and np.max(np.abs(core)) > options.dynatol_f:
            logger.warning(
                "The steady-state function does not solve the steady state for the "
                "Ramsey problem."
            )
            _log_instruments("Conditional on the following instrument values:", ys_init, model, options)
            _log_residuals(core, model, options.dynatol_f, ramsey=False)
            return ys, SteadyStateStatus.failure(
                StatusCode.RAMSEY_FILE_NOT_SOLVING, sum_of_squares(resids)
            )
        if ramsey_solver is solve_ramsey_static:
            ramsey_solver = partial(solve_ramsey_static, conditional_steady_state=ys)

    if options.debug:
        _log_nonfinite_values(ys_init, model)

    ys, params, status = ramsey_solver(ys_init, model, options, outputs)
    status = SteadyStateStatus.coerce(status)
    if not status.ok:
        logger.warning("The Ramsey static solver failed: %s", status)
        return np.asarray(ys).reshape(-1), SteadyStateStatus.failure(
            StatusCode.RAMSEY_INTERNAL_ERROR
        )
    if params is not None and params is not model.params:
        model.params[:] = np.asarray(params, dtype=float).reshape(-1)
    ys = np.asarray(ys).reshape(-1)

    resids = evaluate_static_model(ys, exo_ss, model.params, model)
    multiplier_block = resids[:n_mult]
    core = resids[n_mult:]

    nan_indices = np.flatnonzero(np.isnan(core))
    if nan_indices.size:
        logger.warning("The steady state computation for the Ramsey problem resulted in NaNs.")
        _log_instruments(
            "The steady state computation resulted in the following instrument values:",
            ys,
            model,
            options,
        )
        logger.warning("The problem occurred in equation(s) %s", _equation_list(nan_indices))
        return ys, SteadyStateStatus.failure(StatusCode.RAMSEY_NAN)

    nan_indices = np.flatnonzero(np.isnan(multiplier_block))
    if nan_indices.size:
        logger.warning(
            "The steady state computation for the Ramsey problem resulted in NaNs in the "
            "auxiliary equations."
        )
        _log_instruments(
            "The steady state computation resulted in the following instrument values:",
            ys,
            model,
            options,
        )
        logger.warning(
            "The problem occurred in auxiliary equation(s) %s", _equation_list(nan_indices)
        )
        return ys, SteadyStateStatus.failure(StatusCode.RAMSEY_AUX_NAN)

    if np.max(np.abs(resids), initial=0.0) > options.dynatol_f:
        logger.warning("The steady state for the Ramsey problem could not be computed.")
        _log_instruments(
            "The steady state computation stopped with the following instrument values:",
            ys_init,
            model,
            options,
        )
        _log_residuals(resids, model, options.dynatol_f)
        return ys, SteadyStateStatus.failure(
            StatusCode.RAMSEY_NOT_SOLVING, sum_of_squares(resids)
        )

    return ys, None


def _linear_steady_state(
    ys_init: Array, exo_ss: Array, model: SteadyStateModel, options: SolveOptions
) -> tuple[Array, bool]:
    fvec, jacob = evaluate_static_with_jacobian(ys_init, exo_ss, model.params, model)
    unsolved = False

    bad_rows = np.flatnonzero(~np.isfinite(fvec))
    if bad_rows.size:
        ys = ys_init.copy()
        unsolved = True
        logger.warning(
            "Numerical initial values or parameters are incompatible with equation(s) %s",
            _equation_list(bad_rows),
        )
        logger.warning(_LINEAR_HINT)
    elif np.max(np.abs(fvec), initial=0.0) > LINEAR_PRESOLVED_TOL:
        try:
            ys = ys_init - solve(jacob, fvec)
        except (LinAlgError, ValueError) as exc:
            ys = ys_init.copy()
            unsolved = True
            logger.warning("The Jacobian of the linear model cannot be inverted: %s", exc)
        else:
            resid = evaluate_static_model(ys, exo_ss, model.params, model)
            if not np.max(np.abs(resid), initial=0.0) <= LINEAR_ACCEPT_TOL:
                unsolved = True
                logger.warning("No steady state for the linear model could be found.")
                logger.warning(_LINEAR_HINT)
    else:
        ys = ys_init.copy()

    if options.debug:
        _log_nonfinite_jacobian(jacob, ys_init, model)
    return ys, unsolved


def _log_nonfinite_jacobian(jacob: Array, ys_init: Array, model: SteadyStateModel) -> None:
    rows, cols = np.nonzero(~np.isfinite(jacob))
    if rows.size == 0:
        return
    logger.warning("The Jacobian contains Inf or NaN. The problem arises from:")
    for row, col in zip(rows, cols):
        name = model.variable_label(int(col))
        logger.warning(
            "Derivative of equation %d with respect to variable %s (initial value of %s: %g)",
            row + 1,
            name,
            name,
            ys_init[col],
        )
    logger.warning(_LINEAR_HINT)


def _log_nonfinite_values(ys_init: Array, model: SteadyStateModel) -> None:
    for label, mask in (("Inf", np.isinf(ys_init)), ("NaN", np.isnan(ys_init))):
        names = [model.endo_names[i] for i in np.flatnonzero(mask)]
        if names:
            logger.warning(
                "The initial values for the steady state of the following variables are %s: %s",
                label,
                ", ".join(names),
            )


def _log_instruments(
    header: str, values: Array, model: SteadyStateModel, options: SolveOptions
) -> None:
    logger.warning(header)
    for name in options.instruments:
        if name in model.endo_names:
            logger.warning("    %s = %g", name, np.real(values[model.endo_names.index(name)]))
        else:
            logger.warning("    %s is not an endogenous variable", name)


def _log_residuals(
    resids: Array,
    model: SteadyStateModel,
    tol: float,
    *,
    ramsey: bool = True,
) -> None:
    n_mult = model.ramsey_eq_nbr if ramsey else 0
    logger.warning("The following equations have non-zero residuals:")
    for i, value in enumerate(resids):
        if abs(value) > tol / 100 or np.isnan(value):
            if i < n_mult:
                logger.warning("    Auxiliary Ramsey equation number %d: %g", i + 1, np.real(value))
            else:
                logger.warning("    Equation number %d: %g", i - n_mult + 1, np.real(value))


def _equation_list(indices: Array) -> str:
    return ", ".join(str(int(i) + 1) for i in indices)
