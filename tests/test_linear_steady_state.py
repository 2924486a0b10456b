"""Tests for the linear-model path of the steady-state orchestrator.

A linear model is solved with a single Newton step.  Two thresholds are
involved: an initial residual below 1e-12 means the initial values are
accepted as they are, and after the step the residual must be below 1e-6.
"""

import logging

import numpy as np

from steady_py.model import AuxVarSpec, OutputState, SteadyStateModel
from steady_py.options import SolveOptions
from steady_py.status import StatusCode
from steady_py.steady_state import evaluate_steady_state
from steady_py.strategy import SolveStrategy
from helpers import CallCounter, make_linear_model

LINEAR = SolveOptions(linear=True)


def test_already_solved_initial_guess_is_returned_unchanged():
    model = make_linear_model()
    static = CallCounter(model.static)
    model.static = static
    guess = np.array([2.0, 2.0])

    ys, params, status = evaluate_steady_state(guess, model, LINEAR, OutputState.for_model(model))

    assert status.code == StatusCode.SUCCESS
    assert np.array_equal(ys, guess)
    # No Newton step, hence no second evaluation.
    assert static.calls == 1


def test_single_newton_step_solves_linear_model():
    model = make_linear_model(a=0.5, b=3.0)
    result = evaluate_steady_state([0.0, 0.0], model, LINEAR, OutputState.for_model(model))

    assert result.ok
    assert result.strategy is SolveStrategy.LINEAR_DIRECT
    assert np.allclose(result.steady_state, [2.5, 3.0], atol=1e-12)


def test_nonlinear_model_declared_linear_reports_non_convergence():
    """One Newton step on y^3 = 8 from y = 1 leaves a large residual."""

    def static(y, x, params):
        return np.array([y[0] ** 3 - 8.0]), np.array([[3.0 * y[0] ** 2]])

    model = SteadyStateModel(endo_names=("y",), param_names=(), params=[], static=static)
    ys, _, status = evaluate_steady_state([1.0], model, LINEAR, OutputState.for_model(model))

    assert status.code == StatusCode.NON_CONVERGENCE
    assert np.isclose(ys[0], 1.0 + 7.0 / 3.0)
    assert np.isclose(status.magnitude, (ys[0] ** 3 - 8.0) ** 2)


def test_infinite_initial_residual_is_non_convergence():
    model = make_linear_model(b=np.inf)
    ys, _, status = evaluate_steady_state([0.0, 0.0], model, LINEAR, OutputState.for_model(model))

    assert status.code == StatusCode.NON_CONVERGENCE
    assert status.magnitude == np.inf
    assert np.array_equal(ys, [0.0, 0.0])


def test_nan_initial_residual_escalates_to_nan_code():
    model = make_linear_model(b=np.nan)
    _, _, status = evaluate_steady_state([0.0, 0.0], model, LINEAR, OutputState.for_model(model))

    assert status.code == StatusCode.NAN_IN_RESULT
    assert np.isnan(status.magnitude)


def test_singular_jacobian_is_non_convergence():
    def static(y, x, params):
        return np.array([y[0] + y[1] - 1.0, 2.0 * (y[0] + y[1]) - 3.0]), np.array(
            [[1.0, 1.0], [2.0, 2.0]]
        )

    model = SteadyStateModel(endo_names=("a", "b"), param_names=(), params=[], static=static)
    _, _, status = evaluate_steady_state([0.0, 0.0], model, LINEAR, OutputState.for_model(model))

    assert status.code == StatusCode.NON_CONVERGENCE


def test_debug_mode_names_original_variable_of_auxiliary_jacobian_column(caplog):
    def static(y, x, params):
        residual = np.array([y[0] - 1.0, y[1] - y[0]])
        jacobian = np.array([[1.0, np.nan], [-1.0, 1.0]])
        return residual, jacobian

    def set_aux(y, x, params):
        out = np.array(y, dtype=float, copy=True)
        out[1] = out[0]
        return out

    model = SteadyStateModel(
        endo_names=("k", "AUX_ENDO_LAG_0_1"),
        param_names=(),
        params=[],
        static=static,
        aux_vars=(AuxVarSpec(orig_index=0, orig_lead_lag=-1),),
        set_auxiliary_variables=set_aux,
    )
    options = SolveOptions(linear=True, debug=True)

    with caplog.at_level(logging.WARNING, logger="steady_py.steady_state"):
        _, _, status = evaluate_steady_state(
            [0.0, np.nan], model, options, OutputState.for_model(model)
        )

    assert status.code == StatusCode.NON_CONVERGENCE
    assert "Derivative of equation 1 with respect to variable k(-1)" in caplog.text


def test_auxiliary_expansion_runs_once_before_linear_step():
    setter = CallCounter(lambda y, x, p: np.array([y[0], y[0]]))

    def static(y, x, params):
        return np.array([y[0] - 2.0, y[1] - y[0]]), np.array([[1.0, 0.0], [-1.0, 1.0]])

    model = SteadyStateModel(
        endo_names=("k", "AUX"),
        param_names=(),
        params=[],
        static=static,
        aux_vars=(AuxVarSpec(orig_index=0),),
        set_auxiliary_variables=setter,
    )
    result = evaluate_steady_state([0.0, np.nan], model, LINEAR, OutputState.for_model(model))

    assert result.ok
    assert np.allclose(result.steady_state, [2.0, 2.0])
    assert setter.calls == 1
