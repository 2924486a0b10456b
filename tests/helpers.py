"""Shared test helpers for the steady_py test suite.

Provides factory functions that build small, analytically tractable models
used across many test modules, plus a call counter for checking which
collaborators the orchestrator invokes.
"""

import numpy as np

from steady_py.model import AuxVarSpec, StaticEvaluator, SteadyStateModel

ALPHA = 0.33
BETA = 0.99
DELTA = 0.025

K_SS = (ALPHA * BETA / (1 - BETA * (1 - DELTA))) ** (1 / (1 - ALPHA))
Y_SS = K_SS**ALPHA
C_SS = Y_SS - DELTA * K_SS


class CallCounter:
    """Wrap a callable and count its invocations."""

    def __init__(self, func):
        self.func = func
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        return self.func(*args, **kwargs)


def make_linear_model(a: float = 0.5, b: float = 2.0, **kwargs) -> SteadyStateModel:
    """Two-equation linear model.

        y1 = a * y2 + 1
        y2 = b

    Steady state: ``y2 = b``, ``y1 = a * b + 1``.
    """

    def static(y, x, params):
        a_, b_ = params
        residual = np.array([y[0] - a_ * y[1] - 1.0, y[1] - b_])
        jacobian = np.array([[1.0, -a_], [0.0, 1.0]])
        return residual, jacobian

    return SteadyStateModel(
        endo_names=("y1", "y2"),
        param_names=("a", "b"),
        params=np.array([a, b]),
        static=static,
        **kwargs,
    )


def make_rbc_model(**kwargs) -> SteadyStateModel:
    """Static equations of the neoclassical growth model.

        1 / beta = alpha * k^(alpha - 1) + 1 - delta
        y = k^alpha
        c = y - delta * k

    The Jacobian is obtained by finite differences.
    """

    def residual(y, x, params):
        alpha, beta, delta = params
        k, c, out = y
        return np.array(
            [
                alpha * k ** (alpha - 1.0) + 1.0 - delta - 1.0 / beta,
                out - k**alpha,
                c - out + delta * k,
            ]
        )

    return SteadyStateModel(
        endo_names=("k", "c", "y"),
        param_names=("alpha", "beta", "delta"),
        params=np.array([ALPHA, BETA, DELTA]),
        static=StaticEvaluator.from_residual(residual),
        initval={"k": 27.0, "c": 2.2, "y": 3.0},
        **kwargs,
    )


def rbc_auxiliary_setter(y, x, params):
    out = np.array(y, dtype=float, copy=True)
    out[3] = out[0]
    return out


def make_rbc_model_with_auxiliary(set_auxiliary_variables=None) -> SteadyStateModel:
    """Growth model whose production function uses ``k(-2)``.

    The lag is carried by the auxiliary variable ``AUX_ENDO_LAG_0_1``
    (standing for ``k(-2)``), defined by the last static equation.
    """

    def residual(y, x, params):
        alpha, beta, delta = params
        k, c, out, aux = y
        return np.array(
            [
                alpha * aux ** (alpha - 1.0) + 1.0 - delta - 1.0 / beta,
                out - aux**alpha,
                c - out + delta * k,
                aux - k,
            ]
        )

    return SteadyStateModel(
        endo_names=("k", "c", "y", "AUX_ENDO_LAG_0_1"),
        param_names=("alpha", "beta", "delta"),
        params=np.array([ALPHA, BETA, DELTA]),
        static=StaticEvaluator.from_residual(residual),
        aux_vars=(AuxVarSpec(orig_index=0, orig_lead_lag=-2),),
        set_auxiliary_variables=set_auxiliary_variables or rbc_auxiliary_setter,
        initval={"k": 27.0, "c": 2.2, "y": 3.0},
    )


def ramsey_static(y, x, params):
    """Static model of a toy Ramsey problem.

    The planner minimises ``(x - 1)^2 + i^2`` subject to ``x = i``.  With
    multiplier ``lam`` the first-order conditions are

        2 * (x - 1) + lam = 0
        2 * i - lam = 0

    followed by the private-sector equation ``x - i = 0``.  Solution:
    ``x = i = 0.5``, ``lam = 1``.
    """
    xv, iv, lam = y
    residual = np.array([2.0 * (xv - 1.0) + lam, 2.0 * iv - lam, xv - iv])
    jacobian = np.array([[2.0, 0.0, 1.0], [0.0, 2.0, -1.0], [1.0, -1.0, 0.0]])
    return residual, jacobian


def make_ramsey_model(steady_state_function=None, static=None) -> SteadyStateModel:
    return SteadyStateModel(
        endo_names=("x", "i", "lam"),
        param_names=(),
        params=np.array([]),
        static=static or ramsey_static,
        steady_state_function=steady_state_function,
        ramsey_eq_nbr=2,
    )


def ramsey_conditional_steady_state(ys, exo, params, options):
    """Steady state of the private sector given the instrument ``i``."""
    out = np.array(ys, dtype=float, copy=True)
    out[0] = out[1]
    return out, params, 0
