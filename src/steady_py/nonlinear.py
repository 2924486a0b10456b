"""Nonlinear equation solving for the static model.

:func:`solve_nonlinear` wraps ``scipy.optimize.root`` with the conventions
of the steady-state routines: the function returns ``(residual,
jacobian)``; an initial point that already satisfies the tolerance is
returned untouched; non-finite residuals or Jacobian entries at the
initial point stop the solve; and the outcome is reported as a
``(solution, unsolved)`` pair rather than an exception.
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from scipy.optimize import root

from .derivative_backends import finite_difference_jacobian
from .model import SteadyStateModel
from .options import SolveOptions

Array = np.ndarray
ResidualJacobian = Callable[[Array], tuple[Array, Array]]

logger = logging.getLogger(__name__)

# scipy methods that use a user-supplied Jacobian.
_JACOBIAN_METHODS = {"hybr", "lm"}


def solve_nonlinear(
    func: ResidualJacobian, x0: Array, options: SolveOptions
) -> tuple[Array, bool]:
    """Solve ``func(x)[0] = 0`` starting from *x0*.

    Parameters
    ----------
    func : callable
        ``func(x) -> (residual, jacobian)``.
    x0 : Array
        Initial guess.
    options : SolveOptions
        Supplies ``solve_algo``, ``solve_tolf``, ``solve_tolx`` and
        ``maxit``.

    Returns
    -------
    x : Array
        Last iterate (the initial guess if the solve was not attempted).
    unsolved : bool
        True if the residual at *x* is non-finite or exceeds
        ``solve_tolf``.
    """
    x0 = np.asarray(x0, dtype=float).reshape(-1)
    if x0.size == 0:
        return x0, False

    fvec, fjac = func(x0)
    fvec = np.asarray(fvec, dtype=float).reshape(-1)

    bad_rows = np.flatnonzero(~np.isfinite(fvec))
    if bad_rows.size:
        logger.warning(
            "Residuals are not finite at the initial values in equation(s) %s",
            ", ".join(str(i + 1) for i in bad_rows),
        )
        return x0, True

    if np.max(np.abs(fvec)) < options.solve_tolf:
        return x0, False

    fjac = np.asarray(fjac, dtype=float)
    if not np.all(np.isfinite(fjac)):
        rows, cols = np.nonzero(~np.isfinite(fjac))
        for row, col in zip(rows, cols):
            logger.warning(
                "Jacobian is not finite at the initial values: equation %d, variable %d",
                row + 1,
                col + 1,
            )
        return x0, True

    method = options.solve_algo
    if method in _JACOBIAN_METHODS:
        fun = func
        jac = True
    else:
        def fun(x: Array) -> Array:
            return func(x)[0]

        jac = None

    result = root(
        fun,
        x0,
        method=method,
        jac=jac,
        tol=options.solve_tolx,
        options=_root_options(method, options, x0.size),
    )

    x = np.asarray(result.x, dtype=float).reshape(-1)
    fvec, _ = func(x)
    fvec = np.asarray(fvec, dtype=float).reshape(-1)
    unsolved = not np.all(np.isfinite(fvec)) or np.max(np.abs(fvec)) > options.solve_tolf
    if unsolved:
        logger.debug("scipy.optimize.root(%s) stopped: %s", method, result.message)
    return x, bool(unsolved)


def _root_options(method: str, options: SolveOptions, n: int) -> dict[str, int]:
    if method in ("hybr", "df-sane"):
        return {"maxfev": options.maxit * (n + 1)}
    return {"maxiter": options.maxit}


def static_problem(
    model: SteadyStateModel, exo_ss: Array, params: Array, ys_init: Array
) -> tuple[ResidualJacobian, Callable[[Array], Array]]:
    """Static problem restricted to the original variables.

    The unknowns are the first ``orig_endo_nbr`` entries of the steady
    state and the equations are the first ``orig_endo_nbr`` rows of the
    static model.  Auxiliary entries are recomputed from the unknowns at
    every evaluation, and their dependence on the unknowns enters the
    Jacobian through the chain rule.

    Returns
    -------
    func : callable
        ``func(x) -> (residual, jacobian)`` over the original block.
    expand : callable
        ``expand(x) -> ys`` rebuilding the full steady-state vector.
    """
    nvar = model.orig_endo_nbr
    template = np.asarray(ys_init, dtype=float).reshape(-1).copy()
    n_aux = len(model.aux_vars)

    def expand(x: Array) -> Array:
        y = template.copy()
        y[:nvar] = x
        if n_aux:
            y = np.asarray(model.set_auxiliary_variables(y, exo_ss, params), dtype=float)
        return y.reshape(-1)

    def func(x: Array) -> tuple[Array, Array]:
        y = expand(x)
        r, j = model.static(y, exo_ss, params)
        r = np.asarray(r, dtype=float).reshape(-1)
        j = np.asarray(j, dtype=float).reshape(r.size, -1)
        jac = j[:nvar, :nvar]
        if n_aux:
            daux = finite_difference_jacobian(lambda z: expand(z)[nvar:], x)
            jac = jac + j[:nvar, nvar:] @ daux
        return r[:nvar], jac

    return func, expand
