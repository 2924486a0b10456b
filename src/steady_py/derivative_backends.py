"""Numerical differentiation backends for static residual functions.

Model code often supplies only a residual function.  These backends turn
it into a Jacobian so that it can be used with the Newton-type solvers:

* **Finite differences** -- central-difference approximation with
  O(epsilon^2) truncation error.
* **Complex step** -- the Squire-Trapp (1998) method, which achieves
  machine-precision accuracy (no subtractive cancellation) at the cost
  of requiring the target function to support complex arithmetic.

References
----------
Squire, W. and Trapp, G. (1998). "Using Complex Variables to Estimate
    Derivatives of Real Functions." *SIAM Review*, 40(1), 110-112.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

Array = np.ndarray
VectorFunction = Callable[[Array], Array]

BACKENDS = ("finite_difference", "complex_step")


def finite_difference_jacobian(
    func: VectorFunction, x: Array, epsilon: float = 1e-6
) -> Array:
    """Compute the Jacobian of *func* at *x* via central finite differences.

    Uses the two-point central difference formula:

    .. math::

        \\frac{\\partial f}{\\partial x_i}
        \\approx \\frac{f(x + h e_i) - f(x - h e_i)}{2h}

    where :math:`h = \\epsilon \\cdot \\max(1, |x_i|)`.

    Parameters
    ----------
    func : callable
        Vector-valued function ``f(x) -> Array``.
    x : Array
        Point at which to differentiate.
    epsilon : float
        Base step size.

    Returns
    -------
    Array, shape (n_out, n_in)
    """
    x = np.asarray(x, dtype=float).reshape(-1)
    baseline = np.asarray(func(x), dtype=float).reshape(-1)

    jac = np.zeros((baseline.size, x.size), dtype=float)
    for i in range(x.size):
        step = epsilon * max(1.0, abs(x[i]))
        delta = np.zeros_like(x)
        delta[i] = step
        f_plus = np.asarray(func(x + delta), dtype=float).reshape(-1)
        f_minus = np.asarray(func(x - delta), dtype=float).reshape(-1)
        jac[:, i] = (f_plus - f_minus) / (2.0 * step)
    return jac


def complex_step_jacobian(
    func: VectorFunction, x: Array, epsilon: float = 1e-20
) -> Array:
    """Compute the Jacobian of *func* at *x* via the complex-step method.

    .. math::

        \\frac{\\partial f}{\\partial x_i}
        \\approx \\frac{\\mathrm{Im}\\, f(x + i h e_i)}{h}

    *func* must accept complex input and must not take absolute values or
    real parts of its argument.
    """
    x = np.asarray(x, dtype=float).reshape(-1)
    baseline = np.asarray(func(x.astype(complex)), dtype=complex).reshape(-1)

    jac = np.zeros((baseline.size, x.size), dtype=float)
    for i in range(x.size):
        step = epsilon * max(1.0, abs(x[i]))
        perturbed = x.astype(complex)
        perturbed[i] += 1j * step
        f_cs = np.asarray(func(perturbed), dtype=complex).reshape(-1)
        jac[:, i] = np.imag(f_cs) / step
    return jac


def numerical_jacobian(
    func: VectorFunction,
    x: Array,
    backend: str = "finite_difference",
    epsilon: float | None = None,
) -> Array:
    """Differentiate *func* at *x* with the named backend.

    Parameters
    ----------
    backend : {"finite_difference", "complex_step"}
    epsilon : float or None
        Step size; each backend has its own default.

    Raises
    ------
    ValueError
        If *backend* is not recognised.
    """
    if backend == "finite_difference":
        return finite_difference_jacobian(func, x, 1e-6 if epsilon is None else epsilon)
    if backend == "complex_step":
        return complex_step_jacobian(func, x, 1e-20 if epsilon is None else epsilon)
    raise ValueError(f"Unknown derivative backend: {backend}")
