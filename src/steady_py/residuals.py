"""Evaluation of static and dynamic residuals at a candidate steady state."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .model import SteadyStateModel
from .timing import dynamic_selection

Array = np.ndarray


def evaluate_static_model(
    ys: Array, exo_ss: Array, params: Array, model: SteadyStateModel
) -> Array:
    """Static residuals at *ys* (Jacobian discarded)."""
    residual, _ = model.static(np.asarray(ys).reshape(-1), exo_ss, params)
    return np.asarray(residual).reshape(-1)


def evaluate_static_with_jacobian(
    ys: Array, exo_ss: Array, params: Array, model: SteadyStateModel
) -> tuple[Array, Array]:
    residual, jacobian = model.static(np.asarray(ys).reshape(-1), exo_ss, params)
    residual = np.asarray(residual).reshape(-1)
    jacobian = np.asarray(jacobian).reshape(residual.size, -1)
    return residual, jacobian


def evaluate_dynamic_at_steady_state(
    ys: Array, exo_ss: Array, params: Array, model: SteadyStateModel
) -> Array:
    """Dynamic residuals along a constant path at *ys*.

    The steady state is replicated over the ``maximum_lag + maximum_lead +
    1`` periods of the model and the entries flagged in the lead-lag
    incidence matrix are passed to the dynamic evaluator; exogenous values
    are replicated likewise, one row per period.
    """
    if model.dynamic is None:
        raise ValueError("model has no dynamic evaluator")
    ys = np.asarray(ys).reshape(-1)
    periods = model.maximum_lag + model.maximum_lead + 1
    z = np.tile(ys, periods)
    y = z[dynamic_selection(model.lead_lag_incidence)]
    zx = np.tile(np.asarray(exo_ss).reshape(1, -1), (periods, 1))
    residual = model.dynamic(y, zx, params, ys, model.maximum_lag)
    return np.asarray(residual).reshape(-1)


def sum_of_squares(residual: Array) -> float:
    residual = np.asarray(residual).reshape(-1)
    return float(np.real(np.vdot(residual, residual)))


@dataclass(frozen=True)
class ResidualReport:
    """Static residuals of every equation at a given point.

    Attributes
    ----------
    residuals : Array
        One residual per equation.
    labels : tuple of str
        Equation labels (``"Equation number 3"``, or for Ramsey models
        ``"Auxiliary Ramsey equation number 1"``).
    """

    residuals: Array
    labels: tuple[str, ...]

    @property
    def max_abs(self) -> float:
        if self.residuals.size == 0:
            return 0.0
        return float(np.max(np.abs(self.residuals)))

    def lines(self, tol: float | None = None) -> list[str]:
        """Formatted residuals, restricted to those above *tol* if given."""
        out = []
        for label, value in zip(self.labels, self.residuals):
            if tol is None or not abs(value) <= tol:
                out.append(f"{label}: {value:.6g}")
        return out


def equation_labels(model: SteadyStateModel, n_equations: int) -> tuple[str, ...]:
    """Labels numbering the Ramsey multiplier block separately."""
    n_mult = model.ramsey_eq_nbr
    labels = [f"Auxiliary Ramsey equation number {i + 1}" for i in range(min(n_mult, n_equations))]
    labels += [f"Equation number {i - n_mult + 1}" for i in range(n_mult, n_equations)]
    return tuple(labels)


def static_residual_report(
    ys: Array, exo_ss: Array, params: Array, model: SteadyStateModel
) -> ResidualReport:
    residuals = evaluate_static_model(ys, exo_ss, params, model)
    return ResidualReport(residuals=residuals, labels=equation_labels(model, residuals.size))
