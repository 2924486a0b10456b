"""Model descriptor for steady-state computation.

A model is described by its symbol lists and by injected callables that
stand in for the generated code of an equation compiler:

* **Static model** ``static(y, x, params) -> (residual, jacobian)`` --
  the equilibrium equations with all leads and lags collapsed onto the
  current period.  One equation per endogenous variable; auxiliary
  equations (if any) come last.
* **Dynamic model** ``dynamic(y, x, params, steady_state, it_) ->
  residual`` -- the time-indexed equations, evaluated on the endogenous
  values selected by the lead-lag incidence matrix.  Only needed when
  some equations take a different form in the static and dynamic models.
* **Auxiliary-variable setter** ``set_auxiliary_variables(y, x, params) ->
  y`` -- fills the auxiliary entries of *y* from the original ones.
* **Steady-state function** ``steady_state_function(y, x, params,
  options) -> (ys, params, status)`` -- a user-supplied closed-form
  steady state.

The callables are resolved once, when the model is built, rather than
looked up by name at every evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Sequence

import numpy as np

from .derivative_backends import numerical_jacobian
from .timing import LeadLagIncidence, build_lead_lag_incidence

Array = np.ndarray
StaticModel = Callable[[Array, Array, Array], tuple[Array, Array]]
DynamicModel = Callable[[Array, Array, Array, Array, int], Array]
AuxiliarySetter = Callable[[Array, Array, Array], Array]
SteadyStateFunction = Callable[[Array, Array, Array, Any], tuple[Any, Any, Any]]


def _to_1d(array: Array | Sequence[float], expected_size: int | None = None) -> Array:
    out = np.asarray(array, dtype=float).reshape(-1)
    if expected_size is not None and out.size != expected_size:
        raise ValueError(f"Expected vector of size {expected_size}, got {out.size}")
    return out


@dataclass(frozen=True)
class AuxVarSpec:
    """Auxiliary variable introduced by a model transformation.

    Attributes
    ----------
    orig_index : int
        0-based index of the original endogenous variable that the
        auxiliary variable stands for.  Used only in diagnostics.
    orig_lead_lag : int
        Timing of the original variable the auxiliary replaces
        (e.g. ``-2`` for ``x(-2)``).
    """

    orig_index: int
    orig_lead_lag: int = 0


class StaticEvaluator:
    """Adapter turning a residual-only function into a static model.

    The Jacobian is computed numerically with one of the
    :mod:`~steady_py.derivative_backends`.

    Parameters
    ----------
    residual : callable
        ``residual(y, x, params) -> Array``.
    backend : {"finite_difference", "complex_step"}
        Differentiation backend.
    epsilon : float or None
        Step size passed to the backend.
    """

    def __init__(
        self,
        residual: Callable[[Array, Array, Array], Array],
        backend: str = "finite_difference",
        epsilon: float | None = None,
    ):
        self.residual = residual
        self.backend = backend
        self.epsilon = epsilon

    @classmethod
    def from_residual(
        cls,
        residual: Callable[[Array, Array, Array], Array],
        backend: str = "finite_difference",
        epsilon: float | None = None,
    ) -> StaticEvaluator:
        return cls(residual, backend=backend, epsilon=epsilon)

    def __call__(self, y: Array, x: Array, params: Array) -> tuple[Array, Array]:
        y = np.asarray(y).reshape(-1)
        fvec = np.asarray(self.residual(y, x, params)).reshape(-1)
        if np.iscomplexobj(y):
            # Complex iterates come from user code; differentiate the real part.
            y = np.real(y)
        jacob = numerical_jacobian(
            lambda z: self.residual(z, x, params),
            y,
            backend=self.backend,
            epsilon=self.epsilon,
        )
        return fvec, jacob


@dataclass
class SteadyStateModel:
    """Structural description of a model whose steady state is sought.

    Parameters
    ----------
    endo_names : Sequence[str]
        Names of all endogenous variables; auxiliary variables last.
    param_names : Sequence[str]
        Parameter names.
    params : Array
        Parameter values.  Shared with the caller: a user steady-state
        function that returns new values updates this array in place.
    static : StaticModel
        Static residual/Jacobian evaluator.
    exo_names : Sequence[str]
        Names of the exogenous variables.
    exo_det_names : Sequence[str]
        Names of the deterministic exogenous variables.
    dynamic : DynamicModel or None
        Dynamic residual evaluator.
    aux_vars : Sequence[AuxVarSpec]
        Auxiliary variables, in the order they occupy the tail of
        *endo_names*.
    set_auxiliary_variables : AuxiliarySetter or None
        Computes auxiliary values from original ones.  Required when
        *aux_vars* is non-empty.
    steady_state_function : SteadyStateFunction or None
        User-supplied steady-state function.
    equations : Sequence[str] or None
        Symbolic equations, used to build the lead-lag incidence.
    lead_lag_incidence : Array or None
        Incidence matrix of shape ``(maximum_lag + maximum_lead + 1,
        endo_nbr)``; built from *equations* if not supplied.
    maximum_lag : int or None
        Row of the current period in *lead_lag_incidence*.  Derived when
        the matrix is built from *equations*; required with a supplied
        matrix of more than one row.
    static_and_dynamic_models_differ : bool
        Some equations are tagged to differ between their static and
        dynamic forms.
    ramsey_eq_nbr : int
        Number of multiplier (first-order condition) equations of a
        Ramsey problem.  They occupy the first rows of the static model.
    initval : Mapping[str, float] or None
        Initial values for the steady-state search; missing variables
        default to zero.

    Raises
    ------
    ValueError
        On inconsistent dimensions or missing collaborators.
    """

    endo_names: Sequence[str]
    param_names: Sequence[str]
    params: Array
    static: StaticModel
    exo_names: Sequence[str] = ()
    exo_det_names: Sequence[str] = ()
    dynamic: DynamicModel | None = None
    aux_vars: Sequence[AuxVarSpec] = ()
    set_auxiliary_variables: AuxiliarySetter | None = None
    steady_state_function: SteadyStateFunction | None = None
    equations: Sequence[str] | None = None
    lead_lag_incidence: Array | None = None
    maximum_lag: int | None = None
    static_and_dynamic_models_differ: bool = False
    ramsey_eq_nbr: int = 0
    initval: Mapping[str, float] | None = None

    def __post_init__(self) -> None:
        self.endo_names = tuple(self.endo_names)
        self.param_names = tuple(self.param_names)
        self.exo_names = tuple(self.exo_names)
        self.exo_det_names = tuple(self.exo_det_names)
        self.aux_vars = tuple(self.aux_vars)
        self.params = _to_1d(self.params)

        if len(self.param_names) != self.params.size:
            raise ValueError("param_names length does not match params")
        if len(self.aux_vars) > len(self.endo_names):
            raise ValueError("more auxiliary variables than endogenous variables")
        for aux in self.aux_vars:
            if not 0 <= aux.orig_index < self.orig_endo_nbr:
                raise ValueError(
                    f"auxiliary variable refers to unknown original index {aux.orig_index}"
                )
        if self.aux_vars and self.set_auxiliary_variables is None:
            raise ValueError("a model with auxiliary variables needs set_auxiliary_variables")
        if not 0 <= self.ramsey_eq_nbr <= self.endo_nbr:
            raise ValueError("ramsey_eq_nbr must lie between 0 and endo_nbr")

        if self.lead_lag_incidence is None:
            if self.equations is not None:
                incidence = build_lead_lag_incidence(
                    self.equations, endogenous=self.endo_names
                )
            else:
                incidence = LeadLagIncidence(
                    endogenous=self.endo_names,
                    max_lag=0,
                    max_lead=0,
                    lag_orders={},
                    lead_orders={},
                )
            self.lead_lag_incidence = incidence.matrix()
            self.maximum_lag = incidence.max_lag
        else:
            self.lead_lag_incidence = np.asarray(self.lead_lag_incidence, dtype=int)
            if self.lead_lag_incidence.ndim != 2 or (
                self.lead_lag_incidence.shape[1] != self.endo_nbr
            ):
                raise ValueError("lead_lag_incidence must have one column per endogenous variable")
            if self.maximum_lag is None:
                if self.lead_lag_incidence.shape[0] != 1:
                    raise ValueError("maximum_lag is required with a multi-period lead_lag_incidence")
                self.maximum_lag = 0
            if not 0 <= self.maximum_lag < self.lead_lag_incidence.shape[0]:
                raise ValueError("maximum_lag is inconsistent with lead_lag_incidence")
            if np.any(self.lead_lag_incidence[self.maximum_lag] == 0):
                raise ValueError("some variables don't appear at the current period")

        if self.static_and_dynamic_models_differ and self.dynamic is None:
            raise ValueError(
                "static_and_dynamic_models_differ requires a dynamic model evaluator"
            )

        if self.initval is not None:
            unknown = sorted(set(self.initval) - set(self.endo_names))
            if unknown:
                raise ValueError(f"initval refers to unknown variables: {', '.join(unknown)}")

    @property
    def endo_nbr(self) -> int:
        """Number of endogenous variables, auxiliary ones included."""
        return len(self.endo_names)

    @property
    def orig_endo_nbr(self) -> int:
        """Number of endogenous variables before model transformation."""
        return len(self.endo_names) - len(self.aux_vars)

    @property
    def exo_nbr(self) -> int:
        return len(self.exo_names)

    @property
    def exo_det_nbr(self) -> int:
        return len(self.exo_det_names)

    @property
    def param_nbr(self) -> int:
        return len(self.param_names)

    @property
    def maximum_lead(self) -> int:
        return int(self.lead_lag_incidence.shape[0] - 1 - self.maximum_lag)

    def parameter(self, name: str) -> float:
        """Current value of parameter *name*."""
        return float(self.params[self.param_names.index(name)])

    def set_parameter(self, name: str, value: float) -> None:
        """Update parameter *name* in place."""
        self.params[self.param_names.index(name)] = float(value)

    def initial_guess(self) -> Array:
        """Initial steady-state vector built from *initval* (zeros elsewhere)."""
        values = dict(self.initval or {})
        return np.array([float(values.get(name, 0.0)) for name in self.endo_names])

    def variable_label(self, column: int) -> str:
        """Human-readable name of endogenous column *column*.

        Auxiliary columns resolve to the original variable they stand for.
        """
        if column < self.orig_endo_nbr:
            return self.endo_names[column]
        aux = self.aux_vars[column - self.orig_endo_nbr]
        name = self.endo_names[aux.orig_index]
        if aux.orig_lead_lag:
            return f"{name}({aux.orig_lead_lag:+d})"
        return name

    def stationary_indices(
        self, varlist: Sequence[str], unit_root_vars: Sequence[str] = ()
    ) -> tuple[Array, tuple[str, ...]]:
        """Indices and names of the listed variables that are stationary.

        Variables named in *unit_root_vars* are dropped from *varlist*;
        the remaining names are located in *endo_names*.

        Raises
        ------
        ValueError
            If a listed variable is not endogenous.
        """
        unit_roots = set(unit_root_vars)
        names = tuple(name for name in varlist if name not in unit_roots)
        missing = [name for name in names if name not in self.endo_names]
        if missing:
            raise ValueError(f"Unknown endogenous variables: {', '.join(missing)}")
        indices = np.array([self.endo_names.index(name) for name in names], dtype=int)
        return indices, names

    def copy(self) -> SteadyStateModel:
        """Shallow copy with an independent parameter vector."""
        return replace(self, params=self.params.copy())


@dataclass
class OutputState:
    """Caller-held results structure passed alongside the model.

    Attributes
    ----------
    exo_steady_state : Array
        Steady-state values of the exogenous variables.
    exo_det_steady_state : Array
        Steady-state values of the deterministic exogenous variables.
    decision_rule : dict
        Scratch space owned by the caller; the block solver caches its
        decomposition under ``"blocks"``.
    """

    exo_steady_state: Array
    exo_det_steady_state: Array = field(default_factory=lambda: np.zeros(0))
    decision_rule: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.exo_steady_state = _to_1d(self.exo_steady_state)
        self.exo_det_steady_state = _to_1d(self.exo_det_steady_state)

    @classmethod
    def for_model(cls, model: SteadyStateModel) -> OutputState:
        """Outputs with all exogenous steady-state values at zero."""
        return cls(
            exo_steady_state=np.zeros(model.exo_nbr),
            exo_det_steady_state=np.zeros(model.exo_det_nbr),
        )

    def exogenous_steady_state(self) -> Array:
        return np.concatenate([self.exo_steady_state, self.exo_det_steady_state])

    def copy(self) -> OutputState:
        return OutputState(
            exo_steady_state=self.exo_steady_state.copy(),
            exo_det_steady_state=self.exo_det_steady_state.copy(),
            decision_rule=dict(self.decision_rule),
        )
