"""Lead-lag incidence of endogenous variables.

Parses symbolic equation strings to find which endogenous variables appear
with leads and/or lags, and lays the result out as a Dynare-style
incidence matrix.  The matrix has one row per period from ``t - max_lag``
to ``t + max_lead`` and one column per endogenous variable; non-zero
entries number the columns of the dynamic Jacobian, counted period by
period.  The static/dynamic consistency check uses it to pick the
endogenous values that the dynamic residual function expects.

The notation ``x(+1)`` denotes a one-period lead and ``x(-1)`` a
one-period lag, following the Dynare convention.  Every endogenous
variable is assumed to appear at the current period.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Mapping, Sequence

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class LeadLagIncidence:
    """Lead-lag timing structure for endogenous variables.

    Attributes
    ----------
    endogenous : tuple of str
        Ordered names of all endogenous variables.
    max_lag : int
        Maximum lag order found across all variables (0 if no lags).
    max_lead : int
        Maximum lead order found across all variables (0 if no leads).
    lag_orders : Mapping[str, tuple[int, ...]]
        For each variable that appears with a lag, the sorted lag orders.
    lead_orders : Mapping[str, tuple[int, ...]]
        For each variable that appears with a lead, the sorted lead orders.
    """

    endogenous: tuple[str, ...]
    max_lag: int
    max_lead: int
    lag_orders: Mapping[str, tuple[int, ...]]
    lead_orders: Mapping[str, tuple[int, ...]]

    @property
    def periods(self) -> int:
        """Number of periods spanned by the dynamic model."""
        return self.max_lag + self.max_lead + 1

    def has_lag(self, name: str) -> bool:
        return len(self.lag_orders.get(name, ())) > 0

    def has_lead(self, name: str) -> bool:
        return len(self.lead_orders.get(name, ())) > 0

    def matrix(self) -> Array:
        """Return the incidence matrix, shape ``(periods, n_endo)``.

        Entry ``[p, j]`` is the 1-based column of variable *j* at period
        ``p - max_lag`` in the dynamic Jacobian, or 0 if the variable does
        not appear at that period.
        """
        present = np.zeros((self.periods, len(self.endogenous)), dtype=bool)
        present[self.max_lag, :] = True
        for j, name in enumerate(self.endogenous):
            for lag in self.lag_orders.get(name, ()):
                present[self.max_lag - lag, j] = True
            for lead in self.lead_orders.get(name, ()):
                present[self.max_lag + lead, j] = True

        out = np.zeros(present.shape, dtype=int)
        out[present] = np.arange(1, int(present.sum()) + 1)
        return out


_SHIFTED_SYMBOL = re.compile(r"\b([A-Za-z_]\w*)\s*\(([+-]?\d+)\)")


def build_lead_lag_incidence(
    equations: Sequence[str], *, endogenous: Sequence[str]
) -> LeadLagIncidence:
    """Parse equations to build a lead-lag incidence structure.

    Parameters
    ----------
    equations : Sequence[str]
        Model equation strings using the Dynare-style timing convention
        (e.g., ``"c(+1) - beta * r * c"``).
    endogenous : Sequence[str]
        Names of all endogenous variables.

    Returns
    -------
    LeadLagIncidence

    Raises
    ------
    ValueError
        If a timed reference mentions a symbol not in *endogenous*.
    """
    endogenous_tuple = tuple(endogenous)
    endo_set = set(endogenous_tuple)

    lag_orders: dict[str, set[int]] = {name: set() for name in endogenous_tuple}
    lead_orders: dict[str, set[int]] = {name: set() for name in endogenous_tuple}

    for eq in equations:
        for symbol, shift_text in _SHIFTED_SYMBOL.findall(eq):
            if symbol not in endo_set:
                raise ValueError(
                    f"Unknown endogenous symbol in timed reference: '{symbol}'"
                )

            shift = int(shift_text)
            if shift < 0:
                lag_orders[symbol].add(abs(shift))
            elif shift > 0:
                lead_orders[symbol].add(shift)

    max_lag = max((max(v) for v in lag_orders.values() if v), default=0)
    max_lead = max((max(v) for v in lead_orders.values() if v), default=0)

    return LeadLagIncidence(
        endogenous=endogenous_tuple,
        max_lag=max_lag,
        max_lead=max_lead,
        lag_orders={name: tuple(sorted(v)) for name, v in lag_orders.items() if v},
        lead_orders={name: tuple(sorted(v)) for name, v in lead_orders.items() if v},
    )


def dynamic_selection(incidence_matrix: Array) -> Array:
    """Flat indices of the non-zero incidence entries, in column order.

    Applied to ``np.tile(ys, periods)`` this yields the endogenous vector
    expected by a dynamic residual function evaluated at a constant path.
    """
    matrix = np.asarray(incidence_matrix)
    flat = matrix.reshape(-1)
    nonzero = np.flatnonzero(flat)
    return nonzero[np.argsort(flat[nonzero], kind="stable")]
