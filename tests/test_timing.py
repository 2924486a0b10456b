"""Tests for the lead-lag incidence analysis.

``build_lead_lag_incidence`` parses symbolic equation strings to find which
endogenous variables appear with leads or lags.  The incidence matrix built
from it tells the static/dynamic consistency check which entries of a
constant path the dynamic residual function expects.
"""

import numpy as np
import pytest

from steady_py.timing import LeadLagIncidence, build_lead_lag_incidence, dynamic_selection


def test_build_lead_lag_incidence_for_mixed_system():
    """x appears with a lead, k with a lag, and neither the other way round."""
    equations = (
        "x = beta * x(+1) + k(-1)",
        "k = rho * k(-1) + eps",
    )
    incidence = build_lead_lag_incidence(equations, endogenous=("x", "k"))

    assert incidence.max_lag == 1
    assert incidence.max_lead == 1
    assert incidence.periods == 3
    assert incidence.has_lag("k")
    assert incidence.has_lead("x")
    assert not incidence.has_lead("k")
    assert not incidence.has_lag("x")


def test_incidence_matrix_numbers_entries_period_by_period():
    equations = (
        "x = beta * x(+1) + k(-1)",
        "k = rho * k(-1) + eps",
    )
    matrix = build_lead_lag_incidence(equations, endogenous=("x", "k")).matrix()

    expected = np.array(
        [
            [0, 1],
            [2, 3],
            [4, 0],
        ]
    )
    assert np.array_equal(matrix, expected)


def test_static_model_has_single_row_incidence():
    incidence = LeadLagIncidence(
        endogenous=("a", "b"), max_lag=0, max_lead=0, lag_orders={}, lead_orders={}
    )
    assert np.array_equal(incidence.matrix(), [[1, 2]])


def test_dynamic_selection_follows_incidence_numbering():
    matrix = np.array(
        [
            [0, 1],
            [2, 3],
            [4, 0],
        ]
    )
    ys = np.array([10.0, 20.0])
    path = np.tile(ys, 3)

    assert np.array_equal(path[dynamic_selection(matrix)], [20.0, 10.0, 20.0, 10.0])


def test_reject_unknown_symbol_in_equations():
    """An equation referencing a variable not in the endogenous list should raise ValueError."""
    equations = ("x = y(-1)",)
    with pytest.raises(ValueError, match="Unknown endogenous symbol"):
        build_lead_lag_incidence(equations, endogenous=("x",))
