"""Evaluation of a user-supplied steady-state function."""

from __future__ import annotations

import numpy as np

from .model import SteadyStateModel
from .options import SolveOptions
from .status import SteadyStateFileError, SteadyStateStatus

Array = np.ndarray


def evaluate_steady_state_file(
    ys_init: Array,
    exo_ss: Array,
    model: SteadyStateModel,
    options: SolveOptions,
) -> tuple[Array, Array, SteadyStateStatus]:
    """Call ``model.steady_state_function`` and check its output.

    The returned vector must be column shaped: 1-D, or 2-D with a single
    column.  Parameters returned by the function are written into
    ``model.params`` in place.  The function is expected to return the
    auxiliary variables as well; they are not recomputed.

    Returns
    -------
    ys : Array
        Steady state proposed by the function (dtype preserved, so a
        complex result stays complex).
    params : Array
        ``model.params`` after the update.
    status : SteadyStateStatus
        Status reported by the function.

    Raises
    ------
    ValueError
        If the model has no steady-state function.
    SteadyStateFileError
        If the function returns a row vector or a vector of the wrong
        length.
    """
    if model.steady_state_function is None:
        raise ValueError("steadystate_flag is set but the model has no steady_state_function")

    ys, params, status = model.steady_state_function(
        np.asarray(ys_init).copy(), exo_ss, model.params.copy(), options
    )
    ys = np.asarray(ys)
    if ys.ndim > 2 or (ys.ndim == 2 and ys.shape[1] > ys.shape[0]):
        raise SteadyStateFileError(
            "The steady-state function must return a column vector, not a row vector.",
            shape=ys.shape,
        )
    if ys.ndim == 2 and ys.shape[1] != 1:
        raise SteadyStateFileError(
            f"The steady-state function returned a {ys.shape[0]}x{ys.shape[1]} matrix.",
            shape=ys.shape,
        )
    ys = ys.reshape(-1)

    status = SteadyStateStatus.coerce(status)
    if not status.ok:
        return ys, model.params, status

    if ys.size != model.endo_nbr:
        raise SteadyStateFileError(
            f"The steady-state function returned {ys.size} values, expected {model.endo_nbr}.",
            shape=ys.shape,
        )
    if params is not None:
        new_params = np.asarray(params, dtype=float).reshape(-1)
        if new_params.size != model.param_nbr:
            raise ValueError(
                f"The steady-state function returned {new_params.size} parameters, "
                f"expected {model.param_nbr}."
            )
        model.params[:] = new_params
    return ys, model.params, status
