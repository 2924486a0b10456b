"""Solver options for steady-state computation.

:class:`SolveOptions` collects the mode flags and tolerances read by
:func:`steady_py.steady_state.evaluate_steady_state`.  Defaults follow
Dynare's ``options_`` structure (``dynatol.f``, ``solve_tolf``,
``solve_tolx``, ``steady.maxit``).  Options can be built from a mapping
(for instance the contents of a JSON file) and are otherwise immutable;
use :func:`dataclasses.replace` to derive variants.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
import json
from pathlib import Path
from typing import Any, Mapping, Sequence

import numpy as np

_EPS = float(np.finfo(float).eps)


@dataclass(frozen=True)
class SolveOptions:
    """Mode flags and tolerances for a steady-state evaluation.

    Attributes
    ----------
    steadystate_flag : bool
        A user steady-state function is configured on the model and
        should be used.
    ramsey_policy : bool
        Compute the Ramsey optimal-policy steady state (including
        Lagrange multipliers).
    linear : bool
        The model is linear; use a single Newton step.
    bytecode : bool
        Use the compiled (bytecode) evaluation path.
    block : bool
        Use the block-decomposed evaluation path.
    debug : bool
        Emit detailed diagnostics on Inf/NaN initial values and Jacobian
        entries.
    steadystate_nocheck : bool
        Accept the output of a user steady-state function without
        checking its static residuals.
    dynatol_f : float
        Residual tolerance used to accept a steady state (Ramsey checks).
    solve_tolf : float
        Residual tolerance of the nonlinear solver and of the
        static/dynamic consistency check.
    solve_tolx : float
        Step tolerance of the nonlinear solver.
    solve_algo : str
        Method passed to ``scipy.optimize.root``.
    maxit : int
        Iteration bound of the nonlinear solver.
    instruments : tuple of str
        Policy instruments of a Ramsey problem (diagnostics only).
    """

    steadystate_flag: bool = False
    ramsey_policy: bool = False
    linear: bool = False
    bytecode: bool = False
    block: bool = False
    debug: bool = False
    steadystate_nocheck: bool = False
    dynatol_f: float = 1e-5
    solve_tolf: float = _EPS ** (1.0 / 3.0)
    solve_tolx: float = _EPS ** (2.0 / 3.0)
    solve_algo: str = "hybr"
    maxit: int = 50
    instruments: Sequence[str] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "instruments", tuple(self.instruments))
        if self.dynatol_f <= 0.0 or self.solve_tolf <= 0.0 or self.solve_tolx <= 0.0:
            raise ValueError("tolerances must be positive")
        if self.maxit < 1:
            raise ValueError("maxit must be at least 1")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> SolveOptions:
        """Build options from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown solve options: {', '.join(unknown)}")
        return cls(**dict(values))

    def to_dict(self) -> dict[str, Any]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["instruments"] = list(self.instruments)
        return out


def load_options(path: str | Path) -> SolveOptions:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Options file {path} must contain a JSON object")
    return SolveOptions.from_mapping(payload)
