"""Selection of the steady-state solution strategy.

The strategy is derived once from :class:`~steady_py.options.SolveOptions`
at the start of an evaluation and then matched exhaustively, so that the
validation stages never have to re-derive which combination of flags is
active.  Precedence: Ramsey policy, user steady-state function,
block/bytecode, linear, generic nonlinear.
"""

from __future__ import annotations

from enum import Enum

from .options import SolveOptions


class SolveStrategy(Enum):
    RAMSEY_WITH_FILE = "ramsey_with_file"
    RAMSEY_NO_FILE = "ramsey_no_file"
    EXPLICIT_FILE = "explicit_file"
    LINEAR_DIRECT = "linear_direct"
    NONLINEAR_GENERIC = "nonlinear_generic"
    BLOCK_STRUCTURED = "block_structured"

    @classmethod
    def from_options(cls, options: SolveOptions) -> SolveStrategy:
        if options.ramsey_policy:
            if options.steadystate_flag:
                return cls.RAMSEY_WITH_FILE
            return cls.RAMSEY_NO_FILE
        if options.steadystate_flag:
            return cls.EXPLICIT_FILE
        if options.block or options.bytecode:
            return cls.BLOCK_STRUCTURED
        if options.linear:
            return cls.LINEAR_DIRECT
        return cls.NONLINEAR_GENERIC

    @property
    def is_ramsey(self) -> bool:
        return self in (SolveStrategy.RAMSEY_WITH_FILE, SolveStrategy.RAMSEY_NO_FILE)

    @property
    def uses_file(self) -> bool:
        return self in (SolveStrategy.RAMSEY_WITH_FILE, SolveStrategy.EXPLICIT_FILE)
