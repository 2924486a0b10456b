"""Status codes and exceptions reported by the steady-state routines.

A steady-state evaluation never raises on numerical failure.  Instead it
returns a :class:`SteadyStateStatus` carrying a code from the closed
:class:`StatusCode` enumeration and, where meaningful, a diagnostic
magnitude (a sum of squared residuals or imaginary parts).  The codes
follow the numbering used by Dynare's ``info`` vector so that results can
be compared with Dynare logs.

Exceptions are reserved for broken input contracts
(:class:`SteadyStateFileError`) and for the raising convenience wrapper
:func:`steady_py.steady_state.solve_steady_state`
(:class:`SteadyStateError`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
import math


class StatusCode(IntEnum):
    """Outcome of a steady-state evaluation."""

    SUCCESS = 0
    STEADY_STATE_FILE_FAILED = 19
    NON_CONVERGENCE = 20
    COMPLEX_STEADY_STATE = 21
    NAN_IN_RESULT = 22
    STATIC_DYNAMIC_MISMATCH = 25
    RAMSEY_NOT_SOLVING = 81
    RAMSEY_NAN = 82
    RAMSEY_AUX_NAN = 83
    RAMSEY_FILE_NAN = 84
    RAMSEY_FILE_NOT_SOLVING = 85
    RAMSEY_INTERNAL_ERROR = 86


_DESCRIPTIONS = {
    StatusCode.SUCCESS: "steady state found",
    StatusCode.STEADY_STATE_FILE_FAILED: "the steady-state function reported a failure",
    StatusCode.NON_CONVERGENCE: "the solver did not converge",
    StatusCode.COMPLEX_STEADY_STATE: "the steady state is complex valued",
    StatusCode.NAN_IN_RESULT: "the steady state contains NaN",
    StatusCode.STATIC_DYNAMIC_MISMATCH: (
        "the steady state of the static model does not solve the dynamic model"
    ),
    StatusCode.RAMSEY_NOT_SOLVING: "the Ramsey steady state could not be computed",
    StatusCode.RAMSEY_NAN: "the Ramsey steady state produced NaN residuals",
    StatusCode.RAMSEY_AUX_NAN: (
        "the Ramsey steady state produced NaN residuals in the multiplier equations"
    ),
    StatusCode.RAMSEY_FILE_NAN: "the steady-state function produced NaN residuals",
    StatusCode.RAMSEY_FILE_NOT_SOLVING: (
        "the steady-state function does not solve the model conditional on the instruments"
    ),
    StatusCode.RAMSEY_INTERNAL_ERROR: "the Ramsey static solver failed",
}


@dataclass(frozen=True)
class SteadyStateStatus:
    """Tagged result of a steady-state evaluation.

    Attributes
    ----------
    code : StatusCode
        Failure kind; ``StatusCode.SUCCESS`` on success.
    magnitude : float or None
        Diagnostic magnitude attached to the failure (sum of squared
        residuals for non-convergence, sum of squared imaginary parts for
        complex results, NaN when the result contains NaN).  ``None`` when
        the code carries no magnitude.
    """

    code: StatusCode = StatusCode.SUCCESS
    magnitude: float | None = None

    @property
    def ok(self) -> bool:
        return self.code == StatusCode.SUCCESS

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.code]

    @classmethod
    def success(cls) -> SteadyStateStatus:
        return cls(StatusCode.SUCCESS)

    @classmethod
    def failure(
        cls, code: StatusCode, magnitude: float | None = None
    ) -> SteadyStateStatus:
        return cls(StatusCode(code), None if magnitude is None else float(magnitude))

    @classmethod
    def coerce(cls, value: SteadyStateStatus | StatusCode | int | bool) -> SteadyStateStatus:
        """Normalise a status returned by a user collaborator.

        ``True`` (a bare failure flag) maps to
        ``StatusCode.STEADY_STATE_FILE_FAILED``; ``False`` and ``0`` map to
        success; members of :class:`StatusCode` map to themselves.  Any
        other nonzero integer maps to ``StatusCode.STEADY_STATE_FILE_FAILED``
        with the raw code as magnitude.
        """
        if isinstance(value, SteadyStateStatus):
            return value
        if isinstance(value, bool):
            return cls.failure(StatusCode.STEADY_STATE_FILE_FAILED) if value else cls.success()
        code = int(value)
        try:
            return cls(StatusCode(code))
        except ValueError:
            return cls.failure(StatusCode.STEADY_STATE_FILE_FAILED, float(code))

    def __str__(self) -> str:
        text = f"{self.code.name} ({int(self.code)}): {self.description}"
        if self.magnitude is not None and not math.isnan(self.magnitude):
            text += f" [magnitude={self.magnitude:.6g}]"
        elif self.magnitude is not None:
            text += " [magnitude=nan]"
        return text


class SteadyStateFileError(ValueError):
    """Raised when a user steady-state function breaks its output contract.

    The function must return a column-shaped vector (1-D, or 2-D with a
    single column) of length ``endo_nbr``.

    Attributes
    ----------
    shape : tuple of int
        Shape of the offending return value.
    """

    def __init__(self, message: str, shape: tuple[int, ...]):
        self.shape = shape
        super().__init__(message)


class SteadyStateError(RuntimeError):
    """Raised by :func:`~steady_py.steady_state.solve_steady_state` on failure.

    Attributes
    ----------
    status : SteadyStateStatus
        The failing status returned by the orchestrator.
    code : StatusCode
        Shortcut for ``status.code``.
    steady_state : numpy.ndarray
        The point at which the evaluation stopped.
    """

    def __init__(self, status: SteadyStateStatus, steady_state):
        self.status = status
        self.code = status.code
        self.steady_state = steady_state
        super().__init__(f"Steady-state computation failed: {status}")
