from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

import numpy as np

from .model import SteadyStateModel
from .status import StatusCode, SteadyStateStatus
from .steady_state import SteadyStateResult

Array = np.ndarray


def save_steady_state(
    result: SteadyStateResult, model: SteadyStateModel, path: str | Path
) -> None:
    target = Path(path)
    payload = {
        "steady_state": _named(model.endo_names, result.steady_state),
        "params": _named(model.param_names, result.params),
        "status": {
            "code": int(result.status.code),
            "name": result.status.code.name,
            "magnitude": _to_float(result.status.magnitude),
        },
        "strategy": result.strategy.value,
    }
    target.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_steady_state(path: str | Path) -> tuple[dict[str, float], dict[str, float], SteadyStateStatus]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    status = payload["status"]
    magnitude = status.get("magnitude")
    return (
        {k: _from_float(v) for k, v in payload["steady_state"].items()},
        {k: _from_float(v) for k, v in payload["params"].items()},
        SteadyStateStatus(
            StatusCode(int(status["code"])),
            None if magnitude is None else _from_float(magnitude),
        ),
    )


def _named(names: tuple[str, ...], values: Array) -> dict[str, Any]:
    return {
        name: _to_float(value)
        for name, value in zip(names, np.real(np.asarray(values)).reshape(-1))
    }


def _to_float(value: float | None) -> Any:
    # JSON has no NaN/Inf literals; keep them as strings.
    if value is None:
        return None
    value = float(value)
    if math.isfinite(value):
        return value
    return str(value)


def _from_float(value: Any) -> float:
    return float(value)
