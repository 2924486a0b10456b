import json
import math
from pathlib import Path

import numpy as np

from steady_py.serialization import load_steady_state, save_steady_state
from steady_py.status import StatusCode, SteadyStateStatus
from steady_py.steady_state import SteadyStateResult
from steady_py.strategy import SolveStrategy
from helpers import make_linear_model


def test_steady_state_round_trip(tmp_path: Path):
    model = make_linear_model()
    result = SteadyStateResult(
        steady_state=np.array([2.0, 2.0]),
        params=model.params,
        status=SteadyStateStatus.success(),
        strategy=SolveStrategy.LINEAR_DIRECT,
    )
    path = tmp_path / "steady.json"

    save_steady_state(result, model, path)
    steady_state, params, status = load_steady_state(path)

    assert steady_state == {"y1": 2.0, "y2": 2.0}
    assert params == {"a": 0.5, "b": 2.0}
    assert status.ok
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["strategy"] == "linear_direct"
    assert payload["status"] == {"code": 0, "name": "SUCCESS", "magnitude": None}


def test_non_finite_values_are_stored_as_strings(tmp_path: Path):
    model = make_linear_model()
    result = SteadyStateResult(
        steady_state=np.array([np.nan, np.inf]),
        params=model.params,
        status=SteadyStateStatus.failure(StatusCode.NAN_IN_RESULT, math.nan),
        strategy=SolveStrategy.NONLINEAR_GENERIC,
    )
    path = tmp_path / "steady.json"

    save_steady_state(result, model, path)
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["steady_state"] == {"y1": "nan", "y2": "inf"}

    steady_state, _, status = load_steady_state(path)
    assert math.isnan(steady_state["y1"])
    assert steady_state["y2"] == math.inf
    assert status.code is StatusCode.NAN_IN_RESULT
    assert math.isnan(status.magnitude)
