import math

import pytest

from steady_py.status import (
    StatusCode,
    SteadyStateError,
    SteadyStateFileError,
    SteadyStateStatus,
)


def test_success_status_is_ok_and_carries_no_magnitude():
    status = SteadyStateStatus.success()
    assert status.ok
    assert status.code == 0
    assert status.magnitude is None


def test_failure_keeps_code_and_magnitude():
    status = SteadyStateStatus.failure(StatusCode.NON_CONVERGENCE, 2)
    assert not status.ok
    assert status.code is StatusCode.NON_CONVERGENCE
    assert status.magnitude == 2.0
    assert isinstance(status.magnitude, float)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, StatusCode.SUCCESS),
        (False, StatusCode.SUCCESS),
        (True, StatusCode.STEADY_STATE_FILE_FAILED),
        (22, StatusCode.NAN_IN_RESULT),
        (StatusCode.RAMSEY_NAN, StatusCode.RAMSEY_NAN),
    ],
)
def test_coerce_normalises_user_statuses(value, expected):
    assert SteadyStateStatus.coerce(value).code is expected


def test_coerce_maps_unknown_codes_to_file_failure_with_raw_code():
    status = SteadyStateStatus.coerce(24)

    assert status.code is StatusCode.STEADY_STATE_FILE_FAILED
    assert status.magnitude == 24.0
    assert SteadyStateStatus.coerce(-1).magnitude == -1.0


def test_coerce_passes_status_objects_through():
    status = SteadyStateStatus.failure(StatusCode.COMPLEX_STEADY_STATE, 1.0)
    assert SteadyStateStatus.coerce(status) is status


def test_string_form_names_the_code():
    text = str(SteadyStateStatus.failure(StatusCode.NON_CONVERGENCE, 0.5))
    assert text.startswith("NON_CONVERGENCE (20)")
    assert "magnitude=0.5" in text
    assert "magnitude=nan" in str(SteadyStateStatus.failure(StatusCode.NAN_IN_RESULT, math.nan))


def test_every_code_has_a_description():
    for code in StatusCode:
        assert SteadyStateStatus(code).description


def test_steady_state_error_exposes_status():
    status = SteadyStateStatus.failure(StatusCode.RAMSEY_NOT_SOLVING, 4.0)
    err = SteadyStateError(status, [0.0])
    assert err.code is StatusCode.RAMSEY_NOT_SOLVING
    assert err.status is status
    assert "RAMSEY_NOT_SOLVING" in str(err)


def test_steady_state_file_error_is_a_value_error():
    err = SteadyStateFileError("row vector", shape=(1, 3))
    assert isinstance(err, ValueError)
    assert err.shape == (1, 3)
