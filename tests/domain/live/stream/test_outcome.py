"""Tests for tagged outcomes and their HTTP error mapping."""

import pytest

from app.domain.live.stream._outcome import Failure, Ok, StreamErrorKind
from app.utils.app_errors import AppError, AppErrorCode


def test_ok_unwrap():
    assert Ok(5).unwrap() == 5


@pytest.mark.parametrize(
    ("kind", "errcode", "status_code"),
    [
        (StreamErrorKind.CAPACITY_EXCEEDED, AppErrorCode.E_STREAM_LIMIT_REACHED, 403),
        (StreamErrorKind.PROCESS_SPAWN_FAILED, AppErrorCode.E_PROCESS_SPAWN_FAILED, 400),
        (StreamErrorKind.READINESS_TIMEOUT, AppErrorCode.E_READINESS_TIMEOUT, 400),
        (StreamErrorKind.NOT_FOUND, AppErrorCode.E_STREAM_NOT_FOUND, 404),
        (StreamErrorKind.ADMISSION_BUSY, AppErrorCode.E_ADMISSION_BUSY, 409),
    ],
)
def test_failure_maps_to_app_error(kind, errcode, status_code):
    failure = Failure(kind, "message")

    with pytest.raises(AppError) as exc_info:
        failure.unwrap()

    assert exc_info.value.errcode == errcode.value
    assert exc_info.value.status_code == status_code
    assert exc_info.value.errmesg == "message"
