"""Tagged results returned by stream operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

T = TypeVar("T")


class StreamErrorKind(str, Enum):
    CAPACITY_EXCEEDED = "capacity_exceeded"
    PROCESS_SPAWN_FAILED = "process_spawn_failed"
    READINESS_TIMEOUT = "readiness_timeout"
    NOT_FOUND = "not_found"
    ADMISSION_BUSY = "admission_busy"

    def __str__(self) -> str:
        return self.value


_ERROR_MAP: dict[StreamErrorKind, tuple[AppErrorCode, HttpStatusCode]] = {
    StreamErrorKind.CAPACITY_EXCEEDED: (AppErrorCode.E_STREAM_LIMIT_REACHED, HttpStatusCode.FORBIDDEN),
    StreamErrorKind.PROCESS_SPAWN_FAILED: (AppErrorCode.E_PROCESS_SPAWN_FAILED, HttpStatusCode.BAD_REQUEST),
    StreamErrorKind.READINESS_TIMEOUT: (AppErrorCode.E_READINESS_TIMEOUT, HttpStatusCode.BAD_REQUEST),
    StreamErrorKind.NOT_FOUND: (AppErrorCode.E_STREAM_NOT_FOUND, HttpStatusCode.NOT_FOUND),
    StreamErrorKind.ADMISSION_BUSY: (AppErrorCode.E_ADMISSION_BUSY, HttpStatusCode.CONFLICT),
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    kind: StreamErrorKind
    message: str

    def to_app_error(self) -> AppError:
        errcode, status_code = _ERROR_MAP[self.kind]
        return AppError(errcode=errcode, errmesg=self.message, status_code=status_code)

    def unwrap(self):
        raise self.to_app_error()


Outcome = Ok[T] | Failure
