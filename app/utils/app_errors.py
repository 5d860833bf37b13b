"""Application error type raised at the service boundary."""

import inspect
from enum import Enum, IntEnum
from uuid import uuid4


class HttpStatusCode(IntEnum):
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"

    # Stream lifecycle
    E_STREAM_LIMIT_REACHED = "E_STREAM_LIMIT_REACHED"
    E_STREAM_NOT_FOUND = "E_STREAM_NOT_FOUND"
    E_PROCESS_SPAWN_FAILED = "E_PROCESS_SPAWN_FAILED"
    E_READINESS_TIMEOUT = "E_READINESS_TIMEOUT"
    E_ADMISSION_BUSY = "E_ADMISSION_BUSY"

    def __str__(self) -> str:
        return self.value


class AppError(Exception):
    """Error carrying an API error code, message and HTTP status.

    The caller location is captured at construction so the exception handler can
    log where the error was raised rather than where it was rendered.
    """

    def __init__(
        self,
        errcode: AppErrorCode | str,
        errmesg: str,
        status_code: int = HttpStatusCode.BAD_REQUEST,
    ):
        super().__init__(errmesg)
        self.errcode = errcode.value if isinstance(errcode, AppErrorCode) else errcode
        self.errmesg = errmesg
        self.status_code = int(status_code)
        self.erresid = uuid4().hex[:10]
        self.caller_info = self._capture_caller()

    @staticmethod
    def _capture_caller() -> str:
        frame = inspect.currentframe()
        try:
            # Skip _capture_caller and __init__ (and subclass __init__ chains)
            caller = frame.f_back.f_back if frame and frame.f_back else None
            while caller is not None and caller.f_code.co_name == "__init__":
                caller = caller.f_back
            if caller is None:
                return "unknown"
            module = caller.f_globals.get("__name__", caller.f_code.co_filename)
            return f"{module}:{caller.f_code.co_name}:{caller.f_lineno}"
        finally:
            del frame

    def __repr__(self) -> str:
        return f"AppError(errcode={self.errcode!r}, status_code={self.status_code}, errmesg={self.errmesg!r})"
