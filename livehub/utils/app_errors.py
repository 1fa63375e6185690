"""Application error type and codes shared by the API and domain layers."""

import inspect
from enum import Enum, IntEnum
from uuid import uuid4


class HttpStatusCode(IntEnum):
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"
    E_UNAUTHORIZED = "E_UNAUTHORIZED"
    E_INVALID_STATE_TRANSITION = "E_INVALID_STATE_TRANSITION"

    def __str__(self) -> str:
        return self.value


class AppError(Exception):
    """Error carrying an API error code, a message and the HTTP status to answer with.

    The caller location is captured at construction so the exception handler
    can log where the error was raised rather than where it was caught.
    """

    def __init__(
        self,
        errcode: AppErrorCode | str = AppErrorCode.E_INTERNAL_ERROR,
        errmesg: str = "We are sorry, an error occurred.",
        status_code: int = HttpStatusCode.BAD_REQUEST,
    ):
        self.errcode = errcode.value if isinstance(errcode, AppErrorCode) else str(errcode)
        self.errmesg = errmesg
        self.status_code = int(status_code)
        self.erresid = uuid4().hex[:10]

        frame = inspect.currentframe()
        caller = frame.f_back if frame else None
        if caller is not None:
            module = caller.f_globals.get("__name__", caller.f_code.co_filename)
            self.caller_info = f"{module}:{caller.f_code.co_name}:{caller.f_lineno}"
        else:
            self.caller_info = "unknown"

        super().__init__(f"{self.errcode}: {errmesg}")
