from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from livehub.shared.api.utils import E_INVALID_PARAMS, ApiFailure, api_failure, make_response
from livehub.utils.app_errors import AppError, AppErrorCode, HttpStatusCode


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Custom exception handler for AppError.
    Converts AppError to ApiFailure and returns via make_response.
    """
    # Log with the caller info captured when AppError was raised
    log_msg = f"{exc.errcode} {exc.erresid} msg={exc.errmesg} caller={exc.caller_info}"
    if exc.errcode == AppErrorCode.E_INTERNAL_ERROR.value:
        logger.error(log_msg)
    else:
        logger.warning(log_msg)

    failure = ApiFailure(errcode=exc.errcode, errmesg=exc.errmesg, erresid=exc.erresid)
    return make_response(failure, status_code=exc.status_code)


async def app_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()

    logger.warning(
        "Validation error: path={} method={} errors={}",
        request.url.path,
        request.method,
        errors,
    )

    failure = api_failure(E_INVALID_PARAMS, errmesg=str(errors))

    return make_response(failure, status_code=HttpStatusCode.UNPROCESSABLE_ENTITY)
