from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mfgops.common.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ReferenceInUseError,
    ValidationError,
)
from mfgops.logger_config import logger


def _error_response(status_code: int, message: str, error: str, details=None) -> JSONResponse:
    body = {
        "success": False,
        "message": message,
        "error": error,
        "status_code": status_code,
    }
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI):
    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        logger.info(f"{request.method} {request.url.path}: {exc.message}")
        return _error_response(status.HTTP_404_NOT_FOUND, exc.message, "Not Found")

    @app.exception_handler(ReferenceInUseError)
    async def handle_reference_in_use(request: Request, exc: ReferenceInUseError):
        logger.info(f"{request.method} {request.url.path}: {exc.message}")
        return _error_response(status.HTTP_409_CONFLICT, exc.message, "Conflict")

    @app.exception_handler(InvalidTransitionError)
    async def handle_invalid_transition(request: Request, exc: InvalidTransitionError):
        logger.info(f"{request.method} {request.url.path}: {exc.message}")
        return _error_response(status.HTTP_409_CONFLICT, exc.message, "Conflict")

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError):
        logger.info(f"{request.method} {request.url.path}: {exc.message}")
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, "Bad Request")

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _error_response(
            422,
            "Request validation failed",
            "Unprocessable Entity",
            details=jsonable_errors(exc),
        )

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        # Log the exception with traceback
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            "Internal Server Error",
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serializable context (e.g. exception objects in ctx) from pydantic errors."""
    errors = []
    for err in exc.errors():
        errors.append({
            "loc": list(err.get("loc", [])),
            "msg": err.get("msg"),
            "type": err.get("type"),
        })
    return errors
