"""Error handlers -- map kernel errors onto the ``{"error": message}`` wire shape.

Invariants:
    - InvalidPasscodeError -> 401 "Invalid passcode"
    - StatusConflictError (already locked / posted / sold) -> 409
    - Any other LotKernelError (not found, validation, store) -> 400 with
      the error's message unchanged
    - RequestValidationError -> 400
    - Unknown paths keep FastAPI's default 404
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from lot_kernel.exceptions import AuthError, LotKernelError, StatusConflictError
from lot_kernel.logging_config import get_logger

logger = get_logger("api.errors")


def status_for(exc: LotKernelError) -> int:
    if isinstance(exc, AuthError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, StatusConflictError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def register_error_handlers(app: FastAPI) -> None:
    """Register the global error handlers on the FastAPI app."""
    _register_kernel_error_handler(app)
    _register_validation_error_handler(app)


def _register_kernel_error_handler(app: FastAPI) -> None:
    @app.exception_handler(LotKernelError)
    async def kernel_error_handler(request: Request, exc: LotKernelError):
        status_code = status_for(exc)
        logger.warning(
            "request_rejected",
            extra={
                "path": request.url.path,
                "status_code": status_code,
                "error_code": exc.code,
            },
        )
        return JSONResponse(status_code=status_code, content={"error": str(exc)})


def _register_validation_error_handler(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.warning(
            "request_validation_failed",
            extra={"path": request.url.path, "detail": message},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": message},
        )


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first["loc"] if part != "body")
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]
