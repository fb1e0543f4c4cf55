"""
Centralized Error Handlers for VisualGenie

Every failure leaving the HTTP layer has the same JSON body:

    {
        "success": false,
        "error": "DIAG_001",
        "message": "Diagram not found",
        "status_code": 404,
        "details": {...}    // only when there is something to add
    }

Internal error text (driver messages, tracebacks) goes to the log only.
"""

from typing import Any, Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from visualgenie.exceptions import AppException, ErrorCode
from visualgenie.utils.logging_config import get_logger


logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.VALIDATION_ERROR,
    422: ErrorCode.VALIDATION_ERROR,
}

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


class ErrorResponse:
    """Builds the error body shown in the module docstring."""

    @staticmethod
    def create(
        error_code: Union[ErrorCode, str],
        message: str,
        status_code: int,
        details: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": False,
            "error": error_code.value if isinstance(error_code, ErrorCode) else error_code,
            "message": message,
            "status_code": status_code,
        }
        if details:
            body["details"] = details
        return body

    @classmethod
    def json(
        cls,
        error_code: Union[ErrorCode, str],
        message: str,
        status_code: int,
        details: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=cls.create(error_code, message, status_code, details),
            headers=headers,
        )


def log_error(
    error: Exception,
    request: Optional[Request] = None,
    level: str = "ERROR",
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """
    Log a failure with request context bound to the record.

    At ERROR level the traceback is attached, including any chained cause
    such as the SQLAlchemy error behind a DatabaseException.
    """
    fields: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if request is not None:
        fields["method"] = request.method
        fields["url"] = str(request.url)
        fields["client"] = request.client.host if request.client else None
    if extra:
        fields.update(extra)

    bound = logger.bind(**fields)
    if level.upper() == "ERROR":
        bound.opt(exception=error).error("Error occurred: {}", fields["error_type"])
    else:
        bound.log(level.upper(), "Error occurred: {}", fields["error_type"])


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    # First loc element is the source ('body', 'path', 'query')
    return [
        {
            "field": ".".join(str(part) for part in error["loc"][1:]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers; called from create_app()."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        log_error(exc, request, level="ERROR" if exc.status_code >= 500 else "WARNING")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, **exc.to_dict()},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Unknown routes and unsupported methods."""
        log_error(exc, request, level="WARNING")
        return ErrorResponse.json(
            HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.INTERNAL_SERVER_ERROR),
            str(exc.detail) if exc.detail else "HTTP error",
            exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed payloads and path parameters are a 400, never a 422."""
        errors = format_validation_errors(exc)
        log_error(exc, request, level="WARNING", extra={"validation_errors": errors})
        return ErrorResponse.json(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request data",
            status.HTTP_400_BAD_REQUEST,
            {"validation_errors": errors},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log_error(exc, request, level="ERROR")
        return ErrorResponse.json(
            ErrorCode.INTERNAL_SERVER_ERROR,
            GENERIC_ERROR_MESSAGE,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
