"""
Maps application errors to HTTP responses.

This is the only place that picks an error status code. Handlers raise
the typed errors from catalog_api.exceptions and this module renders them.
"""

from typing import Dict, List, Optional, Type

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog_api.exceptions import (
    ApplicationError,
    DatabaseError,
    ForbiddenError,
    ProductNotFoundError,
    ProductValidationError,
    UnauthorizedError,
)
from catalog_api.logging_config import get_child_logger, tracer

logger = get_child_logger("errors")

# Most specific first; ApplicationError is the fallback for unlisted subclasses
ERROR_STATUS: Dict[Type[Exception], int] = {
    ProductValidationError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    ProductNotFoundError: status.HTTP_404_NOT_FOUND,
    DatabaseError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ApplicationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_KIND: Dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "ValidationError",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "NotFound",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "GenericFault",
}

GENERIC_FAULT_MESSAGE = "An unexpected internal server error occurred."


def status_for(exc: Exception) -> int:
    """Status code for an exception, falling back to 500."""
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(
    status_code: int, message: str, errors: Optional[List[dict]] = None
) -> dict:
    """Error payload shared by every error response."""
    body = {"error": ERROR_KIND[status_code], "message": message}
    if errors is not None:
        body["errors"] = errors
    return body


def error_response(
    status_code: int, message: str, errors: Optional[List[dict]] = None
) -> JSONResponse:
    """Build a consistent JSON error response."""
    return JSONResponse(status_code=status_code, content=error_body(status_code, message, errors))


def _request_validation_errors(exc: RequestValidationError) -> List[dict]:
    errors = []
    for err in exc.errors():
        # Drop the leading "body"/"path" location segment
        loc = [str(part) for part in err.get("loc", ())][1:]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "")})
    return errors


def register_error_handlers(app: FastAPI) -> None:
    """Register every error handler on the FastAPI application."""

    @app.exception_handler(ProductValidationError)
    async def handle_validation(request: Request, exc: ProductValidationError) -> JSONResponse:
        logger.warning(
            "Rejected invalid product payload",
            extra={"path": request.url.path, "errors": exc.errors},
        )
        return error_response(status_for(exc), str(exc), exc.errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = _request_validation_errors(exc)
        logger.warning(
            "Rejected malformed request", extra={"path": request.url.path, "errors": errors}
        )
        return error_response(status.HTTP_400_BAD_REQUEST, "Malformed request.", errors)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError) -> JSONResponse:
        logger.warning("Unauthorized request", extra={"path": request.url.path})
        return error_response(status_for(exc), str(exc) or "Unauthorized")

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError) -> JSONResponse:
        logger.warning("Forbidden request", extra={"path": request.url.path})
        return error_response(status_for(exc), str(exc) or "Forbidden")

    @app.exception_handler(ProductNotFoundError)
    async def handle_not_found(request: Request, exc: ProductNotFoundError) -> JSONResponse:
        return error_response(status_for(exc), str(exc))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError) -> JSONResponse:
        with tracer.start_as_current_span("handle_database_error") as span:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "database_error")
            logger.error(
                f"Database error: {exc}",
                extra={"path": request.url.path},
                exc_info=exc.original_exception,
            )
        return error_response(status_for(exc), "A database error occurred.")

    @app.exception_handler(ApplicationError)
    async def handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        logger.error(
            f"Unhandled application error: {exc}",
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return error_response(status_for(exc), GENERIC_FAULT_MESSAGE)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unexpected error: {type(exc).__name__}",
            extra={"path": request.url.path},
            exc_info=exc,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_FAULT_MESSAGE)
