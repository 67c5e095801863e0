"""
Application error taxonomy and the FastAPI handlers that render it.

Services raise these instead of HTTPException so the same code paths can be
driven from tests without an HTTP layer. Every error renders as
``{"error": <message>}`` with the status code carried by the exception.
"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Your request could not be processed. Please try again."


class AppError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = GENERIC_ERROR_MESSAGE
    headers: dict | None = None

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input the caller can correct."""


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class UnsupportedMediaTypeError(AppError):
    default_message = "Only image files are allowed!"


class ConflictError(AppError):
    """A unique field (name, slug) is already taken, or the entity is in a conflicting state."""


class AlreadyCancelledError(ConflictError):
    default_message = "Order is already cancelled."


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to make this request."


class ProcessingError(AppError):
    """Codec failures and external-service failures. Not user-correctable."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = GENERIC_ERROR_MESSAGE
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
