"""
Error taxonomy and the FastAPI handlers that turn it into JSON responses.

Every error body has the shape ``{"message": "..."}``. Store failures are
reported with a generic message so no internal detail reaches the client.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class TodoError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(TodoError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class DuplicateUser(TodoError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists"


class InvalidCredentials(TodoError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid credentials"


class InvalidToken(TodoError):
    """Raised by the token verifier; surfaced to clients as Unauthenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Token is not valid"


class Unauthenticated(TodoError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "No token, authorization denied"


class NotFound(TodoError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Task not found"


class StoreError(TodoError):
    pass


def _error_response(err: TodoError) -> JSONResponse:
    return JSONResponse(status_code=err.status_code, content={"message": err.message})


async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    return _error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Collapse pydantic's error list into one short message."""
    errors = exc.errors()
    if not errors:
        return _error_response(ValidationError())

    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    reason = first.get("msg", "invalid value")
    message = f"{field}: {reason}" if field else reason
    return _error_response(ValidationError(message))


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return _error_response(StoreError())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(StoreError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TodoError, todo_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
