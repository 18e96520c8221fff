"""
Error taxonomy shared by services and routes.

Services raise these; the handlers registered in main.py translate them into
the JSON envelope ``{"success": false, "message": ..., "errors": [...]}``.
Anything else that escapes a route is logged and surfaced as a bare 500.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nocturna.db.helpers import DatabaseError
from nocturna.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class NocturnaError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, errors: list[dict[str, str]] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationFailed(NocturnaError):
    status_code = status.HTTP_400_BAD_REQUEST

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls(message, errors=[{"field": field, "message": message}])


class AuthenticationError(NocturnaError):
    """No, invalid or expired session. Never carries detail."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    def __init__(self):
        super().__init__("Invalid email or password")


class NotFoundError(NocturnaError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(NocturnaError):
    status_code = status.HTTP_409_CONFLICT


class DuplicateEmailError(ConflictError):
    # The registration contract answers duplicates with a 400
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self):
        super().__init__("Email already registered")


class MinuteAlreadyExistsError(ConflictError):
    def __init__(self, vigil_id: str):
        super().__init__("A minute already exists for this vigil")
        self.vigil_id = vigil_id


class VersionConflictError(ConflictError):
    def __init__(self, collection: str, doc_id: str, expected: int, actual: int | None = None):
        super().__init__("The record was modified by someone else; reload and try again")
        self.collection = collection
        self.doc_id = doc_id
        self.expected = expected
        self.actual = actual


class InvalidStateTransitionError(ConflictError):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move vigil from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


def _envelope(message: str, errors: list[dict[str, str]] | None = None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


async def _nocturna_error_handler(request: Request, exc: NocturnaError) -> JSONResponse:
    logger.info(
        "Request rejected",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=_envelope(exc.message, exc.errors))


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" segment
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append({"field": ".".join(location) or "request", "message": error.get("msg", "")})

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope("Validation failed", errors),
    )


async def _database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error(
        "Database failure during request",
        path=request.url.path,
        operation=exc.operation,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope("Internal server error"),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error during request", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NocturnaError, _nocturna_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(DatabaseError, _database_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
