"""
Application error taxonomy and its translation to JSON responses.

Services raise these exceptions; the handlers registered by
register_exception_handlers() turn them into {"message": ...} bodies.
Unexpected exceptions become a generic 500 with no internal detail.
"""

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[FieldError]] = None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body: dict = {"message": self.message}
        if self.errors:
            body["errors"] = [asdict(e) for e in self.errors]
        return body


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class DuplicateEmail(AppError):
    # 400 rather than 409: existing clients read this as a form error
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists with this email"


class ServerError(AppError):
    pass


def _field_errors(exc: RequestValidationError) -> List[FieldError]:
    errors = []
    for err in exc.errors():
        # loc looks like ("body", "email") or ("query", "minPrice")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.append(FieldError(field=".".join(loc) or "request", message=err.get("msg", "Invalid value")))
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        error = ValidationError("Invalid request", errors=_field_errors(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = ServerError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())
