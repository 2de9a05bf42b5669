"""Error envelopes and exception handlers for the HTTP API.

Every error response has the shape {"status": "error", "message": ...};
validation failures add {"errors": {field: [messages]}} and use HTTP 422.
"""

import logging
from typing import Dict, List
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from userapi.errors import DuplicateEmailError

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "The email has already been taken."
PASSWORD_MISMATCH_MESSAGE = "The password confirmation does not match."


class ValidationFailed(Exception):
    """Request checks that pydantic cannot do alone (uniqueness, confirmation)."""

    def __init__(self, errors: Dict[str, List[str]]):
        super().__init__(errors)
        self.errors = errors


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, **extra},
    )


def _field_name(loc) -> str:
    # ("body", "email") -> "email"; ("query", "per_page") -> "per_page"; ("body",) -> "body"
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) if parts else str(loc[0])


def _message_for(field: str, error: dict) -> str:
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}
    label = field.replace("_", " ")
    if error_type == "missing":
        return f"The {label} field is required."
    if error_type == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"The {label} field is required."
        return f"The {label} field must be at least {ctx.get('min_length')} characters."
    if error_type == "string_too_long":
        return f"The {label} field must not be greater than {ctx.get('max_length')} characters."
    if field == "email" and error_type == "value_error":
        return "The email field must be a valid email address."
    if error_type in ("int_parsing", "int_type"):
        return f"The {label} field must be an integer."
    if error_type == "greater_than_equal":
        return f"The {label} field must be at least {ctx.get('ge')}."
    if error_type == "less_than_equal":
        return f"The {label} field must not be greater than {ctx.get('le')}."
    return error.get("msg", "Invalid value.")


def collect_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    """Group pydantic errors by field, in the order they were reported."""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = _field_name(error.get("loc", ("body",)))
        errors.setdefault(field, []).append(_message_for(field, error))
    return errors


def validation_response(errors: Dict[str, List[str]]) -> JSONResponse:
    messages = [message for field_messages in errors.values() for message in field_messages]
    message = messages[0] if messages else "The given data was invalid."
    if len(messages) > 1:
        message += f" (and {len(messages) - 1} more error{'s' if len(messages) > 2 else ''})"
    return error_response(422, message, errors=errors)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return validation_response(collect_errors(exc))


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return validation_response(exc.errors)


async def duplicate_email_handler(request: Request, exc: DuplicateEmailError) -> JSONResponse:
    # A concurrent request inserted the same email after our uniqueness check.
    return validation_response({"email": [EMAIL_TAKEN_MESSAGE]})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {str(exc)}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(DuplicateEmailError, duplicate_email_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
