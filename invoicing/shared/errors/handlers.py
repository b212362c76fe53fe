"""
Framework error hooks.

Request validation failures detected by FastAPI (body, query and path
parameters) are converted into the domain ValidationError and re-raised, so
they reach the error boundary like any other failure. No response is built
and nothing is logged here.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from invoicing.domain.errors import FieldError, ValidationError

_LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")


def _field_path(loc: tuple) -> str:
    parts = list(loc)
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(str(part) for part in parts if part is not None) or "Request"


def validation_error_from_request(exc: RequestValidationError) -> ValidationError:
    """One FieldError per pydantic error, in the order pydantic reported them."""
    errors = []
    for error in exc.errors():
        error_type = error.get("type", "value_error")
        errors.append(
            FieldError(
                field=_field_path(tuple(error.get("loc", ()))),
                message=error.get("msg", "Valor no válido"),
                code=error_type,
                attempted_value=None if error_type == "missing" else error.get("input"),
            )
        )
    return ValidationError(
        f"Request validation failed: {len(errors)} error(s)",
        errors,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register the framework hooks on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> None:
        """Hand request validation failures to the error boundary."""
        raise validation_error_from_request(exc) from exc
