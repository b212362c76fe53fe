"""
Error envelope: the single JSON document returned for every failed request.

``build_envelope`` is pure apart from reading the clock when ``now`` is not
given. ``message`` is always the error's user message; internal diagnostics
(stack trace, inner exception, raw argument messages) only ever appear in
``details`` and only in development mode.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from invoicing.domain.errors import (
    ApplicationError,
    ArgumentError,
    BusinessRuleError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    FileOperationError,
    ForbiddenError,
    ImageProcessingError,
    InvalidOperationError,
    NotFoundError,
    UnauthorizedError,
    UnclassifiedError,
    ValidationError,
)

DEFAULT_HELP_BASE_URL = "https://api.doublevpartners.com/docs/errors/"
UNAVAILABLE = "No disponible"


class ErrorDetail(BaseModel):
    """One entry of the envelope's ``details`` list."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    field: str
    message: str
    code: Optional[str] = None
    attempted_value: Any = None
    suggestion: Optional[str] = None


class ErrorEnvelope(BaseModel):
    """Canonical error response body, serialized in lowerCamelCase.

    Attributes:
        error_code: Stable machine code of the error.
        message: User-safe message.
        details: Variant-specific details, in order.
        timestamp: When the envelope was built (UTC).
        trace_id: Request correlation id.
        help_url: Documentation page for ``error_code``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    error_code: str
    message: str
    details: list[ErrorDetail] = []
    timestamp: datetime
    trace_id: str
    help_url: str

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


def help_url_for(code: str, base_url: str = DEFAULT_HELP_BASE_URL) -> str:
    if not base_url.endswith("/"):
        base_url += "/"
    return f"{base_url}{code.lower()}"


def _validation_details(error: ValidationError, _dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field=item.field,
            message=item.message,
            code=item.code,
            attempted_value=item.attempted_value,
            suggestion=item.suggestion,
        )
        for item in error.errors
    ]


def _business_rule_details(error: BusinessRuleError, _dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="BusinessRule",
            message=error.business_rule,
            code=error.code.value,
        )
    ]


def _not_found_details(error: NotFoundError, _dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="Resource",
            message=(
                f"No se encontró {error.resource_type} con ID: {error.resource_id}"
            ),
            code=error.code.value,
        )
    ]


def _conflict_details(error: ConflictError, _dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(field="Conflict", message=error.conflict_type, code=error.code.value)
    ]


def _unauthorized_details(error: UnauthorizedError, _dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(field="Authorization", message=error.reason, code=error.code.value)
    ]


def _forbidden_details(error: ForbiddenError, _dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="Permission",
            message=f"Se requiere permiso: {error.required_permission}",
            code=error.code.value,
        )
    ]


def _database_details(error: DatabaseError, _dev: bool) -> list[ErrorDetail]:
    details = [
        ErrorDetail(field="Operation", message=error.operation, code=error.code.value)
    ]
    if error.native_error:
        details.append(
            ErrorDetail(field="SqlError", message=error.native_error, code="SQL_ERROR")
        )
    return details


def _external_service_details(
    error: ExternalServiceError, _dev: bool
) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="Service",
            message=f"{error.service_name}: {error.endpoint}",
            code=error.code.value,
        )
    ]


def _configuration_details(error: ConfigurationError, _dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="Configuration",
            message=f"Clave: {error.config_key}",
            code=error.code.value,
        )
    ]


def _file_operation_details(error: FileOperationError, _dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="FileOperation",
            message=f"{error.operation} en {error.path}",
            code=error.code.value,
        )
    ]


def _image_processing_details(
    error: ImageProcessingError, _dev: bool
) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="ImageProcessing",
            message=(
                f"Formato: {error.image_format}, "
                f"Tamaño: {error.file_size_bytes} bytes"
            ),
            code=error.code.value,
        )
    ]


def _argument_details(error: ArgumentError, dev: bool) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field=error.argument or "Unknown",
            message=error.internal_message if dev else error.user_message,
            code=error.code.value,
        )
    ]


def _invalid_operation_details(
    error: InvalidOperationError, dev: bool
) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="Operation",
            message=error.internal_message if dev else error.user_message,
            code=error.code.value,
        )
    ]


def _unclassified_details(error: UnclassifiedError, dev: bool) -> list[ErrorDetail]:
    return []


_DETAIL_BUILDERS: dict[type, Callable[[Any, bool], list[ErrorDetail]]] = {
    ValidationError: _validation_details,
    BusinessRuleError: _business_rule_details,
    NotFoundError: _not_found_details,
    ConflictError: _conflict_details,
    UnauthorizedError: _unauthorized_details,
    ForbiddenError: _forbidden_details,
    DatabaseError: _database_details,
    ExternalServiceError: _external_service_details,
    ConfigurationError: _configuration_details,
    FileOperationError: _file_operation_details,
    ImageProcessingError: _image_processing_details,
    ArgumentError: _argument_details,
    InvalidOperationError: _invalid_operation_details,
    UnclassifiedError: _unclassified_details,
}


def _diagnostic_details(error: UnclassifiedError) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field="StackTrace",
            message=error.stack_trace or UNAVAILABLE,
            code="STACK_TRACE",
        ),
        ErrorDetail(
            field="InnerException",
            message=error.inner_message or UNAVAILABLE,
            code="INNER_EXCEPTION",
        ),
    ]


def build_details(error: ApplicationError, is_development: bool) -> list[ErrorDetail]:
    """Variant-specific details, plus diagnostics for unclassified errors in dev.

    The ARGUMENT_ERROR and INVALID_OPERATION sub-codes get one detail each
    and never carry diagnostics.
    """
    for klass in type(error).__mro__:
        builder = _DETAIL_BUILDERS.get(klass)
        if builder is not None:
            details = builder(error, is_development)
            break
    else:
        raise TypeError(f"No envelope details defined for {type(error).__name__}")

    if is_development and type(error) is UnclassifiedError:
        details.extend(_diagnostic_details(error))
    return details


def build_envelope(
    error: ApplicationError,
    *,
    is_development: bool,
    trace_id: str,
    help_base_url: str = DEFAULT_HELP_BASE_URL,
    now: Optional[datetime] = None,
) -> ErrorEnvelope:
    """Render a classified error as an ErrorEnvelope.

    Args:
        error: The classified error.
        is_development: Whether development diagnostics may be included.
        trace_id: Correlation id of the failed request.
        help_base_url: Base of the per-code documentation URL.
        now: Envelope timestamp; defaults to the current UTC time.

    Returns:
        The envelope. Building it never mutates ``error``.
    """
    code = error.code.value
    return ErrorEnvelope(
        error_code=code,
        message=error.user_message,
        details=build_details(error, is_development),
        timestamp=now or datetime.now(timezone.utc),
        trace_id=trace_id,
        help_url=help_url_for(code, help_base_url),
    )
