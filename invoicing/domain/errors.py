"""
Error taxonomy for the invoicing service.

Every failure that business logic reports to the request boundary is one of
the concrete ApplicationError subclasses defined here. The hierarchy is
closed: subclasses may only be declared in this module, each one fixes its
own code and HTTP status, and callers only supply what is needed to
describe the failure.

Errors are immutable once constructed.
No framework imports allowed.
"""

import traceback
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from types import MappingProxyType
from typing import Any, ClassVar


class ErrorCode(str, Enum):
    """Stable machine identifiers exposed as ``errorCode`` on the wire."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    DATABASE_ERROR = "DATABASE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    FILE_OPERATION_ERROR = "FILE_OPERATION_ERROR"
    IMAGE_PROCESSING_ERROR = "IMAGE_PROCESSING_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    ARGUMENT_ERROR = "ARGUMENT_ERROR"
    INVALID_OPERATION = "INVALID_OPERATION"


@dataclass(frozen=True)
class FieldError:
    """A single field-level violation owned by one ValidationError.

    Attributes:
        field: Name of the offending field (e.g. ``InvoiceDate``).
        message: Human readable description of the violation.
        code: Optional machine code for the violation (e.g. ``REQUIRED_FIELD``).
        attempted_value: The value that was rejected, if useful to the client.
        suggestion: Optional hint on how to fix the value.
    """

    field: str
    message: str
    code: str | None = None
    attempted_value: Any = None
    suggestion: str | None = None


class ApplicationError(Exception):
    """Base error for every classified failure.

    Concrete variants declare ``code``, ``http_status`` and a curated
    ``default_user_message`` as class attributes. ``user_message`` is what
    clients see; ``internal_message`` is for developers and logs only.
    """

    code: ClassVar[ErrorCode]
    http_status: ClassVar[HTTPStatus]
    default_user_message: ClassVar[str] = "Ha ocurrido un error en la aplicación"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError(
                f"{cls.__name__}: the application error taxonomy is closed; "
                f"declare new variants in {__name__}"
            )

    def __init__(
        self,
        internal_message: str,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(internal_message)
        self.internal_message = internal_message
        self.user_message = user_message or self.default_user_message
        self.additional_data = (
            MappingProxyType(dict(additional_data)) if additional_data else None
        )
        self._sealed = True

    def __setattr__(self, name: str, value: Any) -> None:
        # Dunder attributes (__traceback__, __cause__, __notes__) stay writable
        # for the interpreter and contextlib.
        if getattr(self, "_sealed", False) and not name.startswith("__"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    def __str__(self) -> str:
        return self.internal_message


class ValidationError(ApplicationError):
    """One or more input fields violate a constraint."""

    code = ErrorCode.VALIDATION_ERROR
    http_status = HTTPStatus.BAD_REQUEST
    default_user_message = "Los datos proporcionados no son válidos"

    def __init__(
        self,
        internal_message: str,
        errors: Sequence[FieldError],
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.errors = tuple(errors)
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )

    @classmethod
    def for_field(
        cls,
        field: str,
        message: str,
        *,
        internal_message: str | None = None,
        code: str | None = None,
        attempted_value: Any = None,
        suggestion: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> "ValidationError":
        """Build a ValidationError carrying exactly one FieldError."""
        return cls(
            internal_message or message,
            [
                FieldError(
                    field=field,
                    message=message,
                    code=code,
                    attempted_value=attempted_value,
                    suggestion=suggestion,
                )
            ],
            additional_data=additional_data,
        )

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]


class BusinessRuleError(ApplicationError):
    """A well-formed request breaks a business rule."""

    code = ErrorCode.BUSINESS_RULE_VIOLATION
    http_status = HTTPStatus.UNPROCESSABLE_ENTITY
    default_user_message = "La operación infringe una regla de negocio"

    def __init__(
        self,
        internal_message: str,
        business_rule: str,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.business_rule = business_rule
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class NotFoundError(ApplicationError):
    """The requested resource does not exist."""

    code = ErrorCode.RESOURCE_NOT_FOUND
    http_status = HTTPStatus.NOT_FOUND
    default_user_message = "El recurso solicitado no existe"

    def __init__(
        self,
        resource_type: str,
        resource_id: Any,
        *,
        internal_message: str | None = None,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            internal_message or f"{resource_type} with id {resource_id!r} was not found",
            user_message=user_message,
            additional_data=additional_data,
        )


class ConflictError(ApplicationError):
    """The request conflicts with the current state (e.g. duplicates)."""

    code = ErrorCode.CONFLICT
    http_status = HTTPStatus.CONFLICT
    default_user_message = "La operación entra en conflicto con datos existentes"

    def __init__(
        self,
        internal_message: str,
        conflict_type: str,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.conflict_type = conflict_type
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class UnauthorizedError(ApplicationError):
    """The caller is not authenticated."""

    code = ErrorCode.UNAUTHORIZED
    http_status = HTTPStatus.UNAUTHORIZED
    default_user_message = "Credenciales inválidas o sesión expirada"

    def __init__(
        self,
        internal_message: str,
        reason: str,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class ForbiddenError(ApplicationError):
    """The caller is authenticated but lacks a permission."""

    code = ErrorCode.FORBIDDEN
    http_status = HTTPStatus.FORBIDDEN
    default_user_message = "No tiene permisos para realizar esta operación"

    def __init__(
        self,
        internal_message: str,
        required_permission: str,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.required_permission = required_permission
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class DatabaseError(ApplicationError):
    """A data-access operation failed."""

    code = ErrorCode.DATABASE_ERROR
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_user_message = "Error en la base de datos"

    def __init__(
        self,
        internal_message: str,
        operation: str,
        native_error: str | None = None,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.operation = operation
        self.native_error = native_error
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class ExternalServiceError(ApplicationError):
    """A downstream service failed or was unreachable."""

    code = ErrorCode.EXTERNAL_SERVICE_ERROR
    http_status = HTTPStatus.BAD_GATEWAY
    default_user_message = "Un servicio externo no está disponible"

    def __init__(
        self,
        internal_message: str,
        service_name: str,
        endpoint: str,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.service_name = service_name
        self.endpoint = endpoint
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class ConfigurationError(ApplicationError):
    """A required configuration value is missing or invalid."""

    code = ErrorCode.CONFIGURATION_ERROR
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_user_message = "El servicio no está configurado correctamente"

    def __init__(
        self,
        internal_message: str,
        config_key: str,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.config_key = config_key
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class FileOperationError(ApplicationError):
    """Reading, writing or deleting a file failed."""

    code = ErrorCode.FILE_OPERATION_ERROR
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_user_message = "No se pudo completar la operación de archivo"

    def __init__(
        self,
        internal_message: str,
        path: str,
        operation: str,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.path = path
        self.operation = operation
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class ImageProcessingError(ApplicationError):
    """An uploaded image is unsupported or cannot be processed."""

    code = ErrorCode.IMAGE_PROCESSING_ERROR
    http_status = HTTPStatus.BAD_REQUEST
    default_user_message = "La imagen proporcionada no es válida"

    def __init__(
        self,
        internal_message: str,
        image_format: str,
        file_size_bytes: int,
        *,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.image_format = image_format
        self.file_size_bytes = file_size_bytes
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )


class UnclassifiedError(ApplicationError):
    """Catch-all for failures that match no other variant.

    Wraps foreign exceptions (library errors, programming errors) so the
    boundary only ever deals with the taxonomy. Keeps the original stack
    trace and inner exception message for development diagnostics.
    """

    code = ErrorCode.INTERNAL_SERVER_ERROR
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_user_message = "Ha ocurrido un error interno en el servidor"

    def __init__(
        self,
        internal_message: str,
        *,
        stack_trace: str | None = None,
        inner_message: str | None = None,
        exception_type: str | None = None,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.stack_trace = stack_trace
        self.inner_message = inner_message
        self.exception_type = exception_type
        super().__init__(
            internal_message,
            user_message=user_message,
            additional_data=additional_data,
        )

    @classmethod
    def wrap(cls, exc: BaseException) -> "UnclassifiedError":
        """Capture a foreign exception without keeping a reference to it."""
        inner = exc.__cause__ or exc.__context__
        return cls(
            str(exc) or type(exc).__name__,
            stack_trace="".join(traceback.format_exception(exc)) or None,
            inner_message=str(inner) if inner is not None else None,
            exception_type=type(exc).__name__,
        )


class ArgumentError(UnclassifiedError):
    """Generic-family sub-code for a bad argument reaching the service."""

    code = ErrorCode.ARGUMENT_ERROR
    http_status = HTTPStatus.BAD_REQUEST
    default_user_message = "Error en los argumentos proporcionados"

    def __init__(
        self,
        internal_message: str,
        argument: str | None = None,
        *,
        stack_trace: str | None = None,
        inner_message: str | None = None,
        exception_type: str | None = None,
        user_message: str | None = None,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        self.argument = argument
        super().__init__(
            internal_message,
            stack_trace=stack_trace,
            inner_message=inner_message,
            exception_type=exception_type,
            user_message=user_message,
            additional_data=additional_data,
        )


class InvalidOperationError(UnclassifiedError):
    """Generic-family sub-code for an operation invalid in the current state."""

    code = ErrorCode.INVALID_OPERATION
    http_status = HTTPStatus.BAD_REQUEST
    default_user_message = "Operación no válida en el estado actual"


ERROR_VARIANTS: tuple[type[ApplicationError], ...] = (
    ValidationError,
    BusinessRuleError,
    NotFoundError,
    ConflictError,
    UnauthorizedError,
    ForbiddenError,
    DatabaseError,
    ExternalServiceError,
    ConfigurationError,
    FileOperationError,
    ImageProcessingError,
    UnclassifiedError,
)
"""The closed set of top-level variants. Generic sub-codes derive from
UnclassifiedError and are handled through it."""
