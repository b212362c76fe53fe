"""
Error probes.

Each endpoint raises one sample failure so clients and operators can see the
exact envelope, status and log line every error kind produces. Mounted only
when ``error_probes_enabled`` is set.
"""

from enum import Enum

from fastapi import APIRouter

from invoicing.domain.errors import (
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
)
from invoicing.domain.validation import require_email
from invoicing.shared.errors.envelope import ErrorEnvelope

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


class ErrorProbe(str, Enum):
    VALIDATION = "validation"
    BUSINESS_RULE = "business-rule"
    NOT_FOUND = "not-found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    DATABASE = "database"
    EXTERNAL_SERVICE = "external-service"
    CONFIGURATION = "configuration"
    FILE_OPERATION = "file-operation"
    IMAGE_PROCESSING = "image-processing"
    GENERIC = "generic"
    ARGUMENT = "argument"
    INVALID_OPERATION = "invalid-operation"


def _raise_generic() -> None:
    divisor = 0
    try:
        _ = 100 / divisor
    except ZeroDivisionError as exc:
        raise RuntimeError("Error de prueba no controlado") from exc


def _raise_probe(probe: ErrorProbe) -> None:
    if probe is ErrorProbe.VALIDATION:
        require_email("correo-invalido")
    elif probe is ErrorProbe.BUSINESS_RULE:
        raise BusinessRuleError(
            "Regla de negocio de prueba violada",
            "TEST_BUSINESS_RULE",
            user_message="No se puede completar la operación de prueba.",
        )
    elif probe is ErrorProbe.NOT_FOUND:
        raise NotFoundError("Product", 999)
    elif probe is ErrorProbe.CONFLICT:
        raise ConflictError("Recurso duplicado de prueba", "TEST_DUPLICATE")
    elif probe is ErrorProbe.UNAUTHORIZED:
        raise UnauthorizedError("Token de prueba expirado", "TOKEN_EXPIRED")
    elif probe is ErrorProbe.FORBIDDEN:
        raise ForbiddenError("Permiso de prueba ausente", "products:write")
    elif probe is ErrorProbe.DATABASE:
        raise DatabaseError(
            "Fallo de prueba en la base de datos",
            "TestOperation",
            "connection refused",
        )
    elif probe is ErrorProbe.EXTERNAL_SERVICE:
        raise ExternalServiceError(
            "Servicio de prueba sin respuesta", "PaymentGateway", "/api/charge"
        )
    elif probe is ErrorProbe.CONFIGURATION:
        raise ConfigurationError("Clave de prueba ausente", "TEST_SETTING")
    elif probe is ErrorProbe.FILE_OPERATION:
        raise FileOperationError(
            "No se pudo escribir el archivo de prueba", "/tmp/test.txt", "Write"
        )
    elif probe is ErrorProbe.IMAGE_PROCESSING:
        raise ImageProcessingError("Imagen de prueba inválida", "image/gif", 2048)
    elif probe is ErrorProbe.GENERIC:
        _raise_generic()
    elif probe is ErrorProbe.ARGUMENT:
        raise ValueError("El argumento de prueba no es válido")
    elif probe is ErrorProbe.INVALID_OPERATION:
        raise InvalidOperationError("Operación de prueba no permitida en este estado")


@router.get(
    "/errors/{probe}",
    responses={
        status_code: {"model": ErrorEnvelope}
        for status_code in (400, 401, 403, 404, 409, 422, 500, 502)
    },
    summary="Raise a sample error",
)
def raise_error(probe: ErrorProbe) -> None:
    """Raise the sample failure named by ``probe``. Never returns normally."""
    _raise_probe(probe)
