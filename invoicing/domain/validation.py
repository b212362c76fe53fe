"""
Centralized validation helpers.

Each ``require_*`` function enforces one constraint family. It returns
normally when the value is acceptable and raises a ValidationError carrying
one FieldError otherwise (``require_pagination`` checks two fields and
reports every violated one). Helpers never log: reporting is the request
boundary's job.

``ValidationBatch`` runs several helpers and raises a single ValidationError
with every violation collected, for use cases that validate whole commands.
"""

import re
from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from dateutil.relativedelta import relativedelta
from email_validator import EmailNotValidError, validate_email

from invoicing.domain.errors import FieldError, ValidationError

REQUIRED_FIELD = "REQUIRED_FIELD"
INVALID_VALUE = "INVALID_VALUE"
INVALID_LENGTH = "INVALID_LENGTH"
INVALID_FORMAT = "INVALID_FORMAT"
INVALID_DATE = "INVALID_DATE"
OUT_OF_RANGE = "OUT_OF_RANGE"

PHONE_PATTERN = re.compile(r"^(\+57\s?)?[0-9]{3}\s?[0-9]{3}\s?[0-9]{4}$")


def require_id(value: int, field_name: str) -> None:
    """Fail when an identifier is not strictly positive."""
    if value <= 0:
        raise ValidationError.for_field(
            field_name,
            f"El {field_name} debe ser un valor positivo.",
            internal_message=f"El {field_name} debe ser mayor a 0",
            code=INVALID_VALUE,
            attempted_value=value,
            additional_data={"id": value, "min_id": 1},
        )


def require_non_empty_string(
    value: str | None, field_name: str, display_name: str
) -> None:
    """Fail when a string is missing, empty or only whitespace."""
    if value is None or not value.strip():
        raise ValidationError.for_field(
            field_name,
            f"El {display_name} es obligatorio y no puede estar vacío.",
            internal_message=f"El {display_name} es obligatorio",
            code=REQUIRED_FIELD,
            attempted_value=value,
        )


def require_string_length(
    value: str, field_name: str, display_name: str, min_length: int, max_length: int
) -> None:
    """Fail when ``len(value)`` falls outside ``[min_length, max_length]``."""
    length = len(value)
    if length < min_length or length > max_length:
        raise ValidationError.for_field(
            field_name,
            f"El {display_name} debe tener entre {min_length} y {max_length} "
            f"caracteres. Longitud actual: {length}",
            internal_message=(
                f"El {display_name} debe tener entre {min_length} y "
                f"{max_length} caracteres"
            ),
            code=INVALID_LENGTH,
            attempted_value=value,
            suggestion=f"Use entre {min_length} y {max_length} caracteres",
            additional_data={
                "min_length": min_length,
                "max_length": max_length,
                "current_length": length,
            },
        )


def require_positive_price(
    value: Decimal | float | int, field_name: str, display_name: str
) -> None:
    """Fail when a price is zero or negative."""
    if value <= 0:
        raise ValidationError.for_field(
            field_name,
            f"El {display_name} debe ser un valor positivo mayor a cero.",
            internal_message=f"El {display_name} debe ser mayor a 0",
            code=INVALID_VALUE,
            attempted_value=value,
            additional_data={"min_price": "0.01"},
        )


def require_quantity(
    value: int,
    field_name: str,
    display_name: str,
    min_quantity: int = 1,
    max_quantity: int = 1000,
) -> None:
    """Fail when a quantity is outside ``[min_quantity, max_quantity]``."""
    if value < min_quantity or value > max_quantity:
        raise ValidationError.for_field(
            field_name,
            f"La {display_name} debe estar entre {min_quantity} y "
            f"{max_quantity}. Valor actual: {value}",
            internal_message=(
                f"La {display_name} debe estar entre {min_quantity} y {max_quantity}"
            ),
            code=OUT_OF_RANGE,
            attempted_value=value,
            additional_data={
                "min_quantity": min_quantity,
                "max_quantity": max_quantity,
            },
        )


def require_date(
    value: date | datetime,
    field_name: str,
    display_name: str,
    allow_future: bool = False,
    max_years_in_past: int = 10,
    *,
    today: date | None = None,
) -> None:
    """Fail on future dates (unless allowed) or dates too far in the past.

    Both checks compare calendar dates, so a value on the current day is
    never considered future.
    """
    day = value.date() if isinstance(value, datetime) else value
    current = today or date.today()

    if not allow_future and day > current:
        raise ValidationError.for_field(
            field_name,
            f"La {display_name} no puede ser futura. Use una fecha actual o pasada.",
            internal_message=f"La {display_name} no puede ser futura",
            code=INVALID_DATE,
            attempted_value=day,
            suggestion="Use una fecha actual o pasada",
            additional_data={"today": current.isoformat()},
        )

    oldest = current - relativedelta(years=max_years_in_past)
    if day < oldest:
        raise ValidationError.for_field(
            field_name,
            f"La {display_name} no puede ser anterior a {max_years_in_past} años.",
            internal_message=f"La {display_name} no puede ser muy antigua",
            code=INVALID_DATE,
            attempted_value=day,
            suggestion=f"Use una fecha no anterior a {oldest.isoformat()}",
            additional_data={"max_years_in_past": max_years_in_past},
        )


def require_email(value: str | None, field_name: str = "Email") -> None:
    """Fail unless the value is exactly one plain email address."""
    if value is None or not value.strip():
        raise ValidationError.for_field(
            field_name,
            "El email es obligatorio y no puede estar vacío.",
            internal_message="El email es obligatorio",
            code=REQUIRED_FIELD,
            attempted_value=value,
        )

    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError.for_field(
            field_name,
            "El formato del email no es válido. Use formato: usuario@dominio.com",
            internal_message=f"El formato del email no es válido: {exc}",
            code=INVALID_FORMAT,
            attempted_value=value,
            suggestion="usuario@dominio.com",
        ) from exc


def require_phone(value: str | None, field_name: str = "Phone") -> None:
    """Fail when a phone number is present but not in a Colombian format.

    The phone is optional, so empty values pass.
    """
    if value is None or not value.strip():
        return
    if not PHONE_PATTERN.match(value):
        raise ValidationError.for_field(
            field_name,
            "El formato del número de teléfono no es válido. "
            "Use formato: +57 300 123 4567 o 300 123 4567",
            internal_message="El formato del número de teléfono no es válido",
            code=INVALID_FORMAT,
            attempted_value=value,
            suggestion="+57 300 123 4567",
        )


def require_search_term(
    value: str | None,
    field_name: str = "SearchTerm",
    min_length: int = 2,
    max_length: int = 100,
) -> None:
    """Fail when a search term is empty, too short or too long."""
    if value is None or not value.strip():
        raise ValidationError.for_field(
            field_name,
            "El término de búsqueda es obligatorio y debe contener al menos "
            "un carácter.",
            internal_message="El término de búsqueda no puede estar vacío",
            code=REQUIRED_FIELD,
            attempted_value=value,
        )

    if len(value) < min_length:
        raise ValidationError.for_field(
            field_name,
            "Para obtener resultados relevantes, el término de búsqueda debe "
            f"tener al menos {min_length} caracteres.",
            internal_message=(
                f"El término de búsqueda debe tener al menos {min_length} caracteres"
            ),
            code=INVALID_LENGTH,
            attempted_value=value,
            additional_data={"min_length": min_length, "current_length": len(value)},
        )

    if len(value) > max_length:
        raise ValidationError.for_field(
            field_name,
            "El término de búsqueda es demasiado largo. "
            f"Máximo {max_length} caracteres permitidos.",
            internal_message=(
                f"El término de búsqueda no puede exceder {max_length} caracteres"
            ),
            code=INVALID_LENGTH,
            attempted_value=value,
            additional_data={"max_length": max_length, "current_length": len(value)},
        )


def require_pagination(page: int, page_size: int, max_page_size: int = 100) -> None:
    """Check ``page >= 1`` and ``1 <= page_size <= max_page_size``.

    The two constraints are independent; every violated one gets its own
    FieldError in the raised ValidationError.
    """
    errors: list[FieldError] = []
    if page < 1:
        errors.append(
            FieldError(
                field="Page",
                message="El número de página debe ser un valor positivo.",
                code=OUT_OF_RANGE,
                attempted_value=page,
            )
        )
    if page_size < 1 or page_size > max_page_size:
        errors.append(
            FieldError(
                field="PageSize",
                message=(
                    f"El tamaño de página debe ser un valor entre 1 y {max_page_size}."
                ),
                code=OUT_OF_RANGE,
                attempted_value=page_size,
            )
        )
    if errors:
        raise ValidationError(
            "Parámetros de paginación inválidos",
            errors,
            additional_data={
                "page": page,
                "page_size": page_size,
                "max_page_size": max_page_size,
            },
        )


class ValidationBatch:
    """Collects violations from several checks before raising once.

    Example:
        batch = ValidationBatch()
        batch.check(require_id, command.client_id, "ClientId")
        batch.add(FieldError("Details", "La factura debe tener al menos un detalle"))
        batch.raise_if_any("La factura no cumple con las validaciones requeridas")
    """

    def __init__(self) -> None:
        self._errors: list[FieldError] = []

    def check(self, rule: Callable[..., None], *args: Any, **kwargs: Any) -> bool:
        """Run one helper; record its violations and report whether it passed."""
        try:
            rule(*args, **kwargs)
        except ValidationError as exc:
            self._errors.extend(exc.errors)
            return False
        return True

    def add(self, error: FieldError) -> None:
        self._errors.append(error)

    @property
    def errors(self) -> tuple[FieldError, ...]:
        return tuple(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def raise_if_any(
        self,
        internal_message: str,
        *,
        additional_data: Mapping[str, Any] | None = None,
    ) -> None:
        if self._errors:
            raise ValidationError(
                internal_message, self._errors, additional_data=additional_data
            )
