"""Shared helpers for the SQL adapters."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from invoicing.domain.errors import ConflictError, DatabaseError

LIKE_ESCAPE = "\\"
UNIQUE_VIOLATION_SQLSTATE = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    native = exc.orig
    sqlstate = getattr(native, "sqlstate", None) or getattr(native, "pgcode", None)
    if sqlstate == UNIQUE_VIOLATION_SQLSTATE:
        return True
    return "UNIQUE constraint failed" in str(native)


@contextmanager
def database_operation(
    operation: str, *, conflict_type: Optional[str] = None, **data: Any
) -> Iterator[None]:
    """Re-raise any SQLAlchemy failure inside the block as a DatabaseError.

    ``operation`` names the failed data-access step; the driver message is
    kept as ``native_error``. When ``conflict_type`` is given, a unique
    constraint violation becomes a ConflictError of that type instead.
    Stored values that cannot be read back (bad dates or numbers) are also
    a DatabaseError. Nothing is logged here.
    """
    context = {"operation": operation, **data}
    try:
        yield
    except IntegrityError as exc:
        native = getattr(exc, "orig", None) or exc
        if conflict_type is not None and _is_unique_violation(exc):
            raise ConflictError(
                f"Violación de unicidad en {operation}: {native}",
                conflict_type,
                additional_data=context,
            ) from exc
        raise DatabaseError(
            f"Error en la operación de base de datos {operation}: {native}",
            operation,
            str(native),
            additional_data=context,
        ) from exc
    except SQLAlchemyError as exc:
        native = getattr(exc, "orig", None) or exc
        raise DatabaseError(
            f"Error en la operación de base de datos {operation}: {native}",
            operation,
            str(native),
            additional_data=context,
        ) from exc
    except (ValueError, ArithmeticError) as exc:
        raise DatabaseError(
            f"Valor almacenado no válido en {operation}: {exc}",
            operation,
            str(exc),
            additional_data=context,
        ) from exc


def contains_pattern(term: str) -> str:
    """Lower-cased ``LIKE`` pattern matching ``term`` anywhere, wildcards escaped.

    Use with ``ESCAPE '\\'``.
    """
    escaped = (
        term.lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def to_decimal(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
