"""
Result type for non-exceptional flows.

Use cases that want to report a failure without raising return
``Success(value)`` or ``Failure(...)``. ``unwrap`` is the single point
where a Failure is converted back into a raised ApplicationError, so a
call chain never mixes both styles without going through it.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

from invoicing.domain.errors import (
    BusinessRuleError,
    ErrorCode,
    FieldError,
    ValidationError,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying a value."""

    value: T
    additional_data: Mapping[str, Any] | None = None

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Failed outcome. Never carries a value."""

    message: str
    code: str | None = None
    validation_errors: tuple[FieldError, ...] = field(default_factory=tuple)
    additional_data: Mapping[str, Any] | None = None

    @property
    def is_success(self) -> bool:
        return False

    @classmethod
    def validation(
        cls,
        errors: Sequence[FieldError],
        additional_data: Mapping[str, Any] | None = None,
    ) -> "Failure":
        return cls(
            message="Error de validación",
            code=ErrorCode.VALIDATION_ERROR.value,
            validation_errors=tuple(errors),
            additional_data=additional_data,
        )

    def to_error(self) -> ValidationError | BusinessRuleError:
        """Convert to the matching raised error.

        Failures with field errors become a ValidationError; any other
        failure is a broken business rule named by ``code``.
        """
        if self.validation_errors:
            return ValidationError(
                self.message,
                self.validation_errors,
                additional_data=self.additional_data,
            )
        return BusinessRuleError(
            self.message,
            self.code or ErrorCode.BUSINESS_RULE_VIOLATION.value,
            additional_data=self.additional_data,
        )


Result = Union[Success[T], Failure]


def unwrap(result: "Result[T]") -> T:
    """Return the value of a Success or raise the error of a Failure."""
    if isinstance(result, Failure):
        raise result.to_error()
    return result.value
