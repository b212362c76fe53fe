"""Tests for the Success/Failure result type and its single conversion point."""

import pytest

from invoicing.domain.errors import BusinessRuleError, FieldError, ValidationError
from invoicing.domain.result import Failure, Success, unwrap


class TestResult:
    def test_success_unwraps_to_value(self) -> None:
        result = Success(42)
        assert result.is_success
        assert unwrap(result) == 42

    def test_validation_failure_raises_validation_error(self) -> None:
        result = Failure.validation(
            [FieldError("Total", "El total debe ser 119.00", "CALCULATION_ERROR")],
            additional_data={"invoice_number": "F-001"},
        )
        assert not result.is_success
        assert result.code == "VALIDATION_ERROR"

        with pytest.raises(ValidationError) as info:
            unwrap(result)
        assert info.value.fields == ["Total"]
        assert info.value.additional_data["invoice_number"] == "F-001"

    def test_failure_without_field_errors_is_a_business_rule(self) -> None:
        with pytest.raises(BusinessRuleError) as info:
            unwrap(Failure("Factura anulada", code="INVOICE_VOIDED"))
        assert info.value.business_rule == "INVOICE_VOIDED"

    def test_failure_carries_no_value(self) -> None:
        assert not hasattr(Failure("x"), "value")
