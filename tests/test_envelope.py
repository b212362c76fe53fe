"""
Tests for the error envelope builder.

Covers per-variant details, message safety outside development mode,
development diagnostics, help URLs and deterministic serialization.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from invoicing.domain.errors import (
    ArgumentError,
    BusinessRuleError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    FieldError,
    FileOperationError,
    ForbiddenError,
    ImageProcessingError,
    InvalidOperationError,
    NotFoundError,
    UnauthorizedError,
    UnclassifiedError,
    ValidationError,
)
from invoicing.shared.errors.envelope import (
    DEFAULT_HELP_BASE_URL,
    build_envelope,
    help_url_for,
)

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
TRACE_ID = "trace-123"


def _sample_errors():
    try:
        raise ZeroDivisionError("division by zero")
    except ZeroDivisionError as exc:
        unclassified = UnclassifiedError.wrap(exc)
    return [
        ValidationError.for_field("Email", "formato inválido", internal_message="i-val"),
        BusinessRuleError("i-rule", "INVALID_PRODUCT_PRICE"),
        NotFoundError("Product", 999, internal_message="i-notfound"),
        ConflictError("i-conflict", "DUPLICATE_INVOICE_NUMBER"),
        UnauthorizedError("i-unauth", "TOKEN_EXPIRED"),
        ForbiddenError("i-forbidden", "products:write"),
        DatabaseError("i-db", "CreateInvoice", "UNIQUE constraint failed"),
        ExternalServiceError("i-ext", "Pagos", "/charge"),
        ConfigurationError("i-config", "database_url"),
        FileOperationError("i-file", "/tmp/a.txt", "Write"),
        ImageProcessingError("i-image", "image/gif", 2048),
        unclassified,
        ArgumentError("i-arg", "page"),
        InvalidOperationError("i-invalid-op"),
    ]


def _envelope(error, is_development=False):
    return build_envelope(
        error, is_development=is_development, trace_id=TRACE_ID, now=NOW
    )


# ══════════════════════════════════════════════════════════════
# Per-variant details
# ══════════════════════════════════════════════════════════════


class TestDetails:
    def test_validation_keeps_field_errors_in_order(self) -> None:
        error = ValidationError(
            "invalid",
            [
                FieldError("InvoiceNumber", "obligatorio", "REQUIRED_FIELD"),
                FieldError(
                    "Total",
                    "El total debe ser 119.00",
                    "CALCULATION_ERROR",
                    Decimal("100.00"),
                    "El total correcto es 119.00",
                ),
            ],
        )
        envelope = _envelope(error)
        assert [d.field for d in envelope.details] == ["InvoiceNumber", "Total"]
        assert envelope.details[1].suggestion == "El total correcto es 119.00"
        assert envelope.message == "Los datos proporcionados no son válidos"

    def test_not_found_names_resource_and_id(self) -> None:
        envelope = _envelope(NotFoundError("Product", 999))
        assert len(envelope.details) == 1
        assert envelope.details[0].field == "Resource"
        assert "Product" in envelope.details[0].message
        assert "999" in envelope.details[0].message

    def test_database_native_error_adds_second_detail(self) -> None:
        with_native = _envelope(DatabaseError("x", "CreateInvoice", "deadlock"))
        assert [d.field for d in with_native.details] == ["Operation", "SqlError"]
        assert with_native.details[1].code == "SQL_ERROR"

        without_native = _envelope(DatabaseError("x", "CreateInvoice"))
        assert [d.field for d in without_native.details] == ["Operation"]

    @pytest.mark.parametrize(
        "error, field, fragment",
        [
            (BusinessRuleError("x", "INVALID_PRODUCT_PRICE"), "BusinessRule", "INVALID_PRODUCT_PRICE"),
            (ConflictError("x", "DUPLICATE_PRODUCT_NAME"), "Conflict", "DUPLICATE_PRODUCT_NAME"),
            (UnauthorizedError("x", "TOKEN_EXPIRED"), "Authorization", "TOKEN_EXPIRED"),
            (ForbiddenError("x", "products:write"), "Permission", "products:write"),
            (ExternalServiceError("x", "Pagos", "/charge"), "Service", "Pagos: /charge"),
            (ConfigurationError("x", "database_url"), "Configuration", "database_url"),
            (FileOperationError("x", "/tmp/a", "Write"), "FileOperation", "Write en /tmp/a"),
            (ImageProcessingError("x", "image/gif", 2048), "ImageProcessing", "2048 bytes"),
        ],
    )
    def test_single_detail_variants(self, error, field, fragment) -> None:
        envelope = _envelope(error)
        assert len(envelope.details) == 1
        assert envelope.details[0].field == field
        assert fragment in envelope.details[0].message

    def test_argument_detail_hides_raw_message_in_production(self) -> None:
        error = ArgumentError("page must be >= 1", "page")
        assert _envelope(error).details[0].message == error.user_message
        assert _envelope(error, True).details[0].message == "page must be >= 1"
        assert _envelope(error).details[0].field == "page"


# ══════════════════════════════════════════════════════════════
# Message safety and development diagnostics
# ══════════════════════════════════════════════════════════════


class TestMessageSafety:
    @pytest.mark.parametrize("error", _sample_errors(), ids=lambda e: type(e).__name__)
    def test_production_never_leaks_internal_message(self, error) -> None:
        envelope = _envelope(error, is_development=False)
        assert envelope.message == error.user_message
        assert error.internal_message not in envelope.message
        fields = {d.field for d in envelope.details}
        assert "StackTrace" not in fields
        assert "InnerException" not in fields

    @pytest.mark.parametrize("error", _sample_errors(), ids=lambda e: type(e).__name__)
    def test_message_is_user_message_in_development_too(self, error) -> None:
        assert _envelope(error, is_development=True).message == error.user_message

    def test_unclassified_gets_diagnostics_in_development(self) -> None:
        try:
            try:
                raise OSError("disk full")
            except OSError as inner:
                raise RuntimeError("save failed") from inner
        except RuntimeError as exc:
            error = UnclassifiedError.wrap(exc)

        details = {d.field: d for d in _envelope(error, True).details}
        assert "RuntimeError" in details["StackTrace"].message
        assert details["StackTrace"].code == "STACK_TRACE"
        assert details["InnerException"].message == "disk full"
        assert details["InnerException"].code == "INNER_EXCEPTION"

    def test_missing_diagnostics_use_placeholder(self) -> None:
        details = _envelope(UnclassifiedError("x"), True).details
        assert [d.message for d in details] == ["No disponible", "No disponible"]

    def test_classified_errors_get_no_diagnostics_in_development(self) -> None:
        fields = {d.field for d in _envelope(NotFoundError("Product", 1), True).details}
        assert fields == {"Resource"}

    @pytest.mark.parametrize(
        "error, field",
        [
            (ArgumentError("bad arg", "x"), "x"),
            (ArgumentError.wrap(ValueError("v")), "Unknown"),
            (InvalidOperationError("factura anulada"), "Operation"),
        ],
    )
    def test_generic_sub_codes_get_no_diagnostics_in_development(
        self, error, field
    ) -> None:
        details = _envelope(error, True).details
        assert [d.field for d in details] == [field]
        assert details[0].message == error.internal_message


# ══════════════════════════════════════════════════════════════
# Envelope fields and serialization
# ══════════════════════════════════════════════════════════════


class TestSerialization:
    def test_help_url_is_lowercased_code(self) -> None:
        envelope = _envelope(ConflictError("x", "DUP"))
        assert envelope.help_url == DEFAULT_HELP_BASE_URL + "conflict"
        assert help_url_for("VALIDATION_ERROR", "https://docs.test/errors") == (
            "https://docs.test/errors/validation_error"
        )

    def test_wire_shape_is_camel_case(self) -> None:
        body = json.loads(_envelope(NotFoundError("Product", 999)).to_json())
        assert set(body) == {
            "errorCode",
            "message",
            "details",
            "timestamp",
            "traceId",
            "helpUrl",
        }
        assert body["errorCode"] == "RESOURCE_NOT_FOUND"
        assert body["traceId"] == TRACE_ID
        assert set(body["details"][0]) == {
            "field",
            "message",
            "code",
            "attemptedValue",
            "suggestion",
        }

    def test_same_input_gives_identical_json_except_timestamp(self) -> None:
        error = ValidationError.for_field("Email", "formato inválido", attempted_value="x")
        first = json.loads(
            build_envelope(error, is_development=False, trace_id=TRACE_ID).to_json()
        )
        second = json.loads(
            build_envelope(error, is_development=False, trace_id=TRACE_ID).to_json()
        )
        first.pop("timestamp")
        second.pop("timestamp")
        assert first == second

        assert _envelope(error).to_json() == _envelope(error).to_json()

    def test_timestamp_is_envelope_construction_time(self) -> None:
        envelope = _envelope(NotFoundError("Invoice", 1))
        assert envelope.timestamp == NOW

    def test_building_does_not_mutate_error(self) -> None:
        error = DatabaseError("x", "Op", "native")
        before = (error.user_message, error.operation, error.native_error)
        _envelope(error, True)
        assert (error.user_message, error.operation, error.native_error) == before
