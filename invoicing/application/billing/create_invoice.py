"""
Use case: Issue a new invoice.

Input: CreateInvoiceCommand
Output: Invoice (as stored, with lines)
Side effects: Persists the invoice and its lines.
Failure cases: ConflictError (duplicate number), ValidationError (every
field violation collected), DatabaseError (storage failures).
"""

import logging
import re
from collections.abc import Callable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from invoicing.application.billing.dtos import (
    CreateInvoiceCommand,
    InvoiceLineCommand,
    InvoiceTotals,
)
from invoicing.domain.billing.entities import Invoice, InvoiceLine
from invoicing.domain.billing.ports import CatalogRepository, InvoiceRepository
from invoicing.domain.errors import (
    ConflictError,
    DatabaseError,
    FieldError,
    ValidationError,
)
from invoicing.domain.result import Failure, Result, Success, unwrap
from invoicing.domain.validation import (
    INVALID_FORMAT,
    INVALID_VALUE,
    REQUIRED_FIELD,
    ValidationBatch,
    require_date,
    require_id,
    require_non_empty_string,
    require_quantity,
    require_string_length,
)

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("0.19")
TOLERANCE = Decimal("0.01")
CENT = Decimal("0.01")
INVOICE_NUMBER_PATTERN = re.compile(r"^[A-Za-z0-9\-_]+$")
DUPLICATE_INVOICE_NUMBER = "DUPLICATE_INVOICE_NUMBER"


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _require_invoice_number_format(value: str) -> None:
    if not INVOICE_NUMBER_PATTERN.match(value):
        raise ValidationError.for_field(
            "InvoiceNumber",
            "El número de factura solo puede contener letras, números, "
            "guiones y guiones bajos",
            internal_message="Formato de número de factura inválido",
            code=INVALID_FORMAT,
            attempted_value=value,
            suggestion="Use solo letras, números, guiones (-) y guiones bajos (_)",
        )


class CreateInvoiceUseCase:
    """Validates an invoice against the catalog and persists it.

    Totals sent by the client are recomputed from the lines
    (subtotal, tax at ``tax_rate``, total) and must match within 0.01.
    """

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        catalog_repository: CatalogRepository,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._invoices = invoice_repository
        self._catalog = catalog_repository
        self._tax_rate = tax_rate
        self._today = today

    def execute(self, command: CreateInvoiceCommand) -> Invoice:
        """Issue the invoice.

        Args:
            command: The invoice header, lines and client-side totals.

        Returns:
            The stored invoice, read back from the repository.

        Raises:
            ConflictError: If the invoice number is already in use.
            ValidationError: If any field is invalid.
            DatabaseError: If the invoice cannot be stored or read back.
        """
        if self._number_is_well_formed(command.invoice_number) and (
            self._invoices.number_exists(command.invoice_number)
        ):
            raise ConflictError(
                f"Ya existe una factura con el número '{command.invoice_number}'",
                DUPLICATE_INVOICE_NUMBER,
                user_message=(
                    f"El número de factura '{command.invoice_number}' ya está en uso. "
                    "Por favor, use un número diferente."
                ),
                additional_data={"invoice_number": command.invoice_number},
            )

        totals = unwrap(self._validate(command))

        logger.info(
            "Creating invoice number=%s client_id=%d lines=%d",
            command.invoice_number,
            command.client_id,
            len(command.lines),
        )
        invoice_id = self._invoices.create(self._to_invoice(command, totals))

        created = self._invoices.get_by_id(invoice_id)
        if created is None:
            raise DatabaseError(
                "La factura se creó pero no se pudo recuperar",
                "CreateInvoice",
                additional_data={"invoice_id": invoice_id},
            )
        return created

    def preview(self, command: CreateInvoiceCommand) -> Result[InvoiceTotals]:
        """Run every check without storing anything.

        A duplicate number is reported as one more field error instead of
        a conflict, so the client gets the whole picture in one answer.
        """
        result = self._validate(command)
        if self._number_is_well_formed(command.invoice_number) and (
            self._invoices.number_exists(command.invoice_number)
        ):
            duplicate = FieldError(
                field="InvoiceNumber",
                message=f"El número de factura '{command.invoice_number}' ya está en uso",
                code=DUPLICATE_INVOICE_NUMBER,
                attempted_value=command.invoice_number,
                suggestion="Use un número de factura diferente",
            )
            previous = result.validation_errors if isinstance(result, Failure) else ()
            return Failure.validation((duplicate, *previous))
        return result

    def compute_totals(self, lines: tuple[InvoiceLineCommand, ...]) -> InvoiceTotals:
        subtotal = sum(
            (line.unit_price * line.quantity for line in lines), Decimal("0")
        )
        tax_amount = subtotal * self._tax_rate
        return InvoiceTotals(
            subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount
        )

    def _number_is_well_formed(self, invoice_number: str) -> bool:
        return self._check_number(ValidationBatch(), invoice_number)

    @staticmethod
    def _check_number(batch: ValidationBatch, invoice_number: str) -> bool:
        return (
            batch.check(
                require_non_empty_string,
                invoice_number,
                "InvoiceNumber",
                "número de factura",
            )
            and batch.check(
                require_string_length,
                invoice_number,
                "InvoiceNumber",
                "número de factura",
                3,
                20,
            )
            and batch.check(_require_invoice_number_format, invoice_number)
        )

    def _validate(self, command: CreateInvoiceCommand) -> Result[InvoiceTotals]:
        batch = ValidationBatch()

        self._check_number(batch, command.invoice_number)

        if batch.check(require_id, command.client_id, "ClientId") and (
            self._catalog.get_client(command.client_id) is None
        ):
            batch.add(
                FieldError(
                    field="ClientId",
                    message=f"No existe un cliente con ID {command.client_id}",
                    code="CLIENT_NOT_FOUND",
                    attempted_value=command.client_id,
                    suggestion="Seleccione un cliente que exista en el sistema",
                )
            )

        batch.check(
            require_date,
            command.invoice_date,
            "InvoiceDate",
            "fecha de factura",
            today=self._today(),
        )

        if not command.lines:
            batch.add(
                FieldError(
                    field="Details",
                    message="La factura debe tener al menos un detalle",
                    code=REQUIRED_FIELD,
                    suggestion="Agregue al menos un producto a la factura",
                )
            )
        for index, line in enumerate(command.lines):
            self._check_line(batch, f"Details[{index}]", line)

        totals = self.compute_totals(command.lines)
        for field_name, label, sent, expected in (
            ("Subtotal", "subtotal", command.subtotal, totals.subtotal),
            ("TaxAmount", "impuesto", command.tax_amount, totals.tax_amount),
            ("Total", "total", command.total, totals.total),
        ):
            if abs(sent - expected) > TOLERANCE:
                batch.add(
                    FieldError(
                        field=field_name,
                        message=f"El {label} debe ser {_cents(expected)}",
                        code="CALCULATION_ERROR",
                        attempted_value=sent,
                        suggestion=f"El {label} correcto es {_cents(expected)}",
                    )
                )

        if batch:
            return Failure.validation(
                batch.errors,
                additional_data={"invoice_number": command.invoice_number},
            )
        return Success(totals)

    def _check_line(
        self, batch: ValidationBatch, prefix: str, line: InvoiceLineCommand
    ) -> None:
        product_field = f"{prefix}.ProductId"
        if line.product_id <= 0:
            batch.add(
                FieldError(
                    field=product_field,
                    message="El ID del producto debe ser mayor a 0",
                    code=INVALID_VALUE,
                    attempted_value=line.product_id,
                    suggestion="Seleccione un producto válido",
                )
            )
        else:
            product = self._catalog.get_product(line.product_id)
            if product is None:
                batch.add(
                    FieldError(
                        field=product_field,
                        message=f"No existe un producto con ID {line.product_id}",
                        code="PRODUCT_NOT_FOUND",
                        attempted_value=line.product_id,
                        suggestion="Seleccione un producto que exista en el sistema",
                    )
                )
            elif not product.is_active:
                batch.add(
                    FieldError(
                        field=product_field,
                        message=f"El producto '{product.name}' no está activo",
                        code="INACTIVE_PRODUCT",
                        attempted_value=line.product_id,
                        suggestion="Solo puede usar productos activos",
                    )
                )
            elif line.unit_price != product.price:
                batch.add(
                    FieldError(
                        field=f"{prefix}.UnitPrice",
                        message=f"El precio unitario debe ser {product.price}",
                        code="PRICE_MISMATCH",
                        attempted_value=line.unit_price,
                        suggestion=(
                            f"Use el precio actual del producto: {product.price}"
                        ),
                    )
                )

        batch.check(require_quantity, line.quantity, f"{prefix}.Quantity", "cantidad")

    def _to_invoice(
        self, command: CreateInvoiceCommand, totals: InvoiceTotals
    ) -> Invoice:
        return Invoice(
            id=0,
            invoice_number=command.invoice_number,
            client_id=command.client_id,
            client_name="",
            invoice_date=command.invoice_date,
            subtotal=_cents(totals.subtotal),
            tax_amount=_cents(totals.tax_amount),
            total=_cents(totals.total),
            lines=tuple(
                InvoiceLine(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total=_cents(line.unit_price * line.quantity),
                )
                for line in command.lines
            ),
        )
