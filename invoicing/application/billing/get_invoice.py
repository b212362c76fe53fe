"""
Use case: Look up a single invoice.

Input: invoice id or invoice number
Output: Invoice (with lines)
Side effects: None (read-only)
Failure cases: ValidationError (bad id or empty number), NotFoundError.
"""

from invoicing.domain.billing.entities import Invoice
from invoicing.domain.billing.ports import InvoiceRepository
from invoicing.domain.errors import NotFoundError
from invoicing.domain.validation import require_id, require_non_empty_string


class GetInvoiceUseCase:
    """Reads invoices by id or by number."""

    def __init__(self, invoice_repository: InvoiceRepository) -> None:
        self._invoices = invoice_repository

    def execute(self, invoice_id: int) -> Invoice:
        """Return the invoice with the given id.

        Raises:
            ValidationError: If ``invoice_id`` is not positive.
            NotFoundError: If no invoice has that id.
        """
        require_id(invoice_id, "InvoiceId")
        invoice = self._invoices.get_by_id(invoice_id)
        if invoice is None:
            raise NotFoundError(
                "Invoice",
                invoice_id,
                user_message=f"No se encontró la factura con ID {invoice_id}",
            )
        return invoice

    def by_number(self, invoice_number: str) -> Invoice:
        require_non_empty_string(invoice_number, "InvoiceNumber", "número de factura")
        invoice = self._invoices.get_by_number(invoice_number)
        if invoice is None:
            raise NotFoundError(
                "Invoice",
                invoice_number,
                user_message=(
                    f"No se encontró la factura con número '{invoice_number}'"
                ),
            )
        return invoice

    def number_exists(self, invoice_number: str) -> bool:
        require_non_empty_string(invoice_number, "InvoiceNumber", "número de factura")
        return self._invoices.number_exists(invoice_number)
