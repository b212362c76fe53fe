"""
Use case: List and search invoices.

Input: page/page size, or SearchInvoicesQuery
Output: InvoicePage, or a list of Invoice
Side effects: None (read-only)
Failure cases: ValidationError (pagination, search term or search type).
"""

from invoicing.application.billing.dtos import InvoicePage, SearchInvoicesQuery
from invoicing.domain.billing.entities import Invoice
from invoicing.domain.billing.ports import InvoiceRepository
from invoicing.domain.errors import ValidationError
from invoicing.domain.validation import (
    INVALID_VALUE,
    require_pagination,
    require_search_term,
)

SEARCH_BY_CLIENT = "Client"
SEARCH_BY_NUMBER = "InvoiceNumber"
SEARCH_TYPES = (SEARCH_BY_CLIENT, SEARCH_BY_NUMBER)


class ListInvoicesUseCase:
    """Paged invoice listing and text search."""

    def __init__(
        self, invoice_repository: InvoiceRepository, max_page_size: int = 100
    ) -> None:
        self._invoices = invoice_repository
        self._max_page_size = max_page_size

    def execute(self, page: int = 1, page_size: int = 10) -> InvoicePage:
        """Return one page of invoices, newest first.

        Args:
            page: 1-based page number.
            page_size: Items per page, at most ``max_page_size``.

        Raises:
            ValidationError: If either pagination parameter is out of range.
        """
        require_pagination(page, page_size, self._max_page_size)
        items, total = self._invoices.list_page(page, page_size)
        return InvoicePage(
            items=items, total_records=total, page=page, page_size=page_size
        )

    def search(self, query: SearchInvoicesQuery) -> list[Invoice]:
        if query.search_type not in SEARCH_TYPES:
            raise ValidationError.for_field(
                "SearchType",
                f"El tipo de búsqueda debe ser '{SEARCH_BY_CLIENT}' o "
                f"'{SEARCH_BY_NUMBER}'.",
                internal_message=f"Tipo de búsqueda no soportado: {query.search_type}",
                code=INVALID_VALUE,
                attempted_value=query.search_type,
                suggestion=", ".join(SEARCH_TYPES),
            )
        require_search_term(query.search_value, "SearchValue")

        if query.search_type == SEARCH_BY_CLIENT:
            return self._invoices.search_by_client(query.search_value)
        return self._invoices.search_by_number(query.search_value)
