"""
Data Transfer Objects for the billing application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior beyond derived values.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from invoicing.domain.billing.entities import Invoice


@dataclass(frozen=True)
class InvoiceLineCommand:
    """Input DTO for one invoice line.

    Attributes:
        product_id: Catalog product id.
        quantity: Units sold (1-1000).
        unit_price: Price per unit; must match the catalog price.
    """

    product_id: int
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class CreateInvoiceCommand:
    """Input DTO for issuing an invoice.

    Totals are sent by the client and re-checked against the lines.
    """

    invoice_number: str
    client_id: int
    invoice_date: date
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    lines: tuple[InvoiceLineCommand, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class InvoiceTotals:
    """Totals computed from the invoice lines."""

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class InvoicePage:
    """One page of invoices."""

    items: list[Invoice]
    total_records: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_records / self.page_size) if self.page_size else 0


@dataclass(frozen=True)
class SearchInvoicesQuery:
    """Input DTO for invoice search.

    Attributes:
        search_type: ``Client`` or ``InvoiceNumber``.
        search_value: Text to look for.
    """

    search_type: str
    search_value: str


@dataclass(frozen=True)
class ProductImageCommand:
    """Image metadata sent with a product."""

    file_name: str
    content_type: str
    file_size: int
    width: int = 0
    height: int = 0
    alt_text: str = ""


@dataclass(frozen=True)
class CreateProductCommand:
    """Input DTO for creating a product."""

    name: str
    price: Decimal
    description: str = ""
    is_active: bool = True
    image: Optional[ProductImageCommand] = None


@dataclass(frozen=True)
class UpdateProductCommand:
    """Input DTO for a partial product update. None means unchanged."""

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    is_active: Optional[bool] = None
    image: Optional[ProductImageCommand] = None
    remove_image: bool = False
