"""
Domain entities for the billing bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Client:
    """A customer invoices are issued to."""

    id: int
    name: str
    email: str
    phone: str = ""
    address: str = ""


@dataclass(frozen=True)
class ProductImage:
    """Metadata of the image attached to a product."""

    file_name: str
    content_type: str
    file_size: int
    width: int = 0
    height: int = 0
    alt_text: str = ""


@dataclass(frozen=True)
class Product:
    """A catalog product with its current unit price."""

    id: int
    name: str
    price: Decimal
    description: str = ""
    is_active: bool = True
    image: Optional[ProductImage] = None


@dataclass(frozen=True)
class InvoiceLine:
    """One product line of an invoice."""

    product_id: int
    quantity: int
    unit_price: Decimal
    total: Decimal
    product_name: str = ""


@dataclass(frozen=True)
class Invoice:
    """An issued invoice. ``lines`` is empty in list/search results."""

    id: int
    invoice_number: str
    client_id: int
    client_name: str
    invoice_date: date
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    status: str = "Issued"
    created_at: Optional[datetime] = None
    lines: tuple[InvoiceLine, ...] = field(default_factory=tuple)
