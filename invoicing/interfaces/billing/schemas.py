"""
Pydantic schemas for the billing API request/response contract.

Fields are exposed in lowerCamelCase. Request schemas only enforce types;
business constraints are checked by the use cases so every violation is
reported through the same error envelope.
No business logic belongs here.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from invoicing.application.billing.dtos import (
    CreateInvoiceCommand,
    CreateProductCommand,
    InvoiceLineCommand,
    InvoicePage,
    ProductImageCommand,
    UpdateProductCommand,
)
from invoicing.domain.billing.entities import Client, Invoice, Product, ProductImage
from invoicing.domain.errors import FieldError


class CamelModel(BaseModel):
    """Base schema serialized with lowerCamelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


# ------------------------------------------------------------------
# Catalog
# ------------------------------------------------------------------


class ClientResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: str = ""
    address: str = ""

    @classmethod
    def from_entity(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,
            name=client.name,
            email=client.email,
            phone=client.phone,
            address=client.address,
        )


class ProductImageSchema(CamelModel):
    """Image metadata attached to a product.

    Attributes:
        file_name: Original file name, including extension.
        content_type: MIME type (image/jpeg, image/png, image/webp).
        file_size: Size in bytes.
    """

    file_name: str
    content_type: str
    file_size: int
    width: int = 0
    height: int = 0
    alt_text: str = ""

    @classmethod
    def from_entity(cls, image: ProductImage) -> "ProductImageSchema":
        return cls(
            file_name=image.file_name,
            content_type=image.content_type,
            file_size=image.file_size,
            width=image.width,
            height=image.height,
            alt_text=image.alt_text,
        )

    def to_command(self) -> ProductImageCommand:
        return ProductImageCommand(
            file_name=self.file_name,
            content_type=self.content_type,
            file_size=self.file_size,
            width=self.width,
            height=self.height,
            alt_text=self.alt_text,
        )


class ProductResponse(CamelModel):
    id: int
    name: str
    description: str
    price: Decimal
    is_active: bool
    image: Optional[ProductImageSchema] = None

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            is_active=product.is_active,
            image=ProductImageSchema.from_entity(product.image)
            if product.image
            else None,
        )


class CreateProductRequest(CamelModel):
    """Request schema for creating a product."""

    name: str
    price: Decimal
    description: str = ""
    is_active: bool = True
    image: Optional[ProductImageSchema] = None

    def to_command(self) -> CreateProductCommand:
        return CreateProductCommand(
            name=self.name,
            price=self.price,
            description=self.description,
            is_active=self.is_active,
            image=self.image.to_command() if self.image else None,
        )


class UpdateProductRequest(CamelModel):
    """Request schema for a partial product update. Omitted fields are kept."""

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    is_active: Optional[bool] = None
    image: Optional[ProductImageSchema] = None
    remove_image: bool = False

    def to_command(self) -> UpdateProductCommand:
        return UpdateProductCommand(
            name=self.name,
            description=self.description,
            price=self.price,
            is_active=self.is_active,
            image=self.image.to_command() if self.image else None,
            remove_image=self.remove_image,
        )


class ProductStatusResponse(CamelModel):
    id: int
    is_active: bool


# ------------------------------------------------------------------
# Invoices
# ------------------------------------------------------------------


class InvoiceLineRequest(CamelModel):
    product_id: int
    quantity: int
    unit_price: Decimal


class CreateInvoiceRequest(CamelModel):
    """Request schema for issuing an invoice.

    Attributes:
        invoice_number: Unique number, 3-20 letters, digits, '-' or '_'.
        client_id: Id of an existing client.
        invoice_date: Issue date, not in the future.
        subtotal: Sum of line totals as computed by the client.
        tax_amount: Tax on the subtotal as computed by the client.
        total: Subtotal plus tax.
        details: Invoice lines, at least one.
    """

    invoice_number: str
    client_id: int
    invoice_date: date
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    details: list[InvoiceLineRequest] = Field(default_factory=list)

    def to_command(self) -> CreateInvoiceCommand:
        return CreateInvoiceCommand(
            invoice_number=self.invoice_number,
            client_id=self.client_id,
            invoice_date=self.invoice_date,
            subtotal=self.subtotal,
            tax_amount=self.tax_amount,
            total=self.total,
            lines=tuple(
                InvoiceLineCommand(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in self.details
            ),
        )


class InvoiceLineResponse(CamelModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class InvoiceResponse(CamelModel):
    id: int
    invoice_number: str
    client_id: int
    client_name: str
    invoice_date: date
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    status: str
    created_at: Optional[datetime] = None
    details: list[InvoiceLineResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            client_name=invoice.client_name,
            invoice_date=invoice.invoice_date,
            subtotal=invoice.subtotal,
            tax_amount=invoice.tax_amount,
            total=invoice.total,
            status=invoice.status,
            created_at=invoice.created_at,
            details=[
                InvoiceLineResponse(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total=line.total,
                )
                for line in invoice.lines
            ],
        )


class InvoicePageResponse(CamelModel):
    items: list[InvoiceResponse]
    total_records: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: InvoicePage) -> "InvoicePageResponse":
        return cls(
            items=[InvoiceResponse.from_entity(item) for item in page.items],
            total_records=page.total_records,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


class InvoiceNumberExistsResponse(CamelModel):
    invoice_number: str
    exists: bool


class FieldErrorSchema(CamelModel):
    field: str
    message: str
    code: Optional[str] = None
    attempted_value: Any = None
    suggestion: Optional[str] = None

    @classmethod
    def from_domain(cls, error: FieldError) -> "FieldErrorSchema":
        return cls(
            field=error.field,
            message=error.message,
            code=error.code,
            attempted_value=error.attempted_value,
            suggestion=error.suggestion,
        )


class InvoicePreviewResponse(CamelModel):
    """Outcome of checking an invoice without issuing it.

    Attributes:
        is_valid: True when the invoice would be accepted.
        subtotal: Subtotal computed from the lines (valid invoices only).
        tax_amount: Tax computed from the subtotal (valid invoices only).
        total: Computed total (valid invoices only).
        errors: Every violation found, in check order.
    """

    is_valid: bool
    subtotal: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total: Optional[Decimal] = None
    errors: list[FieldErrorSchema] = Field(default_factory=list)
