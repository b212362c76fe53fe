"""
Tests for the billing application layer (use cases).

Tests use cases with mocked ports. No real infrastructure needed.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from invoicing.application.billing.create_invoice import CreateInvoiceUseCase
from invoicing.application.billing.dtos import (
    CreateInvoiceCommand,
    CreateProductCommand,
    InvoiceLineCommand,
    ProductImageCommand,
    SearchInvoicesQuery,
    UpdateProductCommand,
)
from invoicing.application.billing.get_invoice import GetInvoiceUseCase
from invoicing.application.billing.list_clients import ListClientsUseCase
from invoicing.application.billing.list_invoices import ListInvoicesUseCase
from invoicing.application.billing.manage_products import ManageProductsUseCase
from invoicing.domain.billing.entities import Client, Invoice, Product, ProductImage
from invoicing.domain.billing.ports import CatalogRepository, InvoiceRepository
from invoicing.domain.errors import (
    BusinessRuleError,
    ConflictError,
    DatabaseError,
    ImageProcessingError,
    NotFoundError,
    ValidationError,
)
from invoicing.domain.result import Failure, Success


# ══════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════

TODAY = date(2024, 6, 15)

CLIENT = Client(id=1, name="Ana Gómez", email="ana@empresa.co")
LAPTOP = Product(id=1, name="Laptop", price=Decimal("1500.00"))
MOUSE = Product(id=2, name="Mouse", price=Decimal("25.50"))
OLD_MONITOR = Product(id=3, name="Monitor CRT", price=Decimal("80.00"), is_active=False)


def _invoice(invoice_id: int = 10, number: str = "F-0001") -> Invoice:
    return Invoice(
        id=invoice_id,
        invoice_number=number,
        client_id=1,
        client_name="Ana Gómez",
        invoice_date=TODAY,
        subtotal=Decimal("1551.00"),
        tax_amount=Decimal("294.69"),
        total=Decimal("1845.69"),
    )


def _command(**overrides) -> CreateInvoiceCommand:
    values = dict(
        invoice_number="F-0001",
        client_id=1,
        invoice_date=TODAY,
        subtotal=Decimal("1551.00"),
        tax_amount=Decimal("294.69"),
        total=Decimal("1845.69"),
        lines=(
            InvoiceLineCommand(product_id=1, quantity=1, unit_price=Decimal("1500.00")),
            InvoiceLineCommand(product_id=2, quantity=2, unit_price=Decimal("25.50")),
        ),
    )
    values.update(overrides)
    return CreateInvoiceCommand(**values)


@pytest.fixture
def invoices() -> MagicMock:
    repo = MagicMock(spec=InvoiceRepository)
    repo.number_exists.return_value = False
    repo.create.return_value = 10
    repo.get_by_id.return_value = _invoice()
    return repo


@pytest.fixture
def catalog() -> MagicMock:
    repo = MagicMock(spec=CatalogRepository)
    repo.get_client.side_effect = lambda client_id: CLIENT if client_id == 1 else None
    products = {p.id: p for p in (LAPTOP, MOUSE, OLD_MONITOR)}
    repo.get_product.side_effect = products.get
    repo.product_name_exists.return_value = False
    return repo


@pytest.fixture
def create_invoice(invoices, catalog) -> CreateInvoiceUseCase:
    return CreateInvoiceUseCase(invoices, catalog, today=lambda: TODAY)


# ══════════════════════════════════════════════════════════════
# CreateInvoiceUseCase
# ══════════════════════════════════════════════════════════════


class TestCreateInvoice:
    def test_valid_invoice_is_stored_and_read_back(
        self, create_invoice, invoices
    ) -> None:
        result = create_invoice.execute(_command())

        assert result == _invoice()
        stored = invoices.create.call_args.args[0]
        assert stored.subtotal == Decimal("1551.00")
        assert stored.tax_amount == Decimal("294.69")
        assert [line.total for line in stored.lines] == [
            Decimal("1500.00"),
            Decimal("51.00"),
        ]
        invoices.get_by_id.assert_called_once_with(10)

    def test_duplicate_number_is_a_conflict(self, create_invoice, invoices) -> None:
        invoices.number_exists.return_value = True
        with pytest.raises(ConflictError) as info:
            create_invoice.execute(_command())
        assert info.value.conflict_type == "DUPLICATE_INVOICE_NUMBER"
        invoices.create.assert_not_called()

    def test_all_violations_are_reported_together(self, create_invoice, invoices) -> None:
        command = _command(
            invoice_number="F#1",
            client_id=99,
            invoice_date=date(2024, 6, 16),
            lines=(
                InvoiceLineCommand(product_id=404, quantity=1, unit_price=Decimal("1")),
                InvoiceLineCommand(product_id=3, quantity=1, unit_price=Decimal("80.00")),
                InvoiceLineCommand(product_id=2, quantity=1001, unit_price=Decimal("20")),
            ),
        )
        with pytest.raises(ValidationError) as info:
            create_invoice.execute(command)

        codes = {(e.field, e.code) for e in info.value.errors}
        assert ("InvoiceNumber", "INVALID_FORMAT") in codes
        assert ("ClientId", "CLIENT_NOT_FOUND") in codes
        assert ("InvoiceDate", "INVALID_DATE") in codes
        assert ("Details[0].ProductId", "PRODUCT_NOT_FOUND") in codes
        assert ("Details[1].ProductId", "INACTIVE_PRODUCT") in codes
        assert ("Details[2].UnitPrice", "PRICE_MISMATCH") in codes
        assert ("Details[2].Quantity", "OUT_OF_RANGE") in codes
        invoices.create.assert_not_called()

    def test_malformed_number_is_one_format_error(self, create_invoice) -> None:
        with pytest.raises(ValidationError) as info:
            create_invoice.execute(_command(invoice_number="F 0001"))

        (error,) = info.value.errors
        assert (error.field, error.code) == ("InvoiceNumber", "INVALID_FORMAT")
        assert error.attempted_value == "F 0001"
        assert "guiones bajos" in error.suggestion

    def test_invoice_without_lines(self, create_invoice) -> None:
        command = _command(
            lines=(),
            subtotal=Decimal("0"),
            tax_amount=Decimal("0"),
            total=Decimal("0"),
        )
        with pytest.raises(ValidationError) as info:
            create_invoice.execute(command)
        assert info.value.fields == ["Details"]

    def test_totals_must_match_within_a_cent(self, create_invoice) -> None:
        create_invoice.execute(_command(tax_amount=Decimal("294.70"), total=Decimal("1845.70")))

        with pytest.raises(ValidationError) as info:
            create_invoice.execute(_command(total=Decimal("1900.00")))
        assert [(e.field, e.code) for e in info.value.errors] == [
            ("Total", "CALCULATION_ERROR")
        ]

    def test_read_back_failure_is_a_database_error(
        self, create_invoice, invoices
    ) -> None:
        invoices.get_by_id.return_value = None
        with pytest.raises(DatabaseError) as info:
            create_invoice.execute(_command())
        assert info.value.operation == "CreateInvoice"

    def test_tax_rate_is_configurable(self, invoices, catalog) -> None:
        use_case = CreateInvoiceUseCase(
            invoices, catalog, tax_rate=Decimal("0.05"), today=lambda: TODAY
        )
        totals = use_case.compute_totals(_command().lines)
        assert totals.tax_amount == Decimal("77.5500")


class TestPreviewInvoice:
    def test_valid_invoice_returns_totals(self, create_invoice, invoices) -> None:
        result = create_invoice.preview(_command())
        assert isinstance(result, Success)
        assert result.value.total == Decimal("1845.6900")
        invoices.create.assert_not_called()

    def test_duplicate_number_is_one_more_field_error(
        self, create_invoice, invoices
    ) -> None:
        invoices.number_exists.return_value = True
        result = create_invoice.preview(_command(client_id=99))

        assert isinstance(result, Failure)
        assert [(e.field, e.code) for e in result.validation_errors] == [
            ("InvoiceNumber", "DUPLICATE_INVOICE_NUMBER"),
            ("ClientId", "CLIENT_NOT_FOUND"),
        ]

    def test_malformed_number_is_not_looked_up(self, create_invoice, invoices) -> None:
        result = create_invoice.preview(_command(invoice_number="x"))
        assert isinstance(result, Failure)
        invoices.number_exists.assert_not_called()


# ══════════════════════════════════════════════════════════════
# Invoice queries
# ══════════════════════════════════════════════════════════════


class TestGetInvoice:
    def test_by_id(self, invoices) -> None:
        assert GetInvoiceUseCase(invoices).execute(10) == _invoice()

    def test_non_positive_id_is_validation(self, invoices) -> None:
        with pytest.raises(ValidationError):
            GetInvoiceUseCase(invoices).execute(0)
        invoices.get_by_id.assert_not_called()

    def test_missing_id_is_not_found(self, invoices) -> None:
        invoices.get_by_id.return_value = None
        with pytest.raises(NotFoundError) as info:
            GetInvoiceUseCase(invoices).execute(77)
        assert (info.value.resource_type, info.value.resource_id) == ("Invoice", 77)

    def test_missing_number_is_not_found(self, invoices) -> None:
        invoices.get_by_number.return_value = None
        with pytest.raises(NotFoundError):
            GetInvoiceUseCase(invoices).by_number("F-9999")

    def test_blank_number_is_validation(self, invoices) -> None:
        with pytest.raises(ValidationError):
            GetInvoiceUseCase(invoices).number_exists("  ")


class TestListInvoices:
    def test_page(self, invoices) -> None:
        invoices.list_page.return_value = ([_invoice()], 21)
        page = ListInvoicesUseCase(invoices).execute(2, 10)
        assert page.total_pages == 3
        invoices.list_page.assert_called_once_with(2, 10)

    def test_page_size_above_configured_maximum(self, invoices) -> None:
        with pytest.raises(ValidationError) as info:
            ListInvoicesUseCase(invoices, max_page_size=50).execute(1, 51)
        assert info.value.fields == ["PageSize"]

    def test_search_by_client(self, invoices) -> None:
        invoices.search_by_client.return_value = [_invoice()]
        result = ListInvoicesUseCase(invoices).search(
            SearchInvoicesQuery(search_type="Client", search_value="Ana")
        )
        assert len(result) == 1
        invoices.search_by_client.assert_called_once_with("Ana")

    def test_search_by_number(self, invoices) -> None:
        invoices.search_by_number.return_value = []
        ListInvoicesUseCase(invoices).search(
            SearchInvoicesQuery(search_type="InvoiceNumber", search_value="F-0")
        )
        invoices.search_by_number.assert_called_once_with("F-0")

    def test_unknown_search_type(self, invoices) -> None:
        with pytest.raises(ValidationError) as info:
            ListInvoicesUseCase(invoices).search(
                SearchInvoicesQuery(search_type="Total", search_value="100")
            )
        assert info.value.fields == ["SearchType"]

    def test_short_search_term(self, invoices) -> None:
        with pytest.raises(ValidationError) as info:
            ListInvoicesUseCase(invoices).search(
                SearchInvoicesQuery(search_type="Client", search_value="A")
            )
        assert info.value.fields == ["SearchValue"]


# ══════════════════════════════════════════════════════════════
# Catalog
# ══════════════════════════════════════════════════════════════


class TestManageProducts:
    def test_get_missing_product(self, catalog) -> None:
        with pytest.raises(NotFoundError) as info:
            ManageProductsUseCase(catalog).get(999)
        assert info.value.resource_type == "Product"

    def test_create(self, catalog) -> None:
        catalog.create_product.return_value = 4
        catalog.get_product.side_effect = None
        catalog.get_product.return_value = Product(id=4, name="Teclado", price=Decimal("45"))

        created = ManageProductsUseCase(catalog).create(
            CreateProductCommand(name="Teclado", price=Decimal("45"))
        )
        assert created.id == 4
        assert catalog.create_product.call_args.args[0].name == "Teclado"

    def test_duplicate_name_suggests_alternatives(self, catalog) -> None:
        catalog.product_name_exists.return_value = True
        with pytest.raises(ConflictError) as info:
            ManageProductsUseCase(catalog).create(
                CreateProductCommand(name="Laptop", price=Decimal("10"))
            )
        assert info.value.conflict_type == "DUPLICATE_PRODUCT_NAME"
        assert "Laptop Pro" in info.value.additional_data["suggested_names"]

    def test_non_positive_price_breaks_business_rule(self, catalog) -> None:
        with pytest.raises(BusinessRuleError) as info:
            ManageProductsUseCase(catalog).create(
                CreateProductCommand(name="Teclado", price=Decimal("0"))
            )
        assert info.value.business_rule == "INVALID_PRODUCT_PRICE"
        catalog.create_product.assert_not_called()

    def test_short_name_is_validation(self, catalog) -> None:
        with pytest.raises(ValidationError) as info:
            ManageProductsUseCase(catalog).create(
                CreateProductCommand(name="TV", price=Decimal("10"))
            )
        assert info.value.fields == ["Name"]

    @pytest.mark.parametrize(
        "image",
        [
            ProductImageCommand("foto.gif", "image/gif", 1024),
            ProductImageCommand("foto.png", "image/png", 11 * 1024 * 1024),
            ProductImageCommand("foto.exe", "image/png", 1024),
        ],
    )
    def test_rejected_images(self, catalog, image) -> None:
        with pytest.raises(ImageProcessingError) as info:
            ManageProductsUseCase(catalog).create(
                CreateProductCommand(name="Teclado", price=Decimal("10"), image=image)
            )
        assert info.value.file_size_bytes == image.file_size

    def test_update_keeps_omitted_fields(self, catalog) -> None:
        catalog.get_product.side_effect = None
        existing = Product(
            id=1,
            name="Laptop",
            price=Decimal("1500.00"),
            description="14 pulgadas",
            image=ProductImage("laptop.png", "image/png", 2048),
        )
        catalog.get_product.return_value = existing

        ManageProductsUseCase(catalog).update(
            1, UpdateProductCommand(price=Decimal("1400.00"))
        )
        updated = catalog.update_product.call_args.args[0]
        assert updated.price == Decimal("1400.00")
        assert updated.description == "14 pulgadas"
        assert updated.image == existing.image
        catalog.product_name_exists.assert_not_called()

    def test_update_can_remove_image(self, catalog) -> None:
        ManageProductsUseCase(catalog).update(2, UpdateProductCommand(remove_image=True))
        assert catalog.update_product.call_args.args[0].image is None

    def test_update_to_taken_name(self, catalog) -> None:
        catalog.product_name_exists.return_value = True
        with pytest.raises(ConflictError):
            ManageProductsUseCase(catalog).update(2, UpdateProductCommand(name="Laptop"))
        catalog.product_name_exists.assert_called_once_with("Laptop", exclude_id=2)

    def test_delete_missing_product(self, catalog) -> None:
        catalog.delete_product.return_value = False
        with pytest.raises(NotFoundError):
            ManageProductsUseCase(catalog).delete(50)

    def test_toggle_status(self, catalog) -> None:
        catalog.toggle_product_status.return_value = False
        assert ManageProductsUseCase(catalog).toggle_status(1) is False

    def test_search_term_is_validated(self, catalog) -> None:
        with pytest.raises(ValidationError):
            ManageProductsUseCase(catalog).search("")
        catalog.search_products.assert_not_called()


class TestListClients:
    def test_returns_catalog_clients(self, catalog) -> None:
        catalog.list_clients.return_value = [CLIENT]
        assert ListClientsUseCase(catalog).execute() == [CLIENT]
