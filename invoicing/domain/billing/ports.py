"""
Port interfaces (ABCs) for the billing bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces and must surface every
storage failure as a DatabaseError naming the failed operation.
"""

from abc import ABC, abstractmethod
from typing import Optional

from invoicing.domain.billing.entities import Client, Invoice, Product


class InvoiceRepository(ABC):
    """Port for invoice persistence."""

    @abstractmethod
    def create(self, invoice: Invoice) -> int:
        """Persist a new invoice with its lines and return the generated id.

        The ``id`` of the given invoice is ignored.
        """
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        """Return an invoice with its lines, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def get_by_number(self, invoice_number: str) -> Optional[Invoice]:
        """Return an invoice by its number, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def list_page(self, page: int, page_size: int) -> tuple[list[Invoice], int]:
        """Return one page of invoices (newest first) and the total count."""
        raise NotImplementedError

    @abstractmethod
    def search_by_client(self, client_name: str) -> list[Invoice]:
        """Return invoices whose client name contains the given text."""
        raise NotImplementedError

    @abstractmethod
    def search_by_number(self, invoice_number: str) -> list[Invoice]:
        """Return invoices whose number contains the given text."""
        raise NotImplementedError

    @abstractmethod
    def number_exists(self, invoice_number: str) -> bool:
        """Return True if an invoice already uses this number."""
        raise NotImplementedError


class CatalogRepository(ABC):
    """Port for clients and products."""

    @abstractmethod
    def list_clients(self) -> list[Client]:
        raise NotImplementedError

    @abstractmethod
    def get_client(self, client_id: int) -> Optional[Client]:
        raise NotImplementedError

    @abstractmethod
    def list_products(self, active_only: bool = False) -> list[Product]:
        raise NotImplementedError

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        raise NotImplementedError

    @abstractmethod
    def search_products(self, term: str) -> list[Product]:
        """Return products whose name or description contains ``term``."""
        raise NotImplementedError

    @abstractmethod
    def product_name_exists(
        self, name: str, exclude_id: Optional[int] = None
    ) -> bool:
        """Return True if another product already uses ``name``."""
        raise NotImplementedError

    @abstractmethod
    def create_product(self, product: Product) -> int:
        """Persist a new product and return the generated id."""
        raise NotImplementedError

    @abstractmethod
    def update_product(self, product: Product) -> None:
        """Overwrite the stored product with the same id."""
        raise NotImplementedError

    @abstractmethod
    def delete_product(self, product_id: int) -> bool:
        """Delete a product. Returns False if nothing was deleted."""
        raise NotImplementedError

    @abstractmethod
    def toggle_product_status(self, product_id: int) -> bool:
        """Flip ``is_active`` and return the new value."""
        raise NotImplementedError
