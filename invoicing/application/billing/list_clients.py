"""
Use case: List clients available for invoicing.

Side effects: None (read-only)
"""

from invoicing.domain.billing.entities import Client
from invoicing.domain.billing.ports import CatalogRepository


class ListClientsUseCase:
    def __init__(self, catalog_repository: CatalogRepository) -> None:
        self._catalog = catalog_repository

    def execute(self) -> list[Client]:
        return self._catalog.list_clients()
