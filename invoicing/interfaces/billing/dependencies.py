"""
Dependency injection for the billing bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the billing context.
"""

import threading

from fastapi import Depends, Request
from sqlalchemy.engine import Engine

from invoicing.application.billing.create_invoice import CreateInvoiceUseCase
from invoicing.application.billing.get_invoice import GetInvoiceUseCase
from invoicing.application.billing.list_clients import ListClientsUseCase
from invoicing.application.billing.list_invoices import ListInvoicesUseCase
from invoicing.application.billing.manage_products import ManageProductsUseCase
from invoicing.core.config import Settings
from invoicing.domain.billing.ports import CatalogRepository, InvoiceRepository
from invoicing.infrastructure.billing.catalog_repository import (
    CatalogRepositoryAdapter,
)
from invoicing.infrastructure.billing.invoice_repository import (
    InvoiceRepositoryAdapter,
)
from invoicing.infrastructure.db import create_db_engine

_engine_lock = threading.Lock()


def get_settings(request: Request) -> Settings:
    """Return the settings the running application was created with."""
    return request.app.state.settings


def get_engine(request: Request) -> Engine:
    """Return the application's engine, creating it on first use.

    Sync dependencies run in the threadpool, so creation is serialized and
    every request shares one engine.

    Raises:
        ConfigurationError: If no database URL is configured.
    """
    state = request.app.state
    engine = getattr(state, "engine", None)
    if engine is None:
        with _engine_lock:
            engine = getattr(state, "engine", None)
            if engine is None:
                engine = create_db_engine(get_settings(request).require_database_url())
                state.engine = engine
    return engine


def get_invoice_repository(engine: Engine = Depends(get_engine)) -> InvoiceRepository:
    return InvoiceRepositoryAdapter(engine=engine)


def get_catalog_repository(engine: Engine = Depends(get_engine)) -> CatalogRepository:
    return CatalogRepositoryAdapter(engine=engine)


def get_create_invoice_use_case(
    invoices: InvoiceRepository = Depends(get_invoice_repository),
    catalog: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> CreateInvoiceUseCase:
    """Build CreateInvoiceUseCase with its infrastructure dependencies."""
    return CreateInvoiceUseCase(
        invoice_repository=invoices,
        catalog_repository=catalog,
        tax_rate=settings.tax_rate,
    )


def get_get_invoice_use_case(
    invoices: InvoiceRepository = Depends(get_invoice_repository),
) -> GetInvoiceUseCase:
    """Build GetInvoiceUseCase with its infrastructure dependencies."""
    return GetInvoiceUseCase(invoice_repository=invoices)


def get_list_invoices_use_case(
    invoices: InvoiceRepository = Depends(get_invoice_repository),
    settings: Settings = Depends(get_settings),
) -> ListInvoicesUseCase:
    """Build ListInvoicesUseCase with its infrastructure dependencies."""
    return ListInvoicesUseCase(
        invoice_repository=invoices,
        max_page_size=settings.max_page_size,
    )


def get_manage_products_use_case(
    catalog: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> ManageProductsUseCase:
    """Build ManageProductsUseCase with its infrastructure dependencies."""
    return ManageProductsUseCase(
        catalog_repository=catalog,
        max_image_size_bytes=settings.max_image_size_bytes,
        allowed_image_types=settings.allowed_image_types,
    )


def get_list_clients_use_case(
    catalog: CatalogRepository = Depends(get_catalog_repository),
) -> ListClientsUseCase:
    """Build ListClientsUseCase with its infrastructure dependencies."""
    return ListClientsUseCase(catalog_repository=catalog)
