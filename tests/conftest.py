"""Shared fixtures: settings per run mode and an in-memory billing database."""

from decimal import Decimal

import pytest
from sqlalchemy import text

from invoicing.core.config import Settings
from invoicing.infrastructure.db import create_db_engine, create_schema


@pytest.fixture
def production_settings() -> Settings:
    return Settings(
        environment="production",
        error_probes_enabled=True,
        database_url="sqlite:///:memory:",
    )


@pytest.fixture
def development_settings() -> Settings:
    return Settings(
        environment="development",
        error_probes_enabled=True,
        database_url="sqlite:///:memory:",
    )


@pytest.fixture
def engine():
    """Empty billing schema in a private in-memory SQLite database."""
    engine = create_db_engine("sqlite:///:memory:")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_engine(engine):
    """Billing schema with two clients and three products (one inactive)."""
    with engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO clients (id, name, email, phone, address) "
                "VALUES (:id, :name, :email, :phone, :address)"
            ),
            [
                {
                    "id": 1,
                    "name": "Ana Gómez",
                    "email": "ana@example.com",
                    "phone": "300 123 4567",
                    "address": "Calle 10 # 20-30",
                },
                {
                    "id": 2,
                    "name": "Carlos Ruiz",
                    "email": "carlos@example.com",
                    "phone": "",
                    "address": "",
                },
            ],
        )
        conn.execute(
            text(
                "INSERT INTO products (id, name, description, price, is_active) "
                "VALUES (:id, :name, :description, :price, :is_active)"
            ),
            [
                {
                    "id": 1,
                    "name": "Laptop",
                    "description": "Portátil 14 pulgadas",
                    "price": str(Decimal("1500.00")),
                    "is_active": True,
                },
                {
                    "id": 2,
                    "name": "Mouse",
                    "description": "Mouse inalámbrico",
                    "price": str(Decimal("25.50")),
                    "is_active": True,
                },
                {
                    "id": 3,
                    "name": "Monitor CRT",
                    "description": "Descontinuado",
                    "price": str(Decimal("80.00")),
                    "is_active": False,
                },
            ],
        )
    return engine
