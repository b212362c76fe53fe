"""
Database engine and schema bootstrap.

``create_schema`` creates the billing tables when they are missing. The DDL
sticks to types SQLite and PostgreSQL both accept, so development and tests
can run against an in-memory SQLite engine.
"""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from invoicing.infrastructure.billing._sql import database_operation

logger = logging.getLogger(__name__)

DDL_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS clients (
        id       INTEGER PRIMARY KEY,
        name     VARCHAR(100) NOT NULL,
        email    VARCHAR(100) NOT NULL,
        phone    VARCHAR(20)  DEFAULT '',
        address  VARCHAR(200) DEFAULT ''
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS products (
        id                  INTEGER PRIMARY KEY,
        name                VARCHAR(100)  NOT NULL UNIQUE,
        description         VARCHAR(500)  DEFAULT '',
        price               NUMERIC(18,2) NOT NULL,
        is_active           BOOLEAN       NOT NULL DEFAULT TRUE,
        image_file_name     VARCHAR(255),
        image_content_type  VARCHAR(50),
        image_file_size     INTEGER,
        image_width         INTEGER,
        image_height        INTEGER,
        image_alt_text      VARCHAR(200)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS invoices (
        id              INTEGER PRIMARY KEY,
        invoice_number  VARCHAR(20)   NOT NULL UNIQUE,
        client_id       INTEGER       NOT NULL REFERENCES clients (id),
        invoice_date    DATE          NOT NULL,
        subtotal        NUMERIC(18,2) NOT NULL,
        tax_amount      NUMERIC(18,2) NOT NULL,
        total           NUMERIC(18,2) NOT NULL,
        status          VARCHAR(20)   NOT NULL DEFAULT 'Issued',
        created_at      TIMESTAMP     DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS invoice_lines (
        id          INTEGER PRIMARY KEY,
        invoice_id  INTEGER       NOT NULL REFERENCES invoices (id),
        product_id  INTEGER       NOT NULL REFERENCES products (id),
        quantity    INTEGER       NOT NULL,
        unit_price  NUMERIC(18,2) NOT NULL,
        total       NUMERIC(18,2) NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_invoices_client ON invoices (client_id)",
    "CREATE INDEX IF NOT EXISTS idx_invoice_lines_invoice ON invoice_lines (invoice_id)",
]


def create_db_engine(database_url: str) -> Engine:
    """Build a SQLAlchemy engine for ``database_url``.

    In-memory SQLite URLs share one connection so every session sees the
    same database.
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


def create_schema(engine: Engine) -> None:
    """Create missing billing tables (idempotent).

    Raises:
        DatabaseError: If any DDL statement fails.
    """
    with database_operation("CreateSchema"):
        with engine.begin() as conn:
            for ddl in DDL_STATEMENTS:
                conn.execute(text(ddl))
    logger.info("Billing tables verified/created.")
