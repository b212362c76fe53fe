"""
Adapter: Invoice repository.

Implements InvoiceRepository port with SQLAlchemy Core and raw SQL.
Every driver failure surfaces as a DatabaseError naming the operation.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from invoicing.domain.billing.entities import Invoice, InvoiceLine
from invoicing.domain.billing.ports import InvoiceRepository
from invoicing.infrastructure.billing._sql import (
    contains_pattern,
    database_operation,
    to_date,
    to_datetime,
    to_decimal,
)

logger = logging.getLogger(__name__)

_SELECT_INVOICES = """
    SELECT i.id, i.invoice_number, i.client_id, c.name, i.invoice_date,
           i.subtotal, i.tax_amount, i.total, i.status, i.created_at
    FROM invoices i
    JOIN clients c ON c.id = i.client_id
"""


def _row_to_invoice(row, lines: tuple[InvoiceLine, ...] = ()) -> Invoice:
    return Invoice(
        id=row[0],
        invoice_number=row[1],
        client_id=row[2],
        client_name=row[3],
        invoice_date=to_date(row[4]),
        subtotal=to_decimal(row[5]),
        tax_amount=to_decimal(row[6]),
        total=to_decimal(row[7]),
        status=row[8],
        created_at=to_datetime(row[9]),
        lines=lines,
    )


class InvoiceRepositoryAdapter(InvoiceRepository):
    """Stores invoices in the ``invoices`` and ``invoice_lines`` tables."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def create(self, invoice: Invoice) -> int:
        """Insert the invoice and its lines in one transaction.

        Args:
            invoice: Invoice to persist. Its ``id`` is ignored.

        Returns:
            The generated invoice id.
        """
        with database_operation(
            "CreateInvoice",
            conflict_type="DUPLICATE_INVOICE_NUMBER",
            invoice_number=invoice.invoice_number,
        ):
            with self._engine.begin() as conn:
                invoice_id = conn.execute(
                    text(
                        """
                        INSERT INTO invoices
                            (invoice_number, client_id, invoice_date,
                             subtotal, tax_amount, total, status)
                        VALUES
                            (:invoice_number, :client_id, :invoice_date,
                             :subtotal, :tax_amount, :total, :status)
                        RETURNING id
                        """
                    ),
                    {
                        "invoice_number": invoice.invoice_number,
                        "client_id": invoice.client_id,
                        "invoice_date": invoice.invoice_date.isoformat(),
                        "subtotal": str(invoice.subtotal),
                        "tax_amount": str(invoice.tax_amount),
                        "total": str(invoice.total),
                        "status": invoice.status,
                    },
                ).scalar_one()

                if invoice.lines:
                    conn.execute(
                        text(
                            """
                            INSERT INTO invoice_lines
                                (invoice_id, product_id, quantity, unit_price, total)
                            VALUES
                                (:invoice_id, :product_id, :quantity, :unit_price, :total)
                            """
                        ),
                        [
                            {
                                "invoice_id": invoice_id,
                                "product_id": line.product_id,
                                "quantity": line.quantity,
                                "unit_price": str(line.unit_price),
                                "total": str(line.total),
                            }
                            for line in invoice.lines
                        ],
                    )

        logger.debug("Inserted invoice %s with id %d", invoice.invoice_number, invoice_id)
        return invoice_id

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        with database_operation("GetInvoiceById", invoice_id=invoice_id):
            with self._engine.connect() as conn:
                row = conn.execute(
                    text(_SELECT_INVOICES + " WHERE i.id = :invoice_id"),
                    {"invoice_id": invoice_id},
                ).fetchone()
                if row is None:
                    return None
                return _row_to_invoice(row, self._fetch_lines(conn, row[0]))

    def get_by_number(self, invoice_number: str) -> Optional[Invoice]:
        with database_operation("GetInvoiceByNumber", invoice_number=invoice_number):
            with self._engine.connect() as conn:
                row = conn.execute(
                    text(_SELECT_INVOICES + " WHERE i.invoice_number = :invoice_number"),
                    {"invoice_number": invoice_number},
                ).fetchone()
                if row is None:
                    return None
                return _row_to_invoice(row, self._fetch_lines(conn, row[0]))

    def list_page(self, page: int, page_size: int) -> tuple[list[Invoice], int]:
        """Return one page of invoices, newest first, and the total count.

        Args:
            page: 1-based page number.
            page_size: Number of invoices per page.
        """
        with database_operation("ListInvoices", page=page, page_size=page_size):
            with self._engine.connect() as conn:
                total = conn.execute(text("SELECT COUNT(*) FROM invoices")).scalar_one()
                rows = conn.execute(
                    text(
                        _SELECT_INVOICES
                        + """
                        ORDER BY i.invoice_date DESC, i.id DESC
                        LIMIT :limit OFFSET :offset
                        """
                    ),
                    {"limit": page_size, "offset": (page - 1) * page_size},
                ).fetchall()
                return [_row_to_invoice(row) for row in rows], total

    def search_by_client(self, client_name: str) -> list[Invoice]:
        with database_operation("SearchInvoicesByClient", client_name=client_name):
            with self._engine.connect() as conn:
                rows = conn.execute(
                    text(
                        _SELECT_INVOICES
                        + """
                        WHERE LOWER(c.name) LIKE :pattern ESCAPE '\\'
                        ORDER BY i.invoice_date DESC, i.id DESC
                        """
                    ),
                    {"pattern": contains_pattern(client_name)},
                ).fetchall()
                return [_row_to_invoice(row) for row in rows]

    def search_by_number(self, invoice_number: str) -> list[Invoice]:
        with database_operation("SearchInvoicesByNumber", invoice_number=invoice_number):
            with self._engine.connect() as conn:
                rows = conn.execute(
                    text(
                        _SELECT_INVOICES
                        + """
                        WHERE LOWER(i.invoice_number) LIKE :pattern ESCAPE '\\'
                        ORDER BY i.invoice_date DESC, i.id DESC
                        """
                    ),
                    {"pattern": contains_pattern(invoice_number)},
                ).fetchall()
                return [_row_to_invoice(row) for row in rows]

    def number_exists(self, invoice_number: str) -> bool:
        with database_operation("InvoiceNumberExists", invoice_number=invoice_number):
            with self._engine.connect() as conn:
                count = conn.execute(
                    text(
                        "SELECT COUNT(*) FROM invoices WHERE invoice_number = :invoice_number"
                    ),
                    {"invoice_number": invoice_number},
                ).scalar_one()
        return count > 0

    @staticmethod
    def _fetch_lines(conn, invoice_id: int) -> tuple[InvoiceLine, ...]:
        rows = conn.execute(
            text(
                """
                SELECT l.product_id, l.quantity, l.unit_price, l.total, p.name
                FROM invoice_lines l
                JOIN products p ON p.id = l.product_id
                WHERE l.invoice_id = :invoice_id
                ORDER BY l.id
                """
            ),
            {"invoice_id": invoice_id},
        ).fetchall()
        return tuple(
            InvoiceLine(
                product_id=row[0],
                quantity=row[1],
                unit_price=to_decimal(row[2]),
                total=to_decimal(row[3]),
                product_name=row[4],
            )
            for row in rows
        )
