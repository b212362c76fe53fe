"""
Adapter: Catalog repository.

Implements CatalogRepository port (clients and products) with raw SQL.
Product image metadata lives in nullable ``image_*`` columns.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from invoicing.domain.billing.entities import Client, Product, ProductImage
from invoicing.domain.billing.ports import CatalogRepository
from invoicing.infrastructure.billing._sql import (
    contains_pattern,
    database_operation,
    to_decimal,
)

logger = logging.getLogger(__name__)

_SELECT_CLIENTS = "SELECT id, name, email, phone, address FROM clients"
_SELECT_PRODUCTS = """
    SELECT id, name, description, price, is_active,
           image_file_name, image_content_type, image_file_size,
           image_width, image_height, image_alt_text
    FROM products
"""


def _row_to_client(row) -> Client:
    return Client(
        id=row[0],
        name=row[1],
        email=row[2],
        phone=row[3] or "",
        address=row[4] or "",
    )


def _row_to_product(row) -> Product:
    image = None
    if row[5]:
        image = ProductImage(
            file_name=row[5],
            content_type=row[6] or "",
            file_size=row[7] or 0,
            width=row[8] or 0,
            height=row[9] or 0,
            alt_text=row[10] or "",
        )
    return Product(
        id=row[0],
        name=row[1],
        description=row[2] or "",
        price=to_decimal(row[3]),
        is_active=bool(row[4]),
        image=image,
    )


def _product_params(product: Product) -> dict:
    image = product.image
    return {
        "name": product.name,
        "description": product.description,
        "price": str(product.price),
        "is_active": product.is_active,
        "image_file_name": image.file_name if image else None,
        "image_content_type": image.content_type if image else None,
        "image_file_size": image.file_size if image else None,
        "image_width": image.width if image else None,
        "image_height": image.height if image else None,
        "image_alt_text": image.alt_text if image else None,
    }


class CatalogRepositoryAdapter(CatalogRepository):
    """Reads clients and maintains products.

    Implements the CatalogRepository port defined in the domain layer.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_clients(self) -> list[Client]:
        with database_operation("ListClients"):
            with self._engine.connect() as conn:
                rows = conn.execute(text(_SELECT_CLIENTS + " ORDER BY name")).fetchall()
                return [_row_to_client(row) for row in rows]

    def get_client(self, client_id: int) -> Optional[Client]:
        with database_operation("GetClientById", client_id=client_id):
            with self._engine.connect() as conn:
                row = conn.execute(
                    text(_SELECT_CLIENTS + " WHERE id = :client_id"),
                    {"client_id": client_id},
                ).fetchone()
                return _row_to_client(row) if row else None

    def list_products(self, active_only: bool = False) -> list[Product]:
        query = _SELECT_PRODUCTS
        if active_only:
            query += " WHERE is_active = :active"
        query += " ORDER BY name"

        with database_operation("ListProducts", active_only=active_only):
            with self._engine.connect() as conn:
                rows = conn.execute(text(query), {"active": True}).fetchall()
                return [_row_to_product(row) for row in rows]

    def get_product(self, product_id: int) -> Optional[Product]:
        with database_operation("GetProductById", product_id=product_id):
            with self._engine.connect() as conn:
                row = conn.execute(
                    text(_SELECT_PRODUCTS + " WHERE id = :product_id"),
                    {"product_id": product_id},
                ).fetchone()
                return _row_to_product(row) if row else None

    def search_products(self, term: str) -> list[Product]:
        """Case-insensitive match on name or description."""
        with database_operation("SearchProducts", term=term):
            with self._engine.connect() as conn:
                rows = conn.execute(
                    text(
                        _SELECT_PRODUCTS
                        + """
                        WHERE LOWER(name) LIKE :pattern ESCAPE '\\'
                           OR LOWER(description) LIKE :pattern ESCAPE '\\'
                        ORDER BY name
                        """
                    ),
                    {"pattern": contains_pattern(term)},
                ).fetchall()
                return [_row_to_product(row) for row in rows]

    def product_name_exists(
        self, name: str, exclude_id: Optional[int] = None
    ) -> bool:
        with database_operation("ProductNameExists", name=name):
            with self._engine.connect() as conn:
                count = conn.execute(
                    text(
                        """
                        SELECT COUNT(*) FROM products
                        WHERE LOWER(name) = :name
                          AND (:exclude_id IS NULL OR id <> :exclude_id)
                        """
                    ),
                    {"name": name.lower(), "exclude_id": exclude_id},
                ).scalar_one()
        return count > 0

    def create_product(self, product: Product) -> int:
        with database_operation(
            "CreateProduct", conflict_type="DUPLICATE_PRODUCT_NAME", name=product.name
        ):
            with self._engine.begin() as conn:
                product_id = conn.execute(
                    text(
                        """
                        INSERT INTO products
                            (name, description, price, is_active,
                             image_file_name, image_content_type, image_file_size,
                             image_width, image_height, image_alt_text)
                        VALUES
                            (:name, :description, :price, :is_active,
                             :image_file_name, :image_content_type, :image_file_size,
                             :image_width, :image_height, :image_alt_text)
                        RETURNING id
                        """
                    ),
                    _product_params(product),
                ).scalar_one()
        logger.debug("Inserted product %s with id %d", product.name, product_id)
        return product_id

    def update_product(self, product: Product) -> None:
        with database_operation(
            "UpdateProduct",
            conflict_type="DUPLICATE_PRODUCT_NAME",
            product_id=product.id,
        ):
            with self._engine.begin() as conn:
                conn.execute(
                    text(
                        """
                        UPDATE products
                        SET name = :name,
                            description = :description,
                            price = :price,
                            is_active = :is_active,
                            image_file_name = :image_file_name,
                            image_content_type = :image_content_type,
                            image_file_size = :image_file_size,
                            image_width = :image_width,
                            image_height = :image_height,
                            image_alt_text = :image_alt_text
                        WHERE id = :id
                        """
                    ),
                    {"id": product.id, **_product_params(product)},
                )

    def delete_product(self, product_id: int) -> bool:
        with database_operation("DeleteProduct", product_id=product_id):
            with self._engine.begin() as conn:
                result = conn.execute(
                    text("DELETE FROM products WHERE id = :product_id"),
                    {"product_id": product_id},
                )
        return result.rowcount > 0

    def toggle_product_status(self, product_id: int) -> bool:
        with database_operation("ToggleProductStatus", product_id=product_id):
            with self._engine.begin() as conn:
                conn.execute(
                    text("UPDATE products SET is_active = NOT is_active WHERE id = :product_id"),
                    {"product_id": product_id},
                )
                is_active = conn.execute(
                    text("SELECT is_active FROM products WHERE id = :product_id"),
                    {"product_id": product_id},
                ).scalar_one_or_none()
        return bool(is_active)
