"""
Use case: Manage the product catalog.

Input: product ids, search terms, CreateProductCommand, UpdateProductCommand
Output: Product, list of Product, or bool (delete/toggle)
Side effects: Creates, updates and deletes products.
Failure cases: ValidationError (bad id, name or search term), NotFoundError
(unknown product), ConflictError (duplicate name), BusinessRuleError
(non-positive price), ImageProcessingError (unsupported image metadata),
DatabaseError (storage failures).
"""

import logging
import os
from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from invoicing.application.billing.dtos import (
    CreateProductCommand,
    ProductImageCommand,
    UpdateProductCommand,
)
from invoicing.domain.billing.entities import Product, ProductImage
from invoicing.domain.billing.ports import CatalogRepository
from invoicing.domain.errors import (
    BusinessRuleError,
    ConflictError,
    DatabaseError,
    ImageProcessingError,
    NotFoundError,
)
from invoicing.domain.validation import (
    require_id,
    require_non_empty_string,
    require_search_term,
    require_string_length,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_SIZE_BYTES = 10 * 1024 * 1024
DEFAULT_ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
NAME_SUFFIXES = ("Pro", "Plus", "Premium", "Deluxe", "Standard")


def suggest_product_names(base_name: str) -> list[str]:
    """Alternative names offered when ``base_name`` is already taken."""
    return [f"{base_name} {suffix}" for suffix in NAME_SUFFIXES]


class ManageProductsUseCase:
    """Catalog product queries and maintenance.

    Image metadata is checked against ``allowed_image_types`` and
    ``max_image_size_bytes`` before anything is stored.
    """

    def __init__(
        self,
        catalog_repository: CatalogRepository,
        max_image_size_bytes: int = DEFAULT_MAX_IMAGE_SIZE_BYTES,
        allowed_image_types: Iterable[str] = DEFAULT_ALLOWED_IMAGE_TYPES,
    ) -> None:
        self._catalog = catalog_repository
        self._max_image_size_bytes = max_image_size_bytes
        self._allowed_image_types = frozenset(t.lower() for t in allowed_image_types)

    def list_all(self) -> list[Product]:
        return self._catalog.list_products()

    def list_active(self) -> list[Product]:
        return self._catalog.list_products(active_only=True)

    def get(self, product_id: int) -> Product:
        """Return one product.

        Raises:
            ValidationError: If ``product_id`` is not positive.
            NotFoundError: If the product does not exist.
        """
        require_id(product_id, "ProductId")
        product = self._catalog.get_product(product_id)
        if product is None:
            raise NotFoundError(
                "Product",
                product_id,
                user_message=f"El producto con ID {product_id} no existe en el sistema.",
            )
        return product

    def search(self, term: str) -> list[Product]:
        require_search_term(term)
        return self._catalog.search_products(term)

    def create(self, command: CreateProductCommand) -> Product:
        """Create a product and return it as stored.

        Args:
            command: Name, price, description, status and optional image.

        Returns:
            The stored product.

        Raises:
            ValidationError: If the name is empty or not 3-100 characters.
            ConflictError: If another product already uses the name.
            BusinessRuleError: If the price is not positive.
            ImageProcessingError: If the image type or size is not accepted.
            DatabaseError: If the product cannot be stored or read back.
        """
        self._check_name(command.name)
        if self._catalog.product_name_exists(command.name):
            raise ConflictError(
                f"Ya existe un producto con el nombre '{command.name}'",
                "DUPLICATE_PRODUCT_NAME",
                user_message=(
                    f"El nombre '{command.name}' ya está en uso. "
                    "Por favor, elija un nombre diferente."
                ),
                additional_data={
                    "product_name": command.name,
                    "suggested_names": suggest_product_names(command.name),
                },
            )
        self._check_price(command.price)
        image = self._to_image(command.image) if command.image else None

        product_id = self._catalog.create_product(
            Product(
                id=0,
                name=command.name,
                price=command.price,
                description=command.description,
                is_active=command.is_active,
                image=image,
            )
        )
        logger.info("Created product id=%d name=%s", product_id, command.name)

        created = self._catalog.get_product(product_id)
        if created is None:
            raise DatabaseError(
                "El producto se creó pero no se pudo recuperar",
                "CreateProduct",
                additional_data={"product_id": product_id},
            )
        return created

    def update(self, product_id: int, command: UpdateProductCommand) -> Product:
        """Apply a partial update; fields left as None keep their value."""
        existing = self.get(product_id)

        if command.name is not None and command.name != existing.name:
            self._check_name(command.name)
            if self._catalog.product_name_exists(command.name, exclude_id=product_id):
                raise ConflictError(
                    f"Ya existe un producto con el nombre '{command.name}'",
                    "DUPLICATE_PRODUCT_NAME",
                    user_message=(
                        f"El nombre '{command.name}' ya está en uso por otro "
                        "producto. Por favor, elija un nombre diferente."
                    ),
                    additional_data={
                        "product_id": product_id,
                        "new_name": command.name,
                        "existing_name": existing.name,
                        "suggested_names": suggest_product_names(command.name),
                    },
                )
        if command.price is not None:
            self._check_price(command.price, product_id)

        image = existing.image
        if command.remove_image:
            image = None
        elif command.image is not None:
            image = self._to_image(command.image)

        updated = replace(
            existing,
            name=command.name if command.name is not None else existing.name,
            description=(
                command.description
                if command.description is not None
                else existing.description
            ),
            price=command.price if command.price is not None else existing.price,
            is_active=(
                command.is_active if command.is_active is not None else existing.is_active
            ),
            image=image,
        )
        self._catalog.update_product(updated)

        stored = self._catalog.get_product(product_id)
        if stored is None:
            raise DatabaseError(
                "El producto se actualizó pero no se pudo recuperar",
                "UpdateProduct",
                additional_data={"product_id": product_id},
            )
        return stored

    def delete(self, product_id: int) -> None:
        require_id(product_id, "ProductId")
        if not self._catalog.delete_product(product_id):
            raise NotFoundError(
                "Product",
                product_id,
                user_message=f"El producto con ID {product_id} no existe en el sistema.",
            )
        logger.info("Deleted product id=%d", product_id)

    def toggle_status(self, product_id: int) -> bool:
        """Flip the active flag and return the new value."""
        self.get(product_id)
        return self._catalog.toggle_product_status(product_id)

    @staticmethod
    def _check_name(name: str) -> None:
        require_non_empty_string(name, "Name", "nombre del producto")
        require_string_length(name, "Name", "nombre del producto", 3, 100)

    @staticmethod
    def _check_price(price: Decimal, product_id: Optional[int] = None) -> None:
        if price <= 0:
            data = {"price": str(price), "min_price": "0.01"}
            if product_id is not None:
                data["product_id"] = product_id
            raise BusinessRuleError(
                "El precio del producto debe ser mayor a 0",
                "INVALID_PRODUCT_PRICE",
                user_message="El precio debe ser un valor positivo mayor a cero.",
                additional_data=data,
            )

    def _to_image(self, image: ProductImageCommand) -> ProductImage:
        content_type = image.content_type.lower()
        extension = os.path.splitext(image.file_name)[1].lower()
        if (
            image.file_size <= 0
            or image.file_size > self._max_image_size_bytes
            or content_type not in self._allowed_image_types
            or extension not in ALLOWED_IMAGE_EXTENSIONS
        ):
            max_mb = self._max_image_size_bytes // (1024 * 1024)
            raise ImageProcessingError(
                "El archivo no es una imagen válida",
                image.content_type,
                image.file_size,
                user_message=(
                    "Por favor, seleccione un archivo de imagen válido "
                    f"(JPG, PNG, WebP) con un tamaño máximo de {max_mb}MB."
                ),
                additional_data={
                    "file_name": image.file_name,
                    "content_type": image.content_type,
                    "file_size": image.file_size,
                },
            )
        return ProductImage(
            file_name=image.file_name,
            content_type=content_type,
            file_size=image.file_size,
            width=image.width,
            height=image.height,
            alt_text=image.alt_text,
        )
