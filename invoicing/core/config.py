"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here, no scattered magic strings.
"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from invoicing.domain.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        environment: Run mode. ``development`` enables development
            diagnostics in error responses; anything else is production.
        debug: Expose the interactive API docs.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        database_url: SQLAlchemy URL of the billing database.
        auto_create_schema: Create missing tables on startup.
        error_help_base_url: Base of the ``helpUrl`` of error responses.
        error_probes_enabled: Mount the endpoints that raise sample errors.
        tax_rate: Tax applied to invoice subtotals.
        max_page_size: Upper bound of the page size for listings.
        max_image_size_bytes: Largest accepted product image.
        allowed_image_types: Accepted product image content types.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Invoicing Service"
    version: str = "1.0.0"
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"

    database_url: Optional[str] = None
    auto_create_schema: bool = False

    error_help_base_url: str = "https://api.doublevpartners.com/docs/errors/"
    error_probes_enabled: bool = False

    tax_rate: Decimal = Decimal("0.19")
    max_page_size: int = 100
    max_image_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    allowed_image_types: list[str] = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
    ]

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    def require_database_url(self) -> str:
        """Return the database URL or fail with a ConfigurationError."""
        if not self.database_url:
            raise ConfigurationError(
                "DATABASE_URL is not configured",
                "database_url",
                user_message="La conexión a la base de datos no está configurada",
            )
        return self.database_url


settings = Settings()
