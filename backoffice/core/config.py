"""
Application Configuration
"""
from pydantic_settings import BaseSettings
from decimal import Decimal
from typing import List
import warnings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Back Office API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./backoffice.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Stock and ledger adjustments: fail instead of skipping rows that vanished
    STRICT_ADJUSTMENTS: bool = False

    # Invoicing
    DEFAULT_CGST_RATE: Decimal = Decimal("9")
    DEFAULT_SGST_RATE: Decimal = Decimal("9")
    DEFAULT_IGST_RATE: Decimal = Decimal("0")
    INVOICE_NUMBER_PREFIX: str = "INV-"
    INVOICE_NUMBER_PADDING: int = 4
    CURRENCY_PHRASE: str = "Rupees Only"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def database_url(self) -> str:
        """Get properly formatted database URL"""
        url = self.DATABASE_URL
        if url.startswith("file:"):
            # Convert file: URL to SQLite URL
            path = url[5:]
            return f"sqlite:///{path}"
        return url

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    def validate_runtime_settings(self):
        """Refuse unsafe combinations in production, warn elsewhere"""
        if self.is_production and self.DEBUG:
            raise ValueError(
                "CRITICAL: DEBUG mode is enabled in production! "
                "Set DEBUG=False for production environment."
            )

        if self.is_production and self.database_url.startswith("sqlite"):
            warnings.warn(
                "WARNING: SQLite does not honour row locks. "
                "Concurrent invoices for the same party or item may lose updates.",
                UserWarning
            )

        return True

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

try:
    settings.validate_runtime_settings()
except ValueError as e:
    if settings.is_production:
        raise
    else:
        warnings.warn(str(e), UserWarning)
