"""Centralized configuration using pydantic-settings.

All configuration is loaded from environment variables and .env files.
This is the single source of truth for receiptdesk configuration.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Main application settings.

    All settings can be overridden via environment variables.
    For nested settings, use double underscore: TAX__RATE=0.1
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ============================================================
    # Tax Configuration
    # ============================================================

    class TaxSettings(BaseModel):
        """Tax configuration."""

        rate: str = Field("0.10", description="Flat tax rate as a fraction (0.10 = 10%)")
        invoice_threshold: str = Field(
            "82.50", description="Total at or above which a tax invoice is required"
        )
        tax_name: str = Field("GST", description="Tax name shown on documents")
        validate_business_numbers: bool = Field(
            True, description="Check ABN check digits when reporting tax invoice compliance"
        )

    tax: TaxSettings = TaxSettings()  # type: ignore[call-arg]

    # ============================================================
    # Currency Configuration
    # ============================================================

    class CurrencySettings(BaseModel):
        """Currency configuration - single currency support."""

        code: str = Field("AUD", description="ISO 4217 currency code")
        locale: str = Field("en_AU", description="Locale for amount formatting")

    currency: CurrencySettings = CurrencySettings()  # type: ignore[call-arg]

    # ============================================================
    # Document Configuration
    # ============================================================

    class DocumentSettings(BaseModel):
        """Rendered document configuration."""

        output_dir: Path = Field(Path("data/receipt-pdfs"), description="Directory for PDFs")
        page_size: str = Field("A4", description="Page size (A4 or LETTER)")
        margin_mm: float = Field(18.0, description="Page margin on every side in millimetres")
        repeat_table_header: bool = Field(
            False, description="Redraw the line-item table header on continuation pages"
        )
        footer_text: str = Field("Thank you for your business!", description="Footer text")
        date_format: str = Field("%d/%m/%Y", description="strftime format for the purchase date")
        yes_label: str = Field("Yes", description="Tax column token for taxable lines")
        no_label: str = Field("No", description="Tax column token for untaxed lines")

    documents: DocumentSettings = DocumentSettings()  # type: ignore[call-arg]

    # ============================================================
    # Storage Configuration
    # ============================================================

    class StorageSettings(BaseModel):
        """File storage configuration."""

        data_dir: Path = Field(Path("data"), description="Root directory for JSON data files")
        receipts_file: str = Field("receipts.json", description="Receipt records file name")
        customers_file: str = Field("customers.json", description="Customer directory file name")
        products_file: str = Field("products.json", description="Product catalog file name")
        seller_file: str = Field("seller.json", description="Seller profile file name")

        @property
        def receipts_path(self) -> Path:
            return self.data_dir / self.receipts_file

        @property
        def customers_path(self) -> Path:
            return self.data_dir / self.customers_file

        @property
        def products_path(self) -> Path:
            return self.data_dir / self.products_file

        @property
        def seller_path(self) -> Path:
            return self.data_dir / self.seller_file

    storage: StorageSettings = StorageSettings()  # type: ignore[call-arg]

    # ============================================================
    # Observability Configuration
    # ============================================================

    class ObservabilitySettings(BaseModel):
        """Observability configuration."""

        log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
        log_format: str = Field("json", description="Log format (json or text)")

        @field_validator("log_format")
        @classmethod
        def validate_log_format(cls, v: str) -> str:
            if v not in {"json", "text"}:
                raise ValueError("log_format must be 'json' or 'text'")
            return v

    observability: ObservabilitySettings = ObservabilitySettings()  # type: ignore[call-arg]


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore
    return _settings


def reset_settings() -> None:
    """Reset settings (mainly for testing)."""
    global _settings
    _settings = None
