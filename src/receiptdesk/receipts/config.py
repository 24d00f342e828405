"""
Receipt engine configuration
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import mm

from .exceptions import ReceiptConfigurationError

PAGE_SIZES: dict[str, tuple[float, float]] = {
    "A4": A4,
    "LETTER": LETTER,
}


class TaxConfig(BaseModel):
    """Tax configuration"""

    model_config = ConfigDict(frozen=True)

    rate: Decimal = Field(Decimal("0.10"), description="Flat tax rate as a fraction")
    invoice_threshold: Decimal = Field(
        Decimal("82.50"), description="Total at or above which a tax invoice is required"
    )
    tax_name: str = Field("GST", description="Tax name shown on documents")
    validate_business_numbers: bool = Field(True, description="Check ABN check digits")

    @field_validator("rate")
    @classmethod
    def _rate_is_fraction(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 1:
            raise ValueError(f"tax rate must be between 0 and 1, got {v}")
        return v

    @field_validator("invoice_threshold")
    @classmethod
    def _threshold_not_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError(f"tax invoice threshold must be non-negative, got {v}")
        return v

    @property
    def rate_percent(self) -> str:
        """Rate rendered for labels, e.g. '10%'."""
        return f"{(self.rate * 100).normalize():f}%"


class CurrencyConfig(BaseModel):
    """Currency configuration - Single currency support"""

    model_config = ConfigDict(frozen=True)

    code: str = Field("AUD", description="Currency code")
    locale: str = Field("en_AU", description="Formatting locale")


class DocumentConfig(BaseModel):
    """Rendered document configuration"""

    model_config = ConfigDict(frozen=True)

    output_dir: Path = Field(Path("data/receipt-pdfs"))
    page_size: str = Field("A4")
    margin: float = Field(18 * mm, description="Margin on every side, in points")
    repeat_table_header: bool = Field(False)
    footer_text: str = Field("Thank you for your business!")
    date_format: str = Field("%d/%m/%Y")
    yes_label: str = Field("Yes")
    no_label: str = Field("No")

    @field_validator("page_size")
    @classmethod
    def _known_page_size(cls, v: str) -> str:
        key = v.upper()
        if key not in PAGE_SIZES:
            raise ValueError(f"unsupported page size {v!r}; use one of {sorted(PAGE_SIZES)}")
        return key

    @property
    def page_dimensions(self) -> tuple[float, float]:
        return PAGE_SIZES[self.page_size]


class ReceiptConfig(BaseModel):
    """Main receipt engine configuration"""

    model_config = ConfigDict(frozen=True)

    tax: TaxConfig = Field(default_factory=TaxConfig)
    currency: CurrencyConfig = Field(default_factory=CurrencyConfig)
    documents: DocumentConfig = Field(default_factory=DocumentConfig)
    receipts_path: Path = Field(Path("data/receipts.json"))

    @classmethod
    def from_settings(cls, settings=None) -> "ReceiptConfig":
        """Create configuration from application settings."""
        from receiptdesk.settings import get_settings

        settings = settings or get_settings()

        try:
            tax = TaxConfig(
                rate=Decimal(settings.tax.rate),
                invoice_threshold=Decimal(settings.tax.invoice_threshold),
                tax_name=settings.tax.tax_name,
                validate_business_numbers=settings.tax.validate_business_numbers,
            )
        except InvalidOperation as exc:
            raise ReceiptConfigurationError(
                f"Tax settings are not valid decimals: {exc}", config_key="tax"
            ) from exc
        except ValueError as exc:
            raise ReceiptConfigurationError(str(exc), config_key="tax") from exc

        try:
            documents = DocumentConfig(
                output_dir=settings.documents.output_dir,
                page_size=settings.documents.page_size,
                margin=settings.documents.margin_mm * mm,
                repeat_table_header=settings.documents.repeat_table_header,
                footer_text=settings.documents.footer_text,
                date_format=settings.documents.date_format,
                yes_label=settings.documents.yes_label,
                no_label=settings.documents.no_label,
            )
        except ValueError as exc:
            raise ReceiptConfigurationError(str(exc), config_key="documents") from exc

        return cls(
            tax=tax,
            currency=CurrencyConfig(
                code=settings.currency.code,
                locale=settings.currency.locale,
            ),
            documents=documents,
            receipts_path=settings.storage.receipts_path,
        )


# Global configuration instance
_receipt_config: ReceiptConfig | None = None


def get_receipt_config() -> ReceiptConfig:
    """Get the global receipt configuration instance"""
    global _receipt_config
    if _receipt_config is None:
        _receipt_config = ReceiptConfig.from_settings()
    return _receipt_config


def set_receipt_config(config: ReceiptConfig | None) -> None:
    """Set the global receipt configuration instance"""
    global _receipt_config
    _receipt_config = config
