"""
Money and currency utilities using py-moneyed and Babel.

Provides half-up rounding to cents, currency validation and
locale-aware formatting for amounts shown on receipts.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from babel import Locale
from babel.core import UnknownLocaleError
from babel.numbers import format_currency
from moneyed import Currency, Money, get_currency
from moneyed.classes import CurrencyDoesNotExist

AUD = Currency("AUD")

DEFAULT_CURRENCY = "AUD"
DEFAULT_LOCALE = "en_AU"

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(amount: int | float | Decimal | str) -> Decimal:
    """Convert a number to Decimal without binary float artefacts."""
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, str):
        return Decimal(amount)
    return Decimal(str(amount))


def round_money(amount: int | float | Decimal | str) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


class MoneyHandler:
    """Central handler for money operations with proper error handling."""

    def __init__(
        self, default_currency: str = DEFAULT_CURRENCY, default_locale: str = DEFAULT_LOCALE
    ) -> None:
        self.default_currency = self._validate_currency(default_currency)
        self.default_locale = self._validate_locale(default_locale)

    def _validate_currency(self, currency_code: str) -> Currency:
        """Validate and return Currency object."""
        try:
            return get_currency(currency_code.upper())
        except CurrencyDoesNotExist:
            raise ValueError(f"Invalid currency code: {currency_code}")

    def _validate_locale(self, locale_code: str) -> str:
        """Validate locale code."""
        try:
            Locale.parse(locale_code)
            return locale_code
        except (UnknownLocaleError, ValueError):
            return DEFAULT_LOCALE

    def create_money(
        self, amount: int | float | Decimal | str, currency: str | None = None
    ) -> Money:
        """Create Money object rounded to cents."""
        currency = currency or self.default_currency.code
        validated_currency = self._validate_currency(currency)
        return Money(amount=round_money(amount), currency=validated_currency)

    def format_money(self, money: Money, locale: str | None = None, **kwargs: Any) -> str:
        """Format Money object with locale-aware formatting."""
        locale = locale or self.default_locale
        validated_locale = self._validate_locale(locale)

        try:
            return format_currency(
                number=money.amount, currency=money.currency.code, locale=validated_locale, **kwargs
            )
        except (TypeError, ValueError):
            # Fallback to simple formatting if locale issues
            return f"{money.currency.code} {money.amount}"

    def format_amount(self, amount: int | float | Decimal | str, locale: str | None = None) -> str:
        """Format a bare amount in the default currency."""
        return self.format_money(self.create_money(amount), locale)


# Global instance for convenience
money_handler = MoneyHandler()


def format_amount(amount: int | float | Decimal | str, locale: str | None = None) -> str:
    """Format an amount with the default handler."""
    return money_handler.format_amount(amount, locale)


__all__ = [
    "AUD",
    "CENTS",
    "ZERO",
    "MoneyHandler",
    "format_amount",
    "money_handler",
    "round_money",
    "to_decimal",
]
