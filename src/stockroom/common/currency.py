"""Normalisation of payment amounts into the base currency."""

from typing import Optional, Union

from ..core.config import BASE_CURRENCY
from .models import Currency


MONEY_PLACES = 2


class InvalidConversionRateError(ValueError):
    """Raised when a foreign-currency amount has no usable conversion rate."""


def round_money(amount: float) -> float:
    return round(amount, MONEY_PLACES)


def normalize_amount(
    amount: float,
    currency: Union[Currency, str],
    conversion_rate: Optional[float],
    base_currency: Union[Currency, str] = BASE_CURRENCY,
) -> float:
    """
    Converts a payment amount into the base currency.

    Any amount not already in the base currency is divided by its stored
    conversion rate (units of the foreign currency per one unit of the base
    currency). The result is rounded to MONEY_PLACES.

    Raises:
        InvalidConversionRateError: if a foreign-currency amount has a
            missing, zero or negative conversion rate.
    """
    if Currency(currency) == Currency(base_currency):
        return round_money(amount)
    if conversion_rate is None or conversion_rate <= 0:
        raise InvalidConversionRateError(
            f"Cannot convert {amount} {Currency(currency).value} with conversion rate {conversion_rate!r}"
        )
    return round_money(amount / conversion_rate)


def total_paid(payments, base_currency: Union[Currency, str] = BASE_CURRENCY) -> float:
    """Sums payment rows (dicts with amount, currency and conversion_rate) in the base currency."""
    return round_money(sum(
        normalize_amount(p["amount"], p["currency"], p["conversion_rate"], base_currency)
        for p in payments
    ))
