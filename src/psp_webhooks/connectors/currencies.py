"""Conversion between provider minor units and ledger amounts."""

from decimal import Decimal
from typing import Optional

# ISO 4217 currencies without a minor unit
ZERO_DECIMAL_CURRENCIES = frozenset([
    "BIF", "CLP", "DJF", "GNF", "ISK", "JPY", "KMF", "KRW", "PYG",
    "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
])

THREE_DECIMAL_CURRENCIES = frozenset([
    "BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND",
])


def get_currency_exponent(currency: str) -> int:
    code = currency.upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def amount_from_minor_units(amount: Optional[Decimal], currency: Optional[str]) -> Optional[Decimal]:
    """Convert an amount in minor units (e.g. cents) into major units.

    Args:
        amount: Amount in the currency's minor unit.
        currency: Three-letter currency code.

    Returns:
        The amount in major units, or None if the amount is unknown.
    """
    if amount is None:
        return None
    exponent = get_currency_exponent(currency) if currency else 2
    return Decimal(amount).scaleb(-exponent)
