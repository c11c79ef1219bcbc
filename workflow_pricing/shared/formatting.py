"""Credit and currency presentation helpers.

The cost engine works in credits. Conversion, rounding and symbols are
decided here, at the presentation edge.
"""

from dataclasses import dataclass
from typing import Dict

from .errors import PreconditionViolation

# 100 credits = $1
DEFAULT_CREDIT_PRICE = 0.01


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str
    rate: float  # Units per USD


CURRENCIES: Dict[str, Currency] = {
    "USD": Currency("USD", "$", "US Dollar", 1.0),
    "CAD": Currency("CAD", "C$", "Canadian Dollar", 1.36),
    "EUR": Currency("EUR", "€", "Euro", 0.92),
    "INR": Currency("INR", "₹", "Indian Rupee", 83.12),
}


def get_currency(code: str) -> Currency:
    """Look up a supported currency; an unknown code is rejected as bad input."""
    try:
        return CURRENCIES[code.upper()]
    except KeyError:
        raise PreconditionViolation(f"Unsupported currency '{code}'") from None


def credits_to_currency(credits: float, credit_price: float = DEFAULT_CREDIT_PRICE) -> float:
    """Convert credits to USD."""
    return credits * credit_price


def convert_currency(usd_amount: float, code: str = "USD") -> float:
    return usd_amount * get_currency(code).rate


def format_currency(usd_amount: float, code: str = "USD", decimals: int = 2) -> str:
    """Format a USD amount in the requested currency, e.g. ``$1,234.50``."""
    if usd_amount == float("inf"):
        return "∞"
    currency = get_currency(code)
    return f"{currency.symbol}{usd_amount * currency.rate:,.{decimals}f}"


def format_credits(credits: float, decimals: int = 4) -> str:
    return f"{credits:,.{decimals}f}C"
