"""
Money formatting for prompts and human-readable text.

Usage:
    from app.utils.money import format_money

    format_money(1200.5)            -> "$1,200.50"
    format_money(1200.5, "EUR")     -> "1,200.50 EUR"
    format_money(99, decimals=0)    -> "$99"
"""
from decimal import Decimal

# Prefix symbols; other currencies get the ISO code as a suffix
_CURRENCY_SYMBOL = {
    "USD": "$",
}


def format_money(amount, currency: str = "USD", decimals: int = 2) -> str:
    """
    Format an amount with thousands separators.

    Args:
        amount: int / float / Decimal / str
        currency: ISO currency code
        decimals: digits after the decimal point

    Returns:
        "$1,200.50" / "1,200.50 EUR"
    """
    if isinstance(amount, str):
        amount = Decimal(amount)
    sign = "-" if amount < 0 else ""
    formatted = f"{abs(amount):,.{decimals}f}"
    symbol = _CURRENCY_SYMBOL.get(currency)
    if symbol:
        return f"{sign}{symbol}{formatted}"
    return f"{sign}{formatted} {currency}"
