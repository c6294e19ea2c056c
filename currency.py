import os
from typing import Optional

from schemas import Currency

EXCHANGE_RATE = int(os.getenv("EXCHANGE_RATE", 120))  # 1 USD = X BDT
SYMBOLS = {"BDT": "৳", "USD": "$"}


def _group(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}".rstrip("0").rstrip(".")


def format_price(amount: float, currency: Currency = "BDT", exchange_rate: int = EXCHANGE_RATE) -> str:
    """Render a BDT base amount in ``currency``.

    >>> format_price(12000, "BDT")
    '৳12,000'
    >>> format_price(12000, "USD")
    '$100.00'
    """
    if currency == "BDT":
        return f"{SYMBOLS['BDT']}{_group(amount)}"
    if currency == "USD":
        return f"{SYMBOLS['USD']}{amount / exchange_rate:,.2f}"
    raise ValueError(f"Unsupported currency: {currency}")


class CurrencyService:
    """Display-only conversion; stored prices always stay in BDT."""

    def __init__(self, session, exchange_rate: int = EXCHANGE_RATE):
        self.session = session
        self.exchange_rate = exchange_rate

    @property
    def currency(self) -> Currency:
        return self.session.currency

    def set_currency(self, currency: Currency) -> None:
        if currency not in SYMBOLS:
            raise ValueError(f"Unsupported currency: {currency}")
        self.session.set_currency(currency)

    def format(self, amount: float, currency: Optional[Currency] = None) -> str:
        return format_price(amount, currency or self.currency, self.exchange_rate)
