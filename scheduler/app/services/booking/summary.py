# scheduler/app/services/booking/summary.py
"""
Booking summary: selected slot count × price per slot.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce to a two-decimal Decimal. Garbage becomes 0.00."""
    try:
        return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0.00")


def format_money(amount, currency: str = "EUR") -> str:
    """
    "€12.50" for known currencies, "12.50 CHF" otherwise.
    """
    value = to_money(amount)
    code = (currency or "EUR").upper()
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        sign = "-" if value < 0 else ""
        return f"{sign}{symbol}{abs(value):.2f}"
    return f"{value:.2f} {code}"


@dataclass(frozen=True)
class BookingSummary:
    count: int
    price_per_slot: Decimal
    currency: str = "EUR"

    @property
    def total(self) -> Decimal:
        return to_money(to_money(self.price_per_slot) * self.count)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def lines(self) -> list[str]:
        return [
            f"Booked slots: {self.count}",
            f"Price per slot: {format_money(self.price_per_slot, self.currency)}",
            f"Total: {format_money(self.total, self.currency)}",
        ]
