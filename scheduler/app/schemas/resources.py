# scheduler/app/schemas/resources.py
"""
Pydantic schemas for the resource payload (GET /resources/{id}).
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Resource(BaseModel):
    """Bookable resource as returned by the backend (read-only here)."""
    id: int
    name: str = ""
    units_count: Optional[int] = None
    open_time: Optional[str] = None   # "HH:MM"
    close_time: Optional[str] = None  # "HH:MM"
    price_per_slot: Decimal = Decimal("0")
    currency: str = "EUR"

    # Unavailability config (CSV / semicolon separated)
    unavailable_weekdays: Optional[str] = None     # "0,6" (0 = Sunday)
    unavailable_dates: Optional[str] = None        # "2099-01-01,2099-12-25"
    daily_unavailable_ranges: Optional[str] = None  # "12:00-13:30;16:00-17:00"

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @property
    def units(self) -> int:
        """Number of parallel units, never less than one."""
        try:
            return max(1, int(self.units_count or 1))
        except (TypeError, ValueError):
            return 1
