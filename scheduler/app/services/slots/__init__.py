# scheduler/app/services/slots/__init__.py
"""
Availability calculation for the scheduler grid.

Pure functions: resource + date + now → bookable labels.
"""

from .config import SlotGridConfig, get_grid_config
from .calculator import (
    available_slots,
    generate_slots,
    is_date_unavailable,
    is_slot_unavailable,
    is_time_in_ranges,
    resolve_initial_date,
)
from .keys import SlotKey, make_slot_key, parse_slot_key

__all__ = [
    "SlotGridConfig",
    "get_grid_config",
    "available_slots",
    "generate_slots",
    "is_date_unavailable",
    "is_slot_unavailable",
    "is_time_in_ranges",
    "resolve_initial_date",
    "SlotKey",
    "make_slot_key",
    "parse_slot_key",
]
