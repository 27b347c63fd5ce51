# scheduler/app/services/slots/keys.py
"""
Slot key format: {date}_{start_time}_{unit}

Example: "2099-01-15_09:30_2"
Used as Selection Set member and as hold map key.
"""

import re
from datetime import date
from typing import NamedTuple

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class SlotKey(NamedTuple):
    date: str
    start_time: str
    unit: int


def make_slot_key(day: date | str, start_time: str, unit: int) -> str:
    day_str = day.isoformat() if isinstance(day, date) else day
    return f"{day_str}_{start_time}_{unit}"


def parse_slot_key(key: str) -> SlotKey | None:
    """Split a slot key into its parts. None if the key is malformed."""
    parts = key.split("_") if isinstance(key, str) else []
    if len(parts) != 3:
        return None
    day_str, start_time, unit_str = parts
    try:
        date.fromisoformat(day_str)
        unit = int(unit_str)
    except ValueError:
        return None
    if unit < 1 or not TIME_RE.match(start_time):
        return None
    return SlotKey(day_str, start_time, unit)
