# scheduler/app/services/slots/calculator.py
"""
Availability calculation for the scheduler grid.

Produces per-date data:
  ordered "HH:MM" labels + per label unavailability verdict

Contains:
✓ working hours of resource (openTime / closeTime)
✓ weekday blackout (0 = Sunday .. 6 = Saturday)
✓ specific-date blackout
✓ daily blocked ranges ("HH:MM-HH:MM;HH:MM-HH:MM", half-open)
✓ "now" relative to the selected date (local calendar)

Does NOT contain:
✗ Holds (checked by the hold store)
✗ Server-side bookings (the backend rejects conflicts)
"""

from datetime import date, datetime, timedelta

from ...schemas.resources import Resource
from .config import SlotGridConfig, get_grid_config, time_str_to_minutes, minutes_to_time_str


def generate_slots(
    resource: Resource,
    config: SlotGridConfig | None = None,
) -> list[str]:
    """
    Grid labels from openTime (inclusive) to closeTime (exclusive).

    Returns:
        List of "HH:MM". Empty list = closed or unparsable hours.
    """
    config = config or get_grid_config()

    start = time_str_to_minutes(resource.open_time or config.default_open_time)
    end = time_str_to_minutes(resource.close_time or config.default_close_time)
    if start is None or end is None or end <= start:
        return []

    return [minutes_to_time_str(t) for t in range(start, end, config.slot_step_minutes)]


def is_date_unavailable(resource: Resource, target_date: date) -> bool:
    """Weekday or specific-date blackout."""
    weekday = (target_date.weekday() + 1) % 7  # 0 = Sunday
    if weekday in _parse_weekdays(resource.unavailable_weekdays):
        return True
    return target_date.isoformat() in _split_csv(resource.unavailable_dates)


def is_slot_unavailable(
    resource: Resource,
    target_date: date,
    time_str: str,
    now: datetime,
) -> bool:
    """
    Check whether a single grid label can be booked on target_date.

    Unparsable labels are treated as unavailable.
    """
    if is_date_unavailable(resource, target_date):
        return True

    today = now.date()
    if target_date < today:
        return True

    slot_start = time_str_to_minutes(time_str)
    if slot_start is None:
        return True

    if target_date == today and slot_start < now.hour * 60 + now.minute:
        return True

    return is_time_in_ranges(time_str, resource.daily_unavailable_ranges)


def is_time_in_ranges(time_str: str, ranges: str | None) -> bool:
    """
    Check time against "HH:MM-HH:MM" ranges separated by ";".

    Ranges are half-open [from, to). Malformed entries are skipped.
    """
    if not ranges or not time_str:
        return False

    minutes = time_str_to_minutes(time_str)
    if minutes is None:
        return False

    for from_min, to_min in _parse_ranges(ranges):
        if from_min <= minutes < to_min:
            return True
    return False


def available_slots(
    resource: Resource,
    target_date: date,
    now: datetime,
    config: SlotGridConfig | None = None,
) -> list[str]:
    """Labels that are bookable on target_date."""
    return [
        time_str
        for time_str in generate_slots(resource, config)
        if not is_slot_unavailable(resource, target_date, time_str, now)
    ]


def resolve_initial_date(
    resource: Resource,
    selected: date,
    now: datetime,
    config: SlotGridConfig | None = None,
) -> date:
    """
    Roll today forward to tomorrow when nothing is left to book today.

    Exactly one step: tomorrow is returned even if it is fully unavailable.
    """
    if selected != now.date():
        return selected
    if available_slots(resource, selected, now, config):
        return selected
    return selected + timedelta(days=1)


# ── Helpers ──────────────────────────────────────────────────────────────


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_weekdays(value: str | None) -> set[int]:
    weekdays: set[int] = set()
    for part in _split_csv(value):
        try:
            weekdays.add(int(part))
        except ValueError:
            continue
    return weekdays


def _parse_ranges(value: str) -> list[tuple[int, int]]:
    """Parse "HH:MM-HH:MM;..." into (from_min, to_min) pairs."""
    result: list[tuple[int, int]] = []
    for chunk in value.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        parts = chunk.split("-")
        if len(parts) != 2:
            continue
        from_min = time_str_to_minutes(parts[0].strip())
        to_min = time_str_to_minutes(parts[1].strip())
        if from_min is None or to_min is None:
            continue
        result.append((from_min, to_min))
    return result
