# scheduler/app/services/booking/grouping.py
"""
Selection Set → booking request.

Keys are parsed into (date, start, unit), end = start + one grid step,
grouped by date:
  one date     → BookBatchRequest  {date, slots}
  several      → BookMultiRequest  {days: [{date, slots}, ...]}
"""

from typing import Iterable, Optional

from ...schemas.bookings import (
    BookBatchRequest,
    BookMultiRequest,
    DayPayload,
    ParticipantPayload,
    SlotPayload,
)
from ..slots.config import SlotGridConfig, add_minutes, get_grid_config, time_str_to_minutes
from ..slots.keys import parse_slot_key


def group_by_date(
    slot_keys: Iterable[str],
    config: SlotGridConfig | None = None,
) -> dict[str, list[SlotPayload]]:
    """
    Group selected keys by date, ordered by date then start time then unit.

    Malformed keys are skipped.
    """
    config = config or get_grid_config()
    parsed = [k for k in (parse_slot_key(key) for key in slot_keys) if k is not None]
    parsed.sort(key=lambda k: (k.date, time_str_to_minutes(k.start_time) or 0, k.unit))

    by_date: dict[str, list[SlotPayload]] = {}
    for key in parsed:
        end_time = add_minutes(key.start_time, config.slot_step_minutes)
        if end_time is None:
            continue
        by_date.setdefault(key.date, []).append(
            SlotPayload(startTime=key.start_time, endTime=end_time, unit=key.unit)
        )
    return by_date


def build_booking_request(
    slot_keys: Iterable[str],
    participants: Optional[list[ParticipantPayload]] = None,
    config: SlotGridConfig | None = None,
) -> BookBatchRequest | BookMultiRequest:
    """
    Build the request body for the selected keys.

    Raises:
        ValueError: nothing valid to book
    """
    by_date = group_by_date(slot_keys, config)
    if not by_date:
        raise ValueError("No valid slots selected")

    if len(by_date) == 1:
        (only_date, slots), = by_date.items()
        return BookBatchRequest(date=only_date, slots=slots, participants=participants)

    days = [DayPayload(date=d, slots=slots) for d, slots in by_date.items()]
    return BookMultiRequest(days=days, participants=participants)
