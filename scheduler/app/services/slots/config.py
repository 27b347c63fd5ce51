# scheduler/app/services/slots/config.py
"""
Scheduler grid configuration and time helpers.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings


@dataclass(frozen=True)
class SlotGridConfig:
    """
    Configuration for the booking grid.

    Attributes:
        slot_step_minutes: Grid step in minutes (15/30/60)
        hold_minutes: Lifetime of a hold placed after a booking
        default_open_time: Opening time used when a resource has none
        default_close_time: Closing time used when a resource has none
    """
    slot_step_minutes: int = 30
    hold_minutes: int = 30
    default_open_time: str = "08:00"
    default_close_time: str = "20:00"

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.hold_minutes <= 0:
            raise ValueError(f"hold_minutes must be positive, got {self.hold_minutes}")

    @property
    def hold_ms(self) -> int:
        """Hold lifetime in epoch milliseconds."""
        return self.hold_minutes * 60 * 1000


@lru_cache
def get_grid_config() -> SlotGridConfig:
    """Grid configuration (singleton). Step and hold lifetime stay at 30 minutes."""
    return SlotGridConfig(
        default_open_time=settings.default_open_time,
        default_close_time=settings.default_close_time,
    )


# ── Time helpers ─────────────────────────────────────────────────────────


def time_str_to_minutes(value: str | None) -> int | None:
    """
    Convert "HH:MM" to minutes from midnight.

    Returns None for anything that is not two integer parts
    within a day (e.g. "", "9", "ab:cd", "25:00").
    """
    if not value or not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 24 and 0 <= minute < 60):
        return None
    total = hour * 60 + minute
    if total > 24 * 60:
        return None
    return total


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes from midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(value: str, minutes: int) -> str | None:
    """Shift an "HH:MM" label by a number of minutes."""
    start = time_str_to_minutes(value)
    if start is None:
        return None
    return minutes_to_time_str(start + minutes)
