# scheduler/app/services/holds/__init__.py
"""
Slot holds: temporary client-side locks placed after a booking,
pending payment. Persisted per resource, swept once per second.
"""

from .models import LegacyHold, OwnedHold, decode_hold, encode_hold
from .store import ANONYMOUS_OWNER, HoldStore
from .ticker import HoldTicker

__all__ = [
    "LegacyHold",
    "OwnedHold",
    "decode_hold",
    "encode_hold",
    "ANONYMOUS_OWNER",
    "HoldStore",
    "HoldTicker",
]
