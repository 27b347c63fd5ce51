# scheduler/app/services/booking/__init__.py
"""
Selection and booking for the resource scheduler.
"""

from .controller import BookingController, BookingState, Cell, CellState
from .grouping import build_booking_request, group_by_date
from .page import ResourceBookingPage
from .split import ParticipantSplit, SavedEmails
from .summary import BookingSummary, format_money

__all__ = [
    "BookingController",
    "BookingState",
    "Cell",
    "CellState",
    "build_booking_request",
    "group_by_date",
    "ResourceBookingPage",
    "ParticipantSplit",
    "SavedEmails",
    "BookingSummary",
    "format_money",
]
