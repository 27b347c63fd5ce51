"""
Tests for turning a selection into a booking request body.
"""

import pytest

from scheduler.app.schemas.bookings import BookBatchRequest, BookMultiRequest, dump_request
from scheduler.app.services.booking.grouping import build_booking_request, group_by_date
from scheduler.app.services.slots.config import SlotGridConfig


def test_single_date_becomes_batch():
    request = build_booking_request(["2099-01-15_09:30_1", "2099-01-15_09:00_1"])

    assert isinstance(request, BookBatchRequest)
    assert dump_request(request) == {
        "date": "2099-01-15",
        "slots": [
            {"startTime": "09:00", "endTime": "09:30", "unit": 1},
            {"startTime": "09:30", "endTime": "10:00", "unit": 1},
        ],
    }


def test_several_dates_become_multi():
    request = build_booking_request(["2099-01-16_10:00_2", "2099-01-15_09:00_1"])

    assert isinstance(request, BookMultiRequest)
    assert dump_request(request) == {
        "days": [
            {"date": "2099-01-15", "slots": [{"startTime": "09:00", "endTime": "09:30", "unit": 1}]},
            {"date": "2099-01-16", "slots": [{"startTime": "10:00", "endTime": "10:30", "unit": 2}]},
        ],
    }


def test_slots_sorted_by_time_then_unit():
    grouped = group_by_date(["2099-01-15_10:00_1", "2099-01-15_09:00_2", "2099-01-15_09:00_1"])
    slots = grouped["2099-01-15"]
    assert [(s.start_time, s.unit) for s in slots] == [("09:00", 1), ("09:00", 2), ("10:00", 1)]


def test_last_slot_of_day_ends_at_midnight():
    grouped = group_by_date(["2099-01-15_23:30_1"])
    assert grouped["2099-01-15"][0].end_time == "24:00"


def test_end_time_follows_step():
    grouped = group_by_date(["2099-01-15_09:00_1"], SlotGridConfig(slot_step_minutes=60))
    assert grouped["2099-01-15"][0].end_time == "10:00"


def test_malformed_keys_are_skipped():
    grouped = group_by_date(["garbage", "2099-01-15_09:00_1"])
    assert list(grouped) == ["2099-01-15"]


def test_nothing_to_book():
    with pytest.raises(ValueError):
        build_booking_request(["garbage"])
