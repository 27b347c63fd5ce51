"""
Tests for the page session: mount, grid, banner, resource switch.
"""

from datetime import date, datetime

import pytest

from scheduler.app.auth import AuthContext
from scheduler.app.errors import ApiTransportError
from scheduler.app.main import open_page
from scheduler.app.services.booking.controller import BookingState, CellState
from scheduler.app.services.booking.page import ResourceBookingPage
from scheduler.app.utils.api import ApiClient

from .conftest import make_api, make_token

RESOURCE = {
    "id": 1,
    "name": "Court A",
    "unitsCount": 2,
    "openTime": "09:00",
    "closeTime": "10:00",
    "pricePerSlot": 10,
    "currency": "EUR",
}


def make_page(redis, clock, api=None, token=None, resource=None) -> ResourceBookingPage:
    api = api or make_api()
    api.get_resource.return_value = {"statusCode": 200, "data": resource or RESOURCE}
    auth = AuthContext(token=token if token is not None else make_token("alice"))
    return ResourceBookingPage(1, api, auth, redis, clock=clock, tick_interval=60)


@pytest.mark.asyncio
async def test_mount_builds_grid(redis_store, clock):
    page = make_page(redis_store, clock)
    try:
        assert await page.mount() is True

        assert page.resource.name == "Court A"
        assert page.date == date(2025, 9, 28)
        assert page.times() == ["09:00", "09:30"]
        rows = page.grid()
        assert [time for time, _ in rows] == ["09:00", "09:30"]
        assert [c.unit for c in rows[0][1]] == [1, 2]
        assert all(c.state == CellState.AVAILABLE for _, cells in rows for c in cells)
        assert page.ticker.running
        assert page.hold_banner() is None
    finally:
        await page.unmount()
    assert page.ticker is None


@pytest.mark.asyncio
async def test_mount_loads_saved_emails_and_profile(redis_store, clock):
    api = make_api()
    api.get_saved_emails.return_value = {"statusCode": 200, "data": ["friend@example.com"]}
    page = make_page(redis_store, clock, api=api)
    try:
        await page.mount()
    finally:
        await page.unmount()

    assert page.saved_emails.emails == ["friend@example.com"]
    assert page.profile_email == "me@example.com"
    assert page.controller.split.owner_email == "me@example.com"


@pytest.mark.asyncio
async def test_anonymous_mount_skips_user_data(redis_store, clock):
    api = make_api()
    page = make_page(redis_store, clock, api=api, token="")
    try:
        await page.mount()
    finally:
        await page.unmount()

    api.get_saved_emails.assert_not_awaited()
    api.my_profile.assert_not_awaited()


@pytest.mark.asyncio
async def test_mount_rolls_to_tomorrow_when_today_is_over(redis_store, clock):
    clock.set(datetime(2025, 9, 28, 21, 0))
    page = make_page(redis_store, clock)
    try:
        await page.mount()
    finally:
        await page.unmount()

    assert page.date == date(2025, 9, 29)


@pytest.mark.asyncio
async def test_mount_reports_load_failure(redis_store, clock):
    api = make_api()
    page = make_page(redis_store, clock, api=api)
    api.get_resource.return_value = {"statusCode": 404, "message": "Resource not found"}

    assert await page.mount() is False

    assert page.error == "Resource not found"
    assert page.grid() == []
    assert page.ticker is None


@pytest.mark.asyncio
async def test_mount_reports_transport_failure(redis_store, clock):
    api = make_api()
    page = make_page(redis_store, clock, api=api)
    api.get_resource.side_effect = ApiTransportError("offline")

    assert await page.mount() is False
    assert page.error == "offline"


@pytest.mark.asyncio
async def test_book_then_banner_then_expiry(redis_store, clock):
    page = make_page(redis_store, clock)
    try:
        await page.mount()
        page.set_date("2025-09-29")

        assert page.click("09:30", 1) is True
        assert await page.submit() is True

        assert page.cell("09:30", 1).state == CellState.HELD_MINE
        assert page.cell("09:00", 2).disabled
        assert page.hold_banner() == "Reservation hold active: 30:00"

        clock.advance(minutes=31)
        assert page.tick() is True

        assert page.hold_banner() is None
        assert page.controller.state == BookingState.BROWSING
        assert page.cell("09:30", 1).state == CellState.AVAILABLE
    finally:
        await page.unmount()


@pytest.mark.asyncio
async def test_two_viewers_on_one_storage(redis_store, clock):
    alice = make_page(redis_store, clock, token=make_token("alice"))
    bob = make_page(redis_store, clock, token=make_token("bob"))
    try:
        await alice.mount()
        await bob.mount()
        alice.set_date("2025-09-29")
        bob.set_date("2025-09-29")

        alice.click("09:30", 1)
        await alice.submit()
        bob.tick()

        assert bob.cell("09:30", 1).state == CellState.HELD_OTHER
        assert bob.click("09:30", 1) is False
        assert bob.hold_banner() is None
        assert bob.click("09:00", 1) is True
    finally:
        await alice.unmount()
        await bob.unmount()


@pytest.mark.asyncio
async def test_change_resource_rearms(redis_store, clock):
    api = make_api()
    page = make_page(redis_store, clock, api=api)
    try:
        await page.mount()
        page.click("09:30", 1)

        api.get_resource.return_value = {"statusCode": 200, "data": {**RESOURCE, "id": 2, "name": "Court B"}}
        assert await page.change_resource(2) is True

        assert page.resource.name == "Court B"
        assert page.holds.key == "resourceHolds_2"
        assert page.ticker.store is page.holds
        assert page.ticker.running
        assert page.controller.selection == set()
    finally:
        await page.unmount()


@pytest.mark.asyncio
async def test_remember_email(redis_store, clock):
    api = make_api()
    page = make_page(redis_store, clock, api=api)

    assert await page.remember_email("friend@example.com") is True
    api.add_saved_email.assert_awaited_once_with("friend@example.com")


def test_open_page_wires_viewer(redis_store, clock):
    page = open_page(5, token=make_token("carol"), redis=redis_store, clock=clock)

    assert page.resource_id == 5
    assert page.auth.owner_id == "carol"
    assert isinstance(page.api, ApiClient)
    assert page.api.auth is page.auth
    assert page.redis is redis_store


@pytest.mark.asyncio
async def test_failed_resource_switch_leaves_page_inert(redis_store, clock):
    api = make_api()
    page = make_page(redis_store, clock, api=api)
    try:
        await page.mount()
        api.get_resource.return_value = {"statusCode": 404, "message": "Resource not found"}

        assert await page.change_resource(2) is False

        assert page.error == "Resource not found"
        assert page.resource is None
        assert page.holds is None
        assert page.ticker is None
        page.set_date("2099-01-15")
        assert page.grid() == []
        assert page.cell("09:00", 1) is None
        assert page.click("09:00", 1) is False
        assert await page.submit() is False
        assert page.hold_banner() is None
        assert page.tick() is False
        api.book_resource_batch.assert_not_awaited()
    finally:
        await page.unmount()


@pytest.mark.asyncio
async def test_failed_switch_then_successful_retry(redis_store, clock):
    api = make_api()
    page = make_page(redis_store, clock, api=api)
    try:
        await page.mount()
        api.get_resource.return_value = {"statusCode": 404, "message": "Resource not found"}
        await page.change_resource(2)

        api.get_resource.return_value = {"statusCode": 200, "data": {**RESOURCE, "id": 2, "name": "Court B"}}
        assert await page.change_resource(2) is True

        assert page.error is None
        assert page.resource.id == 2
        assert page.ticker.running
        assert page.ticker.store is page.holds
    finally:
        await page.unmount()


def test_cell_on_unmounted_page(redis_store, clock):
    page = make_page(redis_store, clock)
    assert page.cell("09:00", 1) is None
