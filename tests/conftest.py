"""
Shared fixtures for scheduler tests.

- InMemoryRedis: dict-backed stand-in for the get/set/delete subset the hold
  store uses; two stores on one instance behave like two tabs on one profile
- FakeClock: controllable "now"
- make_resource / make_token helpers
"""

from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest
from jose import jwt
from redis import ConnectionError as RedisConnectionError

from scheduler.app.auth import AuthContext
from scheduler.app.schemas.resources import Resource
from scheduler.app.services.booking.controller import BookingController
from scheduler.app.services.holds.store import HoldStore

TEST_SECRET = "test-secret"
FAR_FUTURE = "2099-01-15"


class InMemoryRedis:
    """Minimal Redis double for string keys."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail = False
        self.writes = 0

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("storage unavailable")

    def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._check()
        self.writes += 1
        self.data[key] = value
        return True

    def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now + timedelta(**kwargs)

    def set(self, now: datetime) -> None:
        self.now = now


def make_resource(**overrides: Any) -> Resource:
    data = {
        "id": 1,
        "name": "Court A",
        "unitsCount": 1,
        "openTime": "09:00",
        "closeTime": "10:00",
        "unavailableWeekdays": "",
        "unavailableDates": "",
        "dailyUnavailableRanges": "",
        "pricePerSlot": 10,
        "currency": "EUR",
    }
    data.update(overrides)
    return Resource.model_validate(data)


def make_token(sub: str = "alice", roles: list[str] | None = None) -> str:
    claims = {"sub": sub, "roles": roles if roles is not None else ["CUSTOMER"]}
    return jwt.encode(claims, TEST_SECRET, algorithm="HS256")


def make_api() -> AsyncMock:
    api = AsyncMock()
    api.book_resource_batch.return_value = {"statusCode": 200, "message": "Your booking has been received"}
    api.book_resource_multi.return_value = {"statusCode": 200, "message": "Your booking has been received"}
    api.get_saved_emails.return_value = {"statusCode": 200, "data": []}
    api.my_profile.return_value = {"statusCode": 200, "data": {"email": "me@example.com"}}
    api.add_saved_email.return_value = {"statusCode": 200}
    return api


def make_controller(
    redis: InMemoryRedis,
    clock: FakeClock,
    resource: Resource | None = None,
    token: str | None = None,
    api: AsyncMock | None = None,
) -> BookingController:
    resource = resource or make_resource()
    auth = AuthContext(token=token if token is not None else make_token())
    store = HoldStore(redis, resource.id, owner=auth.owner_id, clock=clock)
    store.load()
    return BookingController(resource, store, api or make_api(), auth, clock=clock)


@pytest.fixture
def redis_store() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 9, 28, 9, 0, 0))


@pytest.fixture
def api() -> AsyncMock:
    return make_api()
