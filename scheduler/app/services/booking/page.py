# scheduler/app/services/booking/page.py
"""
Resource booking page session.

Hosts the hold manager for one resource view:
  mount          → GET resource, load holds, saved e-mails, pick date, start ticker
  change_resource → same for another resource, ticker re-armed
  unmount        → ticker stopped

Rendering is left to the caller: grid() returns rows of Cell verdicts.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from pydantic import ValidationError
from redis import Redis

from ...auth import AuthContext
from ...errors import GENERIC_LOAD_ERROR, BookingError, ResourceLoadError
from ...schemas.resources import Resource
from ..holds.store import HoldStore
from ..holds.ticker import HoldTicker
from ..slots.calculator import generate_slots, resolve_initial_date
from ..slots.config import SlotGridConfig, get_grid_config
from ..slots.keys import make_slot_key
from .controller import BookingController, Cell
from .split import SavedEmails

logger = logging.getLogger(__name__)

HOLD_BANNER = "Reservation hold active: %s"


class ResourceBookingPage:
    """One viewer's session on a resource scheduler."""

    def __init__(
        self,
        resource_id: int | str,
        api,
        auth: AuthContext,
        redis: Redis,
        clock: Callable[[], datetime] = datetime.now,
        config: SlotGridConfig | None = None,
        tick_interval: float | None = None,
    ):
        self.resource_id = resource_id
        self.api = api
        self.auth = auth
        self.redis = redis
        self.clock = clock
        self.config = config or get_grid_config()
        self.tick_interval = tick_interval

        self.resource: Optional[Resource] = None
        self.holds: Optional[HoldStore] = None
        self.controller: Optional[BookingController] = None
        self.ticker: Optional[HoldTicker] = None
        self.saved_emails = SavedEmails(api)
        self.profile_email = ""
        self.date: date = clock().date()
        self.error: str | None = None

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def mount(self) -> bool:
        """
        Load everything the grid needs. False if the resource failed to load.
        """
        try:
            self.resource = await self._fetch_resource(self.resource_id)
        except ResourceLoadError as e:
            self.error = e.message
            logger.error(f"[PAGE] resource={self.resource_id} not loaded: {e.message}")
            await self._detach()
            return False

        self.error = None
        self.holds = HoldStore(
            self.redis,
            self.resource.id,
            owner=self.auth.owner_id,
            clock=self.clock,
            config=self.config,
        )
        self.holds.load()

        if self.auth.is_authenticated:
            await self._load_user_data()

        self.controller = BookingController(
            self.resource,
            self.holds,
            self.api,
            self.auth,
            clock=self.clock,
            config=self.config,
            owner_email=self.profile_email,
        )

        today = self.clock().date()
        self.date = resolve_initial_date(self.resource, today, self.clock(), self.config)
        if self.date != today:
            logger.info(f"[PAGE] nothing left today, moved to {self.date.isoformat()}")

        if self.ticker is None:
            self.ticker = HoldTicker(self.holds, on_tick=self._on_tick, interval=self.tick_interval)
            self.ticker.start()
        else:
            await self.ticker.restart(self.holds)
        return True

    async def unmount(self) -> None:
        if self.ticker is not None:
            await self.ticker.stop()
            self.ticker = None

    async def _detach(self) -> None:
        """Drop the previous resource so the grid and actions go inert."""
        await self.unmount()
        self.resource = None
        self.holds = None
        self.controller = None

    async def change_resource(self, resource_id: int | str) -> bool:
        """Switch to another resource; selection starts empty."""
        if self.ticker is not None:
            await self.ticker.stop()
        self.resource_id = resource_id
        return await self.mount()

    async def _fetch_resource(self, resource_id) -> Resource:
        try:
            resp = await self.api.get_resource(resource_id)
        except BookingError as e:
            raise ResourceLoadError(e.message or GENERIC_LOAD_ERROR) from e

        if resp.get("statusCode") != 200 or not resp.get("data"):
            raise ResourceLoadError(resp.get("message") or GENERIC_LOAD_ERROR, resp.get("statusCode"))

        try:
            return Resource.model_validate(resp["data"])
        except ValidationError as e:
            raise ResourceLoadError(GENERIC_LOAD_ERROR) from e

    async def _load_user_data(self) -> None:
        await self.saved_emails.load()
        try:
            resp = await self.api.my_profile()
        except BookingError as e:
            logger.warning(f"[PAGE] profile unavailable: {e.message}")
            return
        data = resp.get("data") if resp.get("statusCode") == 200 else None
        if isinstance(data, dict) and data.get("email"):
            self.profile_email = str(data["email"])

    def _on_tick(self, changed: bool) -> None:
        if self.controller is not None:
            self.controller.on_tick(changed)

    # ── View ─────────────────────────────────────────────────────────────

    def set_date(self, value: date | str) -> None:
        self.date = date.fromisoformat(value) if isinstance(value, str) else value

    def times(self) -> list[str]:
        if self.resource is None:
            return []
        return generate_slots(self.resource, self.config)

    def grid(self) -> list[tuple[str, list[Cell]]]:
        """Rows of (time, cells for units 1..N) for the selected date."""
        if self.resource is None or self.controller is None:
            return []
        units = range(1, self.resource.units + 1)
        return [
            (time_str, [self.controller.cell(self.date, time_str, unit) for unit in units])
            for time_str in self.times()
        ]

    def cell(self, time_str: str, unit: int) -> Optional[Cell]:
        if self.controller is None:
            return None
        return self.controller.cell(self.date, time_str, unit)

    def hold_banner(self) -> str | None:
        if self.holds is None or not self.holds.has_own_holds:
            return None
        return HOLD_BANNER % self.holds.countdown_text()

    # ── Actions ──────────────────────────────────────────────────────────

    def click(self, time_str: str, unit: int) -> bool:
        if self.controller is None:
            return False
        return self.controller.click(make_slot_key(self.date, time_str, unit))

    async def submit(self) -> bool:
        if self.controller is None:
            return False
        return await self.controller.submit()

    async def remember_email(self, email: str) -> bool:
        return await self.saved_emails.remember(email)

    def tick(self) -> bool:
        """Run one sweep immediately (same as a ticker beat)."""
        if self.ticker is not None:
            return self.ticker.run_once()
        if self.holds is None:
            return False
        changed = self.holds.tick()
        self._on_tick(changed)
        return changed
