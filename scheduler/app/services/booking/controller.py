# scheduler/app/services/booking/controller.py
"""
Selection / booking state machine for one resource view.

States:
  BROWSING: nothing selected, no own holds
  SELECTING: ≥1 slot selected, no own holds
  SUBMITTING: booking request in flight
  HELD: booking accepted, own holds active

Flow:
  click free cell      → toggle in Selection Set
  click own held cell  → cancel that hold
  submit               → group by date → book-batch / book-multi
  success              → holds for every submitted key, selection cleared
  failure              → message shown, selection kept for retry
  tick, own holds gone → BROWSING
"""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Callable, NamedTuple

from ...auth import AuthContext
from ...errors import (
    AUTH_REQUIRED_MESSAGE,
    EMPTY_SELECTION_MESSAGE,
    FORBIDDEN_MESSAGE,
    GENERIC_BOOKING_ERROR,
    BookingError,
)
from ...schemas.bookings import BookBatchRequest
from ...schemas.resources import Resource
from ..holds.store import HoldStore
from ..slots.calculator import generate_slots, is_slot_unavailable
from ..slots.config import SlotGridConfig, get_grid_config
from ..slots.keys import make_slot_key, parse_slot_key
from .grouping import build_booking_request
from .split import ParticipantSplit
from .summary import BookingSummary

logger = logging.getLogger(__name__)


class BookingState(str, Enum):
    BROWSING = "browsing"
    SELECTING = "selecting"
    SUBMITTING = "submitting"
    HELD = "held"


class CellState(str, Enum):
    AVAILABLE = "available"
    SELECTED = "selected"
    HELD_MINE = "held_mine"    # reserved by the caller, click cancels
    HELD_OTHER = "held_other"  # reserved by someone else, not cancellable
    UNAVAILABLE = "unavailable"


class Cell(NamedTuple):
    key: str
    time: str
    unit: int
    state: CellState
    disabled: bool


class BookingController:
    """Selection Set + booking submission for one resource."""

    def __init__(
        self,
        resource: Resource,
        holds: HoldStore,
        api,
        auth: AuthContext,
        clock: Callable[[], datetime] = datetime.now,
        config: SlotGridConfig | None = None,
        owner_email: str = "",
    ):
        self.resource = resource
        self.holds = holds
        self.api = api
        self.auth = auth
        self.clock = clock
        self.config = config or get_grid_config()

        self.selection: set[str] = set()
        self.error: str | None = None
        self.success_message: str | None = None
        self.split = ParticipantSplit(total=0, owner_email=owner_email)

        self._submitting = False
        self._grid = set(generate_slots(resource, self.config))

    # ── State ────────────────────────────────────────────────────────────

    @property
    def state(self) -> BookingState:
        if self._submitting:
            return BookingState.SUBMITTING
        if self.holds.has_own_holds:
            return BookingState.HELD
        if self.selection:
            return BookingState.SELECTING
        return BookingState.BROWSING

    @property
    def summary(self) -> BookingSummary:
        return BookingSummary(
            count=len(self.selection),
            price_per_slot=self.resource.price_per_slot,
            currency=self.resource.currency,
        )

    @property
    def can_submit(self) -> bool:
        return (
            not self._submitting
            and bool(self.selection)
            and not self.holds.has_own_holds
            and self.split.is_valid
        )

    def dismiss_error(self) -> None:
        self.error = None

    def _fail(self, message: str) -> None:
        logger.info(f"[BOOKING] resource={self.resource.id}: {message}")
        self.error = message

    # ── Cells ────────────────────────────────────────────────────────────

    def is_unavailable(self, key: str) -> bool:
        """Calendar verdict only (hours, blackouts, past time)."""
        parsed = parse_slot_key(key)
        if parsed is None or parsed.start_time not in self._grid:
            return True
        if parsed.unit > self.resource.units:
            return True
        return is_slot_unavailable(
            self.resource,
            date.fromisoformat(parsed.date),
            parsed.start_time,
            self.clock(),
        )

    def is_disabled(self, key: str) -> bool:
        if self._submitting:
            return True
        if self.holds.owns_hold(key):
            return False
        if self.holds.is_held(key) or self.holds.has_own_holds:
            return True
        return self.is_unavailable(key)

    def cell_state(self, day: date | str, time_str: str, unit: int) -> CellState:
        key = make_slot_key(day, time_str, unit)
        if self.holds.owns_hold(key):
            return CellState.HELD_MINE
        if self.holds.is_held(key):
            return CellState.HELD_OTHER
        if key in self.selection:
            return CellState.SELECTED
        if self.is_unavailable(key):
            return CellState.UNAVAILABLE
        return CellState.AVAILABLE

    def cell(self, day: date | str, time_str: str, unit: int) -> Cell:
        key = make_slot_key(day, time_str, unit)
        return Cell(
            key=key,
            time=time_str,
            unit=unit,
            state=self.cell_state(day, time_str, unit),
            disabled=self.is_disabled(key),
        )

    # ── Events ───────────────────────────────────────────────────────────

    def click(self, key: str) -> bool:
        """
        Handle a click on a grid cell.

        Returns:
            True if the selection or the holds changed.
        """
        if self._submitting:
            return False

        if self.holds.owns_hold(key):
            cancelled = self.holds.cancel_hold(key)
            if cancelled:
                logger.info(f"[BOOKING] hold cancelled: {key}, state={self.state.value}")
            return cancelled

        if self.is_disabled(key):
            return False

        if key in self.selection:
            self.selection.discard(key)
        else:
            self.selection.add(key)
        self.split.retotal(self.summary.total)
        return True

    def deselect(self, key: str) -> None:
        if key in self.selection:
            self.selection.discard(key)
            self.split.retotal(self.summary.total)

    def clear_selection(self) -> None:
        self.selection.clear()
        self.split.retotal(self.summary.total)

    def on_tick(self, changed: bool = True) -> None:
        """Called after HoldStore.tick()."""
        taken = {k for k in self.selection if self.holds.is_held(k) and not self.holds.owns_hold(k)}
        if taken:
            logger.info(f"[BOOKING] {len(taken)} selected slot(s) now held by another viewer")
            self.selection -= taken
            self.split.retotal(self.summary.total)

    async def submit(self) -> bool:
        """
        Book the Selection Set.

        Returns:
            True if the backend accepted the booking.
        """
        if self._submitting:
            return False

        if not self.auth.is_authenticated:
            self._fail(AUTH_REQUIRED_MESSAGE)
            return False

        if not self.auth.can_book:
            self._fail(FORBIDDEN_MESSAGE)
            return False

        if not self.selection:
            self._fail(EMPTY_SELECTION_MESSAGE)
            return False

        if self.holds.has_own_holds:
            return False

        split_errors = self.split.errors()
        if split_errors:
            self._fail(split_errors[0])
            return False

        keys = sorted(self.selection)
        try:
            request = build_booking_request(keys, self.split.payload(), self.config)
        except ValueError as e:
            self._fail(str(e))
            return False

        self.error = None
        self.success_message = None
        self._submitting = True
        logger.info(f"[BOOKING] submitting {len(keys)} slot(s) for resource={self.resource.id}")

        try:
            if isinstance(request, BookBatchRequest):
                response = await self.api.book_resource_batch(self.resource.id, request)
            else:
                response = await self.api.book_resource_multi(self.resource.id, request)
        except BookingError as e:
            self._fail(e.message or GENERIC_BOOKING_ERROR)
            return False
        except Exception as e:
            logger.exception(f"[BOOKING] booking request failed for resource={self.resource.id}")
            self._fail(str(e) or GENERIC_BOOKING_ERROR)
            return False
        finally:
            self._submitting = False

        if not isinstance(response, dict) or response.get("statusCode") != 200:
            message = response.get("message") if isinstance(response, dict) else None
            self._fail(message or GENERIC_BOOKING_ERROR)
            return False

        self.success_message = response.get("message") or f"Booked {len(keys)} slot(s) successfully!"
        self.holds.add_holds(keys)
        self.selection.clear()
        self.split.disable()
        self.split.retotal(0)
        logger.info(f"[BOOKING] booked {len(keys)} slot(s), state={self.state.value}")
        return True
