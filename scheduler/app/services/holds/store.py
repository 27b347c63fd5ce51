# scheduler/app/services/holds/store.py
"""
Redis storage for slot holds.

Key format: resourceHolds_{resource_id}
Value: JSON object, slot key → {"expiresAt": epoch_ms, "owner": str}
       (legacy values are a bare epoch_ms number, owner unknown)

One key per resource, shared by every viewer of the same storage.
All writes are read-whole-map → mutate → write-whole-map (single SET).
Concurrent writers race; the backend stays the source of truth for
real booking conflicts.

Storage failures never propagate: the store falls back to "no holds".
"""

import json
import logging
from datetime import datetime
from typing import Callable, Iterable

from redis import Redis, RedisError

from ...auth import ANONYMOUS_OWNER
from ..slots.config import SlotGridConfig, get_grid_config
from .models import OwnedHold, decode_hold, encode_hold

logger = logging.getLogger(__name__)


def _epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


class HoldStore:
    """Resource-scoped hold map with expiry sweeping."""

    KEY_PREFIX = "resourceHolds_"

    def __init__(
        self,
        redis: Redis,
        resource_id: int | str,
        owner: str = ANONYMOUS_OWNER,
        clock: Callable[[], datetime] = datetime.now,
        config: SlotGridConfig | None = None,
    ):
        self.redis = redis
        self.resource_id = resource_id
        self.owner = owner or ANONYMOUS_OWNER
        self.clock = clock
        self.config = config or get_grid_config()

        self.holds: dict[str, OwnedHold] = {}
        self.has_own_holds = False
        self.own_earliest_expiry: int | None = None

    @property
    def key(self) -> str:
        return f"{self.KEY_PREFIX}{self.resource_id}"

    def _now_ms(self) -> int:
        return _epoch_ms(self.clock())

    # ── Storage ──────────────────────────────────────────────────────────

    def _read(self) -> dict[str, OwnedHold]:
        """Read and normalize the persisted map. Empty on any failure."""
        try:
            raw = self.redis.get(self.key)
            if not raw:
                return {}
            data = json.loads(raw)
        except (RedisError, TypeError, ValueError) as e:
            logger.warning(f"[HOLDS] read failed for {self.key}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"[HOLDS] unexpected payload under {self.key}, ignoring")
            return {}

        holds: dict[str, OwnedHold] = {}
        for slot_key, value in data.items():
            hold = decode_hold(value)
            if hold is not None:
                holds[slot_key] = hold.normalize()
        return holds

    def _write(self, holds: dict[str, OwnedHold]) -> None:
        """Persist the whole map; delete the key when nothing is left."""
        try:
            if holds:
                payload = {k: encode_hold(v) for k, v in holds.items()}
                self.redis.set(self.key, json.dumps(payload))
            else:
                self.redis.delete(self.key)
        except (RedisError, TypeError, ValueError) as e:
            logger.warning(f"[HOLDS] write failed for {self.key}: {e}")

    # ── Snapshot ─────────────────────────────────────────────────────────

    def _apply(self, holds: dict[str, OwnedHold]) -> None:
        """Replace the in-memory snapshot and recompute owner flags."""
        self.holds = holds
        own = [h.expires_at for h in holds.values() if h.is_owned_by(self.owner)]
        self.has_own_holds = bool(own)
        self.own_earliest_expiry = min(own) if own else None

    def _sweep(self, holds: dict[str, OwnedHold], now_ms: int) -> tuple[dict[str, OwnedHold], bool]:
        active = {k: h for k, h in holds.items() if h.is_active(now_ms)}
        return active, len(active) != len(holds)

    # ── Operations ───────────────────────────────────────────────────────

    def load(self) -> tuple[dict[str, OwnedHold], bool]:
        """
        Read holds for the resource, dropping expired entries.

        Returns:
            (active holds, whether the current owner has any of them)
        """
        holds, pruned = self._sweep(self._read(), self._now_ms())
        if pruned:
            self._write(holds)
        self._apply(holds)
        logger.info(
            f"[HOLDS] loaded {len(holds)} hold(s) for resource={self.resource_id}, "
            f"own={self.has_own_holds}"
        )
        return dict(holds), self.has_own_holds

    def add_holds(self, slot_keys: Iterable[str], owner: str | None = None) -> int:
        """
        Hold slots for hold_minutes from now.

        An existing hold is replaced only if the new expiry is later.

        Returns:
            Number of slots written (new or extended).
        """
        owner = owner or self.owner
        now_ms = self._now_ms()
        expires_at = now_ms + self.config.hold_ms

        holds, _ = self._sweep(self._read(), now_ms)
        written = 0
        for slot_key in slot_keys:
            existing = holds.get(slot_key)
            if existing is not None and existing.expires_at >= expires_at:
                continue
            holds[slot_key] = OwnedHold(expires_at=expires_at, owner=owner)
            written += 1

        self._write(holds)
        self._apply(holds)
        logger.info(f"[HOLDS] held {written} slot(s) on resource={self.resource_id} for owner={owner}")
        return written

    def cancel_hold(self, slot_key: str, owner: str | None = None) -> bool:
        """Remove a hold. Only its owner may cancel it."""
        owner = owner or self.owner
        holds, _ = self._sweep(self._read(), self._now_ms())

        existing = holds.get(slot_key)
        if existing is None or not existing.is_owned_by(owner):
            self._apply(holds)
            return False

        del holds[slot_key]
        self._write(holds)
        self._apply(holds)
        logger.info(f"[HOLDS] cancelled {slot_key} on resource={self.resource_id}")
        return True

    def tick(self) -> bool:
        """
        Periodic sweep (once per second while the page is open).

        Re-reads the shared map so holds written by other viewers show up.

        Returns:
            True if the visible holds changed.
        """
        before = self.holds
        stored = self._read()
        holds, pruned = self._sweep(stored, self._now_ms())
        if pruned:
            self._write(holds)
        self._apply(holds)
        return holds != before

    # ── Queries ──────────────────────────────────────────────────────────

    def is_held(self, slot_key: str) -> bool:
        return slot_key in self.holds

    def owns_hold(self, slot_key: str, owner: str | None = None) -> bool:
        hold = self.holds.get(slot_key)
        return hold is not None and hold.is_owned_by(owner or self.owner)

    def holder(self, slot_key: str) -> str | None:
        hold = self.holds.get(slot_key)
        return hold.owner if hold else None

    def seconds_remaining(self) -> int:
        """Seconds until the earliest own hold expires (0 when none)."""
        if self.own_earliest_expiry is None:
            return 0
        remaining_ms = self.own_earliest_expiry - self._now_ms()
        return max(0, -(-remaining_ms // 1000))

    def countdown_text(self) -> str:
        """Remaining time of the earliest own hold as "MM:SS"."""
        seconds = self.seconds_remaining()
        return f"{seconds // 60:02d}:{seconds % 60:02d}"
