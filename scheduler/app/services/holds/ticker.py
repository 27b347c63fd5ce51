# scheduler/app/services/holds/ticker.py
"""
Hold expiry ticker.

Calls HoldStore.tick() once per interval and notifies the page.
Owned by the page lifecycle: started on mount / resource change,
stopped on unmount.
"""

import asyncio
import logging
from typing import Callable, Optional

from ...config import settings
from .store import HoldStore

logger = logging.getLogger(__name__)


class HoldTicker:
    """Periodic asyncio task around a HoldStore."""

    def __init__(
        self,
        store: HoldStore,
        on_tick: Optional[Callable[[bool], None]] = None,
        interval: float | None = None,
    ):
        self.store = store
        self.on_tick = on_tick
        self.interval = interval if interval is not None else settings.tick_interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info(f"[TICKER] started for resource={self.store.resource_id}")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(f"[TICKER] stopped for resource={self.store.resource_id}")

    async def restart(self, store: HoldStore) -> None:
        """Re-arm for another resource."""
        await self.stop()
        self.store = store
        self.start()

    def run_once(self) -> bool:
        changed = self.store.tick()
        if self.on_tick is not None:
            self.on_tick(changed)
        return changed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("[TICKER] tick failed")
