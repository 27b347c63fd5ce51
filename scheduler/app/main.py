"""
scheduler/app/main.py

Entry point for embedding the scheduler.

ONLY:
- logging setup
- wiring ApiClient + Redis + AuthContext into a ResourceBookingPage

No booking logic here.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from redis import Redis

from scheduler.app.auth import AuthContext
from scheduler.app.redis_client import redis_client
from scheduler.app.services.booking.page import ResourceBookingPage
from scheduler.app.utils.api import ApiClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def open_page(
    resource_id: int | str,
    token: Optional[str] = None,
    cached_roles: Optional[list[str]] = None,
    redis: Optional[Redis] = None,
    api: Optional[ApiClient] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> ResourceBookingPage:
    """
    Build a page for one viewer. Call await page.mount() afterwards.
    """
    auth = AuthContext(token=token, cached_roles=cached_roles or [])
    page = ResourceBookingPage(
        resource_id,
        api or ApiClient(auth=auth),
        auth,
        redis if redis is not None else redis_client,
        clock=clock,
    )
    logger.info(f"[PAGE] opened resource={resource_id} for owner={auth.owner_id}")
    return page
