# scheduler/app/redis_client.py
"""
Shared Redis connection for hold persistence.

The connection is lazy: nothing is opened until the first command.
"""

import redis

from .config import settings

redis_client = redis.from_url(settings.redis_url, decode_responses=True)
