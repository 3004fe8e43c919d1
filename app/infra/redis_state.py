from __future__ import annotations

import os
from functools import lru_cache

from redis import Redis

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
RATE_LIMIT_PREFIX = "petreg:ratelimit:"


@lru_cache(maxsize=1)
def get_redis() -> Redis:
    return Redis.from_url(REDIS_URL, decode_responses=True)


def check_redis_ready() -> bool:
    try:
        return bool(get_redis().ping())
    except Exception:
        return False


def acquire_rate_limit(key: str, window_seconds: int) -> bool:
    """Claim ``key`` for ``window_seconds``; False when already claimed."""
    return bool(get_redis().set(f"{RATE_LIMIT_PREFIX}{key}", "1", nx=True, ex=window_seconds))


def release_rate_limit(key: str) -> None:
    get_redis().delete(f"{RATE_LIMIT_PREFIX}{key}")
