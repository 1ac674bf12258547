from __future__ import annotations

from contextlib import contextmanager

import redis
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class JobLockError(Exception):
    """Raised when a periodic job lock cannot be acquired."""


_LOCK_PREFIX = "clan_portal:lock:"


def _redis_client() -> redis.Redis:
    redis_url = getattr(settings, "REDIS_URL", None)
    if not redis_url:
        raise ImproperlyConfigured("REDIS_URL is not configured in settings.")
    return redis.Redis.from_url(redis_url, decode_responses=True)


@contextmanager
def job_lock(name: str, timeout: int | None = None, wait: int | None = None):
    """Serialize a periodic job across processes with a Redis lock."""
    client = _redis_client()
    lock = client.lock(
        f"{_LOCK_PREFIX}{name}",
        timeout=timeout or getattr(settings, "ROSTER_LOCK_TIMEOUT", 600),
        blocking_timeout=wait if wait is not None else getattr(settings, "ROSTER_LOCK_WAIT", 5),
    )
    try:
        acquired = lock.acquire(blocking=True)
    except redis.RedisError as exc:
        raise JobLockError(f"Failed to acquire {name} lock: {exc}") from exc
    if not acquired:
        raise JobLockError(f"{name} is already running elsewhere.")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # Lock expired server-side before release.
            pass
