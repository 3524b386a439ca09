"""
Login rate limiting

Attempts are counted per client IP in fixed windows. Counts are kept in
process memory and mirrored to Redis when REDIS_URL is set, so every API
worker sees the same window.
"""

import logging
import time
from threading import Lock
from typing import NamedTuple, Optional

import redis
from fastapi import HTTPException, Request

from .config import RATE_LIMIT_ENABLED, REDIS_URL

logger = logging.getLogger(__name__)

REDIS_SYNC_SECONDS = 10
PRUNE_SECONDS = 60


class RateLimitResult(NamedTuple):
    allowed: bool
    count: int
    retry_after: int


class AttemptCounter:
    """Fixed-window attempt counts, optionally shared through Redis"""

    def __init__(self, redis_url: Optional[str] = None):
        self.redis_url = redis_url
        self._redis: Optional[redis.Redis] = None
        self._windows: dict[str, dict] = {}
        self._lock = Lock()
        self._last_prune = 0

    def connect(self) -> Optional[redis.Redis]:
        """Redis client, or None when no URL is configured or it is unreachable"""
        if self._redis is not None or not self.redis_url:
            return self._redis
        try:
            client = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
        except redis.RedisError as e:
            logger.warning(f"⚠️ Redis unavailable, login attempts counted in memory only: {e}")
            return None
        logger.info("🔄 Redis connected for login rate limiting")
        self._redis = client
        return client

    def _prune(self, now: int) -> None:
        if now - self._last_prune < PRUNE_SECONDS:
            return
        stale = [key for key, window in self._windows.items() if now >= window["resets_at"]]
        for key in stale:
            del self._windows[key]
        self._last_prune = now

    def _open_window(self, key: str, window_seconds: int, now: int, client) -> dict:
        window = {"count": 0, "resets_at": now + window_seconds, "synced_at": now}
        if client is None:
            return window
        # Another worker may already have counted attempts for this key
        try:
            shared_count, ttl = client.get(key), client.ttl(key)
        except redis.RedisError as e:
            logger.warning(f"⚠️ Could not read {key} from Redis: {e}")
            return window
        if shared_count and ttl > 0:
            window["count"] = int(shared_count)
            window["resets_at"] = now + ttl
        return window

    def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        """Count one attempt for ``key`` and report whether it is within ``limit``"""
        now = int(time.time())
        client = self.connect()

        with self._lock:
            self._prune(now)
            window = self._windows.get(key)
            if window is None or now >= window["resets_at"]:
                window = self._open_window(key, window_seconds, now, client)
                self._windows[key] = window

            allowed = window["count"] < limit
            if allowed:
                window["count"] += 1

            if client is not None and now - window["synced_at"] >= REDIS_SYNC_SECONDS:
                try:
                    client.set(key, window["count"], ex=max(1, window["resets_at"] - now))
                    window["synced_at"] = now
                except redis.RedisError as e:
                    logger.warning(f"⚠️ Could not write {key} to Redis: {e}")

            return RateLimitResult(allowed, window["count"], max(0, window["resets_at"] - now))

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


attempt_counter = AttemptCounter(REDIS_URL)


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_rate_limiter(
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    counter: AttemptCounter = attempt_counter,
    enabled: bool = RATE_LIMIT_ENABLED,
):
    """
    Per-IP rate limiting dependency

    Example usage:
        rate_limit_login = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")

        @router.post("/login")
        async def login(data: LoginRequest, _: None = Depends(rate_limit_login)):
            ...
    """

    async def rate_limiter(request: Request):
        if not enabled:
            return

        key = f"{key_prefix}:{get_client_ip(request)}"
        result = counter.hit(key, limit, window_seconds)
        if not result.allowed:
            logger.warning(f"🚫 Rate limit exceeded for {key} ({result.count}/{limit})")
            raise HTTPException(
                status_code=429,
                detail=f"Too many requests. Try again in {result.retry_after} seconds.",
                headers={"Retry-After": str(result.retry_after)},
            )

    return rate_limiter
