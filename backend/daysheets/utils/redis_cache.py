import base64
import logging
import os
import random
from typing import Optional

import redis

from daysheets.core.config import settings
from .json_utils import dumps, loads

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


class _NullRedis:
    """No-op Redis client used when Redis is disabled.

    Methods mirror the minimal surface used in this codebase so callers can
    proceed without needing try/except around get_redis_client().
    """

    def get(self, key: str):
        return None

    def setex(self, key: str, expire: int, value: str):
        return None

    def delete(self, key: str):
        return 0

    def close(self):
        return None


def get_redis_client() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        url = (settings.REDIS_URL or "").strip()
        # Allow disabling via empty/none/disabled/false
        if not url or url.lower() in {"none", "disabled", "false", "0"}:
            _redis_client = _NullRedis()  # type: ignore[assignment]
            return _redis_client
        # Conservative socket timeouts so a slow Redis never stalls a request
        _redis_client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=float(os.getenv("REDIS_CONNECT_TIMEOUT", "0.5")),
            socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", "0.5")),
        )
    return _redis_client


FLIGHT_KEY_PREFIX = "flight:lookup"
LOGO_KEY_PREFIX = "logo:airline"


def _apply_jitter(expire: int) -> int:
    """Return a TTL with a small random jitter to prevent cache stampedes."""
    return expire + random.randint(0, max(1, expire // 10))


def cache_bytes(key: str, data: bytes, expire: int) -> None:
    """Cache arbitrary bytes under the given key using base64 encoding.

    The global Redis client is configured with decode_responses=True, so we
    encode binary blobs as base64 strings for storage.
    """
    client = get_redis_client()
    try:
        client.setex(key, _apply_jitter(expire), base64.b64encode(data).decode("ascii"))
    except redis.exceptions.RedisError as exc:
        logger.warning("Could not cache bytes: %s", exc)


def get_cached_bytes(key: str) -> Optional[bytes]:
    """Return cached bytes for the key if present, else None."""
    client = get_redis_client()
    try:
        data = client.get(key)
    except redis.exceptions.RedisError as exc:
        logger.warning("Redis unavailable: %s", exc)
        return None
    if not data:
        return None
    try:
        return base64.b64decode(data)
    except ValueError:
        return None


def _flight_key(params: dict) -> str:
    parts = [f"{k}={str(v).upper()}" for k, v in sorted(params.items()) if v]
    return f"{FLIGHT_KEY_PREFIX}:{'&'.join(parts)}"


def get_cached_flight(params: dict) -> dict | None:
    client = get_redis_client()
    try:
        data = client.get(_flight_key(params))
    except redis.exceptions.RedisError as exc:
        logger.warning("Redis unavailable: %s", exc)
        return None
    if data:
        return loads(data)
    return None


def cache_flight(data: dict, params: dict, expire: int = 300) -> None:
    client = get_redis_client()
    try:
        # No jitter: the HTTP Cache-Control max-age promises the same window
        client.setex(_flight_key(params), expire, dumps(data))
    except redis.exceptions.RedisError as exc:
        logger.warning("Could not cache flight: %s", exc)


def logo_key(target: str, size: int) -> str:
    return f"{LOGO_KEY_PREFIX}:{target.lower()}:{size}"


def close_redis_client() -> None:
    """Close the global Redis client if it exists."""
    global _redis_client
    if _redis_client is not None:
        try:
            _redis_client.close()
        except redis.exceptions.RedisError as exc:  # pragma: no cover - best effort
            logger.warning("Error closing Redis client: %s", exc)
        finally:
            _redis_client = None
