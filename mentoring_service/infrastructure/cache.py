import json
from typing import Any, Optional

import redis
import structlog

from ..config import settings

logger = structlog.get_logger()

_redis_client: Optional[redis.Redis] = None

GROUPS_LIST_KEY = "groups:list"


def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )
    return _redis_client


def get_cache(key: str) -> Optional[Any]:
    """Значение из кэша или None. Недоступный Redis - это промах, а не ошибка."""
    try:
        value = get_redis().get(key)
    except Exception as e:
        logger.warning("cache_unavailable", op="get", key=key, error=str(e))
        return None
    if value is None:
        return None
    return json.loads(value)


def set_cache(key: str, value: Any, ttl: int | None = None) -> bool:
    try:
        get_redis().setex(key, ttl or settings.CACHE_TTL, json.dumps(value, ensure_ascii=False, default=str))
    except Exception as e:
        logger.warning("cache_unavailable", op="set", key=key, error=str(e))
        return False
    return True


def invalidate(*keys: str) -> int:
    """Удалить ключи после изменения данных."""
    if not keys:
        return 0
    try:
        return get_redis().delete(*keys)
    except Exception as e:
        logger.warning("cache_unavailable", op="delete", keys=list(keys), error=str(e))
        return 0
