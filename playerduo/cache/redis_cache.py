"""
Redis 캐시 구현
REDIS_URL 이 설정된 경우에만 활성화된다.
"""
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from playerduo.core.config import settings

logger = logging.getLogger(__name__)

# Redis 클라이언트 인스턴스
_redis_client: Optional[redis.Redis] = None

async def get_redis_client() -> Optional[redis.Redis]:
    """
    Redis 클라이언트 인스턴스 반환

    Returns:
        redis.Redis: Redis 클라이언트 (미설정 또는 연결 실패 시 None)
    """
    global _redis_client
    if not settings.REDIS_URL:
        return None
    if _redis_client is None:
        try:
            client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_timeout=2.0,
                socket_connect_timeout=2.0,
            )
            await client.ping()
            _redis_client = client
            logger.info("Connected to Redis")
        except (RedisError, OSError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            return None
    return _redis_client

async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("Redis connection closed.")

def balance_cache_key(user_id: int) -> str:
    return f"wallet:balance:{user_id}"
