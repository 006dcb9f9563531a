from redis.asyncio import Redis, ConnectionPool

import settings


class CachePrefix:
    SESSION_PREFIX = "codearena-session:"  # 保存单个 Session 信息
    USER_PREFIX = "codearena-user:"  # 保存用户信息


_session_connection_pool = ConnectionPool(
    max_connections=10,
    host=settings.REDIS_CONF["session"]["HOST"],
    port=settings.REDIS_CONF["session"]["PORT"],
    db=settings.REDIS_CONF["session"]["DB"],
    decode_responses=True,
    password=settings.REDIS_CONF["session"]["PASSWORD"]
)


def get_session_redis():
    return Redis(connection_pool=_session_connection_pool)


async def close_cache_connections():
    await _session_connection_pool.aclose()
