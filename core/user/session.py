"""
登录状态由账号服务写入 Redis，判题服务只负责校验 Session
"""
import json

from fastapi import Depends, HTTPException
from fastapi.security import APIKeyCookie
from redis.asyncio import Redis

from storage.cache import get_session_redis, CachePrefix


SESSION_PREFIX = CachePrefix.SESSION_PREFIX
USER_PREFIX = CachePrefix.USER_PREFIX
cookie_scheme = APIKeyCookie(name="session_id", auto_error=False)


async def get_current_user(
    session_id: str = Depends(cookie_scheme),
    session_redis: Redis = Depends(get_session_redis),
) -> dict:
    if not session_id:
        raise HTTPException(status_code=401, detail="未登录")
    session_name = SESSION_PREFIX + session_id
    session_str = await session_redis.get(session_name)
    if not session_str:
        raise HTTPException(status_code=401, detail="未登录")
    session = json.loads(session_str)
    # 获取用户信息
    user_str = await session_redis.get(USER_PREFIX + session["user_id"])
    if not user_str:
        raise HTTPException(status_code=401, detail="会话已过期，请重新登录")
    user: dict = json.loads(user_str)
    # 判断用户是否被禁用
    if user.get("is_deleted"):
        await session_redis.delete(session_name)
        raise HTTPException(status_code=401, detail="当前账号已被禁用，请联系管理员")
    # 对比 Session 版本号
    if session["session_version"] != user["session_version"]:
        await session_redis.delete(session_name)
        raise HTTPException(status_code=401, detail="会话已过期，请重新登录")
    return user
