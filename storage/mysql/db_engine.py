from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import (
    create_async_engine as _create_async_engine,
    AsyncEngine
)

import settings


def create_async_engine(url: str | URL = None, **kwargs) -> AsyncEngine:
    if url is None:
        _MYSQL_CONF = settings.MYSQL_CONF
        url = URL.create(
            "mysql+aiomysql",
            username=_MYSQL_CONF["USER"],
            password=_MYSQL_CONF["PASSWORD"],
            host=_MYSQL_CONF["HOST"],
            port=_MYSQL_CONF["PORT"],
            database=_MYSQL_CONF["NAME"]
        )
    if "echo" not in kwargs:
        kwargs["echo"] = settings.DEV_ENV
    return _create_async_engine(url, **kwargs)


# 统计行的并发合并依赖“读已提交”，重新读取时才能看到其他请求刚提交的数据
engine = create_async_engine(
    pool_recycle=60,
    isolation_level="READ COMMITTED"
)
