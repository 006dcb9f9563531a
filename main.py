from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from uvicorn.config import logger

import settings
from routes import judge_router
from storage.mysql import engine
from storage.cache import close_cache_connections
from mq.broker import broker


async def on_startup():
    logger.info("Creating RabbitMQ connection")
    await broker.startup()


async def on_shutdown():
    logger.info("Disconnecting with MySQL")
    await engine.dispose()
    logger.info("Disconnecting with RabbitMQ")
    await broker.shutdown()
    logger.info("Disconnecting with Redis")
    await close_cache_connections()


@asynccontextmanager
async def lifespan(_: FastAPI):
    await on_startup()
    yield
    await on_shutdown()


app = FastAPI(title="CodeArena 判题服务 API 文档", lifespan=lifespan)
app.include_router(judge_router, prefix="/judge", tags=["判题接口"])


if __name__ == "__main__":
    run_config = {
        "host": "127.0.0.1" if settings.DEV_ENV else "0.0.0.0",
        "log_config": "log-config.json"
    }
    uvicorn.run(app, **run_config)
