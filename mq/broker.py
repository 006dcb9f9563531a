import logging

from taskiq_redis import RedisAsyncResultBackend
from taskiq_aio_pika import AioPikaBroker

import settings
from core.judge.orchestrator import judge_pending_submission

logger = logging.getLogger(__name__)


_mq_conf = settings.REDIS_CONF["mq"]
if _mq_conf["PASSWORD"] is not None:
    _redis_url = f"redis://:{_mq_conf['PASSWORD']}@{_mq_conf['HOST']}:{_mq_conf['PORT']}/{_mq_conf['DB']}"
else:
    _redis_url = f"redis://{_mq_conf['HOST']}:{_mq_conf['PORT']}/{_mq_conf['DB']}"

broker = AioPikaBroker(
    url=settings.RABBITMQ_CONF["url"],
).with_result_backend(
    RedisAsyncResultBackend(
        redis_url=_redis_url,
        health_check_interval=30,
        socket_keepalive=True,
        retry_on_timeout=True,
        socket_connect_timeout=15,
        socket_timeout=10
    )
)


@broker.task("judge-submission")
async def judge_submission_task(submission_id: int):
    """
    对队列中 pending 状态的提交记录进行判题，已经判过的记录直接忽略
    """
    result = await judge_pending_submission(submission_id)
    if result is None:
        logger.info("Submission %s is missing or already judged, skipped", submission_id)
        return None
    return result.model_dump(mode="json")
