import os
import json


# 是否是开发环境
DEV_ENV: bool = os.environ.get("CODEARENA_ENV", "dev") == "dev"

# 元数据文件名
METADATA_FILENAME: str = os.environ.get(
    "CODEARENA_METADATA",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "metadata_dev.json" if DEV_ENV else "metadata.json")
)

# 元数据
with open(METADATA_FILENAME, encoding="utf8") as _f:
    METADATA: dict = json.load(_f)["metadata"]

# MySQL 连接配置
MYSQL_CONF: dict = METADATA["databases"]["mysql"]["default"]

# Redis 连接配置
REDIS_CONF: dict = METADATA["databases"]["redis"]

# RabbitMQ 消息队列配置
RABBITMQ_CONF: dict = METADATA["rabbitmq"]

# Judge0 代码执行服务配置
JUDGE0_CONF: dict = METADATA["judge0"]

# 判题引擎配置
JUDGE_CONF: dict = METADATA["judge"]
