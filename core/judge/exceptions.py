class JudgeError(Exception):
    """
    判题引擎异常基类
    """


class ExecutionServiceError(JudgeError):
    """
    代码执行服务不可达、响应码非 2xx 或响应体无法解析
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StatsReconcileError(JudgeError):
    """
    用户做题统计在重试次数用尽后仍未能写入
    """
