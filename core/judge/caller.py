import logging
from json.decoder import JSONDecodeError

import httpx

import settings
from .models import RawExecutionResult
from .languages import resolve_language_id
from .verdict import JUDGE0_TLE_STATUS
from .exceptions import ExecutionServiceError

logger = logging.getLogger(__name__)


def parse_judge0_response(payload: dict) -> RawExecutionResult:
    """
    Judge0 的 time 字段单位为秒（字符串），memory 字段单位为 KB
    """
    status = payload.get("status")
    if isinstance(status, dict):
        status_id = status.get("id")
    else:
        status_id = payload.get("status_id", status)
    return RawExecutionResult(
        status_id=status_id,
        stdout=payload.get("stdout"),
        stderr=payload.get("stderr"),
        compile_output=payload.get("compile_output"),
        time_ms=float(payload.get("time") or 0) * 1000,
        memory_mb=float(payload.get("memory") or 0) / 1024
    )


class Judge0Caller:
    def __init__(
        self,
        url: str = None,
        *,
        api_key: str = None,
        api_host: str = None,
        timeout_grace: float = None,
        transport: httpx.AsyncBaseTransport = None
    ):
        conf = settings.JUDGE0_CONF
        self.url = (url or conf["url"]).rstrip("/") + "/submissions"
        self.headers = {"Content-Type": "application/json"}
        api_key = api_key or conf.get("api_key")
        api_host = api_host or conf.get("api_host")
        if api_key and api_host:
            self.headers.update({"x-rapidapi-key": api_key, "x-rapidapi-host": api_host})
        self.timeout_grace = conf.get("timeout_grace", 5) if timeout_grace is None else timeout_grace
        self.transport = transport

    async def call(
        self,
        *,
        source_code: str,
        stdin: str,
        language: str,
        time_limit: int
    ) -> RawExecutionResult:
        """
        同步等待 Judge0 返回单个测试用例的执行结果
        :param source_code: 拼装好的完整程序。
        :param stdin: 标准输入。
        :param language: 编程语言名称，未知语言会回退到默认语言。
        :param time_limit: 题目时间限制，单位毫秒。
        :return: 原始执行结果，请求超时按超出时间限制处理。
        """
        data = {
            "language_id": resolve_language_id(language),
            "source_code": source_code,
            "stdin": stdin
        }
        params = {"base64_encoded": "false", "wait": "true"}
        timeout = time_limit / 1000 + self.timeout_grace
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.post(self.url, params=params, json=data, headers=self.headers)
        except httpx.TimeoutException:
            logger.warning("Judge0 request timed out after %.1fs", timeout)
            return RawExecutionResult(status_id=JUDGE0_TLE_STATUS, time_ms=time_limit)
        except httpx.HTTPError as e:
            raise ExecutionServiceError(f"Judge0 API unreachable: {e}") from e

        if not response.is_success:
            logger.error("Judge0 API error: %s %s", response.status_code, response.text[:300])
            raise ExecutionServiceError(
                f"Judge0 API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code
            )
        try:
            payload = response.json()
        except JSONDecodeError as e:
            raise ExecutionServiceError("Judge0 API 响应解码异常", status_code=response.status_code) from e
        return parse_judge0_response(payload)


judge0_caller = Judge0Caller()
