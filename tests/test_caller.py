import json

import httpx
import pytest

from core.judge.caller import Judge0Caller, parse_judge0_response
from core.judge.exceptions import ExecutionServiceError


def make_caller(handler, **kwargs) -> Judge0Caller:
    return Judge0Caller("http://judge0.test/", transport=httpx.MockTransport(handler), **kwargs)


def test_parse_judge0_response_units():
    raw = parse_judge0_response({
        "status": {"id": 3, "description": "Accepted"},
        "stdout": "hello\n",
        "stderr": None,
        "compile_output": None,
        "time": "0.025",
        "memory": 2048
    })
    assert raw.status_id == 3
    assert raw.stdout == "hello\n"
    assert raw.time_ms == pytest.approx(25)
    assert raw.memory_mb == pytest.approx(2)


def test_parse_judge0_response_missing_fields():
    raw = parse_judge0_response({"status_id": 6, "compile_output": "error: expected ';'"})
    assert raw.status_id == 6
    assert raw.time_ms == 0
    assert raw.memory_mb == 0


@pytest.mark.asyncio
async def test_call_posts_synchronous_submission():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"status": {"id": 3}, "stdout": "olleh", "time": "0.01", "memory": 1024})

    caller = make_caller(handler)
    raw = await caller.call(source_code="print(1)", stdin="hello", language="python", time_limit=2000)

    assert raw.status_id == 3
    assert raw.stdout == "olleh"
    request = requests[0]
    assert request.url.path == "/submissions"
    assert request.url.params["base64_encoded"] == "false"
    assert request.url.params["wait"] == "true"
    body = json.loads(request.content)
    assert body == {"language_id": 71, "source_code": "print(1)", "stdin": "hello"}
    assert "x-rapidapi-key" not in request.headers


@pytest.mark.asyncio
async def test_call_unknown_language_falls_back():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"status": {"id": 3}})

    await make_caller(handler).call(source_code="", stdin="", language="cobol", time_limit=1000)
    assert bodies[0]["language_id"] == 71


@pytest.mark.asyncio
async def test_call_sends_rapidapi_headers():
    headers = []

    def handler(request: httpx.Request) -> httpx.Response:
        headers.append(request.headers)
        return httpx.Response(200, json={"status": {"id": 3}})

    caller = make_caller(handler, api_key="secret", api_host="judge0-ce.p.rapidapi.com")
    await caller.call(source_code="", stdin="", language="java", time_limit=1000)
    assert headers[0]["x-rapidapi-key"] == "secret"
    assert headers[0]["x-rapidapi-host"] == "judge0-ce.p.rapidapi.com"


@pytest.mark.asyncio
async def test_call_non_success_status_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="Service Unavailable")

    with pytest.raises(ExecutionServiceError) as exc_info:
        await make_caller(handler).call(source_code="", stdin="", language="python", time_limit=1000)
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_call_invalid_body_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    with pytest.raises(ExecutionServiceError):
        await make_caller(handler).call(source_code="", stdin="", language="python", time_limit=1000)


@pytest.mark.asyncio
async def test_call_connection_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExecutionServiceError):
        await make_caller(handler).call(source_code="", stdin="", language="python", time_limit=1000)


@pytest.mark.asyncio
async def test_call_timeout_is_time_limit_exceeded():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    raw = await make_caller(handler).call(source_code="", stdin="", language="python", time_limit=1500)
    assert raw.status_id == 5
    assert raw.time_ms == 1500
