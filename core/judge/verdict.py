from pydantic import BaseModel

from .models import RawExecutionResult, Verdict
from .charcodec import decode_char_array, parse_char_array, render_char_array, is_array_literal


# Judge0 状态码 -> 判题结果，未出现在表中的状态一律视为运行错误
JUDGE0_STATUS_VERDICTS: dict[int, Verdict] = {
    3: Verdict.accepted,
    4: Verdict.wrong_answer,
    5: Verdict.time_limit_exceeded,
    6: Verdict.compilation_error,
    7: Verdict.runtime_error,   # SIGSEGV
    8: Verdict.runtime_error,   # SIGXFSZ
    9: Verdict.runtime_error,   # SIGFPE
    10: Verdict.runtime_error,  # SIGABRT
    11: Verdict.runtime_error,  # NZEC
    12: Verdict.runtime_error,  # Other
}

JUDGE0_TLE_STATUS = 5

# 数值越大越严重
VERDICT_SEVERITY: dict[Verdict, int] = {
    Verdict.accepted: 0,
    Verdict.wrong_answer: 1,
    Verdict.time_limit_exceeded: 2,
    Verdict.runtime_error: 3,
    Verdict.compilation_error: 4,
}


class Classification(BaseModel):
    verdict: Verdict
    actual_output: str
    passed: bool


def verdict_from_status(status_id: int | None) -> Verdict:
    return JUDGE0_STATUS_VERDICTS.get(status_id, Verdict.runtime_error)


def worst_verdict(current: Verdict, candidate: Verdict) -> Verdict:
    if VERDICT_SEVERITY[candidate] > VERDICT_SEVERITY[current]:
        return candidate
    return current


def _flat_output(stdout: str) -> str:
    # 只去掉输出末尾的换行，字符数组首尾的空白字符同样是数据
    if stdout.endswith("\r\n"):
        return stdout[:-2]
    if stdout.endswith("\n"):
        return stdout[:-1]
    return stdout


def classify(
    raw: RawExecutionResult,
    expected_output: str,
    expand_char_array: bool = False
) -> Classification:
    """
    根据执行结果和期望输出给出单个测试用例的判题结果
    :param raw: 代码执行服务返回的原始结果。
    :param expected_output: 测试用例的期望输出。
    :param expand_char_array: 当前语言是否以扁平字符串输出字符数组，为真时在比较前还原为数组字面量。
    :return: 判题结果、规整后的实际输出、是否通过。
    """
    actual = (raw.stdout or "").strip()
    expected = expected_output.strip()
    verdict = verdict_from_status(raw.status_id)
    if verdict is not Verdict.accepted:
        # 非 accepted 的状态不会因为输出一致而被改判
        return Classification(verdict=verdict, actual_output=actual, passed=False)

    if expand_char_array and is_array_literal(expected) and not is_array_literal(actual):
        # 已经是数组字面量的输出（例如 int[]）不需要还原
        expected_chars = parse_char_array(expected)
        if expected_chars is not None:
            actual = render_char_array(decode_char_array(_flat_output(raw.stdout or "")))
            expected = render_char_array(expected_chars)

    if actual != expected:
        return Classification(verdict=Verdict.wrong_answer, actual_output=actual, passed=False)
    return Classification(verdict=Verdict.accepted, actual_output=actual, passed=True)
