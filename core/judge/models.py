from enum import Enum

from pydantic import BaseModel


class Verdict(str, Enum):
    accepted = "accepted"
    wrong_answer = "wrong_answer"
    compilation_error = "compilation_error"
    runtime_error = "runtime_error"
    time_limit_exceeded = "time_limit_exceeded"


class SubmissionStatus(str, Enum):
    """
    提交记录的状态，除 pending / running 以外的取值与 Verdict 一一对应
    """
    pending = "pending"
    running = "running"
    accepted = "accepted"
    wrong_answer = "wrong_answer"
    compilation_error = "compilation_error"
    runtime_error = "runtime_error"
    time_limit_exceeded = "time_limit_exceeded"


class PreparedProgram(BaseModel):
    source_code: str
    stdin: str


class RawExecutionResult(BaseModel):
    status_id: int | None = None
    stdout: str | None = None
    stderr: str | None = None
    compile_output: str | None = None
    time_ms: float = 0
    memory_mb: float = 0


class TestResult(BaseModel):
    test_case_id: int
    input: str
    expected_output: str
    actual_output: str
    passed: bool
    verdict: Verdict
    execution_time_ms: float
    memory_used_mb: float
    is_sample: bool


class SubmissionOutcome(BaseModel):
    verdict: Verdict
    test_cases_passed: int
    test_cases_total: int
    execution_time_ms: float = 0
    memory_used_mb: float = 0
    error_message: str | None = None


class JudgeResult(SubmissionOutcome):
    submission_id: int
    sample_test_results: list[TestResult] = []
