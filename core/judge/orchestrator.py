import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

import settings
from storage.mysql import (
    ProblemService,
    TestCaseService,
    SubmissionService,
    TestResultService,
    UserProblemStatService
)
from .caller import Judge0Caller, judge0_caller
from .languages import get_template
from .models import (
    Verdict,
    SubmissionStatus,
    RawExecutionResult,
    TestResult,
    SubmissionOutcome,
    JudgeResult
)
from .verdict import classify, worst_verdict
from .exceptions import ExecutionServiceError, StatsReconcileError

logger = logging.getLogger(__name__)


def error_message_for(verdict: Verdict, raw: RawExecutionResult) -> str | None:
    if verdict is Verdict.compilation_error:
        return raw.compile_output or "Compilation error"
    if verdict is Verdict.runtime_error:
        return raw.stderr or f"Runtime error (status {raw.status_id})"
    if verdict is Verdict.time_limit_exceeded:
        return "Time limit exceeded"
    return None


class JudgeOrchestrator:
    def __init__(
        self,
        problem_service: ProblemService,
        test_case_service: TestCaseService,
        submission_service: SubmissionService,
        test_result_service: TestResultService,
        stat_service: UserProblemStatService,
        caller: Judge0Caller = None,
        short_circuit_compilation_error: bool = None
    ):
        self.problem_service = problem_service
        self.test_case_service = test_case_service
        self.submission_service = submission_service
        self.test_result_service = test_result_service
        self.stat_service = stat_service
        self.caller = caller or judge0_caller
        if short_circuit_compilation_error is None:
            short_circuit_compilation_error = settings.JUDGE_CONF.get("short_circuit_compilation_error", True)
        self.short_circuit_compilation_error = short_circuit_compilation_error

    @classmethod
    def with_session(cls, session: AsyncSession, **kwargs) -> "JudgeOrchestrator":
        return cls(
            ProblemService(session),
            TestCaseService(session),
            SubmissionService(session),
            TestResultService(session),
            UserProblemStatService(session),
            **kwargs
        )

    async def create_submission(
        self,
        *,
        user_id: str,
        problem_id: int,
        code: str,
        language: str,
        challenge_id: int | None = None
    ):
        """
        创建状态为 pending 的提交记录，题目不存在时返回 None
        """
        problem = await self.problem_service.query_by_primary_key(problem_id)
        if problem is None:
            return None
        test_cases = await self.test_case_service.query_by_problem_id(problem_id)
        submission = await self.submission_service.create(
            user_id=user_id,
            problem_id=problem_id,
            code=code,
            language=language,
            test_cases_total=len(test_cases),
            challenge_id=challenge_id
        )
        logger.info(
            "Created submission %s for problem %s, language: %s, user: %s",
            submission.id, problem_id, language, user_id
        )
        return submission

    async def submit(
        self,
        *,
        user_id: str,
        problem_id: int,
        code: str,
        language: str,
        challenge_id: int | None = None
    ) -> JudgeResult | None:
        submission = await self.create_submission(
            user_id=user_id,
            problem_id=problem_id,
            code=code,
            language=language,
            challenge_id=challenge_id
        )
        if submission is None:
            return None
        return await self.judge(submission)

    async def judge_by_id(self, submission_id: int) -> JudgeResult | None:
        submission = await self.submission_service.query_by_primary_key(submission_id, refresh=True)
        if submission is None or submission.status != SubmissionStatus.pending.value:
            # 已经判过的提交记录不再重复判题
            return None
        return await self.judge(submission)

    async def judge(self, submission) -> JudgeResult:
        # 回滚会让会话中的对象全部过期，后续只使用这里取出的值
        submission_id, user_id, problem_id = submission.id, submission.user_id, submission.problem_id
        code, language = submission.code, submission.language
        test_cases_total = submission.test_cases_total
        try:
            await self.submission_service.mark_running(submission_id)
        except SQLAlchemyError:
            logger.exception("Failed to mark submission %s as running", submission_id)
            await self.submission_service.session.rollback()

        problem = await self.problem_service.query_by_primary_key(problem_id)
        if problem is None:
            # 排队期间题目被删除，直接结束这次提交，避免提交记录一直停留在 running
            logger.error("Problem %s of submission %s no longer exists", problem_id, submission_id)
            outcome = SubmissionOutcome(
                verdict=Verdict.runtime_error,
                test_cases_passed=0,
                test_cases_total=test_cases_total,
                error_message="Problem not found"
            )
            await self.finalize(submission_id, outcome)
            return JudgeResult(submission_id=submission_id, **outcome.model_dump())
        test_cases = await self.test_case_service.query_by_problem_id(problem_id)
        outcome, test_results = await self.run_test_cases(code, language, problem, test_cases)
        logger.info(
            "Submission %s results: status=%s, passed=%d/%d",
            submission_id, outcome.verdict.value, outcome.test_cases_passed, outcome.test_cases_total
        )
        await self.persist(submission_id, user_id, problem_id, problem.points, outcome, test_results)
        return JudgeResult(
            submission_id=submission_id,
            sample_test_results=[result for result in test_results if result.is_sample],
            **outcome.model_dump()
        )

    async def run_test_cases(self, code: str, language: str, problem, test_cases) -> tuple[SubmissionOutcome, list[TestResult]]:
        """
        按顺序逐个执行测试用例并汇总结果
        :return: 最终判题结果以及每个已执行测试用例的结果
        """
        template = get_template(language)
        verdict = Verdict.accepted
        error_message = None
        passed_count = 0
        total_time = 0.0
        max_memory = 0.0
        test_results: list[TestResult] = []

        for test_case in test_cases:
            program = template.prepare(code, problem.starter_code or "", test_case.input)
            try:
                raw = await self.caller.call(
                    source_code=program.source_code,
                    stdin=program.stdin,
                    language=language,
                    time_limit=problem.time_limit
                )
            except ExecutionServiceError as e:
                logger.error("Error executing test case %s: %s", test_case.id, e)
                verdict = Verdict.runtime_error
                error_message = str(e)
                break

            classification = classify(raw, test_case.expected_output, template.flat_char_arrays)
            if classification.passed:
                passed_count += 1
            total_time += raw.time_ms
            max_memory = max(max_memory, raw.memory_mb)
            test_results.append(TestResult(
                test_case_id=test_case.id,
                input=test_case.input,
                expected_output=test_case.expected_output.strip(),
                actual_output=classification.actual_output,
                passed=classification.passed,
                verdict=classification.verdict,
                execution_time_ms=raw.time_ms,
                memory_used_mb=raw.memory_mb,
                is_sample=test_case.is_sample
            ))

            # 最终结果取所有测试用例中最严重的一个，错误信息跟随该结果
            worse = worst_verdict(verdict, classification.verdict)
            if worse is not verdict:
                verdict = worse
                error_message = error_message_for(verdict, raw)

            if classification.verdict is Verdict.compilation_error and self.short_circuit_compilation_error:
                # 同一份代码在后续测试用例上只会得到相同的编译错误
                break

        evaluated = len(test_results)
        outcome = SubmissionOutcome(
            verdict=verdict,
            test_cases_passed=passed_count,
            test_cases_total=len(test_cases),
            execution_time_ms=total_time / evaluated if evaluated else 0,
            memory_used_mb=max_memory,
            error_message=error_message
        )
        return outcome, test_results

    async def finalize(self, submission_id: int, outcome: SubmissionOutcome) -> bool:
        """
        写入最终结果，只有提交记录已经被其他任务结束时才返回 False，写库异常记录日志后返回 True
        """
        try:
            if not await self.submission_service.finalize(submission_id, outcome):
                logger.warning("Submission %s was already finalized, result discarded", submission_id)
                return False
        except SQLAlchemyError:
            logger.exception("Failed to finalize submission %s", submission_id)
            await self.submission_service.session.rollback()
        return True

    async def persist(
        self,
        submission_id: int,
        user_id: str,
        problem_id: int,
        problem_points: int,
        outcome: SubmissionOutcome,
        test_results: list[TestResult]
    ):
        """
        保存判题结果并更新用户做题统计，写库失败只记录日志，不影响返回给调用方的结果
        """
        if not await self.finalize(submission_id, outcome):
            return

        try:
            await self.test_result_service.create_many(submission_id, test_results)
        except SQLAlchemyError:
            logger.exception("Failed to save test results of submission %s", submission_id)
            await self.test_result_service.session.rollback()

        await self.reconcile_stats(submission_id, user_id, problem_id, problem_points, outcome)

    async def reconcile_stats(
        self,
        submission_id: int,
        user_id: str,
        problem_id: int,
        problem_points: int,
        outcome: SubmissionOutcome
    ):
        # 写库异常时重试，避免丢失“首次通过”的状态变化
        retries = settings.JUDGE_CONF["stats_retries"]
        for attempt in range(1, retries + 1):
            try:
                await self.stat_service.reconcile(user_id, problem_id, outcome, problem_points)
                return
            except StatsReconcileError:
                break
            except SQLAlchemyError:
                logger.warning(
                    "Database error while updating stats for submission %s (%d/%d)",
                    submission_id, attempt, retries, exc_info=True
                )
                await self.stat_service.session.rollback()
        logger.error(
            "Failed to update stats for user %s problem %s, submission %s",
            user_id, problem_id, submission_id
        )


async def judge_submission(**kwargs) -> JudgeResult | None:
    """
    使用独立的数据库会话完成一次判题，不依赖请求的生命周期
    """
    async with SubmissionService() as service:
        orchestrator = JudgeOrchestrator.with_session(service.session)
        return await orchestrator.submit(**kwargs)


async def judge_pending_submission(submission_id: int) -> JudgeResult | None:
    async with SubmissionService() as service:
        orchestrator = JudgeOrchestrator.with_session(service.session)
        return await orchestrator.judge_by_id(submission_id)
