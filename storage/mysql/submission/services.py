import logging
from datetime import datetime

from sqlmodel import select
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

import settings
from core.judge.models import SubmissionStatus, SubmissionOutcome, TestResult
from core.judge.stats import merge_user_problem_stat
from core.judge.exceptions import StatsReconcileError
from ..base import MySQLService
from .models import Submission, SubmissionTestResult, UserProblemStat

logger = logging.getLogger(__name__)

_OPEN_STATUSES = (SubmissionStatus.pending.value, SubmissionStatus.running.value)


class SubmissionService(MySQLService):
    async def query_by_primary_key(self, submission_id: int, refresh: bool = False):
        statement = select(Submission).where(Submission.id == submission_id)
        if refresh:
            statement = statement.execution_options(populate_existing=True)
        submissions = await self.session.exec(statement)
        return submissions.first()

    async def query_by_user_and_problem_id(self, user_id: str, problem_id: int):
        statement = (
            select(Submission)
            .where(
                Submission.user_id == user_id,
                Submission.problem_id == problem_id
            )
            .order_by(Submission.created_at.desc(), Submission.id.desc())
        )
        submissions = await self.session.exec(statement)
        return submissions.all()

    async def create(
        self,
        user_id: str,
        problem_id: int,
        code: str,
        language: str,
        test_cases_total: int,
        challenge_id: int | None = None
    ) -> Submission:
        submission = Submission(
            user_id=user_id,
            problem_id=problem_id,
            code=code,
            language=language,
            challenge_id=challenge_id,
            test_cases_total=test_cases_total,
            status=SubmissionStatus.pending.value
        )
        self.session.add(submission)
        await self.session.commit()
        await self.session.refresh(submission)
        return submission

    async def mark_running(self, submission_id: int) -> bool:
        statement = (
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.status == SubmissionStatus.pending.value
            )
            .values(status=SubmissionStatus.running.value)
        )
        result = await self.session.exec(statement)  # type: ignore
        await self.session.commit()
        return result.rowcount == 1

    async def finalize(self, submission_id: int, outcome: SubmissionOutcome) -> bool:
        """
        写入最终判题结果，已经结束的提交记录不会被再次修改
        :param submission_id: 提交记录ID
        :param outcome: 最终判题结果
        :return: 是否写入成功
        """
        statement = (
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.status.in_(_OPEN_STATUSES)
            )
            .values(
                status=outcome.verdict.value,
                test_cases_passed=outcome.test_cases_passed,
                test_cases_total=outcome.test_cases_total,
                execution_time_ms=outcome.execution_time_ms,
                memory_used_mb=outcome.memory_used_mb,
                error_message=outcome.error_message
            )
        )
        result = await self.session.exec(statement)  # type: ignore
        await self.session.commit()
        return result.rowcount == 1


class TestResultService(MySQLService):
    async def create_many(self, submission_id: int, test_results: list[TestResult]):
        _test_results = [
            SubmissionTestResult(submission_id=submission_id, **test_result.model_dump(mode="json"))
            for test_result in test_results
        ]
        self.session.add_all(_test_results)
        await self.session.commit()

    async def query_by_submission_id(self, submission_id: int, sample_only: bool = True):
        statement = select(SubmissionTestResult).where(SubmissionTestResult.submission_id == submission_id)
        if sample_only:
            statement = statement.where(SubmissionTestResult.is_sample == True)  # noqa: E712
        statement = statement.order_by(SubmissionTestResult.id)
        test_results = await self.session.exec(statement)
        return test_results.all()


class UserProblemStatService(MySQLService):
    async def query_by_user_and_problem_id(self, user_id: str, problem_id: int, refresh: bool = False):
        statement = select(UserProblemStat).where(
            UserProblemStat.user_id == user_id,
            UserProblemStat.problem_id == problem_id
        )
        if refresh:
            # 重新从数据库读取，避免拿到会话中缓存的旧数据
            statement = statement.execution_options(populate_existing=True)
        stats = await self.session.exec(statement)
        return stats.first()

    async def reconcile(
        self,
        user_id: str,
        problem_id: int,
        outcome: SubmissionOutcome,
        problem_points: int,
        retries: int = None
    ) -> dict:
        """
        把提交结果合并进 (user_id, problem_id) 唯一对应的统计行。

        不依赖数据库锁：每次写入后都检查是否真的写入成功。插入时遇到唯一索引冲突，
        说明另一个请求刚刚创建了这一行；更新时影响行数为 0，说明这一行在读取之后被其他请求修改过。
        这两种情况都会重新读取后再次合并，直到成功或重试次数用尽。
        :return: 最终写入的列
        """
        retries = retries or settings.JUDGE_CONF["stats_retries"]
        for attempt in range(1, retries + 1):
            existing = await self.query_by_user_and_problem_id(user_id, problem_id, refresh=True)
            values = merge_user_problem_stat(existing, outcome, problem_points, datetime.now())
            if existing is None:
                written = await self._insert(user_id, problem_id, values)
            else:
                written = await self._compare_and_update(user_id, problem_id, existing.attempts, values)
            if written:
                return values
            logger.info(
                "Stats row for user %s problem %s changed concurrently, retrying (%d/%d)",
                user_id, problem_id, attempt, retries
            )
        raise StatsReconcileError(
            f"failed to reconcile stats for user {user_id} problem {problem_id} after {retries} attempts"
        )

    async def _insert(self, user_id: str, problem_id: int, values: dict) -> bool:
        self.session.add(UserProblemStat(user_id=user_id, problem_id=problem_id, **values))
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            return False
        return True

    async def _compare_and_update(self, user_id: str, problem_id: int, expected_attempts: int, values: dict) -> bool:
        # attempts 每次写入都会加一，可以当作版本号使用
        statement = (
            update(UserProblemStat)
            .where(
                UserProblemStat.user_id == user_id,
                UserProblemStat.problem_id == problem_id,
                UserProblemStat.attempts == expected_attempts
            )
            .values(**values)
        )
        result = await self.session.exec(statement)  # type: ignore
        if result.rowcount != 1:
            await self.session.rollback()
            return False
        await self.session.commit()
        return True
