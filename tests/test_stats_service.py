from types import SimpleNamespace

import pytest
from sqlalchemy import text

from core.judge.exceptions import StatsReconcileError
from core.judge.models import SubmissionOutcome, Verdict
from storage.mysql.submission.services import UserProblemStatService

from conftest import create_problem

ACCEPTED = SubmissionOutcome(
    verdict=Verdict.accepted, test_cases_passed=1, test_cases_total=1, execution_time_ms=30, memory_used_mb=2
)
WRONG_ANSWER = SubmissionOutcome(verdict=Verdict.wrong_answer, test_cases_passed=0, test_cases_total=1)


@pytest.mark.asyncio
async def test_reconcile_inserts_then_updates(session):
    problem = await create_problem(session, [])
    problem_id = problem.id
    service = UserProblemStatService(session)

    values = await service.reconcile("user-1", problem_id, WRONG_ANSWER, 10)
    assert values["attempts"] == 1
    values = await service.reconcile("user-1", problem_id, ACCEPTED, 10)
    assert values["attempts"] == 2

    stat = await service.query_by_user_and_problem_id("user-1", problem_id, refresh=True)
    assert stat.attempts == 2
    assert stat.solved is True
    assert stat.points_earned == 10
    assert stat.best_execution_time_ms == 30


@pytest.mark.asyncio
async def test_concurrent_insert_is_retried_as_update(session, monkeypatch):
    problem = await create_problem(session, [])
    problem_id = problem.id
    service = UserProblemStatService(session)
    await service.reconcile("user-1", problem_id, WRONG_ANSWER, 10)

    original = service.query_by_user_and_problem_id
    calls = []

    async def query_missing_first(user_id, problem_id, refresh=False):
        calls.append(user_id)
        if len(calls) == 1:
            # 模拟另一个请求在读取之后抢先插入了这一行
            return None
        return await original(user_id, problem_id, refresh)

    monkeypatch.setattr(service, "query_by_user_and_problem_id", query_missing_first)
    values = await service.reconcile("user-1", problem_id, ACCEPTED, 10)

    assert len(calls) == 2
    assert values["attempts"] == 2
    stat = await original("user-1", problem_id, refresh=True)
    assert stat.attempts == 2
    assert stat.solved is True


@pytest.mark.asyncio
async def test_stale_update_is_retried(session, monkeypatch):
    problem = await create_problem(session, [])
    problem_id = problem.id
    service = UserProblemStatService(session)
    await service.reconcile("user-1", problem_id, WRONG_ANSWER, 10)

    original = service.query_by_user_and_problem_id
    calls = []

    async def query_then_race(user_id, problem_id, refresh=False):
        calls.append(user_id)
        existing = await original(user_id, problem_id, refresh)
        if len(calls) == 1:
            snapshot = SimpleNamespace(
                attempts=existing.attempts,
                solved=existing.solved,
                points_earned=existing.points_earned,
                best_execution_time_ms=existing.best_execution_time_ms,
                best_memory_used_mb=existing.best_memory_used_mb
            )
            # 读取之后另一个请求完成了一次写入
            await session.exec(text("UPDATE user_problem_stat SET attempts = attempts + 1"))
            await session.commit()
            return snapshot
        return existing

    monkeypatch.setattr(service, "query_by_user_and_problem_id", query_then_race)
    values = await service.reconcile("user-1", problem_id, ACCEPTED, 10)

    assert len(calls) == 2
    assert values["attempts"] == 3
    stat = await original("user-1", problem_id, refresh=True)
    assert stat.attempts == 3
    assert stat.solved is True
    assert stat.points_earned == 10


@pytest.mark.asyncio
async def test_reconcile_gives_up_after_retries(session, monkeypatch):
    problem = await create_problem(session, [])
    problem_id = problem.id
    service = UserProblemStatService(session)
    await service.reconcile("user-1", problem_id, WRONG_ANSWER, 10)

    async def always_missing(user_id, problem_id, refresh=False):
        return None

    monkeypatch.setattr(service, "query_by_user_and_problem_id", always_missing)
    with pytest.raises(StatsReconcileError):
        await service.reconcile("user-1", problem_id, ACCEPTED, 10, retries=2)

    monkeypatch.undo()
    stat = await service.query_by_user_and_problem_id("user-1", problem_id, refresh=True)
    assert stat.attempts == 1
    assert stat.solved is False
