from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from core.judge.models import RawExecutionResult
from storage.mysql.problem.models import Problem, TestCase


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    async with AsyncSession(engine, expire_on_commit=False) as _session:
        yield _session
    await engine.dispose()


@pytest.fixture
def caller():
    return AsyncMock()


async def create_problem(session, cases, points=10, starter_code="", time_limit=2000) -> Problem:
    """
    cases: [(input, expected_output, is_sample), ...]，按列表顺序生成 order_index
    """
    problem = Problem(title="Reverse String", starter_code=starter_code, points=points, time_limit=time_limit)
    session.add(problem)
    await session.commit()
    await session.refresh(problem)
    for index, (test_input, expected_output, is_sample) in enumerate(cases):
        session.add(TestCase(
            problem_id=problem.id,
            input=test_input,
            expected_output=expected_output,
            order_index=index,
            is_sample=is_sample
        ))
    await session.commit()
    return problem


def accepted(stdout: str, time_ms: float = 10, memory_mb: float = 1.5) -> RawExecutionResult:
    return RawExecutionResult(status_id=3, stdout=stdout, time_ms=time_ms, memory_mb=memory_mb)
