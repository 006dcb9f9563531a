from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from storage.mysql import (
    MySQLService,
    get_async_session,
    SubmissionService,
    TestResultService,
    UserProblemStatService
)
from core.judge.orchestrator import JudgeOrchestrator


def service_factory(service_class: type[MySQLService]):
    def create_service(session: AsyncSession = Depends(get_async_session)) -> MySQLService:
        return service_class(session)
    return create_service


def get_judge_orchestrator(session: AsyncSession = Depends(get_async_session)) -> JudgeOrchestrator:
    return JudgeOrchestrator.with_session(session)


get_submission_service = service_factory(SubmissionService)
get_test_result_service = service_factory(TestResultService)
get_user_problem_stat_service = service_factory(UserProblemStatService)
