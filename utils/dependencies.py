"""
收集项目所有依赖项
"""
from typing import Annotated

from fastapi import Depends

from core.user.session import get_current_user
from core.judge.orchestrator import JudgeOrchestrator
from utils.service_registry import (
    get_submission_service,
    get_test_result_service,
    get_user_problem_stat_service,
    get_judge_orchestrator
)
from storage.mysql import (
    SubmissionService,
    TestResultService,
    UserProblemStatService
)


# 用户相关依赖项
CurrentUserDependency = Annotated[dict, Depends(get_current_user)]  # noqa

# 数据库相关依赖项
SubmissionServiceDependency = Annotated[SubmissionService, Depends(get_submission_service)]
TestResultServiceDependency = Annotated[TestResultService, Depends(get_test_result_service)]
UserProblemStatServiceDependency = Annotated[UserProblemStatService, Depends(get_user_problem_stat_service)]

# 判题相关依赖项
JudgeOrchestratorDependency = Annotated[JudgeOrchestrator, Depends(get_judge_orchestrator)]
