import asyncio

from fastapi import APIRouter, Query

from mq.broker import judge_submission_task
from core.judge.orchestrator import judge_submission
from utils.responses import ArenaResponse, ResponseCodes
from utils.dependencies import (
    CurrentUserDependency,
    SubmissionServiceDependency,
    TestResultServiceDependency,
    UserProblemStatServiceDependency,
    JudgeOrchestratorDependency
)
from .models import SubmissionCreate

router = APIRouter()


@router.post("/submission", summary="提交代码并等待判题结果")
async def submit(data: SubmissionCreate, user: CurrentUserDependency):
    """
    ## 参数列表说明:
    **problem_id**: 题目ID；必须；请求体 </br>
    **code**: 用户的解题代码；必须；请求体 </br>
    **language**: 编程语言名称，例如 python、java；必须；请求体 </br>
    **challenge_id**: 每日挑战ID；可选；请求体
    ## 响应代码说明:
    **200**: 判题完成，返回判题结果以及样例测试用例的详细结果 </br>
    **260**: 编程语言为空 </br>
    **700**: 题目不存在
    """
    language = data.language.strip().lower()
    if not language:
        return ArenaResponse(ResponseCodes.PARAMS_ERROR)
    # 客户端断开连接时判题仍然继续，保证提交记录和做题统计被写入
    result = await asyncio.shield(judge_submission(
        user_id=user["user_id"],
        problem_id=data.problem_id,
        code=data.code,
        language=language,
        challenge_id=data.challenge_id
    ))
    if result is None:
        return ArenaResponse(ResponseCodes.PROBLEM_NOT_FOUND)
    return ArenaResponse(ResponseCodes.OK, data=result.model_dump(mode="json"))


@router.post("/submission/queue", summary="提交代码并放入判题队列")
async def submit_to_queue(
    data: SubmissionCreate,
    user: CurrentUserDependency,
    orchestrator: JudgeOrchestratorDependency
):
    """
    ## 参数列表说明:
    同“提交代码并等待判题结果”接口
    ## 响应代码说明:
    **200**: 提交成功，返回本次提交记录的ID，通过“查询提交记录”接口获取判题结果 </br>
    **260**: 编程语言为空 </br>
    **700**: 题目不存在
    """
    language = data.language.strip().lower()
    if not language:
        return ArenaResponse(ResponseCodes.PARAMS_ERROR)
    submission = await orchestrator.create_submission(
        user_id=user["user_id"],
        problem_id=data.problem_id,
        code=data.code,
        language=language,
        challenge_id=data.challenge_id
    )
    if submission is None:
        return ArenaResponse(ResponseCodes.PROBLEM_NOT_FOUND)
    await judge_submission_task.kiq(submission_id=submission.id)
    return ArenaResponse(ResponseCodes.OK, data={"submission_id": submission.id})


@router.get("/submission", summary="查询提交记录")
async def query_submission(
    user: CurrentUserDependency,
    submission_service: SubmissionServiceDependency,
    test_result_service: TestResultServiceDependency,
    submission_id: int = Query(ge=1)
):
    """
    ## 参数列表说明:
    **submission_id**: 提交记录的ID；必须；查询参数
    ## 响应代码说明:
    **200**: 业务逻辑执行成功，返回提交记录以及样例测试用例的结果 </br>
    **255**: 请求的资源不存在 </br>
    **310**: 当前账号权限不足
    """
    submission = await submission_service.query_by_primary_key(submission_id)
    if submission is None:
        return ArenaResponse(ResponseCodes.NOT_FOUND)
    if submission.user_id != user["user_id"]:
        return ArenaResponse(ResponseCodes.PERMISSION_DENIED)
    test_results = await test_result_service.query_by_submission_id(submission_id, sample_only=True)
    data = submission.model_dump(exclude={"user_id"})
    data["sample_test_results"] = [
        test_result.model_dump(exclude={"id", "submission_id"}) for test_result in test_results
    ]
    return ArenaResponse(ResponseCodes.OK, data=data)


@router.get("/submissions", summary="查询当前用户某道题目的全部提交记录")
async def query_submissions(
    user: CurrentUserDependency,
    service: SubmissionServiceDependency,
    problem_id: int = Query(ge=1)
):
    """
    ## 参数列表说明:
    **problem_id**: 题目ID；必须；查询参数
    ## 响应代码说明:
    **200**: 业务逻辑执行成功，按提交时间倒序返回提交记录
    """
    submissions = await service.query_by_user_and_problem_id(user["user_id"], problem_id)
    data = [submission.model_dump(exclude={"user_id", "code"}) for submission in submissions]
    return ArenaResponse(ResponseCodes.OK, data=data)


@router.get("/stats", summary="查询当前用户某道题目的做题统计")
async def query_stats(
    user: CurrentUserDependency,
    service: UserProblemStatServiceDependency,
    problem_id: int = Query(ge=1)
):
    """
    ## 参数列表说明:
    **problem_id**: 题目ID；必须；查询参数
    ## 响应代码说明:
    **200**: 业务逻辑执行成功 </br>
    **255**: 当前用户还没有提交过这道题目
    """
    stat = await service.query_by_user_and_problem_id(user["user_id"], problem_id)
    if stat is None:
        return ArenaResponse(ResponseCodes.NOT_FOUND)
    return ArenaResponse(ResponseCodes.OK, data=stat.model_dump(exclude={"id"}))
