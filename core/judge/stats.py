from datetime import datetime

from .models import SubmissionOutcome, Verdict


def merge_user_problem_stat(
    existing,
    outcome: SubmissionOutcome,
    problem_points: int,
    now: datetime
) -> dict:
    """
    把一次提交的结果合并进用户做题统计，不涉及数据库读写
    :param existing: 已有的统计行（需要 attempts、solved、points_earned、best_execution_time_ms、
                     best_memory_used_mb 属性），首次提交时为 None。
    :param outcome: 本次提交的最终结果。
    :param problem_points: 题目分值。
    :param now: 本次提交的时间。
    :return: 合并后需要写入的列。
    """
    accepted = outcome.verdict is Verdict.accepted
    if existing is None:
        attempts, was_solved, points_earned = 0, False, 0
        best_time, best_memory = None, None
    else:
        attempts, was_solved, points_earned = existing.attempts, existing.solved, existing.points_earned
        best_time, best_memory = existing.best_execution_time_ms, existing.best_memory_used_mb

    if accepted and not was_solved:
        # 分数只在首次通过时记一次
        points_earned = problem_points
    if accepted:
        if best_time is None or outcome.execution_time_ms < best_time:
            best_time = outcome.execution_time_ms
        if best_memory is None or outcome.memory_used_mb < best_memory:
            best_memory = outcome.memory_used_mb

    return {
        "attempts": attempts + 1,
        "solved": was_solved or accepted,
        "points_earned": points_earned,
        "best_execution_time_ms": best_time,
        "best_memory_used_mb": best_memory,
        "last_attempted_at": now,
        "updated_at": now,
    }
