from datetime import datetime

from sqlalchemy import Column, TIMESTAMP, Text, UniqueConstraint, func
from sqlmodel import Field

from utils.models import ArenaSQLModel
from core.judge.models import SubmissionStatus


class Submission(ArenaSQLModel, table=True):
    __tablename__ = "problem_submission"

    id: int | None = Field(None, primary_key=True)
    created_at: datetime = Field(
        None,
        sa_column=Column(
            "created_at", TIMESTAMP(), server_default=func.now(), nullable=False
        )
    )
    code: str = Field(sa_type=Text, nullable=False)
    language: str = Field(max_length=20, nullable=False)
    status: str = Field(SubmissionStatus.pending.value, max_length=20, nullable=False, index=True)
    test_cases_passed: int = Field(0, nullable=False)
    test_cases_total: int = Field(0, nullable=False)
    execution_time_ms: float = Field(0, nullable=False)
    memory_used_mb: float = Field(0, nullable=False)
    error_message: str | None = Field(None, sa_type=Text)
    challenge_id: int | None = Field(None, index=True)
    user_id: str = Field(max_length=36, nullable=False, index=True)
    problem_id: int = Field(nullable=False, index=True, foreign_key="problem.id")


class SubmissionTestResult(ArenaSQLModel, table=True):
    __tablename__ = "submission_test_result"

    id: int | None = Field(None, primary_key=True)
    input: str = Field(sa_type=Text, nullable=False)
    expected_output: str = Field(sa_type=Text, nullable=False)
    actual_output: str = Field(sa_type=Text, nullable=False)
    passed: bool = Field(nullable=False)
    verdict: str = Field(max_length=20, nullable=False)
    execution_time_ms: float = Field(0, nullable=False)
    memory_used_mb: float = Field(0, nullable=False)
    is_sample: bool = Field(False, nullable=False)
    submission_id: int = Field(nullable=False, index=True, foreign_key="problem_submission.id")
    test_case_id: int = Field(nullable=False, index=True, foreign_key="problem_test_case.id")


class UserProblemStat(ArenaSQLModel, table=True):
    __tablename__ = "user_problem_stat"
    __table_args__ = (UniqueConstraint("user_id", "problem_id", name="uq_user_problem_stat"),)

    id: int | None = Field(None, primary_key=True)
    attempts: int = Field(0, nullable=False)
    solved: bool = Field(False, nullable=False)
    best_execution_time_ms: float | None = Field(None)
    best_memory_used_mb: float | None = Field(None)
    points_earned: int = Field(0, nullable=False)
    last_attempted_at: datetime | None = Field(None)
    updated_at: datetime | None = Field(None)
    user_id: str = Field(max_length=36, nullable=False)
    problem_id: int = Field(nullable=False, index=True, foreign_key="problem.id")
