from datetime import datetime

from sqlalchemy import Column, TIMESTAMP, Text, func
from sqlmodel import Field

from utils.models import ArenaSQLModel


class Problem(ArenaSQLModel, table=True):
    __tablename__ = "problem"

    id: int | None = Field(None, primary_key=True)
    title: str = Field(max_length=100, nullable=False)
    starter_code: str = Field("", sa_type=Text, nullable=False)
    points: int = Field(0, nullable=False)
    time_limit: int = Field(2000, nullable=False)  # 单位：毫秒
    created_at: datetime = Field(
        None,
        sa_column=Column(
            "created_at", TIMESTAMP(), server_default=func.now(), nullable=False
        )
    )


class TestCase(ArenaSQLModel, table=True):
    __tablename__ = "problem_test_case"

    id: int | None = Field(None, primary_key=True)
    input: str = Field(sa_type=Text, nullable=False)
    expected_output: str = Field(sa_type=Text, nullable=False)
    order_index: int = Field(0, nullable=False)
    is_sample: bool = Field(False, nullable=False)
    problem_id: int = Field(nullable=False, index=True, foreign_key="problem.id")
