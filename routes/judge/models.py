from sqlmodel import Field

from utils.models import ArenaSQLModel


class SubmissionCreate(ArenaSQLModel):
    problem_id: int = Field(ge=1)
    code: str = Field(min_length=1)
    language: str = Field(min_length=1, max_length=20)
    challenge_id: int | None = Field(None, ge=1)
