import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField, field_validator
from sqlalchemy import Column, String, Text
from sqlmodel import Field

from codearena.data.schemas.base import BaseModel as TableModel, UTCDateTime, utcnow
from codearena.data.schemas.enums import SubmissionStatus


class Submission(TableModel, table=True):
    """A user's code attempt against a problem, optionally inside a contest."""

    __tablename__ = "submissions"

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    problem_id: uuid.UUID = Field(
        foreign_key="problems.id", index=True, ondelete="CASCADE"
    )
    contest_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="contests.id", index=True, ondelete="CASCADE"
    )
    code: str = Field(sa_column=Column(Text, nullable=False))
    language: str = Field(sa_column=Column(String(20), nullable=False))
    status: SubmissionStatus = Field(default=SubmissionStatus.PENDING)
    runtime: float = Field(default=0.0, description="Total runtime in seconds.")
    memory: int = Field(default=0, description="Peak memory in kB.")
    error_message: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    test_cases_passed: int = Field(default=0)
    test_cases_total: int = Field(default=0)
    score: int = Field(default=0)
    submitted_at: datetime = Field(default_factory=utcnow, index=True, sa_type=UTCDateTime)


class SubmissionCreate(BaseModel):
    code: str = PydanticField(..., min_length=1)
    language: str = PydanticField(..., min_length=1, examples=["cpp", "python"])

    @field_validator("code", "language")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class CaseResult(BaseModel):
    stdin: Optional[str] = None
    expected_output: Optional[str] = None
    stdout: Optional[str] = None
    status_id: int
    status_description: Optional[str] = None
    time: Optional[float] = None
    memory: Optional[int] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None


class JudgeVerdict(BaseModel):
    """Aggregate of the judge results for one batch."""

    status: SubmissionStatus
    passed: int
    total: int
    runtime: float
    memory: int
    error_message: Optional[str] = None
    results: List[CaseResult] = []

    @property
    def accepted(self) -> bool:
        return self.status == SubmissionStatus.ACCEPTED


class RunResponse(BaseModel):
    success: bool
    test_cases: List[CaseResult]
    runtime: float
    memory: int
    passed: int
    total: int
    error_message: Optional[str] = None


class SubmitResponse(BaseModel):
    accepted: bool
    total_test_cases: int
    passed_test_cases: int
    runtime: float
    memory: int
    message: SubmissionStatus
    error_message: Optional[str] = None
    submission_id: uuid.UUID


class ContestSubmitResponse(SubmitResponse):
    success: bool = True
    score: int
    rank: int
    is_first_attempt: bool


class SubmissionResponse(BaseModel):
    id: uuid.UUID
    problem_id: uuid.UUID
    contest_id: Optional[uuid.UUID] = None
    code: str
    language: str
    status: SubmissionStatus
    runtime: float
    memory: int
    error_message: Optional[str] = None
    test_cases_passed: int
    test_cases_total: int
    score: int
    submitted_at: datetime

    model_config = {"from_attributes": True}


class SubmissionPage(BaseModel):
    submissions: List[SubmissionResponse]
    total: int
    total_pages: int
    current_page: int
