import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField, field_validator
from sqlalchemy import JSON, Column, String, Text
from sqlmodel import Field

from codearena.data.schemas.base import BaseModel as TableModel
from codearena.data.schemas.enums import Difficulty


class Problem(TableModel, table=True):
    """
    Represents a coding problem in the system.

    Test cases, starter code and reference solutions are stored inline as
    JSON lists of the shapes described by the schemas below.
    """

    __tablename__ = "problems"

    title: str = Field(sa_column=Column(String(200), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    difficulty: Difficulty = Field(default=Difficulty.EASY)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    visible_test_cases: List[dict] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    hidden_test_cases: List[dict] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    start_code: List[dict] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    reference_solution: List[dict] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    problem_creator_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="users.id", ondelete="SET NULL"
    )


class VisibleTestCase(BaseModel):
    input: str
    output: str
    explanation: Optional[str] = None


class HiddenTestCase(BaseModel):
    input: str
    output: str


class StartCode(BaseModel):
    language: str
    initial_code: str


class ReferenceSolution(BaseModel):
    language: str
    complete_code: str


class ProblemBase(BaseModel):
    title: str = PydanticField(..., min_length=1, max_length=200)
    description: str = PydanticField(..., min_length=1)
    difficulty: Difficulty
    tags: List[str] = []

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class ProblemCreate(ProblemBase):
    visible_test_cases: List[VisibleTestCase] = PydanticField(..., min_length=1)
    hidden_test_cases: List[HiddenTestCase] = PydanticField(..., min_length=1)
    start_code: List[StartCode] = []
    reference_solution: List[ReferenceSolution] = PydanticField(..., min_length=1)


class ProblemUpdate(BaseModel):
    title: Optional[str] = PydanticField(None, min_length=1, max_length=200)
    description: Optional[str] = PydanticField(None, min_length=1)
    difficulty: Optional[Difficulty] = None
    tags: Optional[List[str]] = None
    visible_test_cases: Optional[List[VisibleTestCase]] = PydanticField(None, min_length=1)
    hidden_test_cases: Optional[List[HiddenTestCase]] = PydanticField(None, min_length=1)
    start_code: Optional[List[StartCode]] = None
    reference_solution: Optional[List[ReferenceSolution]] = PydanticField(None, min_length=1)


class ProblemSummary(BaseModel):
    id: uuid.UUID
    title: str
    difficulty: Difficulty
    tags: List[str]

    model_config = {"from_attributes": True}


class ProblemResponse(ProblemSummary):
    """Problem as shown to solvers: no hidden tests, no reference solution."""

    description: str
    visible_test_cases: List[VisibleTestCase]
    start_code: List[StartCode]
    created_at: datetime
    updated_at: datetime
    secure_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[float] = None


class ProblemAdminResponse(ProblemResponse):
    hidden_test_cases: List[HiddenTestCase]
    reference_solution: List[ReferenceSolution]
    problem_creator_id: Optional[uuid.UUID] = None


class ContestProblemView(ProblemResponse):
    points: int
