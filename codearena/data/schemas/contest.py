import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField, field_validator, model_validator
from sqlalchemy import JSON, Column, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from codearena.data.schemas.auth import UserSummary
from codearena.data.schemas.base import (
    BaseModel as TableModel,
    UTCDateTime,
    to_naive_utc,
    utcnow,
)
from codearena.data.schemas.enums import ContestDifficulty, ContestStatus
from codearena.data.schemas.problem import ContestProblemView, ProblemSummary


class Contest(TableModel, table=True):
    """A time-boxed collection of problems with a participant leaderboard."""

    __tablename__ = "contests"

    title: str = Field(sa_column=Column(String(200), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    status: ContestStatus = Field(default=ContestStatus.UPCOMING, index=True)
    start_time: datetime = Field(index=True, sa_type=UTCDateTime)
    end_time: datetime = Field(sa_type=UTCDateTime)
    rules: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    prize_pool: str = Field(default="")
    created_by: Optional[uuid.UUID] = Field(
        default=None, foreign_key="users.id", ondelete="SET NULL"
    )
    is_public: bool = Field(default=True)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    difficulty: ContestDifficulty = Field(default=ContestDifficulty.MEDIUM)


class ContestProblem(SQLModel, table=True):
    __tablename__ = "contest_problems"
    __table_args__ = (UniqueConstraint("contest_id", "problem_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    contest_id: uuid.UUID = Field(
        foreign_key="contests.id", index=True, ondelete="CASCADE"
    )
    problem_id: uuid.UUID = Field(foreign_key="problems.id", ondelete="CASCADE")
    points: int = Field(default=100)
    order: Optional[int] = Field(default=None)


class ContestParticipant(SQLModel, table=True):
    __tablename__ = "contest_participants"
    __table_args__ = (UniqueConstraint("contest_id", "user_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    contest_id: uuid.UUID = Field(
        foreign_key="contests.id", index=True, ondelete="CASCADE"
    )
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    score: int = Field(default=0)
    last_submission: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    registered_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    late_registration: bool = Field(default=False)


class ContestProblemAttempt(SQLModel, table=True):
    """Per participant and problem: wrong tries before solving, and the solve itself."""

    __tablename__ = "contest_problem_attempts"
    __table_args__ = (UniqueConstraint("contest_id", "user_id", "problem_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    contest_id: uuid.UUID = Field(
        foreign_key="contests.id", index=True, ondelete="CASCADE"
    )
    user_id: uuid.UUID = Field(foreign_key="users.id", ondelete="CASCADE")
    problem_id: uuid.UUID = Field(foreign_key="problems.id", ondelete="CASCADE")
    wrong_attempts: int = Field(default=0)
    solved_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    score: int = Field(default=0)

    @property
    def solved(self) -> bool:
        return self.solved_at is not None


# Request schemas


class ContestProblemInput(BaseModel):
    problem_id: uuid.UUID
    points: int = PydanticField(100, ge=1)
    order: Optional[int] = None


class ContestBase(BaseModel):
    title: str = PydanticField(..., min_length=1, max_length=200)
    description: str = PydanticField(..., min_length=1)
    start_time: datetime
    end_time: datetime
    problems: List[ContestProblemInput] = []
    rules: List[str] = []
    prize_pool: str = ""
    tags: List[str] = []
    difficulty: ContestDifficulty = ContestDifficulty.MEDIUM
    is_public: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ContestCreate(ContestBase):
    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class ContestUpdate(BaseModel):
    title: Optional[str] = PydanticField(None, min_length=1, max_length=200)
    description: Optional[str] = PydanticField(None, min_length=1)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    problems: Optional[List[ContestProblemInput]] = None
    rules: Optional[List[str]] = None
    prize_pool: Optional[str] = None
    tags: Optional[List[str]] = None
    difficulty: Optional[ContestDifficulty] = None
    is_public: Optional[bool] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


# Response schemas


class TimeRemaining(BaseModel):
    type: str
    value: str
    seconds: int


class ContestProblemEntry(BaseModel):
    problem_id: uuid.UUID
    points: int
    order: Optional[int] = None
    problem: Optional[ProblemSummary] = None
    is_solved: bool = False


class ContestResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    status: ContestStatus
    start_time: datetime
    end_time: datetime
    rules: List[str]
    prize_pool: str
    tags: List[str]
    difficulty: ContestDifficulty
    is_public: bool
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ContestListItem(ContestResponse):
    time_remaining: TimeRemaining
    progress: int
    is_registered: bool
    duration: int
    participants_count: int
    problems_count: int


class ContestPage(BaseModel):
    success: bool = True
    contests: List[ContestListItem]
    total: int
    total_pages: int
    current_page: int


class ProblemSolvedStat(BaseModel):
    problem_id: uuid.UUID
    points: int = 100
    solved_count: int
    success_rate: float


class ContestDetail(ContestResponse):
    problems: List[ContestProblemEntry]
    time_remaining: TimeRemaining
    progress: int
    total_participants: int
    average_score: float
    problems_solved_stats: List[ProblemSolvedStat]


class UserContestStats(BaseModel):
    is_registered: bool = False
    rank: Optional[int] = None
    score: int = 0
    problems_solved: int = 0


class ContestDetailResponse(BaseModel):
    success: bool = True
    contest: ContestDetail
    user_stats: UserContestStats


class ContestMutationResponse(BaseModel):
    success: bool = True
    message: str
    contest: ContestResponse


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str
    contest_start_time: datetime
    contest_end_time: datetime
    time_remaining: TimeRemaining
    contest_status: ContestStatus
    is_late_registration: bool


class ContestProblemsInfo(BaseModel):
    id: uuid.UUID
    title: str
    status: ContestStatus
    start_time: datetime
    end_time: datetime
    is_registered: bool
    user_solved_count: int
    total_problems: int


class ContestProblemsResponse(BaseModel):
    success: bool = True
    problems: List[ContestProblemEntry]
    contest: ContestProblemsInfo


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: uuid.UUID
    user: Optional[UserSummary] = None
    score: int
    problems_solved: int
    last_submission: Optional[datetime] = None
    progress: int = 0


class ContestLeaderboardResponse(BaseModel):
    success: bool = True
    leaderboard: List[LeaderboardEntry]
    total_participants: int
    contest_status: ContestStatus
    contest_end_time: datetime
    contest_title: str


class ParticipantResponse(BaseModel):
    user_id: uuid.UUID
    user: Optional[UserSummary] = None
    score: int
    problems_solved: int
    last_submission: Optional[datetime] = None
    registered_at: datetime
    late_registration: bool


class ParticipantsResponse(BaseModel):
    success: bool = True
    participants: List[ParticipantResponse]


class TopPerformer(BaseModel):
    user_id: uuid.UUID
    score: int
    problems_solved: int


class ContestStats(BaseModel):
    total_participants: int
    total_problems: int
    total_submissions: int
    total_attempts: int
    average_score: float
    max_score: int
    problems_stats: List[ProblemSolvedStat]
    accuracy_rate: float
    top_performers: List[TopPerformer]


class ContestStatsResponse(BaseModel):
    success: bool = True
    stats: ContestStats


class MyContestsResponse(BaseModel):
    success: bool = True
    contests: List[ContestResponse]


class ContestProblemResponse(BaseModel):
    success: bool = True
    problem: ContestProblemView
