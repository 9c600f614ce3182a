import uuid
from typing import List, Optional

from pydantic import BaseModel

from codearena.data.schemas.enums import LeaderboardFilter, TimeRange


class StandingEntry(BaseModel):
    """Schema for a single entry in the global leaderboard."""

    rank: int
    user_id: uuid.UUID
    first_name: str
    last_name: Optional[str] = None
    profile_pic: Optional[str] = None
    score: int
    problems_solved: int
    contest_score: int


class StandingResponse(BaseModel):
    """Schema for the global leaderboard response."""

    success: bool = True
    time_range: TimeRange
    filter: LeaderboardFilter
    leaderboard: List[StandingEntry]
    total_users: int
    active_users: int
    avg_score: float
    top_score: int
    user_rank: Optional[int] = None
