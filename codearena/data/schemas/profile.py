from datetime import date
from typing import Dict, List

from pydantic import BaseModel

from codearena.data.schemas.submission import SubmissionResponse


class SubmissionHistory(BaseModel):
    """Schema for a user's recent submissions."""

    entries: List[SubmissionResponse]
    total: int


class ContributionCalendarEntry(BaseModel):
    """Schema for a single day in a user's activity heatmap."""

    date: date
    count: int


class ContributionCalendar(BaseModel):
    year: int
    entries: List[ContributionCalendarEntry]


class TopicStatEntry(BaseModel):
    topic: str
    solved: int


class TopicStats(BaseModel):
    topics: List[TopicStatEntry]


class ProfileSummary(BaseModel):
    solved_total: int
    solved_by_difficulty: Dict[str, int]
    total_submissions: int
    accepted_submissions: int
    acceptance_rate: float
