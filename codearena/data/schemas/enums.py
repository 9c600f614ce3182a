from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ContestDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class ContestStatus(str, Enum):
    """Contest lifecycle, derived from the start and end times."""
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    ENDED = "ended"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    WRONG = "wrong"
    ERROR = "error"


class ReactionKind(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class TimeRange(str, Enum):
    ALL = "all"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class LeaderboardFilter(str, Enum):
    OVERALL = "overall"
    CONTESTS = "contests"
    PROBLEMS = "problems"
