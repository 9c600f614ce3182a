from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.repositories.standing import (
    count_users,
    get_contest_scores,
    get_solved_counts,
)
from codearena.data.repositories.user_repository import get_users_by_ids
from codearena.data.schemas import (
    LeaderboardFilter,
    StandingEntry,
    StandingResponse,
    TimeRange,
    User,
    utcnow,
)

# Create a module-specific logger
standing_logger = logger.getChild("standing")

# Each solved problem is worth this much in the overall ranking
PROBLEM_POINTS = 10

RANGE_DAYS = {TimeRange.DAILY: 1, TimeRange.WEEKLY: 7, TimeRange.MONTHLY: 30}


def range_start(time_range: TimeRange, now: datetime) -> Optional[datetime]:
    days = RANGE_DAYS.get(time_range)
    return now - timedelta(days=days) if days else None


def standing_score(
    leaderboard_filter: LeaderboardFilter, problems_solved: int, contest_score: int
) -> int:
    if leaderboard_filter == LeaderboardFilter.CONTESTS:
        return contest_score
    if leaderboard_filter == LeaderboardFilter.PROBLEMS:
        return problems_solved
    return contest_score + PROBLEM_POINTS * problems_solved


async def get_standing_service(
    db: AsyncSession,
    time_range: TimeRange = TimeRange.ALL,
    leaderboard_filter: LeaderboardFilter = LeaderboardFilter.OVERALL,
    limit: int = 100,
    offset: int = 0,
    current_user: Optional[User] = None,
) -> StandingResponse:
    """
    Get users ranked by score for the global leaderboard.

    Args:
        db: Database session
        time_range: Only activity inside this window counts
        leaderboard_filter: Which activity makes up the score
        limit: Maximum number of users to return
        offset: Number of users to skip
        current_user: Caller whose rank is reported, if authenticated

    Returns:
        StandingResponse with the requested page and aggregate figures
    """
    standing_logger.info(
        f"Getting standing: range={time_range.value}, filter={leaderboard_filter.value}, "
        f"limit={limit}, offset={offset}"
    )
    since = range_start(time_range, utcnow())
    solved = await get_solved_counts(db, since)
    contest_scores = await get_contest_scores(db, since)
    users = await get_users_by_ids(db, set(solved) | set(contest_scores))

    rows = []
    for user_id, user in users.items():
        problems_solved = solved.get(user_id, 0)
        contest_score = contest_scores.get(user_id, 0)
        score = standing_score(leaderboard_filter, problems_solved, contest_score)
        if score <= 0:
            continue
        rows.append((user, score, problems_solved, contest_score))

    rows.sort(key=lambda row: (-row[1], -row[2], row[0].first_name))
    entries = [
        StandingEntry(
            rank=rank,
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_pic=user.profile_pic,
            score=score,
            problems_solved=problems_solved,
            contest_score=contest_score,
        )
        for rank, (user, score, problems_solved, contest_score) in enumerate(rows, start=1)
    ]

    user_rank = None
    if current_user is not None:
        user_rank = next(
            (e.rank for e in entries if e.user_id == current_user.id), None
        )

    scores = [e.score for e in entries]
    response = StandingResponse(
        time_range=time_range,
        filter=leaderboard_filter,
        leaderboard=entries[offset : offset + limit],
        total_users=await count_users(db),
        active_users=len(entries),
        avg_score=round(sum(scores) / len(scores), 2) if scores else 0.0,
        top_score=max(scores, default=0),
        user_rank=user_rank,
    )
    standing_logger.info(f"Retrieved {len(response.leaderboard)} users for standing")
    return response
