from collections import Counter
from datetime import datetime

from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.repositories import profile as profile_repo
from codearena.data.repositories.submission import list_user_submissions
from codearena.data.repositories.user_repository import get_user_by_id
from codearena.data.schemas import (
    ContributionCalendar,
    ContributionCalendarEntry,
    Difficulty,
    ProfileSummary,
    SubmissionHistory,
    SubmissionResponse,
    TopicStatEntry,
    TopicStats,
)
from codearena.errors import BadRequestException, ResourceNotFoundException

# Create a module-specific logger
profile_logger = logger.getChild("profile")


async def ensure_user_exists(db: AsyncSession, user_id: UUID4) -> None:
    if not await get_user_by_id(db, user_id):
        profile_logger.warning(f"User not found: ID {user_id}")
        raise ResourceNotFoundException(detail="User not found")


async def get_submission_history_service(
    db: AsyncSession, user_id: UUID4, limit: int = 10, offset: int = 0
) -> SubmissionHistory:
    """
    Get the most recent submissions of a user.

    Args:
        db: Database session
        user_id: ID of the user to get the history for
        limit: Maximum number of submissions to return
        offset: Number of submissions to skip

    Returns:
        SubmissionHistory with the page and the total count
    """
    profile_logger.info(f"Getting submission history for user {user_id}")
    await ensure_user_exists(db, user_id)
    submissions, total = await list_user_submissions(
        db, user_id, offset=offset, limit=limit
    )
    profile_logger.info(
        f"Retrieved {len(submissions)} submission history entries for user {user_id}"
    )
    return SubmissionHistory(
        entries=[SubmissionResponse.model_validate(s) for s in submissions],
        total=total,
    )


async def get_activity_heatmap_service(
    db: AsyncSession, user_id: UUID4, year: int
) -> ContributionCalendar:
    """
    Count the user's submissions per day of the given year.
    """
    if not 1970 <= year <= 9998:
        raise BadRequestException(detail="Invalid year")
    await ensure_user_exists(db, user_id)

    times = await profile_repo.get_submission_times(
        db, user_id, datetime(year, 1, 1), datetime(year + 1, 1, 1)
    )
    per_day = Counter(t.date() for t in times)
    return ContributionCalendar(
        year=year,
        entries=[
            ContributionCalendarEntry(date=day, count=count)
            for day, count in sorted(per_day.items())
        ],
    )


async def get_topic_stats_service(
    db: AsyncSession, user_id: UUID4, limit: int = 10
) -> TopicStats:
    await ensure_user_exists(db, user_id)
    tag_lists = await profile_repo.get_accepted_problem_tags(db, user_id)
    counts = Counter(tag for tags in tag_lists for tag in set(tags))
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return TopicStats(
        topics=[TopicStatEntry(topic=topic, solved=solved) for topic, solved in ordered[:limit]]
    )


async def get_profile_summary_service(db: AsyncSession, user_id: UUID4) -> ProfileSummary:
    await ensure_user_exists(db, user_id)
    by_difficulty = await profile_repo.get_solved_by_difficulty(db, user_id)
    total, accepted = await profile_repo.get_submission_counts(db, user_id)
    return ProfileSummary(
        solved_total=sum(by_difficulty.values()),
        solved_by_difficulty={d.value: by_difficulty.get(d.value, 0) for d in Difficulty},
        total_submissions=total,
        accepted_submissions=accepted,
        acceptance_rate=round(accepted / total * 100, 2) if total else 0.0,
    )
