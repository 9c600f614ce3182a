import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services.auth_dependency import get_current_user
from codearena.business.services.profile import (
    get_activity_heatmap_service,
    get_profile_summary_service,
    get_submission_history_service,
    get_topic_stats_service,
)
from codearena.config import logger
from codearena.data.repositories import get_session
from codearena.data.schemas import (
    ContributionCalendar,
    ProfileSummary,
    SubmissionHistory,
    TopicStats,
    User,
)
from codearena.errors import AppException, BadRequestException, DatabaseException

# Create a module-specific logger
profile_logger = logger.getChild("profile")

router = APIRouter(prefix="/user", tags=["profile"])


def parse_user_id(user_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(user_id)
    except ValueError:
        profile_logger.warning(f"Profile request failed: Invalid user ID format: {user_id}")
        raise BadRequestException(detail="Invalid user ID format")


@router.get(
    "/{user_id}/profile/submissions",
    response_model=SubmissionHistory,
)
async def get_user_submission_history(
    user_id: str,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Get the most recent submissions of a user.

    Args:
        user_id: ID of the user to get submissions for
        limit: Maximum number of submissions to return (default: 10, max: 100)
        offset: Number of submissions to skip (default: 0)

    Returns:
        Submission history entries and their total count
    """
    profile_logger.info(f"Submission history request for user ID: {user_id}")

    try:
        history = await get_submission_history_service(
            db, parse_user_id(user_id), limit, offset
        )
        profile_logger.info(
            f"Submission history request successful: {len(history.entries)} entries for user {user_id} (total: {history.total})"
        )

        return history
    except AppException as e:
        raise e
    except Exception as e:
        profile_logger.error(f"Unexpected error during submission history request: {str(e)}")
        raise DatabaseException(detail="An unexpected error occurred")


@router.get(
    "/{user_id}/profile/activity-heatmap/{year}",
    response_model=ContributionCalendar,
)
async def get_user_activity_heatmap(
    user_id: str,
    year: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Get submission counts per day of the given year for a specific user.

    Args:
        user_id: ID of the user to get the heatmap for
        year: Year to get the heatmap for

    Returns:
        Contribution calendar data
    """
    profile_logger.info(f"Activity heatmap request for user ID: {user_id}, year: {year}")

    try:
        calendar = await get_activity_heatmap_service(db, parse_user_id(user_id), year)
        profile_logger.info(
            f"Activity heatmap request successful: {len(calendar.entries)} entries for user {user_id}, year {year}"
        )

        return calendar
    except AppException as e:
        raise e
    except Exception as e:
        profile_logger.error(f"Unexpected error during activity heatmap request: {str(e)}")
        raise DatabaseException(detail="An unexpected error occurred")


@router.get(
    "/{user_id}/profile/topic-stats",
    response_model=TopicStats,
)
async def get_user_topic_stats(
    user_id: str,
    limit: int = Query(5, ge=1, le=10),
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Get the tags the user has solved the most problems in.
    This data can be used to create a polygon visualization of the user's strengths.

    Args:
        user_id: ID of the user to get topic statistics for
        limit: Maximum number of topics to return (default: 5, max: 10)

    Returns:
        Topic statistics data
    """
    profile_logger.info(f"Topic stats request for user ID: {user_id}")

    try:
        return await get_topic_stats_service(db, parse_user_id(user_id), limit)
    except AppException as e:
        raise e
    except Exception as e:
        profile_logger.error(f"Unexpected error during topic stats request: {str(e)}")
        raise DatabaseException(detail="An unexpected error occurred")


@router.get(
    "/{user_id}/profile/summary",
    response_model=ProfileSummary,
)
async def get_user_profile_summary(
    user_id: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Solved counts per difficulty and the acceptance rate of a user."""
    try:
        return await get_profile_summary_service(db, parse_user_id(user_id))
    except AppException as e:
        raise e
    except Exception as e:
        profile_logger.error(f"Unexpected error during profile summary request: {str(e)}")
        raise DatabaseException(detail="An unexpected error occurred")
