from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services.auth_dependency import get_optional_user
from codearena.business.services.standing import get_standing_service
from codearena.config import logger
from codearena.data.repositories import get_session
from codearena.data.schemas import LeaderboardFilter, StandingResponse, TimeRange, User
from codearena.errors import AppException, DatabaseException

# Create a module-specific logger
standing_logger = logger.getChild("standing")

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get(
    "",
    response_model=StandingResponse,
)
async def get_standing(
    time_range: TimeRange = Query(TimeRange.ALL),
    leaderboard_filter: LeaderboardFilter = Query(LeaderboardFilter.OVERALL, alias="filter"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_session),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get users ranked by score for the global leaderboard.

    Args:
        time_range: all, daily, weekly or monthly
        filter: overall, contests or problems
        limit: Maximum number of users to return (default: 100, max: 1000)
        offset: Number of users to skip (default: 0)

    Returns:
        The ranked page, aggregate figures and the caller's rank
    """
    standing_logger.info(f"Standing request with limit={limit}, offset={offset}")

    try:
        standing = await get_standing_service(
            db, time_range, leaderboard_filter, limit, offset, current_user
        )
        standing_logger.info(
            f"Standing request successful: {len(standing.leaderboard)} entries"
        )

        return standing
    except AppException as e:
        raise e
    except Exception as e:
        standing_logger.error(f"Unexpected error during standing request: {str(e)}")
        raise DatabaseException(detail="An unexpected error occurred")
