from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.schemas import Submission, SubmissionStatus, User
from codearena.errors import DatabaseException

standing_logger = logger.getChild("standing")


async def get_solved_counts(
    db: AsyncSession, since: Optional[datetime] = None
) -> Dict[UUID, int]:
    """
    Distinct accepted problems per user, counting submissions from `since` on.
    """
    conditions = [Submission.status == SubmissionStatus.ACCEPTED]
    if since is not None:
        conditions.append(Submission.submitted_at >= since)
    try:
        result = await db.execute(
            select(Submission.user_id, func.count(distinct(Submission.problem_id)))
            .where(*conditions)
            .group_by(Submission.user_id)
        )
        return {user_id: count for user_id, count in result.all()}
    except Exception as e:
        standing_logger.error(f"Error counting solved problems: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve standing")


async def get_contest_scores(
    db: AsyncSession, since: Optional[datetime] = None
) -> Dict[UUID, int]:
    """
    Sum of accepted contest submission scores per user from `since` on.
    """
    conditions = [
        Submission.status == SubmissionStatus.ACCEPTED,
        Submission.contest_id.is_not(None),
    ]
    if since is not None:
        conditions.append(Submission.submitted_at >= since)
    try:
        result = await db.execute(
            select(Submission.user_id, func.sum(Submission.score))
            .where(*conditions)
            .group_by(Submission.user_id)
        )
        return {user_id: int(total or 0) for user_id, total in result.all()}
    except Exception as e:
        standing_logger.error(f"Error summing contest scores: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve standing")


async def count_users(db: AsyncSession) -> int:
    try:
        total = await db.scalar(select(func.count()).select_from(User))
        return total or 0
    except Exception as e:
        standing_logger.error(f"Error counting users: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve standing")
