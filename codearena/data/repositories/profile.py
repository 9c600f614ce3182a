from datetime import datetime
from typing import Dict, List, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.schemas import Problem, SolvedProblem, Submission, SubmissionStatus
from codearena.errors import DatabaseException

profile_logger = logger.getChild("profile")


async def get_submission_times(
    db: AsyncSession, user_id: UUID, start: datetime, end: datetime
) -> List[datetime]:
    """
    Timestamps of every submission the user made in [start, end).
    """
    try:
        result = await db.execute(
            select(Submission.submitted_at).where(
                Submission.user_id == user_id,
                Submission.submitted_at >= start,
                Submission.submitted_at < end,
            )
        )
        return list(result.scalars().all())
    except Exception as e:
        profile_logger.error(
            f"Error retrieving submission activity for user {user_id}: {str(e)}"
        )
        raise DatabaseException(
            detail="Failed to retrieve activity heatmap due to database error"
        )


async def get_accepted_problem_tags(db: AsyncSession, user_id: UUID) -> List[List[str]]:
    """
    Tag lists of the distinct problems the user has an accepted submission for.
    """
    try:
        accepted = (
            select(Submission.problem_id)
            .where(
                Submission.user_id == user_id,
                Submission.status == SubmissionStatus.ACCEPTED,
            )
            .distinct()
        )
        result = await db.execute(select(Problem.tags).where(Problem.id.in_(accepted)))
        return [tags or [] for tags in result.scalars().all()]
    except Exception as e:
        profile_logger.error(f"Error retrieving topic stats for user {user_id}: {str(e)}")
        raise DatabaseException(
            detail="Failed to retrieve topic stats due to database error"
        )


async def get_solved_by_difficulty(db: AsyncSession, user_id: UUID) -> Dict[str, int]:
    try:
        result = await db.execute(
            select(Problem.difficulty, func.count())
            .join(SolvedProblem, SolvedProblem.problem_id == Problem.id)
            .where(SolvedProblem.user_id == user_id)
            .group_by(Problem.difficulty)
        )
        return {difficulty.value: count for difficulty, count in result.all()}
    except Exception as e:
        profile_logger.error(f"Error retrieving solved counts for user {user_id}: {str(e)}")
        raise DatabaseException(
            detail="Failed to retrieve profile summary due to database error"
        )


async def get_submission_counts(db: AsyncSession, user_id: UUID) -> Tuple[int, int]:
    """
    Total and accepted submission counts for the user.
    """
    try:
        total = await db.scalar(
            select(func.count())
            .select_from(Submission)
            .where(Submission.user_id == user_id)
        )
        accepted = await db.scalar(
            select(func.count())
            .select_from(Submission)
            .where(
                Submission.user_id == user_id,
                Submission.status == SubmissionStatus.ACCEPTED,
            )
        )
        return total or 0, accepted or 0
    except Exception as e:
        profile_logger.error(
            f"Error retrieving submission counts for user {user_id}: {str(e)}"
        )
        raise DatabaseException(
            detail="Failed to retrieve profile summary due to database error"
        )
