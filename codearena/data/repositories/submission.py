from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.schemas import SolvedProblem, Submission
from codearena.errors import DatabaseException

# Create a module-specific logger
submission_logger = logger.getChild("submission")


async def save_submission(db: AsyncSession, submission: Submission) -> Submission:
    """
    Insert or update a submission and return it refreshed.
    """
    try:
        db.add(submission)
        await db.commit()
        await db.refresh(submission)
        return submission
    except Exception as e:
        await db.rollback()
        submission_logger.error(f"Error saving submission {submission.id}: {str(e)}")
        raise DatabaseException(detail="Failed to save submission")


async def list_user_submissions(
    db: AsyncSession,
    user_id: UUID,
    problem_id: Optional[UUID] = None,
    contest_id: Optional[UUID] = None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> Tuple[List[Submission], int]:
    """
    The user's submissions, newest first, with the unpaginated total.
    """
    conditions = [Submission.user_id == user_id]
    if problem_id is not None:
        conditions.append(Submission.problem_id == problem_id)
    if contest_id is not None:
        conditions.append(Submission.contest_id == contest_id)

    try:
        total = await db.scalar(
            select(func.count()).select_from(Submission).where(*conditions)
        )
        query = (
            select(Submission)
            .where(*conditions)
            .order_by(Submission.submitted_at.desc())
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all()), total or 0
    except Exception as e:
        submission_logger.error(
            f"Error retrieving submissions of user {user_id}: {str(e)}"
        )
        raise DatabaseException(detail="Failed to retrieve submissions")


async def mark_problem_solved(db: AsyncSession, user_id: UUID, problem_id: UUID) -> bool:
    """
    Record the problem as solved by the user. Returns False if it already was.
    """
    try:
        existing = await db.execute(
            select(SolvedProblem).where(
                SolvedProblem.user_id == user_id,
                SolvedProblem.problem_id == problem_id,
            )
        )
        if existing.scalar_one_or_none():
            return False
        db.add(SolvedProblem(user_id=user_id, problem_id=problem_id))
        await db.commit()
        submission_logger.info(f"User {user_id} solved problem {problem_id}")
        return True
    except IntegrityError:
        # Solved concurrently by another request
        await db.rollback()
        return False
    except Exception as e:
        await db.rollback()
        submission_logger.error(
            f"Error marking problem {problem_id} solved for {user_id}: {str(e)}"
        )
        raise DatabaseException(detail="Failed to record solved problem")
