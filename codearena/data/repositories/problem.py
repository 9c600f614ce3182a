from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.schemas import Problem, SolvedProblem, utcnow
from codearena.errors import DatabaseException

problem_logger = logger.getChild("problem_repository")


async def create_problem(db: AsyncSession, problem: Problem) -> Problem:
    try:
        db.add(problem)
        await db.commit()
        await db.refresh(problem)
        problem_logger.info(f"Created problem {problem.id}: {problem.title}")
        return problem
    except Exception as e:
        await db.rollback()
        problem_logger.error(f"Error in create_problem: {str(e)}", exc_info=True)
        raise DatabaseException(detail="Failed to create problem")


async def get_problem(db: AsyncSession, problem_id: UUID) -> Optional[Problem]:
    try:
        result = await db.execute(select(Problem).where(Problem.id == problem_id))
        return result.scalar_one_or_none()
    except Exception as e:
        problem_logger.error(f"Error retrieving problem {problem_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve problem")


async def get_problems_by_ids(
    db: AsyncSession, ids: Iterable[UUID]
) -> Dict[UUID, Problem]:
    ids = list(set(ids))
    if not ids:
        return {}
    try:
        result = await db.execute(select(Problem).where(Problem.id.in_(ids)))
        return {problem.id: problem for problem in result.scalars().all()}
    except Exception as e:
        problem_logger.error(f"Error retrieving problems {ids}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve problems")


async def list_problems(db: AsyncSession) -> List[Problem]:
    try:
        result = await db.execute(select(Problem).order_by(Problem.created_at))
        return list(result.scalars().all())
    except Exception as e:
        problem_logger.error(f"Error listing problems: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve problems")


async def update_problem(
    db: AsyncSession, problem: Problem, changes: Dict[str, Any]
) -> Problem:
    try:
        for field, value in changes.items():
            setattr(problem, field, value)
        problem.updated_at = utcnow()
        db.add(problem)
        await db.commit()
        await db.refresh(problem)
        problem_logger.info(f"Updated problem {problem.id}: {sorted(changes)}")
        return problem
    except Exception as e:
        await db.rollback()
        problem_logger.error(f"Error updating problem {problem.id}: {str(e)}")
        raise DatabaseException(detail="Failed to update problem")


async def delete_problem(db: AsyncSession, problem: Problem) -> None:
    try:
        await db.delete(problem)
        await db.commit()
        problem_logger.info(f"Deleted problem {problem.id}")
    except Exception as e:
        await db.rollback()
        problem_logger.error(f"Error deleting problem {problem.id}: {str(e)}")
        raise DatabaseException(detail="Failed to delete problem")


async def get_solved_problems(db: AsyncSession, user_id: UUID) -> List[Problem]:
    """Problems the user has an accepted submission for, in order of solving."""
    try:
        result = await db.execute(
            select(Problem)
            .join(SolvedProblem, SolvedProblem.problem_id == Problem.id)
            .where(SolvedProblem.user_id == user_id)
            .order_by(SolvedProblem.solved_at)
        )
        return list(result.scalars().all())
    except Exception as e:
        problem_logger.error(f"Error retrieving solved problems of {user_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve solved problems")
