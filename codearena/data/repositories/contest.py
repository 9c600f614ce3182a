from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.schemas import (
    Contest,
    ContestParticipant,
    ContestProblem,
    ContestProblemAttempt,
    ContestProblemInput,
    ContestStatus,
    Submission,
)
from codearena.errors import (
    AppException,
    BadRequestException,
    ConflictException,
    DatabaseException,
)

contest_logger = logger.getChild("contest_repository")


async def create_contest(
    db: AsyncSession, contest: Contest, problems: List[ContestProblemInput]
) -> Contest:
    try:
        db.add(contest)
        await db.flush()
        for entry in problems:
            db.add(
                ContestProblem(
                    contest_id=contest.id,
                    problem_id=entry.problem_id,
                    points=entry.points,
                    order=entry.order,
                )
            )
        await db.commit()
        await db.refresh(contest)
        contest_logger.info(f"Created contest {contest.id}: {contest.title}")
        return contest
    except AppException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise BadRequestException(detail="A problem can only be listed once per contest")
    except Exception as e:
        await db.rollback()
        contest_logger.error(f"Error creating contest: {str(e)}", exc_info=True)
        raise DatabaseException(detail="Failed to create contest")


async def save_contest(
    db: AsyncSession,
    contest: Contest,
    problems: Optional[List[ContestProblemInput]] = None,
) -> Contest:
    """Persist contest changes. A given problem list replaces the stored one."""
    try:
        db.add(contest)
        if problems is not None:
            await db.execute(
                delete(ContestProblem).where(ContestProblem.contest_id == contest.id)
            )
            for entry in problems:
                db.add(
                    ContestProblem(
                        contest_id=contest.id,
                        problem_id=entry.problem_id,
                        points=entry.points,
                        order=entry.order,
                    )
                )
        await db.commit()
        await db.refresh(contest)
        return contest
    except AppException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise BadRequestException(detail="A problem can only be listed once per contest")
    except Exception as e:
        await db.rollback()
        contest_logger.error(f"Error updating contest {contest.id}: {str(e)}")
        raise DatabaseException(detail="Failed to update contest")


async def get_contest(db: AsyncSession, contest_id: UUID) -> Optional[Contest]:
    try:
        result = await db.execute(select(Contest).where(Contest.id == contest_id))
        return result.scalar_one_or_none()
    except Exception as e:
        contest_logger.error(f"Error retrieving contest {contest_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve contest")


async def list_contests(
    db: AsyncSession,
    status: Optional[ContestStatus] = None,
    search: Optional[str] = None,
    public_only: bool = True,
    offset: int = 0,
    limit: int = 10,
) -> Tuple[List[Contest], int]:
    conditions = []
    if status is not None:
        conditions.append(Contest.status == status)
    if public_only:
        conditions.append(Contest.is_public == True)  # noqa: E712
    if search:
        conditions.append(
            or_(
                Contest.title.icontains(search, autoescape=True),
                Contest.description.icontains(search, autoescape=True),
            )
        )

    try:
        total = await db.scalar(
            select(func.count()).select_from(Contest).where(*conditions)
        )
        result = await db.execute(
            select(Contest)
            .where(*conditions)
            .order_by(Contest.start_time)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0
    except Exception as e:
        contest_logger.error(f"Error listing contests: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve contests")


async def delete_contest(db: AsyncSession, contest: Contest) -> None:
    """Remove the contest together with everything recorded under it."""
    try:
        for model in (
            Submission,
            ContestProblemAttempt,
            ContestParticipant,
            ContestProblem,
        ):
            await db.execute(delete(model).where(model.contest_id == contest.id))
        await db.delete(contest)
        await db.commit()
        contest_logger.info(f"Deleted contest {contest.id}")
    except Exception as e:
        await db.rollback()
        contest_logger.error(f"Error deleting contest {contest.id}: {str(e)}")
        raise DatabaseException(detail="Failed to delete contest")


async def get_contest_problems(db: AsyncSession, contest_id: UUID) -> List[ContestProblem]:
    try:
        result = await db.execute(
            select(ContestProblem).where(ContestProblem.contest_id == contest_id)
        )
        return list(result.scalars().all())
    except Exception as e:
        contest_logger.error(f"Error retrieving problems of {contest_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve contest problems")


async def get_contest_problem(
    db: AsyncSession, contest_id: UUID, problem_id: UUID
) -> Optional[ContestProblem]:
    try:
        result = await db.execute(
            select(ContestProblem).where(
                ContestProblem.contest_id == contest_id,
                ContestProblem.problem_id == problem_id,
            )
        )
        return result.scalar_one_or_none()
    except Exception as e:
        contest_logger.error(
            f"Error retrieving problem {problem_id} of {contest_id}: {str(e)}"
        )
        raise DatabaseException(detail="Failed to retrieve contest problem")


async def count_by_contest(
    db: AsyncSession, model, contest_ids: Iterable[UUID]
) -> Dict[UUID, int]:
    """Row counts of a contest child table (participants, problems) per contest."""
    contest_ids = list(contest_ids)
    if not contest_ids:
        return {}
    try:
        result = await db.execute(
            select(model.contest_id, func.count())
            .where(model.contest_id.in_(contest_ids))
            .group_by(model.contest_id)
        )
        return {contest_id: count for contest_id, count in result.all()}
    except Exception as e:
        contest_logger.error(f"Error counting {model.__tablename__}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve contest counts")


async def get_participant(
    db: AsyncSession, contest_id: UUID, user_id: UUID
) -> Optional[ContestParticipant]:
    try:
        result = await db.execute(
            select(ContestParticipant).where(
                ContestParticipant.contest_id == contest_id,
                ContestParticipant.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()
    except Exception as e:
        contest_logger.error(
            f"Error retrieving participant {user_id} of {contest_id}: {str(e)}"
        )
        raise DatabaseException(detail="Failed to retrieve participant")


async def add_participant(
    db: AsyncSession, participant: ContestParticipant
) -> ContestParticipant:
    try:
        db.add(participant)
        await db.commit()
        await db.refresh(participant)
        contest_logger.info(
            f"User {participant.user_id} registered for contest {participant.contest_id}"
        )
        return participant
    except IntegrityError:
        await db.rollback()
        raise ConflictException(detail="Already registered for this contest")
    except Exception as e:
        await db.rollback()
        contest_logger.error(f"Error registering participant: {str(e)}")
        raise DatabaseException(detail="Failed to register for contest")


async def list_participants(
    db: AsyncSession, contest_id: UUID
) -> List[ContestParticipant]:
    try:
        result = await db.execute(
            select(ContestParticipant)
            .where(ContestParticipant.contest_id == contest_id)
            .order_by(ContestParticipant.registered_at)
        )
        return list(result.scalars().all())
    except Exception as e:
        contest_logger.error(f"Error listing participants of {contest_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve participants")


async def registered_contest_ids(
    db: AsyncSession, user_id: UUID, contest_ids: Iterable[UUID]
) -> Set[UUID]:
    contest_ids = list(contest_ids)
    if not contest_ids:
        return set()
    try:
        result = await db.execute(
            select(ContestParticipant.contest_id).where(
                ContestParticipant.user_id == user_id,
                ContestParticipant.contest_id.in_(contest_ids),
            )
        )
        return set(result.scalars().all())
    except Exception as e:
        contest_logger.error(f"Error retrieving registrations of {user_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve registrations")


async def list_user_contests(db: AsyncSession, user_id: UUID) -> List[Contest]:
    try:
        result = await db.execute(
            select(Contest)
            .join(ContestParticipant, ContestParticipant.contest_id == Contest.id)
            .where(ContestParticipant.user_id == user_id)
            .order_by(Contest.start_time.desc())
        )
        return list(result.scalars().all())
    except Exception as e:
        contest_logger.error(f"Error retrieving contests of {user_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve contests")


async def get_attempts(
    db: AsyncSession, contest_id: UUID, user_id: Optional[UUID] = None
) -> List[ContestProblemAttempt]:
    conditions = [ContestProblemAttempt.contest_id == contest_id]
    if user_id is not None:
        conditions.append(ContestProblemAttempt.user_id == user_id)
    try:
        result = await db.execute(select(ContestProblemAttempt).where(*conditions))
        return list(result.scalars().all())
    except Exception as e:
        contest_logger.error(f"Error retrieving attempts of {contest_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve contest attempts")


async def get_attempt(
    db: AsyncSession, contest_id: UUID, user_id: UUID, problem_id: UUID
) -> Optional[ContestProblemAttempt]:
    try:
        result = await db.execute(
            select(ContestProblemAttempt).where(
                ContestProblemAttempt.contest_id == contest_id,
                ContestProblemAttempt.user_id == user_id,
                ContestProblemAttempt.problem_id == problem_id,
            )
        )
        return result.scalar_one_or_none()
    except Exception as e:
        contest_logger.error(f"Error retrieving attempt: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve contest attempt")


async def save_contest_progress(
    db: AsyncSession,
    attempt: ContestProblemAttempt,
    participant: Optional[ContestParticipant] = None,
) -> None:
    """Persist an attempt and, when scoring changed, its participant in one commit."""
    try:
        db.add(attempt)
        if participant is not None:
            db.add(participant)
        await db.commit()
    except Exception as e:
        await db.rollback()
        contest_logger.error(f"Error saving contest progress: {str(e)}")
        raise DatabaseException(detail="Failed to save contest progress")


async def count_contest_submissions(db: AsyncSession, contest_id: UUID) -> int:
    try:
        total = await db.scalar(
            select(func.count())
            .select_from(Submission)
            .where(Submission.contest_id == contest_id)
        )
        return total or 0
    except Exception as e:
        contest_logger.error(f"Error counting submissions of {contest_id}: {str(e)}")
        raise DatabaseException(detail="Failed to count contest submissions")


async def sync_contest_statuses(db: AsyncSession, now: datetime) -> int:
    """Bring every stored status in line with the clock. Returns rows changed."""
    transitions = (
        (ContestStatus.UPCOMING, Contest.start_time > now),
        (ContestStatus.ONGOING, (Contest.start_time <= now) & (Contest.end_time >= now)),
        (ContestStatus.ENDED, Contest.end_time < now),
    )
    try:
        changed = 0
        for status, condition in transitions:
            result = await db.execute(
                update(Contest)
                .where(condition, Contest.status != status)
                .values(status=status)
                .execution_options(synchronize_session="fetch")
            )
            changed += result.rowcount or 0
        await db.commit()
        return changed
    except Exception as e:
        await db.rollback()
        contest_logger.error(f"Error synchronising contest statuses: {str(e)}")
        raise DatabaseException(detail="Failed to synchronise contest statuses")
