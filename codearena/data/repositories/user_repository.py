from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.schemas import SolvedProblem, Submission, User
from codearena.errors import ConflictException, DatabaseException

user_logger = logger.getChild("user")


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
    """Get a user by ID from the database."""
    try:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()
    except Exception as e:
        user_logger.error(f"Error retrieving user {user_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve user due to database error")


async def get_user_by_email(db: AsyncSession, email_id: str) -> Optional[User]:
    try:
        result = await db.execute(select(User).where(User.email_id == email_id.lower()))
        return result.scalar_one_or_none()
    except Exception as e:
        user_logger.error(f"Error retrieving user {email_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve user due to database error")


async def get_users_by_ids(db: AsyncSession, ids: Iterable[UUID]) -> Dict[UUID, User]:
    """Get users by their IDs from the database, keyed by ID."""
    ids = list(set(ids))
    if not ids:
        return {}
    try:
        result = await db.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}
    except Exception as e:
        user_logger.error(f"Error retrieving users {ids}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve users due to database error")


async def create_user(db: AsyncSession, user: User) -> User:
    try:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        user_logger.info(f"Created user {user.id} ({user.email_id})")
        return user
    except IntegrityError:
        await db.rollback()
        user_logger.warning(f"Duplicate email on create: {user.email_id}")
        raise ConflictException(detail="User with this email already exists")
    except Exception as e:
        await db.rollback()
        user_logger.error(f"Error creating user {user.email_id}: {str(e)}")
        raise DatabaseException(detail="Failed to create user due to database error")


async def save_user(db: AsyncSession, user: User) -> User:
    """Persist changes made to a loaded user."""
    try:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user
    except Exception as e:
        await db.rollback()
        user_logger.error(f"Error updating user {user.id}: {str(e)}")
        raise DatabaseException(detail="Failed to update user due to database error")


async def delete_user(db: AsyncSession, user: User) -> None:
    """Delete a user and their submission history."""
    try:
        await db.execute(delete(Submission).where(Submission.user_id == user.id))
        await db.execute(delete(SolvedProblem).where(SolvedProblem.user_id == user.id))
        await db.delete(user)
        await db.commit()
        user_logger.info(f"Deleted user {user.id}")
    except Exception as e:
        await db.rollback()
        user_logger.error(f"Error deleting user {user.id}: {str(e)}")
        raise DatabaseException(detail="Failed to delete user due to database error")
