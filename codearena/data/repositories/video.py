from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.schemas import SolutionVideo
from codearena.errors import DatabaseException

video_logger = logger.getChild("video_repository")


async def get_video_for_problem(
    db: AsyncSession, problem_id: UUID
) -> Optional[SolutionVideo]:
    """Latest solution video uploaded for the problem."""
    try:
        result = await db.execute(
            select(SolutionVideo)
            .where(SolutionVideo.problem_id == problem_id)
            .order_by(SolutionVideo.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
    except Exception as e:
        video_logger.error(f"Error retrieving video of {problem_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve solution video")


async def find_video(
    db: AsyncSession, problem_id: UUID, user_id: UUID, object_key: str
) -> Optional[SolutionVideo]:
    try:
        result = await db.execute(
            select(SolutionVideo).where(
                SolutionVideo.problem_id == problem_id,
                SolutionVideo.user_id == user_id,
                SolutionVideo.object_key == object_key,
            )
        )
        return result.scalar_one_or_none()
    except Exception as e:
        video_logger.error(f"Error retrieving video {object_key}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve solution video")


async def save_video(db: AsyncSession, video: SolutionVideo) -> SolutionVideo:
    try:
        db.add(video)
        await db.commit()
        await db.refresh(video)
        video_logger.info(f"Saved video {video.id} for problem {video.problem_id}")
        return video
    except Exception as e:
        await db.rollback()
        video_logger.error(f"Error saving video {video.object_key}: {str(e)}")
        raise DatabaseException(detail="Failed to save solution video")


async def delete_video(db: AsyncSession, video: SolutionVideo) -> None:
    try:
        await db.delete(video)
        await db.commit()
        video_logger.info(f"Deleted video {video.id}")
    except Exception as e:
        await db.rollback()
        video_logger.error(f"Error deleting video {video.id}: {str(e)}")
        raise DatabaseException(detail="Failed to delete solution video")
