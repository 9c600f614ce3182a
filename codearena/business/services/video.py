from fastapi.concurrency import run_in_threadpool
from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import Config, logger
from codearena.data.repositories import s3
from codearena.data.repositories import video as video_repo
from codearena.data.repositories.problem import get_problem
from codearena.data.schemas import (
    SolutionVideo,
    UploadSignature,
    User,
    VideoMetadataCreate,
    VideoSaveResponse,
    VideoSummary,
    utcnow,
)
from codearena.errors import (
    BadRequestException,
    ConflictException,
    ResourceNotFoundException,
)

video_logger = logger.getChild("video")


def video_object_key(problem_id: UUID4, user_id: UUID4) -> str:
    return f"solutions/{problem_id}/{user_id}_{int(utcnow().timestamp())}"


class VideoService:
    @staticmethod
    async def create_upload_signature(
        db: AsyncSession, problem_id: UUID4, user: User, s3_client
    ) -> UploadSignature:
        if not await get_problem(db, problem_id):
            raise ResourceNotFoundException(detail="Problem not found")

        object_key = video_object_key(problem_id, user.id)
        presigned = await run_in_threadpool(s3.create_video_upload, s3_client, object_key)
        video_logger.info(f"Upload signature issued for {object_key}")
        return UploadSignature(
            upload_url=presigned["url"],
            fields=presigned["fields"],
            object_key=object_key,
            expires_in=Config.VIDEO_UPLOAD_EXPIRY,
        )

    @staticmethod
    async def save_video(
        db: AsyncSession, data: VideoMetadataCreate, user: User, s3_client
    ) -> VideoSaveResponse:
        if not await get_problem(db, data.problem_id):
            raise ResourceNotFoundException(detail="Problem not found")

        metadata = await run_in_threadpool(
            s3.get_object_metadata, s3_client, data.object_key
        )
        if metadata is None:
            video_logger.warning(f"Video not found in storage: {data.object_key}")
            raise BadRequestException(detail="Video not found in storage")

        if await video_repo.find_video(db, data.problem_id, user.id, data.object_key):
            raise ConflictException(detail="Video already exists")

        video = await video_repo.save_video(
            db,
            SolutionVideo(
                problem_id=data.problem_id,
                user_id=user.id,
                object_key=data.object_key,
                secure_url=s3.public_url(data.object_key),
                duration=data.duration,
                thumbnail_url=data.thumbnail_url,
            ),
        )
        return VideoSaveResponse(
            message="Video saved successfully",
            video_solution=VideoSummary(
                id=video.id,
                secure_url=video.secure_url,
                thumbnail_url=video.thumbnail_url,
                duration=video.duration,
                uploaded_at=video.created_at,
            ),
        )

    @staticmethod
    async def delete_video(db: AsyncSession, problem_id: UUID4, s3_client) -> None:
        video = await video_repo.get_video_for_problem(db, problem_id)
        if not video:
            raise ResourceNotFoundException(detail="Video not found")

        await run_in_threadpool(s3.delete_object, s3_client, video.object_key)
        await video_repo.delete_video(db, video)
