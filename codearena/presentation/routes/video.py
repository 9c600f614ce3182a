from fastapi import APIRouter, Depends, status
from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services import VideoService, require_admin
from codearena.config import logger
from codearena.data.repositories import get_s3_client, get_session
from codearena.data.schemas import UploadSignature, User, VideoMetadataCreate, VideoSaveResponse

video_logger = logger.getChild("video")
video_router = APIRouter(prefix="/video", tags=["videos"])


@video_router.get(
    "/create/{problem_id}",
    response_model=UploadSignature,
    summary="Get a video upload signature",
    description="Returns a presigned POST the client uses to upload the solution video straight to storage.",
)
async def create_upload_signature(
    problem_id: UUID4,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    s3_client=Depends(get_s3_client),
):
    return await VideoService.create_upload_signature(db, problem_id, admin, s3_client)


@video_router.post(
    "/save",
    response_model=VideoSaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save uploaded video metadata",
    description="Checks the object exists in storage before recording it.",
)
async def save_video(
    video_data: VideoMetadataCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    s3_client=Depends(get_s3_client),
):
    video_logger.info(f"Saving video {video_data.object_key} for problem {video_data.problem_id}")
    return await VideoService.save_video(db, video_data, admin, s3_client)


@video_router.delete(
    "/delete/{problem_id}",
    summary="Delete a problem's solution video",
)
async def delete_video(
    problem_id: UUID4,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    s3_client=Depends(get_s3_client),
):
    video_logger.info(f"Deleting video of problem {problem_id}")
    await VideoService.delete_video(db, problem_id, s3_client)
    return {"message": "Video deleted successfully"}
