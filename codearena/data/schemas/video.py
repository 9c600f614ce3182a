import uuid
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field

from codearena.data.schemas.base import BaseModel as TableModel


class SolutionVideo(TableModel, table=True):
    """Editorial video for a problem, stored in the object store."""

    __tablename__ = "solution_videos"
    __table_args__ = (UniqueConstraint("problem_id", "user_id", "object_key"),)

    problem_id: uuid.UUID = Field(
        foreign_key="problems.id", index=True, ondelete="CASCADE"
    )
    user_id: uuid.UUID = Field(foreign_key="users.id", ondelete="CASCADE")
    object_key: str = Field(sa_column=Column(String(500), nullable=False))
    secure_url: str = Field(sa_column=Column(String(1000), nullable=False))
    duration: float = Field(default=0.0)
    thumbnail_url: Optional[str] = Field(
        default=None, sa_column=Column(String(1000), nullable=True)
    )


class UploadSignature(BaseModel):
    upload_url: str
    fields: Dict[str, str]
    object_key: str
    expires_in: int


class VideoMetadataCreate(BaseModel):
    problem_id: uuid.UUID
    object_key: str = PydanticField(..., min_length=1)
    duration: float = PydanticField(0.0, ge=0)
    thumbnail_url: Optional[str] = None


class VideoSummary(BaseModel):
    id: uuid.UUID
    secure_url: str
    thumbnail_url: Optional[str] = None
    duration: float
    uploaded_at: datetime


class VideoSaveResponse(BaseModel):
    message: str
    video_solution: VideoSummary
