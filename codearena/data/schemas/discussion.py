import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import JSON, Column, Index, String, Text, text
from sqlmodel import Field, SQLModel

from codearena.data.schemas.auth import UserSummary
from codearena.data.schemas.base import BaseModel as TableModel, UTCDateTime, utcnow
from codearena.data.schemas.enums import ReactionKind


class Discussion(TableModel, table=True):
    __tablename__ = "discussions"

    title: str = Field(sa_column=Column(String(200), nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))
    author_id: uuid.UUID = Field(foreign_key="users.id", ondelete="CASCADE")
    problem_id: uuid.UUID = Field(
        foreign_key="problems.id", index=True, ondelete="CASCADE"
    )
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_solved: bool = Field(default=False)


class DiscussionReply(SQLModel, table=True):
    __tablename__ = "discussion_replies"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    discussion_id: uuid.UUID = Field(
        foreign_key="discussions.id", index=True, ondelete="CASCADE"
    )
    content: str = Field(sa_column=Column(Text, nullable=False))
    author_id: uuid.UUID = Field(foreign_key="users.id", ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class DiscussionReaction(SQLModel, table=True):
    """A like or dislike on a discussion, or on one of its replies when reply_id is set."""

    __tablename__ = "discussion_reactions"
    # reply_id is NULL for discussion-level reactions, so uniqueness needs one partial index per target
    __table_args__ = (
        Index(
            "uq_discussion_reactions_discussion_user",
            "discussion_id",
            "user_id",
            unique=True,
            postgresql_where=text("reply_id IS NULL"),
            sqlite_where=text("reply_id IS NULL"),
        ),
        Index(
            "uq_discussion_reactions_reply_user",
            "reply_id",
            "user_id",
            unique=True,
            postgresql_where=text("reply_id IS NOT NULL"),
            sqlite_where=text("reply_id IS NOT NULL"),
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    discussion_id: uuid.UUID = Field(
        foreign_key="discussions.id", index=True, ondelete="CASCADE"
    )
    reply_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="discussion_replies.id", ondelete="CASCADE"
    )
    user_id: uuid.UUID = Field(foreign_key="users.id", ondelete="CASCADE")
    kind: ReactionKind


class DiscussionCreate(BaseModel):
    title: str = PydanticField(..., min_length=1, max_length=200)
    content: str = PydanticField(..., min_length=1)
    problem_id: uuid.UUID
    tags: List[str] = []


class ReplyCreate(BaseModel):
    content: str = PydanticField(..., min_length=1)


class ReplyResponse(BaseModel):
    id: uuid.UUID
    content: str
    author: Optional[UserSummary] = None
    likes: List[uuid.UUID] = []
    dislikes: List[uuid.UUID] = []
    created_at: datetime


class DiscussionResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    author: Optional[UserSummary] = None
    problem_id: uuid.UUID
    tags: List[str]
    likes: List[uuid.UUID] = []
    dislikes: List[uuid.UUID] = []
    replies: List[ReplyResponse] = []
    is_solved: bool
    created_at: datetime
    updated_at: datetime
