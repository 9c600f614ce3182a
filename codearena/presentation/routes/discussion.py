from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services import DiscussionService, get_current_user
from codearena.config import logger
from codearena.data.repositories import get_session
from codearena.data.schemas import (
    DiscussionCreate,
    DiscussionResponse,
    ReactionKind,
    ReplyCreate,
    User,
)

discussion_logger = logger.getChild("discussion")
discussion_router = APIRouter(prefix="/discussion", tags=["discussions"])


@discussion_router.get("", response_model=List[DiscussionResponse], summary="List discussions")
async def list_discussions(db: AsyncSession = Depends(get_session)):
    return await DiscussionService.list_discussions(db)


@discussion_router.get(
    "/problem/{problem_id}",
    response_model=List[DiscussionResponse],
    summary="List discussions of a problem",
)
async def list_problem_discussions(problem_id: UUID4, db: AsyncSession = Depends(get_session)):
    return await DiscussionService.list_discussions(db, problem_id)


@discussion_router.post(
    "",
    response_model=DiscussionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a discussion",
)
async def create_discussion(
    discussion_data: DiscussionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    discussion_logger.info(f"User {user.id} starting discussion on {discussion_data.problem_id}")
    return await DiscussionService.create_discussion(db, discussion_data, user)


@discussion_router.post(
    "/{discussion_id}/reply", response_model=DiscussionResponse, summary="Reply to a discussion"
)
async def add_reply(
    discussion_id: UUID4,
    reply_data: ReplyCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await DiscussionService.add_reply(db, discussion_id, reply_data, user)


@discussion_router.post(
    "/{discussion_id}/like",
    response_model=DiscussionResponse,
    summary="Toggle a like",
    description="Liking twice removes the like. A like replaces an existing dislike.",
)
async def like_discussion(
    discussion_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await DiscussionService.react(db, discussion_id, user, ReactionKind.LIKE)


@discussion_router.post(
    "/{discussion_id}/dislike",
    response_model=DiscussionResponse,
    summary="Toggle a dislike",
    description="Disliking twice removes the dislike. A dislike replaces an existing like.",
)
async def dislike_discussion(
    discussion_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await DiscussionService.react(db, discussion_id, user, ReactionKind.DISLIKE)


@discussion_router.post(
    "/{discussion_id}/reply/{reply_id}/like",
    response_model=DiscussionResponse,
    summary="Toggle a like on a reply",
)
async def like_reply(
    discussion_id: UUID4,
    reply_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await DiscussionService.like_reply(db, discussion_id, reply_id, user)


@discussion_router.patch(
    "/{discussion_id}/solved",
    response_model=DiscussionResponse,
    summary="Toggle the solved flag",
    description="Only the author of the discussion may do this.",
)
async def toggle_solved(
    discussion_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await DiscussionService.toggle_solved(db, discussion_id, user)
