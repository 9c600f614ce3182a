from typing import List, Optional

from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.repositories import discussion as discussion_repo
from codearena.data.repositories.problem import get_problem
from codearena.data.repositories.user_repository import get_users_by_ids
from codearena.data.schemas import (
    Discussion,
    DiscussionCreate,
    DiscussionReply,
    DiscussionResponse,
    ReactionKind,
    ReplyCreate,
    ReplyResponse,
    User,
    UserSummary,
    utcnow,
)
from codearena.errors import AuthorizationException, ResourceNotFoundException

discussion_logger = logger.getChild("discussion")


async def build_discussion_views(
    db: AsyncSession, discussions: List[Discussion]
) -> List[DiscussionResponse]:
    """Attach authors, replies and reactions to each discussion."""
    ids = [d.id for d in discussions]
    replies = await discussion_repo.get_replies(db, ids)
    reactions = await discussion_repo.get_reactions(db, ids)

    author_ids = [d.author_id for d in discussions]
    author_ids += [r.author_id for thread in replies.values() for r in thread]
    authors = await get_users_by_ids(db, author_ids)

    def summary(user_id) -> Optional[UserSummary]:
        user = authors.get(user_id)
        return UserSummary.model_validate(user) if user else None

    def reactors(discussion_id, reply_id, kind: ReactionKind) -> List[UUID4]:
        return [
            r.user_id
            for r in reactions
            if r.discussion_id == discussion_id and r.reply_id == reply_id and r.kind == kind
        ]

    views = []
    for d in discussions:
        views.append(
            DiscussionResponse(
                id=d.id,
                title=d.title,
                content=d.content,
                author=summary(d.author_id),
                problem_id=d.problem_id,
                tags=d.tags,
                likes=reactors(d.id, None, ReactionKind.LIKE),
                dislikes=reactors(d.id, None, ReactionKind.DISLIKE),
                replies=[
                    ReplyResponse(
                        id=r.id,
                        content=r.content,
                        author=summary(r.author_id),
                        likes=reactors(d.id, r.id, ReactionKind.LIKE),
                        dislikes=reactors(d.id, r.id, ReactionKind.DISLIKE),
                        created_at=r.created_at,
                    )
                    for r in replies.get(d.id, [])
                ],
                is_solved=d.is_solved,
                created_at=d.created_at,
                updated_at=d.updated_at,
            )
        )
    return views


async def get_discussion_or_404(db: AsyncSession, discussion_id: UUID4) -> Discussion:
    discussion = await discussion_repo.get_discussion(db, discussion_id)
    if not discussion:
        raise ResourceNotFoundException(detail="Discussion not found")
    return discussion


async def _view(db: AsyncSession, discussion: Discussion) -> DiscussionResponse:
    return (await build_discussion_views(db, [discussion]))[0]


class DiscussionService:
    @staticmethod
    async def list_discussions(
        db: AsyncSession, problem_id: Optional[UUID4] = None
    ) -> List[DiscussionResponse]:
        discussions = await discussion_repo.list_discussions(db, problem_id)
        return await build_discussion_views(db, discussions)

    @staticmethod
    async def create_discussion(
        db: AsyncSession, data: DiscussionCreate, author: User
    ) -> DiscussionResponse:
        if not await get_problem(db, data.problem_id):
            raise ResourceNotFoundException(detail="Problem not found")
        discussion = await discussion_repo.save_discussion(
            db, Discussion(**data.model_dump(), author_id=author.id)
        )
        discussion_logger.info(f"Discussion {discussion.id} created by {author.id}")
        return await _view(db, discussion)

    @staticmethod
    async def add_reply(
        db: AsyncSession, discussion_id: UUID4, data: ReplyCreate, author: User
    ) -> DiscussionResponse:
        discussion = await get_discussion_or_404(db, discussion_id)
        await discussion_repo.add_reply(
            db,
            DiscussionReply(
                discussion_id=discussion.id, content=data.content, author_id=author.id
            ),
        )
        return await _view(db, discussion)

    @staticmethod
    async def react(
        db: AsyncSession, discussion_id: UUID4, user: User, kind: ReactionKind
    ) -> DiscussionResponse:
        discussion = await get_discussion_or_404(db, discussion_id)
        await discussion_repo.toggle_reaction(db, discussion.id, user.id, kind)
        return await _view(db, discussion)

    @staticmethod
    async def like_reply(
        db: AsyncSession, discussion_id: UUID4, reply_id: UUID4, user: User
    ) -> DiscussionResponse:
        discussion = await get_discussion_or_404(db, discussion_id)
        if not await discussion_repo.get_reply(db, discussion.id, reply_id):
            raise ResourceNotFoundException(detail="Reply not found")
        await discussion_repo.toggle_reaction(
            db, discussion.id, user.id, ReactionKind.LIKE, reply_id=reply_id
        )
        return await _view(db, discussion)

    @staticmethod
    async def toggle_solved(
        db: AsyncSession, discussion_id: UUID4, user: User
    ) -> DiscussionResponse:
        discussion = await get_discussion_or_404(db, discussion_id)
        if discussion.author_id != user.id:
            raise AuthorizationException(detail="Only the author can mark a discussion solved")
        discussion.is_solved = not discussion.is_solved
        discussion.updated_at = utcnow()
        discussion = await discussion_repo.save_discussion(db, discussion)
        return await _view(db, discussion)
