from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.schemas import (
    Discussion,
    DiscussionReaction,
    DiscussionReply,
    ReactionKind,
)
from codearena.errors import DatabaseException

discussion_logger = logger.getChild("discussion_repository")


async def save_discussion(db: AsyncSession, discussion: Discussion) -> Discussion:
    try:
        db.add(discussion)
        await db.commit()
        await db.refresh(discussion)
        return discussion
    except Exception as e:
        await db.rollback()
        discussion_logger.error(f"Error saving discussion: {str(e)}")
        raise DatabaseException(detail="Failed to save discussion")


async def get_discussion(db: AsyncSession, discussion_id: UUID) -> Optional[Discussion]:
    try:
        result = await db.execute(
            select(Discussion).where(Discussion.id == discussion_id)
        )
        return result.scalar_one_or_none()
    except Exception as e:
        discussion_logger.error(f"Error retrieving discussion {discussion_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve discussion")


async def list_discussions(
    db: AsyncSession, problem_id: Optional[UUID] = None
) -> List[Discussion]:
    """Discussions newest first, optionally for a single problem."""
    query = select(Discussion).order_by(Discussion.created_at.desc())
    if problem_id is not None:
        query = query.where(Discussion.problem_id == problem_id)
    try:
        result = await db.execute(query)
        return list(result.scalars().all())
    except Exception as e:
        discussion_logger.error(f"Error listing discussions: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve discussions")


async def get_replies(
    db: AsyncSession, discussion_ids: Iterable[UUID]
) -> Dict[UUID, List[DiscussionReply]]:
    discussion_ids = list(discussion_ids)
    replies: Dict[UUID, List[DiscussionReply]] = {i: [] for i in discussion_ids}
    if not discussion_ids:
        return replies
    try:
        result = await db.execute(
            select(DiscussionReply)
            .where(DiscussionReply.discussion_id.in_(discussion_ids))
            .order_by(DiscussionReply.created_at)
        )
        for reply in result.scalars().all():
            replies[reply.discussion_id].append(reply)
        return replies
    except Exception as e:
        discussion_logger.error(f"Error retrieving replies: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve replies")


async def get_reply(
    db: AsyncSession, discussion_id: UUID, reply_id: UUID
) -> Optional[DiscussionReply]:
    try:
        result = await db.execute(
            select(DiscussionReply).where(
                DiscussionReply.id == reply_id,
                DiscussionReply.discussion_id == discussion_id,
            )
        )
        return result.scalar_one_or_none()
    except Exception as e:
        discussion_logger.error(f"Error retrieving reply {reply_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve reply")


async def add_reply(db: AsyncSession, reply: DiscussionReply) -> DiscussionReply:
    try:
        db.add(reply)
        await db.commit()
        await db.refresh(reply)
        return reply
    except Exception as e:
        await db.rollback()
        discussion_logger.error(f"Error adding reply: {str(e)}")
        raise DatabaseException(detail="Failed to add reply")


async def get_reactions(
    db: AsyncSession, discussion_ids: Iterable[UUID]
) -> List[DiscussionReaction]:
    discussion_ids = list(discussion_ids)
    if not discussion_ids:
        return []
    try:
        result = await db.execute(
            select(DiscussionReaction).where(
                DiscussionReaction.discussion_id.in_(discussion_ids)
            )
        )
        return list(result.scalars().all())
    except Exception as e:
        discussion_logger.error(f"Error retrieving reactions: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve reactions")


async def toggle_reaction(
    db: AsyncSession,
    discussion_id: UUID,
    user_id: UUID,
    kind: ReactionKind,
    reply_id: Optional[UUID] = None,
) -> Optional[ReactionKind]:
    """
    Toggle the user's reaction on a discussion or reply.

    Repeating the same reaction removes it, a different one replaces it.
    Returns the reaction left in place, if any.
    """
    try:
        result = await db.execute(
            select(DiscussionReaction).where(
                DiscussionReaction.discussion_id == discussion_id,
                DiscussionReaction.reply_id == reply_id
                if reply_id is not None
                else DiscussionReaction.reply_id.is_(None),
                DiscussionReaction.user_id == user_id,
            )
        )
        reaction = result.scalar_one_or_none()

        if reaction is not None and reaction.kind == kind:
            await db.delete(reaction)
            current = None
        elif reaction is not None:
            reaction.kind = kind
            db.add(reaction)
            current = kind
        else:
            db.add(
                DiscussionReaction(
                    discussion_id=discussion_id,
                    reply_id=reply_id,
                    user_id=user_id,
                    kind=kind,
                )
            )
            current = kind
        await db.commit()
        return current
    except Exception as e:
        await db.rollback()
        discussion_logger.error(f"Error toggling reaction: {str(e)}")
        raise DatabaseException(detail="Failed to update reaction")
