from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from codearena.data.schemas import (
    Discussion,
    DiscussionReaction,
    DiscussionReply,
    ReactionKind,
    Submission,
    SubmissionStatus,
    to_naive_utc,
    utcnow,
)


def test_utcnow_is_naive():
    assert utcnow().tzinfo is None


def test_to_naive_utc_converts_offsets():
    value = datetime(2026, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

    assert to_naive_utc(value) == datetime(2026, 3, 1, 10, 0)


async def test_timestamps_are_stored_as_naive_utc(session, test_user, test_problem):
    # Test data
    submitted_at = datetime(2026, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    submission = Submission(
        user_id=test_user.id,
        problem_id=test_problem.id,
        code="print(1)",
        language="python",
        status=SubmissionStatus.ACCEPTED,
        submitted_at=submitted_at,
    )
    session.add(submission)
    await session.commit()
    session.expunge_all()

    # Check stored value
    result = await session.execute(select(Submission).where(Submission.id == submission.id))
    stored = result.scalars().one()
    assert stored.submitted_at == datetime(2026, 3, 1, 10, 0)
    assert stored.submitted_at.tzinfo is None
    assert stored.created_at.tzinfo is None


async def test_discussion_reaction_is_unique_per_user(session, test_user, test_problem):
    # Test data
    discussion = Discussion(
        title="Hash map approach",
        content="Why does this pass?",
        author_id=test_user.id,
        problem_id=test_problem.id,
    )
    session.add(discussion)
    await session.commit()
    reply = DiscussionReply(discussion_id=discussion.id, content="It is O(n).", author_id=test_user.id)
    session.add(reply)
    session.add(
        DiscussionReaction(discussion_id=discussion.id, user_id=test_user.id, kind=ReactionKind.LIKE)
    )
    session.add(
        DiscussionReaction(
            discussion_id=discussion.id, reply_id=reply.id, user_id=test_user.id, kind=ReactionKind.LIKE
        )
    )
    await session.commit()

    # Second discussion-level reaction from the same user
    session.add(
        DiscussionReaction(discussion_id=discussion.id, user_id=test_user.id, kind=ReactionKind.DISLIKE)
    )
    with pytest.raises(IntegrityError):
        await session.commit()
    await session.rollback()
