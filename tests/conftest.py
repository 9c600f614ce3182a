# Set environment variables before the application is imported
import os

os.environ["TESTING"] = "True"
os.environ["ENVIRONMENT"] = "local"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from codearena.business.services import generate_password_hash, generate_tokens_for_user
from codearena.business.services.chat import get_chat_model_factory
from codearena.config import logger
from codearena.data.repositories import (
    get_judge_client,
    get_redis_client,
    get_s3_client,
    get_session,
)
from codearena.data.schemas import (
    Contest,
    ContestParticipant,
    ContestProblem,
    ContestStatus,
    Difficulty,
    Problem,
    Submission,
    SubmissionStatus,
    User,
    UserRole,
    utcnow,
)
from codearena.main import app

PASSWORD = "Passw0rd1"

STATUS_DESCRIPTIONS = {
    3: "Accepted",
    4: "Wrong Answer",
    5: "Time Limit Exceeded",
    6: "Compilation Error",
    11: "Runtime Error (NZEC)",
}


def judge_result(case: dict, status_id: int = 3) -> dict:
    """A Judge0 batch result for one test case."""
    return {
        "stdin": case.get("input"),
        "expected_output": case.get("output"),
        "stdout": case.get("output") if status_id == 3 else "wrong",
        "status": {"id": status_id, "description": STATUS_DESCRIPTIONS.get(status_id, "Error")},
        "time": "0.010",
        "memory": 1024,
        "stderr": "Traceback: boom" if status_id == 11 else None,
        "compile_output": "error: expected ';'" if status_id == 6 else None,
    }


class FakeJudge:
    """Stands in for JudgeClient. Every case passes unless status ids are queued."""

    def __init__(self):
        self.status_ids = None
        self.error = None
        self.calls = []

    def run(self, source_code, language_id, cases):
        self.calls.append(
            {"source_code": source_code, "language_id": language_id, "cases": cases}
        )
        if self.error is not None:
            raise self.error
        status_ids = self.status_ids or [3] * len(cases)
        return [judge_result(case, status_id) for case, status_id in zip(cases, status_ids)]


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
async def session(engine):
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with factory() as db:
        yield db


@pytest.fixture
def mock_redis():
    redis = AsyncMock()
    redis.token_in_blocklist.return_value = False
    redis.incr_with_expiry.return_value = 1
    return redis


@pytest.fixture
def fake_judge():
    return FakeJudge()


@pytest.fixture
def mock_s3():
    s3 = MagicMock()
    s3.generate_presigned_post.return_value = {
        "url": "https://storage.test/codearena",
        "fields": {"key": "solutions/x", "policy": "p", "x-amz-signature": "s"},
    }
    s3.head_object.return_value = {"ContentLength": 2048, "ContentType": "video/mp4"}
    return s3


@pytest.fixture
def chat_model():
    model = MagicMock()
    model.generate_content_async = AsyncMock(
        return_value=SimpleNamespace(text="Try a hash map.")
    )
    return model


@pytest.fixture
def chat_factory(chat_model):
    return MagicMock(return_value=chat_model)


@pytest.fixture
async def client(session, mock_redis, fake_judge, mock_s3, chat_factory):
    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_redis_client] = lambda: mock_redis
    app.dependency_overrides[get_judge_client] = lambda: fake_judge
    app.dependency_overrides[get_s3_client] = lambda: mock_s3
    app.dependency_overrides[get_chat_model_factory] = lambda: chat_factory

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def create_user(session, email_id, role=UserRole.USER, first_name="Tester"):
    user = User(
        first_name=first_name,
        last_name="User",
        email_id=email_id,
        password_hash=generate_password_hash(PASSWORD),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def auth_headers(user) -> dict:
    access_token, _ = generate_tokens_for_user(user)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
async def test_user(session):
    return await create_user(session, "user@example.com")


@pytest.fixture
async def other_user(session):
    return await create_user(session, "other@example.com", first_name="Other")


@pytest.fixture
async def admin_user(session):
    return await create_user(session, "admin@example.com", role=UserRole.ADMIN, first_name="Admin")


@pytest.fixture
def user_headers(test_user):
    return auth_headers(test_user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


def problem_payload(title="Two Sum") -> dict:
    return {
        "title": title,
        "description": "Return the indices of the two numbers adding up to target.",
        "difficulty": "easy",
        "tags": ["array", "hash-table"],
        "visible_test_cases": [
            {"input": "2 7 11 15\n9", "output": "0 1", "explanation": "2 + 7 = 9"},
            {"input": "3 2 4\n6", "output": "1 2", "explanation": "2 + 4 = 6"},
        ],
        "hidden_test_cases": [
            {"input": "3 3\n6", "output": "0 1"},
            {"input": "1 5 9\n14", "output": "1 2"},
            {"input": "0 4 3 0\n0", "output": "0 3"},
        ],
        "start_code": [{"language": "python", "initial_code": "def two_sum(nums, target):\n    pass"}],
        "reference_solution": [
            {"language": "python", "complete_code": "print('0 1')"},
            {"language": "cpp", "complete_code": "int main() { return 0; }"},
        ],
    }


def make_problem(creator, title="Two Sum") -> Problem:
    payload = problem_payload(title)
    payload["difficulty"] = Difficulty(payload["difficulty"])
    return Problem(**payload, problem_creator_id=creator.id)


@pytest.fixture
async def test_problem(session, admin_user):
    problem = make_problem(admin_user)
    session.add(problem)
    await session.commit()
    await session.refresh(problem)
    return problem


async def create_contest(session, problem, start, end, points=100, is_public=True):
    now = utcnow()
    if now < start:
        status = ContestStatus.UPCOMING
    elif now <= end:
        status = ContestStatus.ONGOING
    else:
        status = ContestStatus.ENDED
    contest = Contest(
        title="Weekly Contest 1",
        description="Three problems in ninety minutes.",
        start_time=start,
        end_time=end,
        status=status,
        rules=["No plagiarism"],
        tags=["weekly"],
        is_public=is_public,
    )
    session.add(contest)
    await session.flush()
    if problem is not None:
        session.add(
            ContestProblem(contest_id=contest.id, problem_id=problem.id, points=points, order=1)
        )
    await session.commit()
    await session.refresh(contest)
    return contest


@pytest.fixture
async def ongoing_contest(session, test_problem):
    now = utcnow()
    return await create_contest(
        session, test_problem, now - timedelta(minutes=10), now + timedelta(hours=1)
    )


async def register(session, contest, user, late=False):
    participant = ContestParticipant(
        contest_id=contest.id, user_id=user.id, late_registration=late
    )
    session.add(participant)
    await session.commit()
    await session.refresh(participant)
    return participant


async def add_submission(
    session, user, problem, status=SubmissionStatus.ACCEPTED, contest=None, score=0, submitted_at=None
):
    submission = Submission(
        user_id=user.id,
        problem_id=problem.id,
        contest_id=contest.id if contest else None,
        code="print(1)",
        language="python",
        status=status,
        score=score,
        submitted_at=submitted_at or utcnow(),
    )
    session.add(submission)
    await session.commit()
    return submission


# Disable logging during tests
@pytest.fixture(autouse=True)
def disable_logging():
    logger.disabled = True
    yield
    logger.disabled = False
