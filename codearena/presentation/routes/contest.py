from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services import (
    ContestService,
    get_current_user,
    get_optional_user,
    require_admin,
)
from codearena.config import logger
from codearena.data.repositories import JudgeClient, get_judge_client, get_session
from codearena.data.schemas import (
    ContestCreate,
    ContestDetailResponse,
    ContestLeaderboardResponse,
    ContestMutationResponse,
    ContestPage,
    ContestProblemResponse,
    ContestProblemsResponse,
    ContestStatsResponse,
    ContestStatus,
    ContestSubmitResponse,
    ContestUpdate,
    MyContestsResponse,
    ParticipantsResponse,
    RegistrationResponse,
    RunResponse,
    SubmissionCreate,
    SubmissionPage,
    User,
)
from codearena.errors import BadRequestException

contest_logger = logger.getChild("contest")
contest_router = APIRouter(prefix="/api/contests", tags=["contests"])


def parse_status(value: Optional[str]) -> Optional[ContestStatus]:
    if value is None or value == "all":
        return None
    try:
        return ContestStatus(value)
    except ValueError:
        raise BadRequestException(detail=f"Invalid contest status: {value}")


@contest_router.get(
    "/user/my-contests",
    response_model=MyContestsResponse,
    summary="List the caller's contests",
    description="Contests the current user registered for, latest start first.",
)
async def my_contests(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await ContestService.my_contests(db, user)


@contest_router.get(
    "",
    response_model=ContestPage,
    summary="List contests",
    description="Paginated contests ordered by start time, filtered by status and a title/description search.",
)
async def list_contests(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    contest_logger.info(f"Listing contests: status={status_filter}, page={page}, search={search}")
    return await ContestService.list_contests(
        db, user, parse_status(status_filter), page, limit, search
    )


@contest_router.post(
    "",
    response_model=ContestMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a contest",
)
async def create_contest(
    contest_data: ContestCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    contest_logger.info(f"Creating contest '{contest_data.title}'")
    return await ContestService.create_contest(db, contest_data, admin)


@contest_router.get(
    "/{contest_id}",
    response_model=ContestDetailResponse,
    summary="Get a contest",
    description="Contest with its problems, timing data, aggregate stats and the caller's standing.",
)
async def get_contest(
    contest_id: UUID4,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    return await ContestService.get_contest(db, contest_id, user)


@contest_router.put(
    "/{contest_id}",
    response_model=ContestMutationResponse,
    summary="Update a contest",
)
async def update_contest(
    contest_id: UUID4,
    contest_data: ContestUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    contest_logger.info(f"Updating contest ID: {contest_id}")
    return await ContestService.update_contest(db, contest_id, contest_data)


@contest_router.delete(
    "/{contest_id}",
    summary="Delete a contest",
    description="Removes the contest with its problems, participants and submissions.",
)
async def delete_contest(
    contest_id: UUID4,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    contest_logger.info(f"Deleting contest ID: {contest_id}")
    await ContestService.delete_contest(db, contest_id)
    return {"success": True, "message": "Contest deleted successfully"}


@contest_router.post(
    "/{contest_id}/register",
    response_model=RegistrationResponse,
    summary="Register for a contest",
)
async def register(
    contest_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await ContestService.register(db, contest_id, user)


@contest_router.get(
    "/{contest_id}/problems",
    response_model=ContestProblemsResponse,
    summary="List contest problems",
    description="Available to registered users and admins, and to everyone once the contest has ended.",
)
async def get_problems(
    contest_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await ContestService.get_problems(db, contest_id, user)


@contest_router.get(
    "/{contest_id}/problems/{problem_id}",
    response_model=ContestProblemResponse,
    summary="Get a contest problem",
)
async def get_problem(
    contest_id: UUID4,
    problem_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await ContestService.get_problem(db, contest_id, problem_id, user)


@contest_router.post(
    "/{contest_id}/problems/{problem_id}/run",
    response_model=RunResponse,
    summary="Run code for a contest problem",
    description="Runs the visible test cases and stops at the first failure.",
)
async def run_problem(
    contest_id: UUID4,
    problem_id: UUID4,
    submission_data: SubmissionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    judge: JudgeClient = Depends(get_judge_client),
):
    return await ContestService.run_problem(
        db, judge, contest_id, problem_id, user, submission_data
    )


@contest_router.post(
    "/submit/{contest_id}/problems/{problem_id}/submit",
    response_model=ContestSubmitResponse,
    summary="Submit a contest solution",
    description="Judges the solution, scores the first accepted solve and returns the caller's new rank.",
)
async def submit_problem(
    contest_id: UUID4,
    problem_id: UUID4,
    submission_data: SubmissionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    judge: JudgeClient = Depends(get_judge_client),
):
    return await ContestService.submit_problem(
        db, judge, contest_id, problem_id, user, submission_data
    )


@contest_router.get(
    "/{contest_id}/problems/{problem_id}/submissions",
    response_model=SubmissionPage,
    summary="List the caller's submissions for a contest problem",
)
async def list_problem_submissions(
    contest_id: UUID4,
    problem_id: UUID4,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await ContestService.list_problem_submissions(
        db, contest_id, problem_id, user, page, limit
    )


@contest_router.get(
    "/{contest_id}/leaderboard",
    response_model=ContestLeaderboardResponse,
    summary="Contest leaderboard",
)
async def get_leaderboard(contest_id: UUID4, db: AsyncSession = Depends(get_session)):
    return await ContestService.get_leaderboard(db, contest_id)


@contest_router.get(
    "/{contest_id}/participants",
    response_model=ParticipantsResponse,
    summary="List contest participants",
)
async def get_participants(contest_id: UUID4, db: AsyncSession = Depends(get_session)):
    return await ContestService.get_participants(db, contest_id)


@contest_router.get(
    "/{contest_id}/stats",
    response_model=ContestStatsResponse,
    summary="Contest statistics",
)
async def get_stats(contest_id: UUID4, db: AsyncSession = Depends(get_session)):
    return await ContestService.get_stats(db, contest_id)
