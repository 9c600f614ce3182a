from typing import List, Union

from fastapi import APIRouter, Depends, status
from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services import (
    ProblemService,
    SubmissionService,
    get_current_user,
    require_admin,
)
from codearena.config import logger
from codearena.data.repositories import JudgeClient, get_judge_client, get_session
from codearena.data.schemas import (
    ProblemAdminResponse,
    ProblemCreate,
    ProblemResponse,
    ProblemSummary,
    ProblemUpdate,
    SubmissionResponse,
    User,
)

problem_logger = logger.getChild("problem")
problem_router = APIRouter(prefix="/problem", tags=["problems"])


@problem_router.post(
    "/create",
    response_model=ProblemAdminResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a problem",
    description="Validates every reference solution against the visible test cases through the judge, then stores the problem.",
)
async def create_problem(
    problem_data: ProblemCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    judge: JudgeClient = Depends(get_judge_client),
):
    problem_logger.info(f"Creating problem '{problem_data.title}'")
    return await ProblemService.create_problem(problem_data, admin, db, judge)


@problem_router.put(
    "/update/{problem_id}",
    response_model=ProblemAdminResponse,
    summary="Update a problem",
    description="Partially updates a problem. Changed solutions or visible test cases are re-validated.",
)
async def update_problem(
    problem_id: UUID4,
    problem_data: ProblemUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    judge: JudgeClient = Depends(get_judge_client),
):
    problem_logger.info(f"Updating problem ID: {problem_id}")
    return await ProblemService.update_problem(problem_id, problem_data, db, judge)


@problem_router.delete(
    "/delete/{problem_id}",
    summary="Delete a problem",
    description="Deletes a problem by its ID.",
)
async def delete_problem(
    problem_id: UUID4,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    problem_logger.info(f"Deleting problem ID: {problem_id}")
    await ProblemService.delete_problem(problem_id, db)
    return {"message": "Problem deleted successfully"}


@problem_router.get(
    "/problemById/{problem_id}",
    response_model=Union[ProblemAdminResponse, ProblemResponse],
    summary="Get a problem",
    description="Retrieves a problem with its solution video. Admins also see hidden test cases and reference solutions.",
)
async def get_problem(
    problem_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await ProblemService.get_problem(problem_id, user, db)


@problem_router.get(
    "/getAllProblem",
    response_model=List[ProblemSummary],
    summary="List problems",
)
async def list_problems(db: AsyncSession = Depends(get_session)):
    return await ProblemService.list_problems(db)


@problem_router.get(
    "/problemSolvedByUser",
    response_model=List[ProblemSummary],
    summary="List problems solved by the current user",
)
async def list_solved_problems(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await ProblemService.list_solved_problems(user, db)


@problem_router.get(
    "/submittedProblem/{problem_id}",
    response_model=List[SubmissionResponse],
    summary="List the current user's submissions for a problem",
    description="Newest first.",
)
async def list_problem_submissions(
    problem_id: UUID4,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await SubmissionService.list_problem_submissions(user, problem_id, db)
