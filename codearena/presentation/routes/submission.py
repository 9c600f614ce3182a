from fastapi import APIRouter, Depends, status
from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services import SubmissionService, get_current_user
from codearena.config import logger
from codearena.data.repositories import JudgeClient, get_judge_client, get_session
from codearena.data.schemas import RunResponse, SubmissionCreate, SubmitResponse, User

submission_logger = logger.getChild("submission")
submission_router = APIRouter(prefix="/submission", tags=["submissions"])


@submission_router.post(
    "/run/{problem_id}",
    response_model=RunResponse,
    summary="Run code",
    description="Runs the code against the problem's visible test cases. Nothing is stored.",
)
async def run_code(
    problem_id: UUID4,
    submission_data: SubmissionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    judge: JudgeClient = Depends(get_judge_client),
):
    submission_logger.info(f"Run by user {current_user.id} for problem {problem_id}")
    return await SubmissionService.run_code(problem_id, submission_data, db, judge)


@submission_router.post(
    "/submit/{problem_id}",
    response_model=SubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a solution",
    description="Judges the code against the hidden test cases, stores the submission and records the solve when accepted.",
)
async def submit_code(
    problem_id: UUID4,
    submission_data: SubmissionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    judge: JudgeClient = Depends(get_judge_client),
):
    return await SubmissionService.submit_code(
        current_user, problem_id, submission_data, db, judge
    )
