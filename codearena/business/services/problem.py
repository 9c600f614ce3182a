from typing import Any, Dict, List, Union

from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services.submission import get_problem_or_404, judge_code
from codearena.config import logger
from codearena.data.repositories import problem as problem_repo
from codearena.data.repositories.judge import JudgeClient
from codearena.data.repositories.video import get_video_for_problem
from codearena.data.schemas import (
    Problem,
    ProblemAdminResponse,
    ProblemCreate,
    ProblemResponse,
    ProblemSummary,
    ProblemUpdate,
    User,
    UserRole,
)
from codearena.errors import BadRequestException

problem_logger = logger.getChild("problem")


async def validate_reference_solutions(
    judge: JudgeClient,
    reference_solution: List[Dict[str, Any]],
    visible_test_cases: List[Dict[str, Any]],
) -> None:
    """
    Every reference solution must pass every visible test case.
    """
    if not reference_solution or not visible_test_cases:
        raise BadRequestException(
            detail="At least one reference solution and one visible test case are required"
        )
    for solution in reference_solution:
        language = solution["language"]
        verdict = await judge_code(
            judge, solution["complete_code"], language, visible_test_cases
        )
        if not verdict.accepted:
            problem_logger.warning(
                f"Reference solution for {language} failed: {verdict.status.value} "
                f"({verdict.passed}/{verdict.total})"
            )
            raise BadRequestException(
                detail=f"Reference solution for {language} failed the visible test cases"
            )


async def build_problem_view(
    db: AsyncSession, problem: Problem, admin: bool = False
) -> Union[ProblemResponse, ProblemAdminResponse]:
    """Solver or admin view of the problem, enriched with its solution video."""
    model = ProblemAdminResponse if admin else ProblemResponse
    view = model.model_validate(problem, from_attributes=True)
    video = await get_video_for_problem(db, problem.id)
    if video:
        view.secure_url = video.secure_url
        view.thumbnail_url = video.thumbnail_url
        view.duration = video.duration
    return view


class ProblemService:
    @staticmethod
    async def create_problem(
        data: ProblemCreate, creator: User, db: AsyncSession, judge: JudgeClient
    ) -> ProblemAdminResponse:
        problem_logger.info(f"Creating problem '{data.title}' by {creator.id}")
        payload = data.model_dump()
        await validate_reference_solutions(
            judge, payload["reference_solution"], payload["visible_test_cases"]
        )
        problem = await problem_repo.create_problem(
            db, Problem(**payload, problem_creator_id=creator.id)
        )
        return ProblemAdminResponse.model_validate(problem, from_attributes=True)

    @staticmethod
    async def update_problem(
        problem_id: UUID4, data: ProblemUpdate, db: AsyncSession, judge: JudgeClient
    ) -> ProblemAdminResponse:
        problem = await get_problem_or_404(db, problem_id)
        changes = data.model_dump(exclude_unset=True)
        changes = {field: value for field, value in changes.items() if value is not None}
        if not changes:
            raise BadRequestException(detail="No fields to update")

        if "reference_solution" in changes or "visible_test_cases" in changes:
            await validate_reference_solutions(
                judge,
                changes.get("reference_solution", problem.reference_solution),
                changes.get("visible_test_cases", problem.visible_test_cases),
            )

        problem = await problem_repo.update_problem(db, problem, changes)
        return ProblemAdminResponse.model_validate(problem, from_attributes=True)

    @staticmethod
    async def delete_problem(problem_id: UUID4, db: AsyncSession) -> None:
        problem = await get_problem_or_404(db, problem_id)
        await problem_repo.delete_problem(db, problem)

    @staticmethod
    async def get_problem(
        problem_id: UUID4, user: User, db: AsyncSession
    ) -> Union[ProblemResponse, ProblemAdminResponse]:
        problem = await get_problem_or_404(db, problem_id)
        return await build_problem_view(db, problem, admin=user.role == UserRole.ADMIN)

    @staticmethod
    async def list_problems(db: AsyncSession) -> List[ProblemSummary]:
        problems = await problem_repo.list_problems(db)
        return [ProblemSummary.model_validate(p) for p in problems]

    @staticmethod
    async def list_solved_problems(user: User, db: AsyncSession) -> List[ProblemSummary]:
        problems = await problem_repo.get_solved_problems(db, user.id)
        return [ProblemSummary.model_validate(p) for p in problems]
