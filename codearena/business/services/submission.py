from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.config import logger
from codearena.data.repositories import submission as submission_repo
from codearena.data.repositories.judge import (
    JudgeClient,
    get_language_id,
    normalize_language,
)
from codearena.data.repositories.problem import get_problem
from codearena.data.schemas import (
    CaseResult,
    JudgeVerdict,
    Problem,
    RunResponse,
    Submission,
    SubmissionCreate,
    SubmissionResponse,
    SubmissionStatus,
    SubmitResponse,
    User,
)
from codearena.errors import (
    BadRequestException,
    ExternalServiceException,
    ResourceNotFoundException,
)

# Create a module-specific logger
submission_logger = logger.getChild("submission")

ACCEPTED_STATUS_ID = 3
WRONG_ANSWER_STATUS_ID = 4


def to_case_result(result: Dict[str, Any]) -> CaseResult:
    status = result.get("status") or {}
    return CaseResult(
        stdin=result.get("stdin"),
        expected_output=result.get("expected_output"),
        stdout=result.get("stdout"),
        status_id=status.get("id", 0),
        status_description=status.get("description"),
        time=float(result["time"]) if result.get("time") is not None else None,
        memory=result.get("memory"),
        stderr=result.get("stderr"),
        compile_output=result.get("compile_output"),
    )


def summarize_results(
    results: List[Dict[str, Any]], stop_at_first_failure: bool = False
) -> JudgeVerdict:
    """
    Fold judge results into one verdict.

    Runtime is the sum of the case times and memory the peak. The first
    failing case decides the status and the error message.
    """
    status = SubmissionStatus.ACCEPTED
    error_message: Optional[str] = None
    passed = 0
    runtime = 0.0
    memory = 0
    cases: List[CaseResult] = []

    for result in results:
        case = to_case_result(result)
        cases.append(case)
        runtime += case.time or 0.0
        memory = max(memory, case.memory or 0)

        if case.status_id == ACCEPTED_STATUS_ID:
            passed += 1
            continue

        if status == SubmissionStatus.ACCEPTED:
            status = (
                SubmissionStatus.WRONG
                if case.status_id == WRONG_ANSWER_STATUS_ID
                else SubmissionStatus.ERROR
            )
            error_message = (
                case.stderr
                or case.compile_output
                or result.get("message")
                or case.status_description
            )
        if stop_at_first_failure:
            break

    return JudgeVerdict(
        status=status,
        passed=passed,
        total=len(results),
        runtime=round(runtime, 3),
        memory=memory,
        error_message=error_message,
        results=cases,
    )


async def judge_code(
    judge: JudgeClient,
    code: str,
    language: str,
    cases: List[Dict[str, Any]],
    stop_at_first_failure: bool = False,
) -> JudgeVerdict:
    language_id = get_language_id(language)
    results = await run_in_threadpool(judge.run, code, language_id, cases)
    return summarize_results(results, stop_at_first_failure)


def apply_verdict(submission: Submission, verdict: JudgeVerdict) -> Submission:
    submission.status = verdict.status
    submission.runtime = verdict.runtime
    submission.memory = verdict.memory
    submission.error_message = verdict.error_message
    submission.test_cases_passed = verdict.passed
    return submission


async def get_problem_or_404(db: AsyncSession, problem_id: UUID4) -> Problem:
    problem = await get_problem(db, problem_id)
    if not problem:
        submission_logger.warning(f"Problem not found: ID {problem_id}")
        raise ResourceNotFoundException(detail="Problem not found")
    return problem


def to_run_response(verdict: JudgeVerdict) -> RunResponse:
    return RunResponse(
        success=verdict.accepted,
        test_cases=verdict.results,
        runtime=verdict.runtime,
        memory=verdict.memory,
        passed=verdict.passed,
        total=verdict.total,
        error_message=verdict.error_message,
    )


class SubmissionService:
    @staticmethod
    async def run_code(
        problem_id: UUID4,
        data: SubmissionCreate,
        db: AsyncSession,
        judge: JudgeClient,
    ) -> RunResponse:
        """
        Run code against the problem's visible test cases without saving anything.
        """
        submission_logger.info(f"Run request: Problem ID {problem_id}, Language {data.language}")
        problem = await get_problem_or_404(db, problem_id)
        if not problem.visible_test_cases:
            raise BadRequestException(detail="Problem has no visible test cases")

        verdict = await judge_code(judge, data.code, data.language, problem.visible_test_cases)
        return to_run_response(verdict)

    @staticmethod
    async def submit_code(
        user: User,
        problem_id: UUID4,
        data: SubmissionCreate,
        db: AsyncSession,
        judge: JudgeClient,
    ) -> SubmitResponse:
        """
        Judge code against the hidden test cases and record the outcome.

        The submission is stored as pending before judging so a judge failure
        still leaves an `error` record behind.
        """
        submission_logger.info(
            f"Solution submission: Problem ID {problem_id}, User ID {user.id}, "
            f"Language: {data.language}"
        )
        problem = await get_problem_or_404(db, problem_id)
        if not problem.hidden_test_cases:
            raise BadRequestException(detail="Problem has no hidden test cases")
        get_language_id(data.language)

        submission = await submission_repo.save_submission(
            db,
            Submission(
                user_id=user.id,
                problem_id=problem.id,
                code=data.code,
                language=normalize_language(data.language),
                status=SubmissionStatus.PENDING,
                test_cases_total=len(problem.hidden_test_cases),
            ),
        )

        try:
            verdict = await judge_code(
                judge, data.code, data.language, problem.hidden_test_cases
            )
        except ExternalServiceException as e:
            submission.status = SubmissionStatus.ERROR
            submission.error_message = str(e.detail)
            await submission_repo.save_submission(db, submission)
            raise

        submission = await submission_repo.save_submission(
            db, apply_verdict(submission, verdict)
        )
        if verdict.accepted:
            await submission_repo.mark_problem_solved(db, user.id, problem.id)

        submission_logger.info(
            f"Submission {submission.id} judged {verdict.status.value} "
            f"({verdict.passed}/{verdict.total})"
        )
        return SubmitResponse(
            accepted=verdict.accepted,
            total_test_cases=verdict.total,
            passed_test_cases=verdict.passed,
            runtime=verdict.runtime,
            memory=verdict.memory,
            message=verdict.status,
            error_message=verdict.error_message,
            submission_id=submission.id,
        )

    @staticmethod
    async def list_problem_submissions(
        user: User, problem_id: UUID4, db: AsyncSession
    ) -> List[SubmissionResponse]:
        submissions, _ = await submission_repo.list_user_submissions(
            db, user.id, problem_id=problem_id
        )
        return [SubmissionResponse.model_validate(s) for s in submissions]
