import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services.problem import build_problem_view
from codearena.business.services.submission import (
    apply_verdict,
    judge_code,
    to_run_response,
)
from codearena.config import logger
from codearena.data.repositories import contest as contest_repo
from codearena.data.repositories import submission as submission_repo
from codearena.data.repositories.judge import (
    JudgeClient,
    get_language_id,
    normalize_language,
)
from codearena.data.repositories.problem import get_problem, get_problems_by_ids
from codearena.data.repositories.user_repository import get_users_by_ids
from codearena.data.schemas import (
    Contest,
    ContestCreate,
    ContestDetail,
    ContestDetailResponse,
    ContestLeaderboardResponse,
    ContestListItem,
    ContestMutationResponse,
    ContestPage,
    ContestParticipant,
    ContestProblem,
    ContestProblemAttempt,
    ContestProblemEntry,
    ContestProblemInput,
    ContestProblemResponse,
    ContestProblemsInfo,
    ContestProblemsResponse,
    ContestProblemView,
    ContestResponse,
    ContestStats,
    ContestStatsResponse,
    ContestStatus,
    ContestSubmitResponse,
    ContestUpdate,
    LeaderboardEntry,
    MyContestsResponse,
    ParticipantResponse,
    ParticipantsResponse,
    ProblemSolvedStat,
    ProblemSummary,
    RegistrationResponse,
    RunResponse,
    Submission,
    SubmissionCreate,
    SubmissionPage,
    SubmissionResponse,
    SubmissionStatus,
    TimeRemaining,
    TopPerformer,
    User,
    UserContestStats,
    UserRole,
    UserSummary,
    utcnow,
)
from codearena.errors import (
    AuthorizationException,
    BadRequestException,
    ExternalServiceException,
    ResourceNotFoundException,
)

contest_logger = logger.getChild("contest")

# A solve loses one point per elapsed five minutes
SCORE_DECAY_SECONDS = 300
WRONG_ATTEMPT_PENALTY = 10
MIN_SCORE_RATIO = 0.3


def compute_status(start_time: datetime, end_time: datetime, now: datetime) -> ContestStatus:
    if now < start_time:
        return ContestStatus.UPCOMING
    if now <= end_time:
        return ContestStatus.ONGOING
    return ContestStatus.ENDED


def format_duration(seconds: int) -> str:
    """Render seconds as "Xd Xh Xm Xs", dropping leading zero units."""
    days, rest = divmod(max(int(seconds), 0), 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    if days > 0:
        return f"{days}d {hours}h {minutes}m {secs}s"
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def time_remaining(start_time: datetime, end_time: datetime, now: datetime) -> TimeRemaining:
    if now < start_time:
        seconds = int((start_time - now).total_seconds())
        return TimeRemaining(type="starts_in", value=format_duration(seconds), seconds=seconds)
    if now <= end_time:
        seconds = int((end_time - now).total_seconds())
        return TimeRemaining(type="ends_in", value=format_duration(seconds), seconds=seconds)
    return TimeRemaining(type="ended", value="Contest Ended", seconds=0)


def progress(start_time: datetime, end_time: datetime, now: datetime) -> int:
    if now < start_time:
        return 0
    if now > end_time:
        return 100
    total = (end_time - start_time).total_seconds()
    if total <= 0:
        return 100
    return min(100, math.floor((now - start_time).total_seconds() / total * 100))


def duration_hours(start_time: datetime, end_time: datetime) -> int:
    return math.floor((end_time - start_time).total_seconds() / 3600)


def score_for_solve(points: int, elapsed_seconds: float, wrong_attempts: int) -> int:
    """
    Points for a first accepted solve.

    Decays with time since contest start and with wrong attempts, but never
    drops below 30% of the problem's points.
    """
    time_penalty = math.floor(max(elapsed_seconds, 0) / SCORE_DECAY_SECONDS)
    raw = points - time_penalty - WRONG_ATTEMPT_PENALTY * wrong_attempts
    return math.floor(max(raw, MIN_SCORE_RATIO * points))


def rank_participants(entries: Iterable[dict]) -> List[dict]:
    """
    Order by score desc, problems solved desc, then last submission asc.

    A missing last submission sorts first. Ranks start at 1.
    """
    ordered = sorted(
        entries,
        key=lambda e: (
            -e["score"],
            -e["problems_solved"],
            e["last_submission"] or datetime.min,
        ),
    )
    for index, entry in enumerate(ordered, start=1):
        entry["rank"] = index
    return ordered


def sort_contest_problems(problems: List[ContestProblem]) -> List[ContestProblem]:
    return sorted(problems, key=lambda p: (p.order is None, p.order or 0))


def solved_by_user(attempts: List[ContestProblemAttempt]) -> Dict[UUID4, int]:
    counts: Dict[UUID4, int] = {}
    for attempt in attempts:
        if attempt.solved:
            counts[attempt.user_id] = counts.get(attempt.user_id, 0) + 1
    return counts


def solved_by_problem(attempts: List[ContestProblemAttempt]) -> Dict[UUID4, int]:
    counts: Dict[UUID4, int] = {}
    for attempt in attempts:
        if attempt.solved:
            counts[attempt.problem_id] = counts.get(attempt.problem_id, 0) + 1
    return counts


def problem_stats(
    problems: List[ContestProblem],
    attempts: List[ContestProblemAttempt],
    participant_count: int,
) -> List[ProblemSolvedStat]:
    solved = solved_by_problem(attempts)
    return [
        ProblemSolvedStat(
            problem_id=p.problem_id,
            points=p.points,
            solved_count=solved.get(p.problem_id, 0),
            success_rate=round(solved.get(p.problem_id, 0) / participant_count * 100, 2)
            if participant_count
            else 0.0,
        )
        for p in sort_contest_problems(problems)
    ]


def ranked_entries(
    participants: List[ContestParticipant], attempts: List[ContestProblemAttempt]
) -> List[dict]:
    solved = solved_by_user(attempts)
    return rank_participants(
        {
            "user_id": p.user_id,
            "score": p.score,
            "problems_solved": solved.get(p.user_id, 0),
            "last_submission": p.last_submission,
        }
        for p in participants
    )


def _is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == UserRole.ADMIN


async def get_contest_or_404(db: AsyncSession, contest_id: UUID4) -> Contest:
    contest = await contest_repo.get_contest(db, contest_id)
    if not contest:
        contest_logger.warning(f"Contest not found: ID {contest_id}")
        raise ResourceNotFoundException(detail="Contest not found")
    return contest


async def refresh_status(db: AsyncSession, contest: Contest, now: datetime) -> Contest:
    """Store the clock-derived status if it drifted."""
    status = compute_status(contest.start_time, contest.end_time, now)
    if contest.status != status:
        contest_logger.info(f"Contest {contest.id} status {contest.status.value} -> {status.value}")
        contest.status = status
        contest = await contest_repo.save_contest(db, contest)
    return contest


async def ensure_problems_exist(db: AsyncSession, problems: List[ContestProblemInput]) -> None:
    ids = [p.problem_id for p in problems]
    if len(set(ids)) != len(ids):
        raise BadRequestException(detail="A problem can only be listed once per contest")
    found = await get_problems_by_ids(db, ids)
    missing = [str(i) for i in ids if i not in found]
    if missing:
        raise BadRequestException(detail=f"Problems not found: {', '.join(missing)}")


async def ensure_problem_access(
    db: AsyncSession, contest: Contest, user: User
) -> Optional[ContestParticipant]:
    """Ended contests are open to everyone, otherwise registration or admin is required."""
    participant = await contest_repo.get_participant(db, contest.id, user.id)
    if contest.status == ContestStatus.ENDED or participant or _is_admin(user):
        return participant
    contest_logger.warning(f"User {user.id} denied problems of contest {contest.id}")
    raise AuthorizationException(detail="You must register for this contest to view problems")


async def get_contest_problem_or_404(
    db: AsyncSession, contest_id: UUID4, problem_id: UUID4
) -> ContestProblem:
    entry = await contest_repo.get_contest_problem(db, contest_id, problem_id)
    if not entry:
        raise ResourceNotFoundException(detail="Problem not found in this contest")
    return entry


class ContestService:
    @staticmethod
    async def list_contests(
        db: AsyncSession,
        user: Optional[User],
        status: Optional[ContestStatus] = None,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> ContestPage:
        now = utcnow()
        await contest_repo.sync_contest_statuses(db, now)
        contests, total = await contest_repo.list_contests(
            db,
            status=status,
            search=search,
            public_only=not _is_admin(user),
            offset=(page - 1) * limit,
            limit=limit,
        )

        ids = [c.id for c in contests]
        participants = await contest_repo.count_by_contest(db, ContestParticipant, ids)
        problems = await contest_repo.count_by_contest(db, ContestProblem, ids)
        registered = (
            await contest_repo.registered_contest_ids(db, user.id, ids) if user else set()
        )

        items = [
            ContestListItem(
                **ContestResponse.model_validate(c).model_dump(),
                time_remaining=time_remaining(c.start_time, c.end_time, now),
                progress=progress(c.start_time, c.end_time, now),
                is_registered=c.id in registered,
                duration=duration_hours(c.start_time, c.end_time),
                participants_count=participants.get(c.id, 0),
                problems_count=problems.get(c.id, 0),
            )
            for c in contests
        ]
        return ContestPage(
            contests=items,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
            current_page=page,
        )

    @staticmethod
    async def get_contest(
        db: AsyncSession, contest_id: UUID4, user: Optional[User]
    ) -> ContestDetailResponse:
        now = utcnow()
        contest = await refresh_status(db, await get_contest_or_404(db, contest_id), now)
        problems = sort_contest_problems(await contest_repo.get_contest_problems(db, contest.id))
        participants = await contest_repo.list_participants(db, contest.id)
        attempts = await contest_repo.get_attempts(db, contest.id)
        summaries = await get_problems_by_ids(db, [p.problem_id for p in problems])

        solved_ids = {
            a.problem_id for a in attempts if user and a.user_id == user.id and a.solved
        }
        entries = [
            ContestProblemEntry(
                problem_id=p.problem_id,
                points=p.points,
                order=p.order,
                problem=ProblemSummary.model_validate(summaries[p.problem_id])
                if p.problem_id in summaries
                else None,
                is_solved=p.problem_id in solved_ids,
            )
            for p in problems
        ]

        total_participants = len(participants)
        average_score = (
            round(sum(p.score for p in participants) / total_participants, 2)
            if total_participants
            else 0.0
        )

        user_stats = UserContestStats()
        if user:
            for entry in ranked_entries(participants, attempts):
                if entry["user_id"] == user.id:
                    user_stats = UserContestStats(
                        is_registered=True,
                        rank=entry["rank"],
                        score=entry["score"],
                        problems_solved=entry["problems_solved"],
                    )
                    break

        detail = ContestDetail(
            **ContestResponse.model_validate(contest).model_dump(),
            problems=entries,
            time_remaining=time_remaining(contest.start_time, contest.end_time, now),
            progress=progress(contest.start_time, contest.end_time, now),
            total_participants=total_participants,
            average_score=average_score,
            problems_solved_stats=problem_stats(problems, attempts, total_participants),
        )
        return ContestDetailResponse(contest=detail, user_stats=user_stats)

    @staticmethod
    async def create_contest(
        db: AsyncSession, data: ContestCreate, creator: User
    ) -> ContestMutationResponse:
        now = utcnow()
        if data.start_time < now:
            raise BadRequestException(detail="Start time cannot be in the past")
        await ensure_problems_exist(db, data.problems)

        contest = Contest(
            **data.model_dump(exclude={"problems"}),
            status=compute_status(data.start_time, data.end_time, now),
            created_by=creator.id,
        )
        contest = await contest_repo.create_contest(db, contest, data.problems)
        return ContestMutationResponse(
            message="Contest created successfully",
            contest=ContestResponse.model_validate(contest),
        )

    @staticmethod
    async def update_contest(
        db: AsyncSession, contest_id: UUID4, data: ContestUpdate
    ) -> ContestMutationResponse:
        contest = await get_contest_or_404(db, contest_id)
        changes = data.model_dump(exclude_unset=True, exclude={"problems"})
        changes = {field: value for field, value in changes.items() if value is not None}

        start_time = changes.get("start_time", contest.start_time)
        end_time = changes.get("end_time", contest.end_time)
        if end_time <= start_time:
            raise BadRequestException(detail="End time must be after start time")
        if data.problems is not None:
            await ensure_problems_exist(db, data.problems)

        for field, value in changes.items():
            setattr(contest, field, value)
        contest.status = compute_status(start_time, end_time, utcnow())
        contest.updated_at = utcnow()
        contest = await contest_repo.save_contest(db, contest, data.problems)
        contest_logger.info(f"Updated contest {contest.id}: {sorted(changes)}")
        return ContestMutationResponse(
            message="Contest updated successfully",
            contest=ContestResponse.model_validate(contest),
        )

    @staticmethod
    async def delete_contest(db: AsyncSession, contest_id: UUID4) -> None:
        contest = await get_contest_or_404(db, contest_id)
        await contest_repo.delete_contest(db, contest)

    @staticmethod
    async def register(db: AsyncSession, contest_id: UUID4, user: User) -> RegistrationResponse:
        now = utcnow()
        contest = await refresh_status(db, await get_contest_or_404(db, contest_id), now)
        if contest.status == ContestStatus.ENDED:
            raise BadRequestException(detail="Contest has already ended")
        if await contest_repo.get_participant(db, contest.id, user.id):
            raise BadRequestException(detail="Already registered for this contest")

        late = contest.status == ContestStatus.ONGOING
        await contest_repo.add_participant(
            db,
            ContestParticipant(
                contest_id=contest.id,
                user_id=user.id,
                registered_at=now,
                late_registration=late,
            ),
        )
        return RegistrationResponse(
            message="Successfully registered for the contest",
            contest_start_time=contest.start_time,
            contest_end_time=contest.end_time,
            time_remaining=time_remaining(contest.start_time, contest.end_time, now),
            contest_status=contest.status,
            is_late_registration=late,
        )

    @staticmethod
    async def get_problems(
        db: AsyncSession, contest_id: UUID4, user: User
    ) -> ContestProblemsResponse:
        contest = await refresh_status(db, await get_contest_or_404(db, contest_id), utcnow())
        participant = await ensure_problem_access(db, contest, user)

        problems = sort_contest_problems(await contest_repo.get_contest_problems(db, contest.id))
        summaries = await get_problems_by_ids(db, [p.problem_id for p in problems])
        attempts = await contest_repo.get_attempts(db, contest.id, user.id)
        solved_ids = {a.problem_id for a in attempts if a.solved}

        entries = [
            ContestProblemEntry(
                problem_id=p.problem_id,
                points=p.points,
                order=p.order,
                problem=ProblemSummary.model_validate(summaries[p.problem_id])
                if p.problem_id in summaries
                else None,
                is_solved=p.problem_id in solved_ids,
            )
            for p in problems
        ]
        return ContestProblemsResponse(
            problems=entries,
            contest=ContestProblemsInfo(
                id=contest.id,
                title=contest.title,
                status=contest.status,
                start_time=contest.start_time,
                end_time=contest.end_time,
                is_registered=participant is not None,
                user_solved_count=len(solved_ids),
                total_problems=len(problems),
            ),
        )

    @staticmethod
    async def get_problem(
        db: AsyncSession, contest_id: UUID4, problem_id: UUID4, user: User
    ) -> ContestProblemResponse:
        contest = await refresh_status(db, await get_contest_or_404(db, contest_id), utcnow())
        await ensure_problem_access(db, contest, user)
        entry = await get_contest_problem_or_404(db, contest.id, problem_id)
        problem = await get_problem(db, problem_id)
        if not problem:
            raise ResourceNotFoundException(detail="Problem not found")

        view = await build_problem_view(db, problem)
        return ContestProblemResponse(
            problem=ContestProblemView(**view.model_dump(), points=entry.points)
        )

    @staticmethod
    async def run_problem(
        db: AsyncSession,
        judge: JudgeClient,
        contest_id: UUID4,
        problem_id: UUID4,
        user: User,
        data: SubmissionCreate,
    ) -> RunResponse:
        contest = await get_contest_or_404(db, contest_id)
        participant = await contest_repo.get_participant(db, contest.id, user.id)
        if not participant and not _is_admin(user):
            raise AuthorizationException(detail="You are not registered for this contest")
        await get_contest_problem_or_404(db, contest.id, problem_id)
        problem = await get_problem(db, problem_id)
        if not problem:
            raise ResourceNotFoundException(detail="Problem not found")
        if not problem.visible_test_cases:
            raise BadRequestException(detail="Problem has no visible test cases")

        verdict = await judge_code(
            judge,
            data.code,
            data.language,
            problem.visible_test_cases,
            stop_at_first_failure=True,
        )
        return to_run_response(verdict)

    @staticmethod
    async def submit_problem(
        db: AsyncSession,
        judge: JudgeClient,
        contest_id: UUID4,
        problem_id: UUID4,
        user: User,
        data: SubmissionCreate,
    ) -> ContestSubmitResponse:
        """
        Judge a contest submission and update the participant's standing.

        Only the first accepted solve of a problem scores. Wrong answers before
        that count against the eventual score.
        """
        now = utcnow()
        contest = await refresh_status(db, await get_contest_or_404(db, contest_id), now)
        if contest.status != ContestStatus.ONGOING:
            raise BadRequestException(detail="Contest is not active")
        participant = await contest_repo.get_participant(db, contest.id, user.id)
        if not participant:
            raise AuthorizationException(detail="You are not registered for this contest")
        entry = await get_contest_problem_or_404(db, contest.id, problem_id)
        problem = await get_problem(db, problem_id)
        if not problem:
            raise ResourceNotFoundException(detail="Problem not found")
        cases = problem.hidden_test_cases or problem.visible_test_cases
        if not cases:
            raise BadRequestException(detail="Problem has no test cases")
        get_language_id(data.language)

        contest_logger.info(
            f"Contest submission: Contest ID {contest.id}, Problem ID {problem.id}, "
            f"User ID {user.id}"
        )
        submission = await submission_repo.save_submission(
            db,
            Submission(
                user_id=user.id,
                problem_id=problem.id,
                contest_id=contest.id,
                code=data.code,
                language=normalize_language(data.language),
                status=SubmissionStatus.PENDING,
                test_cases_total=len(cases),
                submitted_at=now,
            ),
        )

        try:
            verdict = await judge_code(
                judge, data.code, data.language, cases, stop_at_first_failure=True
            )
        except ExternalServiceException as e:
            submission.status = SubmissionStatus.ERROR
            submission.error_message = str(e.detail)
            await submission_repo.save_submission(db, submission)
            raise

        attempt = await contest_repo.get_attempt(db, contest.id, user.id, problem.id)
        if attempt is None:
            attempt = ContestProblemAttempt(
                contest_id=contest.id, user_id=user.id, problem_id=problem.id
            )
        is_first_attempt = attempt.wrong_attempts == 0
        already_solved = attempt.solved

        score = 0
        scored_participant = None
        if verdict.accepted and not already_solved:
            score = score_for_solve(
                entry.points,
                (now - contest.start_time).total_seconds(),
                attempt.wrong_attempts,
            )
            attempt.solved_at = now
            attempt.score = score
            participant.score += score
            participant.last_submission = now
            scored_participant = participant
        elif verdict.status == SubmissionStatus.WRONG and not already_solved:
            attempt.wrong_attempts += 1
        await contest_repo.save_contest_progress(db, attempt, scored_participant)

        submission = apply_verdict(submission, verdict)
        submission.test_cases_total = len(cases)
        submission.score = score
        submission = await submission_repo.save_submission(db, submission)
        if verdict.accepted:
            await submission_repo.mark_problem_solved(db, user.id, problem.id)

        participants = await contest_repo.list_participants(db, contest.id)
        attempts = await contest_repo.get_attempts(db, contest.id)
        rank = next(
            e["rank"] for e in ranked_entries(participants, attempts) if e["user_id"] == user.id
        )

        contest_logger.info(
            f"Contest submission {submission.id} judged {verdict.status.value}, "
            f"score {score}, rank {rank}"
        )
        return ContestSubmitResponse(
            accepted=verdict.accepted,
            total_test_cases=len(cases),
            passed_test_cases=verdict.passed,
            runtime=verdict.runtime,
            memory=verdict.memory,
            message=verdict.status,
            error_message=verdict.error_message,
            submission_id=submission.id,
            score=score,
            rank=rank,
            is_first_attempt=is_first_attempt,
        )

    @staticmethod
    async def list_problem_submissions(
        db: AsyncSession,
        contest_id: UUID4,
        problem_id: UUID4,
        user: User,
        page: int = 1,
        limit: int = 10,
    ) -> SubmissionPage:
        await get_contest_or_404(db, contest_id)
        submissions, total = await submission_repo.list_user_submissions(
            db,
            user.id,
            problem_id=problem_id,
            contest_id=contest_id,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return SubmissionPage(
            submissions=[SubmissionResponse.model_validate(s) for s in submissions],
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
            current_page=page,
        )

    @staticmethod
    async def get_leaderboard(db: AsyncSession, contest_id: UUID4) -> ContestLeaderboardResponse:
        contest = await refresh_status(db, await get_contest_or_404(db, contest_id), utcnow())
        participants = await contest_repo.list_participants(db, contest.id)
        attempts = await contest_repo.get_attempts(db, contest.id)
        problem_count = len(await contest_repo.get_contest_problems(db, contest.id))
        users = await get_users_by_ids(db, [p.user_id for p in participants])

        leaderboard = [
            LeaderboardEntry(
                **entry,
                user=UserSummary.model_validate(users[entry["user_id"]])
                if entry["user_id"] in users
                else None,
                progress=round(entry["problems_solved"] / problem_count * 100)
                if problem_count
                else 0,
            )
            for entry in ranked_entries(participants, attempts)
        ]
        return ContestLeaderboardResponse(
            leaderboard=leaderboard,
            total_participants=len(participants),
            contest_status=contest.status,
            contest_end_time=contest.end_time,
            contest_title=contest.title,
        )

    @staticmethod
    async def get_participants(db: AsyncSession, contest_id: UUID4) -> ParticipantsResponse:
        contest = await get_contest_or_404(db, contest_id)
        participants = await contest_repo.list_participants(db, contest.id)
        solved = solved_by_user(await contest_repo.get_attempts(db, contest.id))
        users = await get_users_by_ids(db, [p.user_id for p in participants])
        return ParticipantsResponse(
            participants=[
                ParticipantResponse(
                    user_id=p.user_id,
                    user=UserSummary.model_validate(users[p.user_id])
                    if p.user_id in users
                    else None,
                    score=p.score,
                    problems_solved=solved.get(p.user_id, 0),
                    last_submission=p.last_submission,
                    registered_at=p.registered_at,
                    late_registration=p.late_registration,
                )
                for p in participants
            ]
        )

    @staticmethod
    async def get_stats(db: AsyncSession, contest_id: UUID4) -> ContestStatsResponse:
        contest = await get_contest_or_404(db, contest_id)
        participants = await contest_repo.list_participants(db, contest.id)
        problems = await contest_repo.get_contest_problems(db, contest.id)
        attempts = await contest_repo.get_attempts(db, contest.id)
        total_submissions = await contest_repo.count_contest_submissions(db, contest.id)

        participant_count = len(participants)
        scores = [p.score for p in participants]
        stats_per_problem = problem_stats(problems, attempts, participant_count)
        total_solves = sum(s.solved_count for s in stats_per_problem)
        solved = solved_by_user(attempts)
        top = sorted(participants, key=lambda p: -p.score)[:3]

        stats = ContestStats(
            total_participants=participant_count,
            total_problems=len(problems),
            total_submissions=total_submissions,
            total_attempts=sum(a.wrong_attempts + 1 for a in attempts if a.solved),
            average_score=round(sum(scores) / participant_count, 2) if participant_count else 0.0,
            max_score=max(scores, default=0),
            problems_stats=stats_per_problem,
            accuracy_rate=round(total_solves / total_submissions * 100, 2)
            if total_submissions
            else 0.0,
            top_performers=[
                TopPerformer(
                    user_id=p.user_id,
                    score=p.score,
                    problems_solved=solved.get(p.user_id, 0),
                )
                for p in top
            ],
        )
        return ContestStatsResponse(stats=stats)

    @staticmethod
    async def my_contests(db: AsyncSession, user: User) -> MyContestsResponse:
        contests = await contest_repo.list_user_contests(db, user.id)
        return MyContestsResponse(
            contests=[ContestResponse.model_validate(c) for c in contests]
        )
