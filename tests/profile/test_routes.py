import uuid
from datetime import datetime

from fastapi import status

from codearena.data.schemas import Difficulty, SolvedProblem, SubmissionStatus
from tests.conftest import add_submission, make_problem


async def test_submission_history(client, session, test_problem, test_user, user_headers):
    await add_submission(session, test_user, test_problem, SubmissionStatus.WRONG, submitted_at=datetime(2026, 1, 1))
    await add_submission(session, test_user, test_problem, submitted_at=datetime(2026, 1, 2))
    await add_submission(session, test_user, test_problem, SubmissionStatus.ERROR, submitted_at=datetime(2026, 1, 3))

    response = await client.get(
        f"/user/{test_user.id}/profile/submissions", params={"limit": 2}, headers=user_headers
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 3
    assert [e["status"] for e in data["entries"]] == ["error", "accepted"]


async def test_submission_history_unknown_user(client, user_headers):
    response = await client.get(f"/user/{uuid.uuid4()}/profile/submissions", headers=user_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "User not found"


async def test_submission_history_invalid_user_id(client, user_headers):
    response = await client.get("/user/abc/profile/submissions", headers=user_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Invalid user ID format"


async def test_profile_requires_login(client, test_user):
    response = await client.get(f"/user/{test_user.id}/profile/summary")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


async def test_activity_heatmap(client, session, test_problem, test_user, other_headers):
    await add_submission(session, test_user, test_problem, submitted_at=datetime(2025, 12, 31, 23, 0))
    await add_submission(session, test_user, test_problem, submitted_at=datetime(2026, 2, 3, 9, 0))
    await add_submission(session, test_user, test_problem, SubmissionStatus.WRONG, submitted_at=datetime(2026, 2, 3, 18, 30))
    await add_submission(session, test_user, test_problem, submitted_at=datetime(2026, 7, 14, 12, 0))

    response = await client.get(f"/user/{test_user.id}/profile/activity-heatmap/2026", headers=other_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "year": 2026,
        "entries": [
            {"date": "2026-02-03", "count": 2},
            {"date": "2026-07-14", "count": 1},
        ],
    }


async def test_activity_heatmap_invalid_year(client, test_user, user_headers):
    response = await client.get(f"/user/{test_user.id}/profile/activity-heatmap/10000", headers=user_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


async def test_topic_stats(client, session, admin_user, test_problem, test_user, user_headers):
    graph_problem = make_problem(admin_user, "Course Schedule")
    graph_problem.tags = ["graph", "array"]
    unsolved = make_problem(admin_user, "Word Ladder")
    unsolved.tags = ["graph", "bfs"]
    session.add_all([graph_problem, unsolved])
    await session.commit()

    await add_submission(session, test_user, test_problem)
    await add_submission(session, test_user, test_problem)
    await add_submission(session, test_user, graph_problem)
    await add_submission(session, test_user, unsolved, SubmissionStatus.WRONG)

    response = await client.get(
        f"/user/{test_user.id}/profile/topic-stats", params={"limit": 2}, headers=user_headers
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["topics"] == [
        {"topic": "array", "solved": 2},
        {"topic": "graph", "solved": 1},
    ]


async def test_profile_summary(client, session, admin_user, test_problem, test_user, user_headers):
    hard_problem = make_problem(admin_user, "Median of Two Sorted Arrays")
    hard_problem.difficulty = Difficulty.HARD
    session.add(hard_problem)
    await session.commit()
    session.add_all(
        [
            SolvedProblem(user_id=test_user.id, problem_id=test_problem.id),
            SolvedProblem(user_id=test_user.id, problem_id=hard_problem.id),
        ]
    )
    await session.commit()
    await add_submission(session, test_user, test_problem, SubmissionStatus.WRONG)
    await add_submission(session, test_user, test_problem)
    await add_submission(session, test_user, hard_problem)

    response = await client.get(f"/user/{test_user.id}/profile/summary", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "solved_total": 2,
        "solved_by_difficulty": {"easy": 1, "medium": 0, "hard": 1},
        "total_submissions": 3,
        "accepted_submissions": 2,
        "acceptance_rate": 66.67,
    }
