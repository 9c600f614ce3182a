import uuid
from datetime import timedelta

from fastapi import status
from sqlmodel import select

from codearena.data.schemas import (
    ContestParticipant,
    ContestProblem,
    ContestStatus,
    Submission,
    utcnow,
)
from tests.conftest import create_contest, make_problem, register

CODE = {"code": "print('0 1')", "language": "python"}


def contest_payload(problem_id, **overrides):
    now = utcnow()
    payload = {
        "title": "Weekly Contest 2",
        "description": "Two problems.",
        "start_time": (now + timedelta(hours=1)).isoformat(),
        "end_time": (now + timedelta(hours=3)).isoformat(),
        "problems": [{"problem_id": str(problem_id), "points": 200, "order": 1}],
        "rules": ["Be fair"],
        "tags": ["weekly"],
        "difficulty": "hard",
    }
    payload.update(overrides)
    return payload


def submit_url(contest, problem):
    return f"/api/contests/submit/{contest.id}/problems/{problem.id}/submit"


# Test contest creation
async def test_create_contest(client, session, test_problem, admin_user, admin_headers):
    response = await client.post(
        "/api/contests", json=contest_payload(test_problem.id), headers=admin_headers
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Contest created successfully"
    assert data["contest"]["status"] == "upcoming"
    assert data["contest"]["difficulty"] == "hard"
    assert data["contest"]["created_by"] == str(admin_user.id)

    result = await session.execute(
        select(ContestProblem).where(ContestProblem.contest_id == uuid.UUID(data["contest"]["id"]))
    )
    entries = result.scalars().all()
    assert [(e.problem_id, e.points) for e in entries] == [(test_problem.id, 200)]


async def test_create_contest_in_the_past(client, test_problem, admin_headers):
    start = utcnow() - timedelta(hours=1)
    payload = contest_payload(test_problem.id, start_time=start.isoformat())

    response = await client.post("/api/contests", json=payload, headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Start time cannot be in the past"


async def test_create_contest_with_unknown_problem(client, admin_headers):
    missing = uuid.uuid4()

    response = await client.post("/api/contests", json=contest_payload(missing), headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == f"Problems not found: {missing}"


async def test_create_contest_end_before_start(client, test_problem, admin_headers):
    now = utcnow()
    payload = contest_payload(
        test_problem.id,
        start_time=(now + timedelta(hours=2)).isoformat(),
        end_time=(now + timedelta(hours=1)).isoformat(),
    )

    response = await client.post("/api/contests", json=payload, headers=admin_headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_create_contest_with_duplicate_problem(client, session, test_problem, admin_headers):
    payload = contest_payload(test_problem.id)
    payload["problems"] = [
        {"problem_id": str(test_problem.id), "points": 100, "order": 1},
        {"problem_id": str(test_problem.id), "points": 200, "order": 2},
    ]

    response = await client.post("/api/contests", json=payload, headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "A problem can only be listed once per contest"
    result = await session.execute(select(ContestProblem))
    assert result.scalars().all() == []


async def test_create_contest_requires_admin(client, test_problem, user_headers):
    response = await client.post(
        "/api/contests", json=contest_payload(test_problem.id), headers=user_headers
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


# Test contest listing
async def test_list_contests(client, session, test_problem, ongoing_contest):
    now = utcnow()
    await create_contest(
        session, test_problem, now + timedelta(days=1), now + timedelta(days=2), is_public=False
    )

    response = await client.get("/api/contests")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 1
    assert data["total_pages"] == 1
    assert data["current_page"] == 1
    item = data["contests"][0]
    assert item["id"] == str(ongoing_contest.id)
    assert item["status"] == "ongoing"
    assert item["time_remaining"]["type"] == "ends_in"
    assert item["problems_count"] == 1
    assert item["participants_count"] == 0
    assert item["is_registered"] is False
    assert item["duration"] == 1


async def test_list_contests_as_admin_includes_private(client, session, test_problem, ongoing_contest, admin_headers):
    now = utcnow()
    await create_contest(
        session, test_problem, now + timedelta(days=1), now + timedelta(days=2), is_public=False
    )

    response = await client.get("/api/contests", headers=admin_headers)

    assert response.json()["total"] == 2


async def test_list_contests_marks_registration(client, session, ongoing_contest, test_user, user_headers):
    await register(session, ongoing_contest, test_user)

    response = await client.get("/api/contests", headers=user_headers)

    item = response.json()["contests"][0]
    assert item["is_registered"] is True
    assert item["participants_count"] == 1


async def test_list_contests_filters(client, ongoing_contest):
    response = await client.get("/api/contests", params={"status": "upcoming"})
    assert response.json()["total"] == 0

    response = await client.get("/api/contests", params={"status": "all", "search": "WEEKLY"})
    assert response.json()["total"] == 1

    response = await client.get("/api/contests", params={"search": "monthly"})
    assert response.json()["contests"] == []


async def test_list_contests_search_is_literal(client, ongoing_contest):
    response = await client.get("/api/contests", params={"search": "%"})
    assert response.json()["total"] == 0

    response = await client.get("/api/contests", params={"search": "weekly_contest"})
    assert response.json()["total"] == 0

    response = await client.get("/api/contests", params={"search": "kly con"})
    assert response.json()["total"] == 1


async def test_list_contests_invalid_status(client):
    response = await client.get("/api/contests", params={"status": "paused"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST


async def test_list_contests_syncs_status(client, session, test_problem):
    now = utcnow()
    contest = await create_contest(
        session, test_problem, now + timedelta(hours=1), now + timedelta(hours=2)
    )
    contest.start_time = now - timedelta(hours=3)
    contest.end_time = now - timedelta(hours=2)
    session.add(contest)
    await session.commit()

    response = await client.get("/api/contests", params={"status": "ended"})

    assert response.json()["total"] == 1
    assert response.json()["contests"][0]["time_remaining"]["value"] == "Contest Ended"


# Test contest detail
async def test_get_contest(client, session, ongoing_contest, test_problem, test_user, user_headers):
    await register(session, ongoing_contest, test_user)

    response = await client.get(f"/api/contests/{ongoing_contest.id}", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["contest"]["title"] == "Weekly Contest 1"
    assert data["contest"]["problems"][0]["problem"]["title"] == test_problem.title
    assert data["contest"]["problems"][0]["is_solved"] is False
    assert data["contest"]["total_participants"] == 1
    assert data["user_stats"] == {"is_registered": True, "rank": 1, "score": 0, "problems_solved": 0}


async def test_get_contest_anonymous(client, ongoing_contest):
    response = await client.get(f"/api/contests/{ongoing_contest.id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["user_stats"]["is_registered"] is False


async def test_get_missing_contest(client):
    response = await client.get(f"/api/contests/{uuid.uuid4()}")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Contest not found"


# Test contest update and deletion
async def test_update_contest(client, ongoing_contest, admin_headers):
    response = await client.put(
        f"/api/contests/{ongoing_contest.id}",
        json={"title": "Weekly Contest 1 (rerun)", "prize_pool": "$100"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    contest = response.json()["contest"]
    assert contest["title"] == "Weekly Contest 1 (rerun)"
    assert contest["prize_pool"] == "$100"
    assert contest["status"] == "ongoing"


async def test_update_contest_invalid_window(client, ongoing_contest, admin_headers):
    end_time = (ongoing_contest.start_time - timedelta(minutes=1)).isoformat()

    response = await client.put(
        f"/api/contests/{ongoing_contest.id}", json={"end_time": end_time}, headers=admin_headers
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


async def test_update_contest_replaces_problems(
    client, session, ongoing_contest, test_problem, admin_user, admin_headers
):
    graph_problem = make_problem(admin_user, title="Course Schedule")
    session.add(graph_problem)
    await session.commit()
    await session.refresh(graph_problem)

    response = await client.put(
        f"/api/contests/{ongoing_contest.id}",
        json={"problems": [{"problem_id": str(graph_problem.id), "points": 300, "order": 1}]},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    result = await session.execute(
        select(ContestProblem).where(ContestProblem.contest_id == ongoing_contest.id)
    )
    entries = result.scalars().all()
    assert [(e.problem_id, e.points, e.order) for e in entries] == [(graph_problem.id, 300, 1)]


async def test_update_contest_with_duplicate_problem(client, session, ongoing_contest, test_problem, admin_headers):
    entry = {"problem_id": str(test_problem.id), "points": 100}

    response = await client.put(
        f"/api/contests/{ongoing_contest.id}",
        json={"problems": [entry, entry]},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "A problem can only be listed once per contest"
    result = await session.execute(
        select(ContestProblem).where(ContestProblem.contest_id == ongoing_contest.id)
    )
    assert [e.problem_id for e in result.scalars().all()] == [test_problem.id]


async def test_update_contest_recomputes_status(client, session, ongoing_contest, admin_headers):
    now = utcnow()

    response = await client.put(
        f"/api/contests/{ongoing_contest.id}",
        json={
            "start_time": (now + timedelta(hours=1)).isoformat(),
            "end_time": (now + timedelta(hours=2)).isoformat(),
        },
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["contest"]["status"] == "upcoming"
    await session.refresh(ongoing_contest)
    assert ongoing_contest.status == ContestStatus.UPCOMING


async def test_delete_contest(client, session, ongoing_contest, test_user, admin_headers):
    await register(session, ongoing_contest, test_user)

    response = await client.delete(f"/api/contests/{ongoing_contest.id}", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "message": "Contest deleted successfully"}
    response = await client.get(f"/api/contests/{ongoing_contest.id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    participants = await session.execute(select(ContestParticipant))
    assert participants.scalars().all() == []


# Test registration
async def test_register_for_ongoing_contest(client, ongoing_contest, user_headers):
    response = await client.post(f"/api/contests/{ongoing_contest.id}/register", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert data["contest_status"] == "ongoing"
    assert data["is_late_registration"] is True


async def test_register_for_upcoming_contest(client, session, test_problem, user_headers):
    now = utcnow()
    contest = await create_contest(
        session, test_problem, now + timedelta(hours=1), now + timedelta(hours=2)
    )

    response = await client.post(f"/api/contests/{contest.id}/register", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_late_registration"] is False
    assert response.json()["time_remaining"]["type"] == "starts_in"


async def test_register_twice(client, ongoing_contest, user_headers):
    await client.post(f"/api/contests/{ongoing_contest.id}/register", headers=user_headers)

    response = await client.post(f"/api/contests/{ongoing_contest.id}/register", headers=user_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Already registered for this contest"


async def test_register_for_ended_contest(client, session, test_problem, user_headers):
    now = utcnow()
    contest = await create_contest(
        session, test_problem, now - timedelta(hours=2), now - timedelta(hours=1)
    )

    response = await client.post(f"/api/contests/{contest.id}/register", headers=user_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Contest has already ended"


async def test_my_contests(client, session, ongoing_contest, test_user, user_headers):
    await register(session, ongoing_contest, test_user)

    response = await client.get("/api/contests/user/my-contests", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    assert [c["id"] for c in response.json()["contests"]] == [str(ongoing_contest.id)]


# Test contest problems
async def test_problems_require_registration(client, ongoing_contest, user_headers):
    response = await client.get(f"/api/contests/{ongoing_contest.id}/problems", headers=user_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "You must register for this contest to view problems"


async def test_list_contest_problems(client, session, ongoing_contest, test_problem, test_user, user_headers):
    await register(session, ongoing_contest, test_user)

    response = await client.get(f"/api/contests/{ongoing_contest.id}/problems", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["contest"]["is_registered"] is True
    assert data["contest"]["total_problems"] == 1
    assert data["problems"][0]["problem_id"] == str(test_problem.id)
    assert data["problems"][0]["points"] == 100


async def test_ended_contest_problems_are_open(client, session, test_problem, user_headers):
    now = utcnow()
    contest = await create_contest(
        session, test_problem, now - timedelta(hours=2), now - timedelta(hours=1)
    )

    response = await client.get(f"/api/contests/{contest.id}/problems", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["contest"]["is_registered"] is False


async def test_get_contest_problem(client, ongoing_contest, test_problem, admin_headers):
    response = await client.get(
        f"/api/contests/{ongoing_contest.id}/problems/{test_problem.id}", headers=admin_headers
    )

    assert response.status_code == status.HTTP_200_OK
    problem = response.json()["problem"]
    assert problem["points"] == 100
    assert "hidden_test_cases" not in problem


async def test_get_problem_outside_contest(client, ongoing_contest, admin_headers):
    response = await client.get(
        f"/api/contests/{ongoing_contest.id}/problems/{uuid.uuid4()}", headers=admin_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Problem not found in this contest"


async def test_run_contest_problem(client, session, ongoing_contest, test_problem, test_user, user_headers, fake_judge):
    await register(session, ongoing_contest, test_user)
    fake_judge.status_ids = [4, 3]

    response = await client.post(
        f"/api/contests/{ongoing_contest.id}/problems/{test_problem.id}/run",
        json=CODE,
        headers=user_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is False
    assert len(data["test_cases"]) == 1


async def test_run_requires_registration(client, ongoing_contest, test_problem, user_headers):
    response = await client.post(
        f"/api/contests/{ongoing_contest.id}/problems/{test_problem.id}/run",
        json=CODE,
        headers=user_headers,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "You are not registered for this contest"


# Test contest submissions and scoring
async def test_submit_requires_registration(client, ongoing_contest, test_problem, user_headers):
    response = await client.post(submit_url(ongoing_contest, test_problem), json=CODE, headers=user_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


async def test_submit_to_upcoming_contest(client, session, test_problem, test_user, user_headers):
    now = utcnow()
    contest = await create_contest(
        session, test_problem, now + timedelta(hours=1), now + timedelta(hours=2)
    )
    await register(session, contest, test_user)

    response = await client.post(submit_url(contest, test_problem), json=CODE, headers=user_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Contest is not active"


async def test_submit_scoring(client, session, ongoing_contest, test_problem, test_user, user_headers, fake_judge):
    await register(session, ongoing_contest, test_user)
    url = submit_url(ongoing_contest, test_problem)

    # Wrong answer first
    fake_judge.status_ids = [3, 4, 3]
    response = await client.post(url, json=CODE, headers=user_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["accepted"] is False
    assert data["score"] == 0
    assert data["is_first_attempt"] is True

    # Accepted: ten minutes in, one wrong attempt
    fake_judge.status_ids = None
    response = await client.post(url, json=CODE, headers=user_headers)
    data = response.json()
    assert data["accepted"] is True
    assert data["score"] == 88
    assert data["rank"] == 1
    assert data["is_first_attempt"] is False

    # Solving again scores nothing
    response = await client.post(url, json=CODE, headers=user_headers)
    assert response.json()["score"] == 0

    participant = (
        await session.execute(
            select(ContestParticipant).where(ContestParticipant.user_id == test_user.id)
        )
    ).scalars().one()
    assert participant.score == 88
    assert participant.last_submission is not None

    submissions = (
        await session.execute(select(Submission).where(Submission.contest_id == ongoing_contest.id))
    ).scalars().all()
    assert sorted(s.score for s in submissions) == [0, 0, 88]


async def test_leaderboard_and_stats(
    client, session, ongoing_contest, test_problem, test_user, other_user, user_headers, other_headers, fake_judge
):
    await register(session, ongoing_contest, test_user)
    await register(session, ongoing_contest, other_user)
    url = submit_url(ongoing_contest, test_problem)

    fake_judge.status_ids = [4, 3, 3]
    await client.post(url, json=CODE, headers=user_headers)
    fake_judge.status_ids = None
    await client.post(url, json=CODE, headers=user_headers)
    await client.post(url, json=CODE, headers=other_headers)

    response = await client.get(f"/api/contests/{ongoing_contest.id}/leaderboard")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total_participants"] == 2
    assert data["contest_status"] == "ongoing"
    first, second = data["leaderboard"]
    assert first["user_id"] == str(other_user.id)
    assert first["score"] == 98
    assert first["rank"] == 1
    assert first["progress"] == 100
    assert first["user"]["first_name"] == "Other"
    assert second["user_id"] == str(test_user.id)
    assert second["score"] == 88
    assert second["rank"] == 2

    response = await client.get(f"/api/contests/{ongoing_contest.id}/stats")
    stats = response.json()["stats"]
    assert stats["total_participants"] == 2
    assert stats["total_problems"] == 1
    assert stats["total_submissions"] == 3
    assert stats["total_attempts"] == 3
    assert stats["max_score"] == 98
    assert stats["average_score"] == 93.0
    assert stats["accuracy_rate"] == 66.67
    assert stats["problems_stats"][0]["success_rate"] == 100.0
    assert [p["user_id"] for p in stats["top_performers"]] == [str(other_user.id), str(test_user.id)]

    response = await client.get(f"/api/contests/{ongoing_contest.id}/participants")
    participants = response.json()["participants"]
    assert {p["user_id"]: p["problems_solved"] for p in participants} == {
        str(test_user.id): 1,
        str(other_user.id): 1,
    }


async def test_contest_submission_history(client, session, ongoing_contest, test_problem, test_user, user_headers):
    await register(session, ongoing_contest, test_user)
    url = submit_url(ongoing_contest, test_problem)
    for _ in range(3):
        await client.post(url, json=CODE, headers=user_headers)

    response = await client.get(
        f"/api/contests/{ongoing_contest.id}/problems/{test_problem.id}/submissions",
        params={"page": 2, "limit": 2},
        headers=user_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 3
    assert data["total_pages"] == 2
    assert data["current_page"] == 2
    assert len(data["submissions"]) == 1
