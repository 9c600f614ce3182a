import uuid

import pytest
from fastapi import status
from sqlmodel import select

from codearena.data.schemas import Problem, SolutionVideo, SolvedProblem
from tests.conftest import problem_payload


# Test problem creation
async def test_create_problem(client, session, admin_user, admin_headers, fake_judge):
    # Make request
    response = await client.post("/problem/create", json=problem_payload(), headers=admin_headers)

    # Check response
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["title"] == "Two Sum"
    assert data["difficulty"] == "easy"
    assert len(data["hidden_test_cases"]) == 3
    assert data["problem_creator_id"] == str(admin_user.id)

    # Every reference solution ran against the visible cases
    assert len(fake_judge.calls) == 2
    assert {call["language_id"] for call in fake_judge.calls} == {71, 54}
    assert all(len(call["cases"]) == 2 for call in fake_judge.calls)

    # Check database
    result = await session.execute(select(Problem).where(Problem.title == "Two Sum"))
    assert result.scalars().first() is not None


async def test_create_problem_failing_reference(client, session, admin_headers, fake_judge):
    fake_judge.status_ids = [3, 4]

    response = await client.post("/problem/create", json=problem_payload(), headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Reference solution for python failed the visible test cases"
    result = await session.execute(select(Problem))
    assert result.scalars().all() == []


async def test_create_problem_unsupported_language(client, admin_headers):
    payload = problem_payload()
    payload["reference_solution"] = [{"language": "cobol", "complete_code": "DISPLAY 1"}]

    response = await client.post("/problem/create", json=payload, headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Unsupported language: cobol"


async def test_create_problem_requires_hidden_cases(client, admin_headers):
    payload = problem_payload()
    payload["hidden_test_cases"] = []

    response = await client.post("/problem/create", json=payload, headers=admin_headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_create_problem_requires_admin(client, user_headers):
    response = await client.post("/problem/create", json=problem_payload(), headers=user_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


# Test problem update
async def test_update_problem(client, test_problem, admin_headers, fake_judge):
    response = await client.put(
        f"/problem/update/{test_problem.id}",
        json={"title": "Two Sum II", "difficulty": "medium"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["title"] == "Two Sum II"
    assert data["difficulty"] == "medium"
    assert fake_judge.calls == []


async def test_update_problem_revalidates_solutions(client, test_problem, admin_headers, fake_judge):
    fake_judge.status_ids = [6]
    payload = {
        "visible_test_cases": [{"input": "1 1\n2", "output": "0 1"}],
        "reference_solution": [{"language": "python", "complete_code": "print("}],
    }

    response = await client.put(
        f"/problem/update/{test_problem.id}", json=payload, headers=admin_headers
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert len(fake_judge.calls) == 1


@pytest.mark.parametrize(
    "field", ["visible_test_cases", "hidden_test_cases", "reference_solution"]
)
async def test_update_problem_rejects_empty_lists(client, session, test_problem, admin_headers, fake_judge, field):
    response = await client.put(
        f"/problem/update/{test_problem.id}", json={field: []}, headers=admin_headers
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert fake_judge.calls == []
    await session.refresh(test_problem)
    assert len(getattr(test_problem, field)) > 0


async def test_update_problem_without_fields(client, test_problem, admin_headers):
    response = await client.put(f"/problem/update/{test_problem.id}", json={}, headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "No fields to update"


async def test_update_missing_problem(client, admin_headers):
    response = await client.put(
        f"/problem/update/{uuid.uuid4()}", json={"title": "New"}, headers=admin_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


# Test problem deletion
async def test_delete_problem(client, session, test_problem, admin_headers):
    problem_id = test_problem.id

    response = await client.delete(f"/problem/delete/{problem_id}", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Problem deleted successfully"}
    result = await session.execute(select(Problem).where(Problem.id == problem_id))
    assert result.scalars().first() is None


async def test_delete_problem_requires_admin(client, test_problem, user_headers):
    response = await client.delete(f"/problem/delete/{test_problem.id}", headers=user_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


# Test problem retrieval
async def test_get_problem_as_user(client, session, test_problem, test_user, user_headers):
    session.add(
        SolutionVideo(
            problem_id=test_problem.id,
            user_id=test_user.id,
            object_key=f"solutions/{test_problem.id}/video",
            secure_url="https://storage.test/video.mp4",
            thumbnail_url="https://storage.test/thumb.jpg",
            duration=95.5,
        )
    )
    await session.commit()

    response = await client.get(f"/problem/problemById/{test_problem.id}", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["title"] == test_problem.title
    assert len(data["visible_test_cases"]) == 2
    assert "hidden_test_cases" not in data
    assert "reference_solution" not in data
    assert data["secure_url"] == "https://storage.test/video.mp4"
    assert data["duration"] == 95.5


async def test_get_problem_as_admin(client, test_problem, admin_headers):
    response = await client.get(f"/problem/problemById/{test_problem.id}", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data["hidden_test_cases"]) == 3
    assert data["reference_solution"][0]["language"] == "python"
    assert data["secure_url"] is None


async def test_get_missing_problem(client, user_headers):
    response = await client.get(f"/problem/problemById/{uuid.uuid4()}", headers=user_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Problem not found"


async def test_get_problem_invalid_id(client, user_headers):
    response = await client.get("/problem/problemById/not-a-uuid", headers=user_headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_list_problems(client, test_problem):
    response = await client.get("/problem/getAllProblem")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data) == 1
    assert data[0] == {
        "id": str(test_problem.id),
        "title": "Two Sum",
        "difficulty": "easy",
        "tags": ["array", "hash-table"],
    }


async def test_list_problems_empty(client):
    response = await client.get("/problem/getAllProblem")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []


async def test_solved_problems(client, session, test_problem, test_user, user_headers):
    session.add(SolvedProblem(user_id=test_user.id, problem_id=test_problem.id))
    await session.commit()

    response = await client.get("/problem/problemSolvedByUser", headers=user_headers)

    assert response.status_code == status.HTTP_200_OK
    assert [p["id"] for p in response.json()] == [str(test_problem.id)]


async def test_solved_problems_requires_login(client):
    response = await client.get("/problem/problemSolvedByUser")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
