import uuid

from fastapi import status

from tests.conftest import make_problem


async def start_discussion(client, problem, headers, title="Is O(n) possible?"):
    payload = {
        "title": title,
        "content": "Sorting gives O(n log n). Can we do better?",
        "problem_id": str(problem.id),
        "tags": ["complexity"],
    }
    response = await client.post("/discussion", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


async def test_create_discussion(client, test_problem, test_user, user_headers):
    data = await start_discussion(client, test_problem, user_headers)

    assert data["title"] == "Is O(n) possible?"
    assert data["author"]["id"] == str(test_user.id)
    assert data["problem_id"] == str(test_problem.id)
    assert data["likes"] == data["dislikes"] == data["replies"] == []
    assert data["is_solved"] is False


async def test_create_discussion_for_missing_problem(client, user_headers):
    payload = {"title": "Hello", "content": "World", "problem_id": str(uuid.uuid4())}

    response = await client.post("/discussion", json=payload, headers=user_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND


async def test_create_discussion_requires_login(client, test_problem):
    payload = {"title": "Hello", "content": "World", "problem_id": str(test_problem.id)}

    response = await client.post("/discussion", json=payload)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


async def test_list_discussions(client, session, test_problem, admin_user, user_headers):
    other_problem = make_problem(admin_user, "Three Sum")
    session.add(other_problem)
    await session.commit()
    await start_discussion(client, test_problem, user_headers, title="First")
    await start_discussion(client, other_problem, user_headers, title="Second")

    response = await client.get("/discussion")
    assert response.status_code == status.HTTP_200_OK
    assert {d["title"] for d in response.json()} == {"First", "Second"}

    response = await client.get(f"/discussion/problem/{test_problem.id}")
    assert [d["title"] for d in response.json()] == ["First"]


async def test_reply(client, test_problem, other_user, user_headers, other_headers):
    discussion = await start_discussion(client, test_problem, user_headers)

    response = await client.post(
        f"/discussion/{discussion['id']}/reply",
        json={"content": "Use a hash map."},
        headers=other_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    replies = response.json()["replies"]
    assert len(replies) == 1
    assert replies[0]["content"] == "Use a hash map."
    assert replies[0]["author"]["id"] == str(other_user.id)


async def test_reply_to_missing_discussion(client, user_headers):
    response = await client.post(
        f"/discussion/{uuid.uuid4()}/reply", json={"content": "Hi"}, headers=user_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Discussion not found"


async def test_like_toggles(client, test_problem, test_user, user_headers):
    discussion = await start_discussion(client, test_problem, user_headers)
    url = f"/discussion/{discussion['id']}/like"

    response = await client.post(url, headers=user_headers)
    assert response.json()["likes"] == [str(test_user.id)]

    response = await client.post(url, headers=user_headers)
    assert response.json()["likes"] == []


async def test_dislike_replaces_like(client, test_problem, test_user, other_user, user_headers, other_headers):
    discussion = await start_discussion(client, test_problem, user_headers)
    base = f"/discussion/{discussion['id']}"

    await client.post(f"{base}/like", headers=user_headers)
    await client.post(f"{base}/like", headers=other_headers)
    response = await client.post(f"{base}/dislike", headers=user_headers)

    data = response.json()
    assert data["likes"] == [str(other_user.id)]
    assert data["dislikes"] == [str(test_user.id)]


async def test_like_reply(client, test_problem, other_user, user_headers, other_headers):
    discussion = await start_discussion(client, test_problem, user_headers)
    response = await client.post(
        f"/discussion/{discussion['id']}/reply", json={"content": "Hash map."}, headers=user_headers
    )
    reply_id = response.json()["replies"][0]["id"]
    url = f"/discussion/{discussion['id']}/reply/{reply_id}/like"

    response = await client.post(url, headers=other_headers)
    data = response.json()
    assert data["replies"][0]["likes"] == [str(other_user.id)]
    # Reply reactions are separate from the discussion's own
    assert data["likes"] == []

    response = await client.post(url, headers=other_headers)
    assert response.json()["replies"][0]["likes"] == []


async def test_like_missing_reply(client, test_problem, user_headers):
    discussion = await start_discussion(client, test_problem, user_headers)

    response = await client.post(
        f"/discussion/{discussion['id']}/reply/{uuid.uuid4()}/like", headers=user_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Reply not found"


async def test_toggle_solved(client, test_problem, user_headers, other_headers):
    discussion = await start_discussion(client, test_problem, user_headers)
    url = f"/discussion/{discussion['id']}/solved"

    response = await client.patch(url, headers=other_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = await client.patch(url, headers=user_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_solved"] is True

    response = await client.patch(url, headers=user_headers)
    assert response.json()["is_solved"] is False
