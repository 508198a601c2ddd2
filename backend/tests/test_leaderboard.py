"""Tests for the global and per-quiz leaderboards."""

import uuid

from fastapi.testclient import TestClient

from smartquiz.services.leaderboard import global_leaderboard, quiz_leaderboard


def _signup(client: TestClient, username: str) -> dict:
    resp = client.post(
        "/api/auth/register",
        json={"username": username, "email": f"{username}@ex.com", "password": "secret1"},
    )
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def _quiz(client: TestClient, headers: dict, title: str = "Warm-up") -> str:
    resp = client.post(
        "/api/quiz/",
        json={
            "title": title,
            "description": "Two quick ones",
            "category": "General",
            "difficulty": "easy",
            "time_limit": 5,
            "questions": [
                {"question_text": "1 + 1?", "options": ["2", "3"], "correct_answer": 0, "points": 3},
                {"question_text": "2 * 3?", "options": ["5", "6"], "correct_answer": 1, "points": 2},
            ],
        },
        headers=headers,
    )
    quiz_id = resp.json()["id"]
    client.post(f"/api/quiz/{quiz_id}/publish", json={"is_published": True}, headers=headers)
    return quiz_id


def _play(client: TestClient, headers: dict, quiz_id: str, picks: list[int], spent: int = 5) -> str:
    """Run a full attempt answering *picks* in order and return its id."""
    attempt_id = client.post(
        "/api/attempt/start", json={"quiz_id": quiz_id}, headers=headers
    ).json()["attempt"]["id"]
    for index, option in enumerate(picks):
        client.post(
            f"/api/attempt/{attempt_id}/answer",
            json={"question_index": index, "selected_option": option, "time_spent": spent},
            headers=headers,
        )
    client.post(f"/api/attempt/{attempt_id}/complete", headers=headers)
    return attempt_id


def test_global_leaderboard_best_attempt_per_user(client: TestClient):
    author = _signup(client, "author")
    ann = _signup(client, "ann")
    ben = _signup(client, "ben")
    quiz_id = _quiz(client, author)

    _play(client, ann, quiz_id, [0, 0])  # 3 points
    best = _play(client, ann, quiz_id, [0, 1])  # 5 points
    _play(client, ben, quiz_id, [1, 1])  # 2 points

    resp = client.get("/api/leaderboard/global")
    assert resp.status_code == 200
    rows = resp.json()
    assert [(r["rank"], r["username"], r["score"]) for r in rows] == [(1, "ann", 5), (2, "ben", 2)]
    assert rows[0]["attempt_id"] == best
    assert rows[0]["percentage"] == 100
    assert rows[0]["quiz_id"] == quiz_id


def test_global_leaderboard_time_breaks_ties(client: TestClient):
    author = _signup(client, "author")
    slow = _signup(client, "slow")
    fast = _signup(client, "fast")
    quiz_id = _quiz(client, author)

    _play(client, slow, quiz_id, [0, 1], spent=20)
    _play(client, fast, quiz_id, [0, 1], spent=3)

    rows = client.get("/api/leaderboard/global").json()
    assert [r["username"] for r in rows] == ["fast", "slow"]
    assert rows[0]["time_taken"] == 6


def test_global_leaderboard_ignores_open_attempts(client: TestClient):
    author = _signup(client, "author")
    player = _signup(client, "player")
    quiz_id = _quiz(client, author)
    client.post("/api/attempt/start", json={"quiz_id": quiz_id}, headers=player)

    assert client.get("/api/leaderboard/global").json() == []


def test_global_leaderboard_limit(client: TestClient):
    author = _signup(client, "author")
    quiz_id = _quiz(client, author)
    for name in ("ann", "ben", "cat"):
        _play(client, _signup(client, name), quiz_id, [0, 1])

    assert len(client.get("/api/leaderboard/global", params={"limit": 2}).json()) == 2
    # out-of-range limits are clamped, not rejected
    assert len(client.get("/api/leaderboard/global", params={"limit": 0}).json()) == 1


def test_quiz_leaderboard_keeps_every_attempt(client: TestClient):
    author = _signup(client, "author")
    ann = _signup(client, "ann")
    ben = _signup(client, "ben")
    quiz_id = _quiz(client, author, "Scored")
    other_quiz = _quiz(client, author, "Elsewhere")

    _play(client, ann, quiz_id, [0, 1])
    _play(client, ann, quiz_id, [1, 1])
    _play(client, ben, quiz_id, [0, 0])
    _play(client, ben, other_quiz, [0, 1])

    resp = client.get(f"/api/leaderboard/quiz/{quiz_id}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["quiz"] == {"id": quiz_id, "title": "Scored"}
    assert [(e["rank"], e["username"], e["score"]) for e in data["entries"]] == [
        (1, "ann", 5),
        (2, "ben", 3),
        (3, "ann", 2),
    ]


def test_quiz_leaderboard_bad_id(client: TestClient):
    resp = client.get("/api/leaderboard/quiz/not-a-uuid")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid quiz id"


def test_quiz_leaderboard_missing_quiz(client: TestClient):
    resp = client.get("/api/leaderboard/quiz/00000000-0000-4000-8000-000000000000")
    assert resp.status_code == 404


def test_global_limit_counts_players_not_attempts(client: TestClient, db):
    author = _signup(client, "author")
    ann = _signup(client, "ann")
    ben = _signup(client, "ben")
    quiz_id = _quiz(client, author)

    for picks in ([0, 1], [0, 0], [1, 1]):
        _play(client, ann, quiz_id, picks)
    _play(client, ben, quiz_id, [1, 0])  # 0 points

    rows = global_leaderboard(db, 2)
    assert [(r["username"], r["score"]) for r in rows] == [("ann", 5), ("ben", 0)]
    assert set(rows[0]) == {
        "rank",
        "attempt_id",
        "user_id",
        "username",
        "quiz_id",
        "score",
        "percentage",
        "time_taken",
        "completed_at",
    }


def test_quiz_leaderboard_service_limit(client: TestClient, db):
    author = _signup(client, "author")
    ann = _signup(client, "ann")
    quiz_id = _quiz(client, author)
    for picks in ([1, 1], [0, 1], [0, 0]):
        _play(client, ann, quiz_id, picks)

    rows = quiz_leaderboard(db, uuid.UUID(quiz_id), 2)
    assert [(r["rank"], r["score"]) for r in rows] == [(1, 5), (2, 3)]
