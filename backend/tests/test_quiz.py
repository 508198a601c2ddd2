"""Tests for quiz browsing and authoring endpoints."""

import pytest
from fastapi.testclient import TestClient

from smartquiz.db.models import Quiz


def _signup(client: TestClient, username: str = "author") -> dict:
    """Register a user and return auth headers."""
    resp = client.post(
        "/api/auth/register",
        json={"username": username, "email": f"{username}@ex.com", "password": "secret1"},
    )
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def _quiz_payload(**overrides) -> dict:
    payload = {
        "title": "Capitals of Europe",
        "description": "How well do you know your capitals?",
        "category": "Geography",
        "difficulty": "easy",
        "time_limit": 5,
        "tags": ["europe", "cities"],
        "questions": [
            {
                "question_text": "Capital of France?",
                "options": ["Paris", "Lyon", "Nice"],
                "correct_answer": 0,
                "explanation": "Paris has been the capital since 987.",
                "points": 2,
                "time_limit": 30,
            },
            {
                "question_text": "Capital of Spain?",
                "options": ["Seville", "Madrid"],
                "correct_answer": 1,
                "points": 1,
                "time_limit": 20,
            },
        ],
    }
    payload.update(overrides)
    return payload


def _create(client: TestClient, headers: dict, publish: bool = True, **overrides) -> dict:
    resp = client.post("/api/quiz/", json=_quiz_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    quiz = resp.json()
    if publish:
        resp = client.post(
            f"/api/quiz/{quiz['id']}/publish", json={"is_published": True}, headers=headers
        )
        assert resp.status_code == 200
        quiz = resp.json()
    return quiz


# ── Authoring ─────────────────────────────────────────────────────────────────


def test_create_quiz(client: TestClient):
    headers = _signup(client)
    resp = client.post("/api/quiz/", json=_quiz_payload(), headers=headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["is_published"] is False
    assert data["is_public"] is True
    assert data["total_questions"] == 2
    assert data["total_time"] == 50
    assert data["questions"][1]["correct_answer"] == 1


def test_create_quiz_requires_auth(client: TestClient):
    resp = client.post("/api/quiz/", json=_quiz_payload())
    assert resp.status_code == 401


def test_create_quiz_without_questions(client: TestClient):
    headers = _signup(client)
    resp = client.post("/api/quiz/", json=_quiz_payload(questions=[]), headers=headers)
    assert resp.status_code == 400
    assert "at least one question" in resp.json()["detail"]


def test_create_quiz_blank_title(client: TestClient):
    headers = _signup(client)
    resp = client.post("/api/quiz/", json=_quiz_payload(title="  "), headers=headers)
    assert resp.status_code == 400


@pytest.mark.parametrize(
    "question, detail",
    [
        ({"question_text": "", "options": ["a", "b"], "correct_answer": 0}, "Question 2 is invalid"),
        ({"question_text": "Q?", "options": ["a"], "correct_answer": 0}, "Question 2 is invalid"),
        (
            {"question_text": "Q?", "options": ["a", "b"], "correct_answer": 2},
            "Question 2 has invalid correct answer index",
        ),
    ],
)
def test_create_quiz_bad_question(client: TestClient, question, detail):
    headers = _signup(client)
    questions = [_quiz_payload()["questions"][0], question]
    resp = client.post("/api/quiz/", json=_quiz_payload(questions=questions), headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == detail


def test_create_quiz_too_many_options(client: TestClient):
    """Option count limits are enforced by the model and surface as 400."""
    headers = _signup(client)
    question = {"question_text": "Pick", "options": list("abcdefg"), "correct_answer": 0}
    resp = client.post("/api/quiz/", json=_quiz_payload(questions=[question]), headers=headers)
    assert resp.status_code == 400
    assert "options" in resp.json()["detail"]


def test_create_quiz_time_limit_out_of_range(client: TestClient):
    headers = _signup(client)
    resp = client.post("/api/quiz/", json=_quiz_payload(time_limit=500), headers=headers)
    assert resp.status_code == 422


def test_my_quizzes_include_unpublished(client: TestClient):
    headers = _signup(client)
    _create(client, headers, publish=False)
    resp = client.get("/api/quiz/my-quizzes", headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    assert data[0]["questions"][0]["correct_answer"] == 0


def test_update_quiz(client: TestClient):
    headers = _signup(client)
    quiz = _create(client, headers, publish=False)
    questions = _quiz_payload()["questions"][:1]
    resp = client.put(
        f"/api/quiz/{quiz['id']}",
        json={"title": "Just France", "questions": questions},
        headers=headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Just France"
    assert data["total_questions"] == 1
    assert data["total_time"] == 30
    assert data["category"] == "Geography"


def test_update_quiz_not_owner(client: TestClient):
    quiz = _create(client, _signup(client, "author"))
    resp = client.put(
        f"/api/quiz/{quiz['id']}", json={"title": "Mine now"}, headers=_signup(client, "intruder")
    )
    assert resp.status_code == 403
    assert resp.json()["detail"] == "You can only edit your own quizzes"


def test_update_published_quiz_with_attempts(client: TestClient, db):
    headers = _signup(client)
    quiz = _create(client, headers)
    db.query(Quiz).update({Quiz.total_attempts: 1})
    db.commit()
    resp = client.put(f"/api/quiz/{quiz['id']}", json={"title": "New"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot edit published quiz that has attempts"


def test_delete_quiz(client: TestClient):
    headers = _signup(client)
    quiz = _create(client, headers)
    resp = client.delete(f"/api/quiz/{quiz['id']}", headers=headers)
    assert resp.status_code == 200
    assert client.get(f"/api/quiz/{quiz['id']}").status_code == 404


def test_delete_quiz_with_attempts(client: TestClient, db):
    headers = _signup(client)
    quiz = _create(client, headers)
    db.query(Quiz).update({Quiz.total_attempts: 3})
    db.commit()
    resp = client.delete(f"/api/quiz/{quiz['id']}", headers=headers)
    assert resp.status_code == 400


def test_delete_quiz_not_owner(client: TestClient):
    quiz = _create(client, _signup(client, "author"))
    resp = client.delete(f"/api/quiz/{quiz['id']}", headers=_signup(client, "intruder"))
    assert resp.status_code == 403


def test_publish_toggle(client: TestClient):
    headers = _signup(client)
    quiz = _create(client, headers)
    assert quiz["is_published"] is True
    resp = client.post(
        f"/api/quiz/{quiz['id']}/publish", json={"is_published": False}, headers=headers
    )
    assert resp.json()["is_published"] is False


def test_publish_missing_quiz(client: TestClient):
    headers = _signup(client)
    resp = client.post(
        "/api/quiz/5b0c8a3e-0000-4000-8000-000000000000/publish",
        json={"is_published": True},
        headers=headers,
    )
    assert resp.status_code == 404


# ── Browsing ──────────────────────────────────────────────────────────────────


def test_list_only_published_public(client: TestClient):
    headers = _signup(client)
    shown = _create(client, headers)
    _create(client, headers, publish=False, title="Draft")
    private = _create(client, headers, title="Private")
    client.put(f"/api/quiz/{private['id']}", json={"is_public": False}, headers=headers)

    resp = client.get("/api/quiz/")
    assert resp.status_code == 200
    data = resp.json()
    assert [q["id"] for q in data["quizzes"]] == [shown["id"]]
    assert data["pagination"]["total_items"] == 1


def test_list_never_exposes_answers(client: TestClient):
    _create(client, _signup(client))
    data = client.get("/api/quiz/").json()
    for question in data["quizzes"][0]["questions"]:
        assert "correct_answer" not in question


def test_list_filters(client: TestClient):
    headers = _signup(client)
    _create(client, headers)
    _create(
        client,
        headers,
        title="Organic chemistry",
        description="Carbon and friends",
        category="Science",
        difficulty="hard",
        tags=["molecules"],
    )

    by_category = client.get("/api/quiz/", params={"category": "Science"}).json()
    assert [q["title"] for q in by_category["quizzes"]] == ["Organic chemistry"]

    by_difficulty = client.get("/api/quiz/", params={"difficulty": "easy"}).json()
    assert [q["title"] for q in by_difficulty["quizzes"]] == ["Capitals of Europe"]

    by_title = client.get("/api/quiz/", params={"search": "CHEMISTRY"}).json()
    assert len(by_title["quizzes"]) == 1

    by_tag = client.get("/api/quiz/", params={"search": "molecul"}).json()
    assert [q["title"] for q in by_tag["quizzes"]] == ["Organic chemistry"]

    nothing = client.get("/api/quiz/", params={"search": "astronomy"}).json()
    assert nothing["quizzes"] == []
    assert nothing["pagination"]["total_pages"] == 1


def test_search_matches_non_ascii_tag(client: TestClient):
    headers = _signup(client)
    _create(client, headers, title="Paris food", tags=["café", "boulangerie"])

    data = client.get("/api/quiz/", params={"search": "café"}).json()
    assert [q["title"] for q in data["quizzes"]] == ["Paris food"]


def test_search_does_not_match_across_tags(client: TestClient):
    headers = _signup(client)
    _create(client, headers, title="Letters", tags=["a", "b"])

    for needle in ('", "', '["', "[", ","):
        data = client.get("/api/quiz/", params={"search": needle}).json()
        assert data["quizzes"] == [], needle


def test_search_wildcards_are_literal(client: TestClient):
    headers = _signup(client)
    _create(client, headers, title="Plain", tags=["plain"])
    _create(client, headers, title="Offer", tags=["50%_off"])

    data = client.get("/api/quiz/", params={"search": "%_"}).json()
    assert [q["title"] for q in data["quizzes"]] == ["Offer"]


def test_list_pagination(client: TestClient):
    headers = _signup(client)
    for i in range(3):
        _create(client, headers, title=f"Quiz {i}")

    first = client.get("/api/quiz/", params={"limit": 2, "page": 1}).json()
    assert len(first["quizzes"]) == 2
    assert first["pagination"] == {
        "current_page": 1,
        "total_pages": 2,
        "total_items": 3,
        "has_next": True,
        "has_prev": False,
    }

    second = client.get("/api/quiz/", params={"limit": 2, "page": 2}).json()
    assert len(second["quizzes"]) == 1
    assert second["pagination"]["has_next"] is False
    assert second["pagination"]["has_prev"] is True


def test_get_quiz(client: TestClient):
    quiz = _create(client, _signup(client))
    resp = client.get(f"/api/quiz/{quiz['id']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Capitals of Europe"
    assert all("correct_answer" not in q for q in data["questions"])


def test_get_unpublished_quiz(client: TestClient):
    quiz = _create(client, _signup(client), publish=False)
    resp = client.get(f"/api/quiz/{quiz['id']}")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Quiz is not available"


def test_get_quiz_bad_id(client: TestClient):
    resp = client.get("/api/quiz/not-a-uuid")
    assert resp.status_code == 404
