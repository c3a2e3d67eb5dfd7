from __future__ import annotations

import asyncio

from qaweb.api.client import ApiClient
from qaweb.config import ApiConfig
from qaweb.pages.questions import load_question_list

QUESTIONS_REPLY = {
    "success": True,
    "data": {
        "questions": [
            {"id": 5, "title": "How do closures work?", "body": "...", "tags": "python", "user_id": 1},
            {"id": 6, "title": "Why is my cookie quoted?", "body": "...", "tags": "", "user_id": 2},
        ],
        "pagination": {"page": 1, "per": 20, "count": 2},
    },
}

QUESTION_REPLY = {
    "success": True,
    "data": {"id": 5, "title": "How do closures work?", "body": "Explain please", "user_id": 2},
}

ANSWERS_REPLY = {
    "success": True,
    "data": {
        "answers": [{"id": 1, "question_id": 5, "user_id": 3, "body": "They capture scope."}],
        "pagination": {"page": 1},
    },
}


def test_home_lists_questions(make_client, fake_api) -> None:
    fake_api.reply("GET", "questions", QUESTIONS_REPLY)
    client = make_client()

    r = client.get("/")
    assert r.status_code == 200
    assert "How do closures work?" in r.text
    assert "Why is my cookie quoted?" in r.text
    assert 'href="/questions/5"' in r.text
    assert fake_api.paths() == ["GET /api/v1/questions"]
    assert "x-auth-token" not in fake_api.calls[0].headers


def test_question_list_load_is_repeatable(fake_api) -> None:
    fake_api.reply("GET", "questions", QUESTIONS_REPLY)

    async def go():
        api = ApiClient.from_config(ApiConfig(), transport=fake_api.transport())
        try:
            return await load_question_list(api), await load_question_list(api)
        finally:
            await api.aclose()

    first, second = asyncio.run(go())
    assert first == second
    assert first == {
        "questions": QUESTIONS_REPLY["data"]["questions"],
        "pagination": QUESTIONS_REPLY["data"]["pagination"],
    }


def test_home_surfaces_unreachable_api(make_client, fake_api) -> None:
    fake_api.fail_transport("GET", "questions")
    client = make_client()

    r = client.get("/")
    assert r.status_code == 502
    assert "Could not reach the API" in r.text


def test_question_detail_fetches_question_and_answers(make_client, fake_api) -> None:
    fake_api.reply("GET", "questions/5", QUESTION_REPLY)
    fake_api.reply("GET", "questions/5/answers", ANSWERS_REPLY)
    client = make_client(signed_in=True)

    r = client.get("/questions/5")
    assert r.status_code == 200
    assert "How do closures work?" in r.text
    assert "They capture scope." in r.text
    assert sorted(fake_api.paths()) == [
        "GET /api/v1/questions/5",
        "GET /api/v1/questions/5/answers",
    ]
    assert all(c.headers["x-auth-token"] == "abc" for c in fake_api.calls)


def test_question_detail_fails_when_answers_fail(make_client, fake_api) -> None:
    fake_api.reply("GET", "questions/5", QUESTION_REPLY)
    fake_api.fail_transport("GET", "questions/5/answers")
    client = make_client()

    r = client.get("/questions/5")
    assert r.status_code == 502
    assert "How do closures work?" not in r.text


def test_question_detail_fails_when_question_is_refused(make_client, fake_api) -> None:
    fake_api.reply("GET", "questions/5", {"success": False, "message": "question not found"}, 404)
    fake_api.reply("GET", "questions/5/answers", ANSWERS_REPLY)
    client = make_client()

    r = client.get("/questions/5")
    assert r.status_code == 502
    assert "question not found" in r.text
    assert "They capture scope." not in r.text


def test_new_question_page_redirects_anonymous_visitors(make_client) -> None:
    client = make_client()

    r = client.get("/questions/new", follow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"] == "/"


def test_new_question_page_renders_for_signed_in_user(make_client) -> None:
    client = make_client(signed_in=True)

    r = client.get("/questions/new")
    assert r.status_code == 200
    assert 'name="title"' in r.text
    assert "Ada Lovelace" in r.text


def test_create_question_requires_session(make_client, fake_api) -> None:
    client = make_client()

    r = client.post(
        "/questions/new", data={"title": "t", "body": "b", "tags": "x"}, follow_redirects=False
    )
    assert r.status_code == 401
    assert fake_api.calls == []


def test_create_question_posts_and_redirects_home(make_client, fake_api) -> None:
    fake_api.reply("POST", "questions", {"success": True, "data": {"id": 10}}, 201)
    client = make_client(signed_in=True)

    r = client.post(
        "/questions/new",
        data={"title": "Title", "body": "Body", "tags": "python,web"},
        follow_redirects=False,
    )
    assert r.status_code == 303
    assert r.headers["location"] == "/"

    call = fake_api.calls[0]
    assert call.headers["x-auth-token"] == "abc"
    assert fake_api.json_body() == {
        "user_id": 1,
        "title": "Title",
        "body": "Body",
        "tags": "python,web",
    }


def test_create_question_failure_rerenders_with_message(make_client, fake_api) -> None:
    fake_api.reply("POST", "questions", {"success": False, "message": "title is required"}, 400)
    client = make_client(signed_in=True)

    r = client.post("/questions/new", data={"body": "Body"}, follow_redirects=False)
    assert r.status_code == 401
    assert "title is required" in r.text
    assert "location" not in r.headers


def test_create_answer_requires_session(make_client, fake_api) -> None:
    client = make_client()

    r = client.post("/questions/5/answers", data={"body": "hi"}, follow_redirects=False)
    assert r.status_code == 401
    assert fake_api.calls == []


def test_create_answer_completes_without_redirect(make_client, fake_api) -> None:
    fake_api.reply("POST", "questions/5/answers", {"success": True, "data": {"id": 2}}, 201)
    fake_api.reply("GET", "questions/5", QUESTION_REPLY)
    fake_api.reply("GET", "questions/5/answers", ANSWERS_REPLY)
    client = make_client(signed_in=True)

    r = client.post("/questions/5/answers", data={"body": "Use nonlocal."}, follow_redirects=False)
    assert r.status_code == 200
    assert "location" not in r.headers
    assert "How do closures work?" in r.text

    post = fake_api.calls[0]
    assert post.method == "POST"
    assert post.headers["x-auth-token"] == "abc"
    assert fake_api.json_body(0) == {"user_id": 1, "question_id": 5, "body": "Use nonlocal."}


def test_create_answer_failure_shows_message(make_client, fake_api) -> None:
    fake_api.reply("POST", "questions/5/answers", {"success": False, "message": "body too short"})
    fake_api.reply("GET", "questions/5", QUESTION_REPLY)
    fake_api.reply("GET", "questions/5/answers", ANSWERS_REPLY)
    client = make_client(signed_in=True)

    r = client.post("/questions/5/answers", data={"body": "x"})
    assert r.status_code == 401
    assert "body too short" in r.text


def test_question_detail_fails_when_answers_list_is_missing(make_client, fake_api) -> None:
    fake_api.reply("GET", "questions/5", QUESTION_REPLY)
    fake_api.reply("GET", "questions/5/answers", {"success": True, "data": {"pagination": {}}})
    client = make_client()

    r = client.get("/questions/5")
    assert r.status_code == 502
    assert "No answers yet." not in r.text
    assert "How do closures work?" not in r.text


def test_question_detail_fails_when_question_data_is_null(make_client, fake_api) -> None:
    fake_api.reply("GET", "questions/5", {"success": True, "data": None})
    fake_api.reply("GET", "questions/5/answers", ANSWERS_REPLY)
    client = make_client()

    r = client.get("/questions/5")
    assert r.status_code == 502
    assert "They capture scope." not in r.text


def test_null_answers_list_means_no_answers(make_client, fake_api) -> None:
    fake_api.reply("GET", "questions/5", QUESTION_REPLY)
    fake_api.reply(
        "GET", "questions/5/answers", {"success": True, "data": {"answers": None, "pagination": {}}}
    )
    client = make_client()

    r = client.get("/questions/5")
    assert r.status_code == 200
    assert "No answers yet." in r.text


def test_home_fails_when_questions_list_is_malformed(make_client, fake_api) -> None:
    fake_api.reply("GET", "questions", {"success": True, "data": {"questions": "nope"}})
    client = make_client()

    r = client.get("/")
    assert r.status_code == 502


def test_question_id_with_control_character_is_not_a_crash(make_client, fake_api) -> None:
    client = make_client()

    r = client.get("/questions/%00")
    assert r.status_code == 502
    assert "Internal server error" not in r.text
    assert fake_api.calls == []
