from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from qaweb.api.client import ApiClient
from qaweb.api.models import ApiFailure, ApiOk, ApiResult, ApiTransportError
from qaweb.errors import PageLoadError, Unauthorized, UpstreamUnavailable
from qaweb.pages import FormFailure, Redirect, failure_payload
from qaweb.session import Session

logger = logging.getLogger(__name__)


def _token(session: Session | None) -> str | None:
    return session.token if session is not None else None


def _require_data(result: ApiResult, *, what: str) -> Any:
    if isinstance(result, ApiOk):
        return result.data
    if isinstance(result, ApiTransportError):
        logger.warning("Loading %s failed: %s", what, result.message)
        raise PageLoadError(result.message)
    logger.warning("API refused %s: %s", what, result.message)
    raise PageLoadError(result.message)


def _listing(data: Any, key: str) -> tuple[list[Any], Any]:
    # The API encodes an empty list as null, but the key itself is always sent.
    if not isinstance(data, dict) or key not in data:
        logger.warning("API reply has no %s list", key)
        raise PageLoadError(f"Unexpected {key} payload from API")
    items = data[key]
    if items is None:
        items = []
    if not isinstance(items, list):
        logger.warning("API reply has a malformed %s list", key)
        raise PageLoadError(f"Unexpected {key} payload from API")
    return items, data.get("pagination")


async def load_question_list(api: ApiClient) -> dict[str, Any]:
    data = _require_data(await api.get("questions"), what="questions")
    questions, pagination = _listing(data, "questions")
    return {"questions": questions, "pagination": pagination}


async def load_question_detail(
    api: ApiClient, question_id: str, session: Session | None
) -> dict[str, Any]:
    token = _token(session)
    question_result, answers_result = await asyncio.gather(
        api.get(f"questions/{question_id}", token),
        api.get(f"questions/{question_id}/answers", token),
    )

    # Both fetches must succeed; a page with a question but no answers is not rendered.
    question = _require_data(question_result, what=f"question {question_id}")
    if not isinstance(question, dict):
        logger.warning("API reply for question %s carries no question", question_id)
        raise PageLoadError("Unexpected question payload from API")
    answers_data = _require_data(answers_result, what=f"answers for question {question_id}")
    answers, pagination = _listing(answers_data, "answers")

    return {"question": question, "answers": answers, "pagination": pagination}


def load_new_question(session: Session | None) -> Redirect | None:
    if session is None:
        return Redirect("/", status_code=307)
    return None


async def create_question(
    api: ApiClient, session: Session | None, form: Mapping[str, Any]
) -> Redirect | FormFailure:
    if session is None:
        raise Unauthorized()

    result = await api.post(
        "questions",
        {
            "user_id": session.user.id,
            "title": form.get("title"),
            "body": form.get("body"),
            "tags": form.get("tags"),
        },
        session.token,
    )

    if isinstance(result, ApiTransportError):
        raise UpstreamUnavailable(result.message)
    if isinstance(result, ApiFailure):
        return FormFailure(failure_payload(result))

    logger.info("User %s created a question", session.user.id)
    return Redirect("/", status_code=303)


def _parse_question_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise PageLoadError("Question not found", status_code=404) from None


async def create_answer(
    api: ApiClient,
    session: Session | None,
    question_id: str,
    form: Mapping[str, Any],
) -> FormFailure | None:
    """Post an answer. Success completes without a redirect."""

    if session is None:
        raise Unauthorized()

    result = await api.post(
        f"questions/{question_id}/answers",
        {
            "user_id": session.user.id,
            "question_id": _parse_question_id(question_id),
            "body": form.get("body"),
        },
        session.token,
    )

    if isinstance(result, ApiTransportError):
        raise UpstreamUnavailable(result.message)
    if isinstance(result, ApiFailure):
        return FormFailure(failure_payload(result))
    return None
