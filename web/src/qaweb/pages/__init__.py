"""Page load and form action handlers.

Handlers take the API client and the request's ``Session`` explicitly and
return an outcome; the UI router turns outcomes into HTTP responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from qaweb.api.models import ApiFailure

# Failed form submissions are re-rendered with 401.
FORM_FAILURE_STATUS = 401


@dataclass(frozen=True)
class Redirect:
    url: str
    status_code: int = 303


@dataclass(frozen=True)
class FormFailure:
    payload: dict[str, Any] = field(default_factory=dict)
    status_code: int = FORM_FAILURE_STATUS

    @property
    def errors(self) -> list[str]:
        raw = self.payload.get("errors")
        if isinstance(raw, list):
            return [str(x) for x in raw]
        message = self.payload.get("message")
        if isinstance(message, list):
            return [str(x) for x in message]
        if message:
            return [str(message)]
        return []


@dataclass(frozen=True)
class LoginSuccess:
    cookie_value: str
    redirect: Redirect


@dataclass(frozen=True)
class LogoutOutcome:
    redirect: Redirect


def failure_payload(result: ApiFailure) -> dict[str, Any]:
    """The API's reply, message untouched, for re-rendering a form."""

    payload = dict(result.body)
    payload.setdefault("message", result.message)
    return payload
