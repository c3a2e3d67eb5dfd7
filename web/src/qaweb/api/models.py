from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

DEFAULT_FAILURE_MESSAGE = "Request failed"


class Envelope(BaseModel):
    """Response wrapper used by every Q&A API endpoint.

    Login replies put ``user`` and ``token`` next to ``success`` instead of
    under ``data``, so unknown keys are kept.
    """

    model_config = ConfigDict(extra="allow")

    success: bool = False
    data: Any | None = None
    message: Any | None = None


@dataclass(frozen=True)
class ApiOk:
    data: Any
    message: str | None
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ApiFailure:
    message: str
    body: dict[str, Any] = field(default_factory=dict)
    status_code: int | None = None


@dataclass(frozen=True)
class ApiTransportError:
    message: str
    cause: BaseException | None = None


ApiResult = ApiOk | ApiFailure | ApiTransportError


def normalize_message(raw: Any) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        return ", ".join(str(x) for x in raw)
    return str(raw)


def from_body(body: Any, *, status_code: int | None = None) -> ApiResult:
    """Classify a decoded JSON body."""

    if not isinstance(body, dict):
        return ApiTransportError(message="Malformed response from API")

    try:
        envelope = Envelope.model_validate(body)
    except ValidationError as exc:
        return ApiTransportError(message="Malformed response from API", cause=exc)

    message = normalize_message(envelope.message)
    if envelope.success is True:
        return ApiOk(data=envelope.data, message=message, body=body)
    return ApiFailure(
        message=message or DEFAULT_FAILURE_MESSAGE,
        body=body,
        status_code=status_code,
    )
