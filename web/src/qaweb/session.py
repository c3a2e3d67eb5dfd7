from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from fastapi import Request
from pydantic import BaseModel, ConfigDict, ValidationError

from qaweb.config import SessionCookieConfig

logger = logging.getLogger(__name__)


class SessionUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class Session(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: SessionUser
    token: str


def encode_session_cookie(body: dict[str, Any]) -> str:
    """Encode a login response as a cookie-safe string.

    URL-safe base64 without padding keeps the value inside the cookie token
    alphabet, so it is never quoted on the wire.
    """

    raw = json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_session_cookie(value: str | None) -> dict[str, Any] | None:
    text = (value or "").strip().strip('"')
    if not text:
        return None
    try:
        raw = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return data


def load_session(value: str | None) -> Session | None:
    # The cookie carries no signature; whatever decodes is trusted as-is.
    data = decode_session_cookie(value)
    if data is None:
        if value:
            logger.debug("Ignoring undecodable session cookie")
        return None
    try:
        session = Session.model_validate(data)
    except ValidationError:
        logger.debug("Ignoring session cookie without user/token")
        return None
    if not session.token:
        return None
    return session


def resolve_user(session: Session | None) -> SessionUser | None:
    """Project the session onto the user fields the layout renders."""

    if session is None:
        return None
    user = session.user
    return SessionUser(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
    )


def _cookie_config(request: Request) -> SessionCookieConfig:
    config = getattr(request.app.state, "qaweb_config", None)
    return getattr(config, "session", None) or SessionCookieConfig()


def get_session(request: Request) -> Session | None:
    """FastAPI dependency: the session carried by this request's cookie, if any."""

    cookie = _cookie_config(request)
    return load_session(request.cookies.get(cookie.name))
