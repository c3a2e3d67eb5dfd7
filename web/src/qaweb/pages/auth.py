from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from qaweb.api.client import ApiClient
from qaweb.api.models import ApiFailure, ApiTransportError
from qaweb.errors import PageLoadError, UpstreamUnavailable
from qaweb.pages import FormFailure, LoginSuccess, LogoutOutcome, Redirect, failure_payload
from qaweb.session import Session, encode_session_cookie

logger = logging.getLogger(__name__)

LOGIN_URL = "/auth/login"

RegisterVariant = Literal["auth", "legacy"]


def redirect_if_signed_in(session: Session | None) -> Redirect | None:
    """Guard for pages only anonymous visitors should see (login, register)."""

    if session is not None:
        return Redirect("/", status_code=307)
    return None


async def register(
    api: ApiClient, form: Mapping[str, Any], *, variant: RegisterVariant
) -> Redirect | FormFailure:
    """Create an account.

    The two register pages disagree on the confirmation field name, on how
    errors are shaped, and on where to go next; both are kept as they are.
    """

    payload: dict[str, Any] = {
        "first_name": form.get("first_name"),
        "last_name": form.get("last_name"),
        "email": form.get("email"),
        "password": form.get("password"),
    }
    if variant == "auth":
        payload["password_confirm"] = form.get("password_confirm")
    else:
        payload["password_confirmation"] = form.get("password_confirmation")

    result = await api.post("users", payload)

    if isinstance(result, ApiTransportError):
        raise UpstreamUnavailable(result.message)
    if isinstance(result, ApiFailure):
        if variant == "auth":
            return FormFailure({"errors": [result.message]})
        return FormFailure(failure_payload(result))

    logger.info("Registered a new account")
    if variant == "auth":
        return Redirect(LOGIN_URL, status_code=303)
    return Redirect("/login", status_code=303)


async def login(api: ApiClient, form: Mapping[str, Any]) -> LoginSuccess | FormFailure:
    result = await api.post(
        "users/login",
        {
            "email": form.get("email"),
            "password": form.get("password"),
            "remember": form.get("remember") == "on",
        },
    )

    if isinstance(result, ApiTransportError):
        raise UpstreamUnavailable(result.message)
    if isinstance(result, ApiFailure):
        logger.info("Login refused: %s", result.message)
        return FormFailure(failure_payload(result))

    # The whole login reply (user + token) becomes the session cookie.
    return LoginSuccess(
        cookie_value=encode_session_cookie(result.body),
        redirect=Redirect("/", status_code=303),
    )


async def logout(
    api: ApiClient, session: Session | None, *, logout_path: str = "auth/logout"
) -> Redirect | LogoutOutcome:
    if session is None:
        return Redirect(LOGIN_URL, status_code=307)

    result = await api.delete(logout_path, session.token)

    if isinstance(result, ApiTransportError):
        raise UpstreamUnavailable(result.message)
    if isinstance(result, ApiFailure):
        raise PageLoadError(result.message, status_code=401)

    logger.info("User %s logged out", session.user.id)
    return LogoutOutcome(redirect=Redirect(LOGIN_URL, status_code=307))
