from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from qaweb.api.client import ApiClient
from qaweb.config import SessionCookieConfig, WebConfig
from qaweb.pages import FormFailure, Redirect
from qaweb.pages.auth import RegisterVariant, login, logout, redirect_if_signed_in, register
from qaweb.pages.questions import (
    create_answer,
    create_question,
    load_new_question,
    load_question_detail,
    load_question_list,
)
from qaweb.session import Session, get_session, resolve_user

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["ui"])

SessionDep = Depends(get_session)


def _get_api(request: Request) -> ApiClient:
    api = getattr(request.app.state, "api_client", None)
    if api is None:
        raise HTTPException(status_code=500, detail="API client not initialized")
    return api


def _get_config(request: Request) -> WebConfig:
    config = getattr(request.app.state, "qaweb_config", None)
    return config if config is not None else WebConfig()


def _cookie_config(request: Request) -> SessionCookieConfig:
    return _get_config(request).session


def render(
    request: Request,
    name: str,
    session: Session | None,
    context: dict[str, Any],
    *,
    status_code: int = 200,
) -> HTMLResponse:
    ctx = {"user": resolve_user(session), **context}
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def _redirect(outcome: Redirect) -> RedirectResponse:
    return RedirectResponse(url=outcome.url, status_code=outcome.status_code)


def _failure_context(failure: FormFailure) -> dict[str, Any]:
    return {"form": failure.payload, "errors": failure.errors}


@router.get("/", response_class=HTMLResponse)
async def ui_home(request: Request, session: Session | None = SessionDep) -> HTMLResponse:
    data = await load_question_list(_get_api(request))
    return render(request, "index.html", session, {"title": "Questions", **data})


@router.get("/questions/new", response_model=None)
async def ui_question_new(request: Request, session: Session | None = SessionDep) -> Response:
    guard = load_new_question(session)
    if guard is not None:
        return _redirect(guard)
    return render(request, "question_new.html", session, {"title": "Ask a question"})


@router.post("/questions/new", response_model=None)
async def ui_question_new_post(
    request: Request,
    session: Session | None = SessionDep,
    title: str | None = Form(default=None),
    body: str | None = Form(default=None),
    tags: str | None = Form(default=None),
) -> Response:
    outcome = await create_question(
        _get_api(request), session, {"title": title, "body": body, "tags": tags}
    )
    if isinstance(outcome, FormFailure):
        return render(
            request,
            "question_new.html",
            session,
            {
                "title": "Ask a question",
                "values": {"title": title, "body": body, "tags": tags},
                **_failure_context(outcome),
            },
            status_code=outcome.status_code,
        )
    return _redirect(outcome)


@router.get("/questions/{question_id}", response_class=HTMLResponse)
async def ui_question_detail(
    request: Request, question_id: str, session: Session | None = SessionDep
) -> HTMLResponse:
    data = await load_question_detail(_get_api(request), question_id, session)
    return render(request, "question_detail.html", session, {"title": "Question", **data})


@router.post("/questions/{question_id}/answers", response_class=HTMLResponse)
async def ui_answer_create(
    request: Request,
    question_id: str,
    session: Session | None = SessionDep,
    body: str | None = Form(default=None),
) -> HTMLResponse:
    api = _get_api(request)
    outcome = await create_answer(api, session, question_id, {"body": body})

    # No redirect on success: the page is rendered again with fresh data.
    data = await load_question_detail(api, question_id, session)
    ctx: dict[str, Any] = {"title": "Question", **data}
    status_code = 200
    if isinstance(outcome, FormFailure):
        ctx.update(_failure_context(outcome))
        ctx["values"] = {"body": body}
        status_code = outcome.status_code
    return render(request, "question_detail.html", session, ctx, status_code=status_code)


@router.get("/login", response_model=None)
@router.get("/auth/login", response_model=None)
async def ui_login(request: Request, session: Session | None = SessionDep) -> Response:
    guard = redirect_if_signed_in(session)
    if guard is not None:
        return _redirect(guard)
    return render(request, "login.html", session, {"title": "Log in"})


@router.post("/login", response_model=None)
@router.post("/auth/login", response_model=None)
async def ui_login_post(
    request: Request,
    session: Session | None = SessionDep,
    email: str | None = Form(default=None),
    password: str | None = Form(default=None),
    remember: str | None = Form(default=None),
) -> Response:
    outcome = await login(
        _get_api(request), {"email": email, "password": password, "remember": remember}
    )
    if isinstance(outcome, FormFailure):
        return render(
            request,
            "login.html",
            session,
            {"title": "Log in", "values": {"email": email}, **_failure_context(outcome)},
            status_code=outcome.status_code,
        )

    cookie = _cookie_config(request)
    resp = _redirect(outcome.redirect)
    # No max_age/expires: the cookie lives as long as the browser session.
    resp.set_cookie(
        cookie.name,
        outcome.cookie_value,
        path=cookie.path,
        secure=cookie.secure,
        httponly=cookie.httponly,
        samesite=cookie.samesite,
    )
    return resp


@router.get("/auth/logout", response_model=None)
async def ui_logout(request: Request, session: Session | None = SessionDep) -> Response:
    outcome = await logout(
        _get_api(request), session, logout_path=_get_config(request).api.logout_path
    )
    if isinstance(outcome, Redirect):
        return _redirect(outcome)

    cookie = _cookie_config(request)
    resp = _redirect(outcome.redirect)
    resp.delete_cookie(cookie.name, path=cookie.path)
    return resp


def _register_context(variant: RegisterVariant) -> dict[str, Any]:
    return {
        "title": "Register",
        "variant": variant,
        "confirm_field": "password_confirm" if variant == "auth" else "password_confirmation",
    }


async def _register_page(
    request: Request, session: Session | None, variant: RegisterVariant
) -> Response:
    guard = redirect_if_signed_in(session)
    if guard is not None:
        return _redirect(guard)
    return render(request, "register.html", session, _register_context(variant))


async def _register_submit(
    request: Request,
    session: Session | None,
    variant: RegisterVariant,
    fields: dict[str, str | None],
) -> Response:
    outcome = await register(_get_api(request), fields, variant=variant)
    if isinstance(outcome, FormFailure):
        values = {k: v for k, v in fields.items() if not k.startswith("password")}
        return render(
            request,
            "register.html",
            session,
            {**_register_context(variant), "values": values, **_failure_context(outcome)},
            status_code=outcome.status_code,
        )
    return _redirect(outcome)


@router.get("/register", response_model=None)
async def ui_register(request: Request, session: Session | None = SessionDep) -> Response:
    return await _register_page(request, session, "legacy")


@router.post("/register", response_model=None)
async def ui_register_post(
    request: Request,
    session: Session | None = SessionDep,
    first_name: str | None = Form(default=None),
    last_name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    password: str | None = Form(default=None),
    password_confirmation: str | None = Form(default=None),
) -> Response:
    fields = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "password": password,
        "password_confirmation": password_confirmation,
    }
    return await _register_submit(request, session, "legacy", fields)


@router.get("/auth/register", response_model=None)
async def ui_auth_register(request: Request, session: Session | None = SessionDep) -> Response:
    return await _register_page(request, session, "auth")


@router.post("/auth/register", response_model=None)
async def ui_auth_register_post(
    request: Request,
    session: Session | None = SessionDep,
    first_name: str | None = Form(default=None),
    last_name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    password: str | None = Form(default=None),
    password_confirm: str | None = Form(default=None),
) -> Response:
    fields = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "password": password,
        "password_confirm": password_confirm,
    }
    return await _register_submit(request, session, "auth", fields)
