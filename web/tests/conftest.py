from __future__ import annotations

import copy
import json
from collections.abc import Callable, Iterator
from contextlib import ExitStack
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from qaweb.app import create_app
from qaweb.session import encode_session_cookie

API_PREFIX = "/api/v1/"

LOGIN_REPLY: dict[str, Any] = {
    "success": True,
    "user": {"id": 1, "first_name": "Ada", "last_name": "Lovelace", "email": "a@b.com"},
    "token": "abc",
}


class FakeApi:
    """Scripted stand-in for the Q&A REST API, mounted as an httpx transport."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[httpx.Request] = []

    def reply(self, method: str, path: str, body: Any, status_code: int = 200) -> None:
        self.routes[(method, path)] = (status_code, body)

    def fail_transport(self, method: str, path: str) -> None:
        self.routes[(method, path)] = httpx.ConnectError

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX) :]

        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"success": False, "message": "not found"})
        if route is httpx.ConnectError:
            raise httpx.ConnectError("connection refused", request=request)

        status_code, body = route
        if isinstance(body, (bytes, str)):
            return httpx.Response(status_code, content=body)
        return httpx.Response(status_code, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.calls[index].content)

    def paths(self) -> list[str]:
        return [f"{c.method} {c.url.path}" for c in self.calls]


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def login_reply() -> dict[str, Any]:
    return copy.deepcopy(LOGIN_REPLY)


@pytest.fixture
def make_client(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fake_api: FakeApi
) -> Iterator[Callable[..., TestClient]]:
    monkeypatch.setenv("QAWEB_HOME", str(tmp_path))
    monkeypatch.delenv("QAWEB_API_URL", raising=False)

    with ExitStack() as stack:

        def _make(*, signed_in: bool = False) -> TestClient:
            client = stack.enter_context(TestClient(create_app(transport=fake_api.transport())))
            if signed_in:
                client.cookies.set("jwt", encode_session_cookie(LOGIN_REPLY))
            return client

        yield _make
