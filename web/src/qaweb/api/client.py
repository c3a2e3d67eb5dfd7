"""Thin async wrapper around the Q&A REST API.

Every call resolves to an ``ApiResult``; transport and decoding problems come
back as ``ApiTransportError`` rather than being raised, so handlers branch on
the result type instead of guessing at the body's shape.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from qaweb.api.models import ApiResult, ApiTransportError, from_body
from qaweb.config import ApiConfig

logger = logging.getLogger(__name__)


def build_async_client(
    config: ApiConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared ``httpx.AsyncClient`` for API calls.

    ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    base_url = config.base_url.rstrip("/") + "/"
    timeout = (
        httpx.Timeout(config.timeout_seconds) if config.timeout_seconds is not None else None
    )
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        headers={"Accept": "application/json"},
        transport=transport,
    )


class ApiClient:
    def __init__(self, http: httpx.AsyncClient, *, auth_header: str = "X-Auth-Token") -> None:
        self._http = http
        self._auth_header = auth_header

    @classmethod
    def from_config(
        cls,
        config: ApiConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ApiClient:
        return cls(build_async_client(config, transport=transport), auth_header=config.auth_header)

    async def send(
        self,
        method: str,
        path: str,
        data: Any | None = None,
        token: str | None = None,
    ) -> ApiResult:
        headers: dict[str, str] = {}
        content: bytes | None = None

        if data is not None:
            headers["Content-Type"] = "application/json"
            content = json.dumps(data).encode("utf-8")

        if token:
            headers[self._auth_header] = token

        url = path.lstrip("/")
        try:
            response = await self._http.request(method, url, content=content, headers=headers)
        except httpx.InvalidURL as exc:
            logger.warning("%s %r is not a valid API URL: %s", method, url, exc)
            return ApiTransportError(message="Invalid API request", cause=exc)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return ApiTransportError(message="Could not reach the API", cause=exc)

        try:
            body = response.json()
        except ValueError as exc:
            logger.warning(
                "%s %s returned a non-JSON body (status %s)", method, url, response.status_code
            )
            return ApiTransportError(message="Invalid response from API", cause=exc)

        return from_body(body, status_code=response.status_code)

    async def get(self, path: str, token: str | None = None) -> ApiResult:
        return await self.send("GET", path, token=token)

    async def delete(self, path: str, token: str | None = None) -> ApiResult:
        return await self.send("DELETE", path, token=token)

    async def post(self, path: str, data: Any, token: str | None = None) -> ApiResult:
        return await self.send("POST", path, data=data, token=token)

    async def put(self, path: str, data: Any, token: str | None = None) -> ApiResult:
        return await self.send("PUT", path, data=data, token=token)

    async def aclose(self) -> None:
        await self._http.aclose()
