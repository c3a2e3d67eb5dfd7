from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from qaweb.home import QAWebPaths

API_URL_ENV = "QAWEB_API_URL"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=5173, ge=1, le=65535)


class ApiConfig(BaseModel):
    """Where the Q&A REST API lives and how to talk to it."""

    base_url: str = Field(
        default="http://127.0.0.1:8090/api/v1",
        description="Absolute base URL; request paths are joined onto it.",
    )
    auth_header: str = Field(
        default="X-Auth-Token",
        description="Header carrying the session token on authenticated calls.",
    )
    logout_path: str = Field(default="auth/logout")
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout. None waits for the upstream indefinitely.",
    )


class SessionCookieConfig(BaseModel):
    name: str = Field(default="jwt")
    path: str = Field(default="/")
    secure: bool = Field(default=False)
    httponly: bool = Field(default=True)
    samesite: Literal["lax", "strict", "none"] = Field(default="lax")


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")
    level: LogLevel = Field(default="INFO")


class WebConfig(BaseModel):
    version: str = Field(default="1")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    session: SessionCookieConfig = Field(default_factory=SessionCookieConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_web_config(paths: QAWebPaths, environ: dict[str, str] | None = None) -> WebConfig:
    """Load config from ${QAWEB_HOME}/config/web.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    - QAWEB_API_URL, when set, wins over the file's api.base_url.
    """

    env = os.environ if environ is None else environ

    config_path = paths.web_config_path
    config = WebConfig()
    if config_path.exists():
        config = WebConfig.model_validate(_read_json(config_path))

    api_url = (env.get(API_URL_ENV) or "").strip()
    if api_url:
        updated_api = config.api.model_copy(update={"base_url": api_url})
        config = config.model_copy(update={"api": updated_api})

    return config


def write_web_config(paths: QAWebPaths, config: WebConfig) -> None:
    """Persist config to ${QAWEB_HOME}/config/web.json."""

    payload = config.model_dump(mode="json", exclude_none=True)
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    paths.web_config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
