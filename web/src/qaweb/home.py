from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

HOME_ENV = "QAWEB_HOME"


@dataclass(frozen=True)
class QAWebPaths:
    home: Path
    logs_dir: Path
    config_dir: Path

    @property
    def web_config_path(self) -> Path:
        return self.config_dir / "web.json"

    @property
    def log_path(self) -> Path:
        return self.logs_dir / "web.log"


def resolve_qaweb_home(environ: dict[str, str] | None = None) -> Path:
    """``$QAWEB_HOME`` (relative to the user's home dir if not absolute), else ``~/.qaweb``."""

    env = os.environ if environ is None else environ
    raw = (env.get(HOME_ENV) or "").strip()
    if not raw:
        return (Path.home() / ".qaweb").resolve()
    return (Path.home() / Path(raw).expanduser()).resolve()


def ensure_qaweb_layout(home: Path) -> QAWebPaths:
    paths = QAWebPaths(home=home, logs_dir=home / "logs", config_dir=home / "config")
    for path in (paths.logs_dir, paths.config_dir):
        path.mkdir(parents=True, exist_ok=True)
    return paths
