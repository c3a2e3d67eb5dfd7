from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import uvicorn

from qaweb.app import LOG_FORMAT, create_app
from qaweb.config import load_web_config
from qaweb.home import ensure_qaweb_layout, resolve_qaweb_home


def main() -> None:
    home = resolve_qaweb_home()
    paths = ensure_qaweb_layout(home)
    config = load_web_config(paths)

    logging.basicConfig(
        level=config.logging.level,
        format=LOG_FORMAT,
        handlers=[
            RotatingFileHandler(
                paths.log_path,
                maxBytes=config.logging.max_size_mb * 1024 * 1024,
                backupCount=config.logging.backup_count,
                encoding="utf-8",
            ),
            logging.StreamHandler(),
        ],
    )

    host = os.environ.get("QAWEB_BIND") or config.network.bind_host

    env_port = os.environ.get("QAWEB_PORT")
    port = int(env_port) if env_port else config.network.port

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
