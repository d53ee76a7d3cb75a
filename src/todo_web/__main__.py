"""
Run the todo list server: `python -m todo_web`.

Configuration comes from the environment; see todo_web.settings.
"""
from __future__ import annotations

import sys

import structlog
import uvicorn

from .errors import ConfigurationError
from .logging_config import setup_logging
from .main import create_app
from .settings import get_settings


def main() -> int:
    setup_logging()
    log = structlog.get_logger("todo_web")
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        log.error("configuration_error", error=exc.message)
        return 1

    setup_logging(settings.log_env)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
