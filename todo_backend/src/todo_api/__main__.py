"""Serve the application with uvicorn on HOST:PORT from the environment."""

from __future__ import annotations

import logging

import uvicorn

from .logging_utils import configure_logging
from .settings import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Listening on %s:%s", settings.host, settings.port)
    uvicorn.run(
        "todo_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
