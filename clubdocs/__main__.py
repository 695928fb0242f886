"""Command-line entrypoint for running the clubdocs service."""

from __future__ import annotations

import uvicorn

from .config import get_settings
from .utils.logging import configure_logging


def main() -> None:
    """Launch the FastAPI application using configured host/port/log level."""

    configure_logging(get_settings().log_level)
    settings = get_settings()
    uvicorn.run(
        "clubdocs.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
