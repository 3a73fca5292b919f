from __future__ import annotations

import logging

from .config import settings

_NOISY_LOGGERS = ("httpx", "uvicorn", "uvicorn.error", "uvicorn.access", "aiosqlite")


def configure_logging(level: str | None = None) -> None:
    """Root logging setup for entry scripts. Safe to call more than once."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s:%(name)s:%(message)s",
    )

    # Quiet the usual offenders
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
