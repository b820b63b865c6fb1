"""Logging setup shared by the API process and migrations."""

from __future__ import annotations

import logging


def configure_logging(level: str | int = logging.INFO, *, force: bool = False) -> None:
    """Initialise the root logger once.

    ``level`` accepts a level name from settings (``"INFO"``) or a numeric level.
    Pass ``force=True`` to reconfigure during tests.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    # SQL echo is controlled by settings.DEBUG, not the root level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
