"""Shared logging helpers for shreconcile."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# libraries whose INFO output repeats what our own loggers report
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, debug: bool = False, force: bool = False) -> None:
    """Set up root logging for the command line.

    ``debug`` lowers the level to DEBUG, which is where records present in only
    one merge source are reported. Pass ``force=True`` to replace an earlier
    configuration, e.g. once ``--debug`` has been parsed.
    """

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if debug else logging.WARNING)
