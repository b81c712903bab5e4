"""Logging utilities.

All loggers live below the ``dviwriter`` logger, which carries a
``NullHandler`` so library use stays silent unless the application configures
logging.  :func:`configure_logging` is what the CLI calls; it is idempotent.
"""

from __future__ import annotations

import logging
import sys

ROOT_LOGGER_NAME = "dviwriter"
_FORMAT = "%(levelname)s %(name)s: %(message)s"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class _CliHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stderr handler installed by :func:`configure_logging`."""


def get_logger(name: str) -> logging.Logger:
    """Return a logger for ``name`` placed under the package logger."""

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Route package logs to the current ``sys.stderr``.

    Repeated calls replace the handler installed by an earlier call, so at
    most one is attached.
    """

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for old in [h for h in logger.handlers if isinstance(h, _CliHandler)]:
        logger.removeHandler(old)
        old.close()
    handler = _CliHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger


__all__ = ["ROOT_LOGGER_NAME", "get_logger", "configure_logging"]
