"""Logging setup for adapter processes.

stdout carries protocol data only, so every log record goes to stderr in a
``[LEVEL] message`` format the runtime can forward verbatim.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "nexus.adapter"
LOG_FORMAT = "[%(levelname)s] %(message)s"


class _StderrHandler(logging.StreamHandler):
    """Marker subclass so repeated configuration replaces the handler."""


def configure_logging(
    verbose: bool = False,
    *,
    stream: TextIO | None = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """Route SDK logging to stderr.

    Calling this again replaces the handler installed by the previous call,
    so tests and long-lived hosts can reconfigure freely.

    Args:
        verbose: Enable DEBUG records (INFO otherwise)
        stream: Destination stream (defaults to ``sys.stderr``)
        name: Logger to configure

    Returns:
        The configured logger
    """
    log = logging.getLogger(name)
    for handler in list(log.handlers):
        if isinstance(handler, _StderrHandler):
            log.removeHandler(handler)

    handler = _StderrHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    log.setLevel(logging.DEBUG if verbose else logging.INFO)
    log.propagate = False
    return log
