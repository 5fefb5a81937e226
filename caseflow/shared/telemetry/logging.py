"""Stdout logging with request context on every record.

``request_id`` and ``actor`` are copied from the request contextvars, so a
log line can be matched to the audit entries written by the same request.
"""

import logging
import sys

from caseflow.core.config import get_settings
from caseflow.shared.context import get_current_actor_id, get_request_id

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [req=%(request_id)s actor=%(actor)s] %(message)s"


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        record.actor = get_current_actor_id() or "-"
        return True


def setup_logging() -> None:
    """Route root logging to stdout; DEBUG when ``settings.debug`` else INFO."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(
        level=logging.DEBUG if get_settings().debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[handler],
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
