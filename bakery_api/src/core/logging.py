from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Per-request values read by the log filter and by audit records.
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)
client_ip_var: ContextVar[Optional[str]] = ContextVar("client_ip", default=None)
user_agent_var: ContextVar[Optional[str]] = ContextVar("user_agent", default=None)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | user=%(user_id)s | %(message)s"


class LoggingContextFilter(logging.Filter):
    """Copy the correlation id and authenticated user id onto each record ('-' when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.correlation_id = correlation_id_var.get() or "-"
        record.user_id = user_id_var.get() or "-"
        return True


# PUBLIC_INTERFACE
@contextmanager
def request_context(
    correlation_id: str, client_ip: Optional[str] = None, user_agent: Optional[str] = None
) -> Iterator[None]:
    """
    Bind request metadata to the current context for the duration of a request.

    The user id starts empty and is filled in by the auth dependency once the
    caller is known.
    """
    tokens = [
        (correlation_id_var, correlation_id_var.set(correlation_id)),
        (client_ip_var, client_ip_var.set(client_ip)),
        (user_agent_var, user_agent_var.set(user_agent)),
        (user_id_var, user_id_var.set(None)),
    ]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


# PUBLIC_INTERFACE
def configure_logging(level: str | int = logging.INFO, sql_level: str | int = logging.WARNING) -> None:
    """Send all logs to stdout in one pipe-separated format, replacing existing root handlers."""
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.addFilter(LoggingContextFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    logging.getLogger("sqlalchemy.engine").setLevel(sql_level.upper() if isinstance(sql_level, str) else sql_level)
