"""Logging setup.

Records carry the session of the store that emitted them and the edit it was applying, so the
output of several stores (one per CLI call, one per API process) can be told apart.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
from collections.abc import Iterator
from typing import Any

from rich.logging import RichHandler

_session_var: contextvars.ContextVar[str] = contextvars.ContextVar("treesync_session", default="-")
_action_var: contextvars.ContextVar[str] = contextvars.ContextVar("treesync_action", default="-")

# RichHandler renders time and level itself.
_FORMAT = "[%(session)s %(action)s] %(name)s: %(message)s"


class _SessionFilter(logging.Filter):
    """Stamp the bound session and action on each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.session = _session_var.get()  # type: ignore[attr-defined]
        record.action = _action_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def session_context(*, session: str, action: str) -> Iterator[None]:
    """Bind `session` and `action` to every record logged inside the block."""

    session_token = _session_var.set(session)
    action_token = _action_var.set(action)
    try:
        yield
    finally:
        _action_var.reset(action_token)
        _session_var.reset(session_token)


def configure_logging(level: str = "INFO", *, show_locals: bool = False) -> None:
    """Install a single RichHandler on the root logger.

    The CLI and the API factory both call this; a repeated call replaces the handler instead
    of stacking another one.

    Args:
        level: Logging level name.
        show_locals: Include local variables in rich tracebacks.
    """

    root = logging.getLogger()
    for old in [h for h in root.handlers if isinstance(h, RichHandler)]:
        root.removeHandler(old)

    handler = RichHandler(rich_tracebacks=True, tracebacks_show_locals=show_locals, show_path=False)
    handler.addFilter(_SessionFilter())
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log the active exception with structured context appended."""

    if context:
        logger.exception("%s | %s", msg, " ".join(f"{k}={v}" for k, v in context.items()))
    else:
        logger.exception("%s", msg)
