"""Structured logging event identifiers."""

from __future__ import annotations

from enum import Enum, auto
from typing import Any

from structlog.stdlib import BoundLogger

__all__ = ["LogEvents", "emit"]


class LogEvents(str, Enum):
    """Events emitted through :class:`UnifiedLogger`.

    Member names follow ``<COMPONENT>_<SUBJECT>_<OUTCOME>`` and are rendered as
    ``component.subject.outcome``; multi-word subjects become extra dotted
    segments.
    """

    @staticmethod
    def _generate_next_value_(name: str, start: int, count: int, last_values: list[Any]) -> str:
        component, *subject, outcome = name.lower().split("_")
        return ".".join((component, *(subject or ["event"]), outcome))

    CLI_RUN_START = auto()
    CLI_RUN_FINISH = auto()
    CLI_RUN_ERROR = auto()
    CONFIG_LOAD_FINISH = auto()
    MAPPINGS_LOAD_FINISH = auto()
    MAPPINGS_LOAD_ERROR = auto()
    MIGRATE_RUN_START = auto()
    MIGRATE_RUN_FINISH = auto()
    FINDER_LISTING_ERROR = auto()
    FINDER_DISPATCH_FINISH = auto()
    WORKER_THREAD_START = auto()
    WORKER_THREAD_STOP = auto()
    WORKER_THREAD_CRASH = auto()
    WORKER_FILE_REWRITTEN = auto()
    WORKER_FILE_FAILED = auto()


def emit(logger: BoundLogger, event: str | LogEvents, **fields: Any) -> None:
    """Log ``event`` at info level with its dotted name as the message."""

    message = event.value if isinstance(event, LogEvents) else event
    logger.info(message, **fields)
