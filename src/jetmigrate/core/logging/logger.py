"""Structured logging setup shared by the CLI, the runner and the matcher threads.

Records are rendered by structlog and written through a stdlib handler on
stderr; stdout belongs to the run report.
"""
from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping, Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final

import structlog
from structlog.contextvars import bound_contextvars, clear_contextvars
from structlog.stdlib import BoundLogger

__all__ = [
    "LogFormat",
    "LogConfig",
    "MANDATORY_FIELDS",
    "configure_logging",
    "UnifiedLogger",
]


class LogFormat(str, Enum):
    """Renderer used for log records."""

    JSON = "json"
    KEY_VALUE = "key_value"


MANDATORY_FIELDS: Final[Sequence[str]] = ("run_id", "component")
"""Context every record is expected to carry; absent keys are listed in ``missing_context``."""

_ROOT_LOGGER_NAME: Final[str] = "jetmigrate"
_KEY_VALUE_ORDER: Final[Sequence[str]] = ("timestamp", "level", "component", "run_id", "message")


@dataclass(frozen=True, slots=True)
class LogConfig:
    level: int | str = logging.WARNING
    format: LogFormat = LogFormat.KEY_VALUE


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    try:
        return logging.getLevelNamesMapping()[level.upper()]
    except KeyError:
        raise ValueError(f"Unsupported log level: {level}") from None


def _flag_missing_context(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    missing = [name for name in MANDATORY_FIELDS if name not in event_dict]
    if missing:
        event_dict["missing_context"] = missing
    return event_dict


def _event_to_text(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    event = event_dict.get("event")
    if isinstance(event, Enum):
        event_dict["event"] = str(event.value)
    return event_dict


def _pre_chain() -> list[Any]:
    """Processors applied to structlog and foreign stdlib records alike."""

    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        _flag_missing_context,
        _event_to_text,
        structlog.processors.EventRenamer("message"),
        structlog.processors.CallsiteParameterAdder(
            parameters=(
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.THREAD_NAME,
            ),
            additional_ignores=["jetmigrate.core.logging"],
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(config: LogConfig | None = None) -> None:
    """(Re)install the stderr handler and the structlog pipeline."""

    cfg = config or LogConfig()
    if LogFormat(cfg.format) is LogFormat.JSON:
        renderer: Any = structlog.processors.JSONRenderer(sort_keys=True, ensure_ascii=False)
    else:
        renderer = structlog.processors.KeyValueRenderer(key_order=_KEY_VALUE_ORDER, drop_missing=True)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    logging.basicConfig(handlers=[handler], level=_level_number(cfg.level), force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_pre_chain(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class UnifiedLogger:
    """Single entry point for configuring, obtaining and scoping loggers."""

    @staticmethod
    def configure(config: LogConfig | None = None) -> None:
        configure_logging(config)

    @staticmethod
    def get(name: str | None = None) -> BoundLogger:
        return structlog.stdlib.get_logger(name or _ROOT_LOGGER_NAME)

    @staticmethod
    def reset() -> None:
        clear_contextvars()

    @staticmethod
    def scoped(**context: Any) -> AbstractContextManager[Any]:
        """Bind ``context`` for the duration of a ``with`` block.

        Values shadowed by the block are restored on exit. Worker threads start
        from a copy of the coordinator's context and bind their own
        ``component`` on top of it.
        """

        return bound_contextvars(**context)
