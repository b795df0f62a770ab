"""Structured logging for zhishi.

structlog is configured once on import from ``ZHISHI_LOG_*`` settings:
pretty console output by default, JSON when ``ZHISHI_LOG_JSON_OUTPUT``
is set. Model output can be arbitrarily long, so string values in log
entries are shortened before rendering.

Per-operation context (session id, card id, feed token) is bound with
``log_context`` and merged into every entry logged inside it.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

from zhishi.config import LoggingSettings

__all__ = [
    "configure_logging",
    "get_logger",
    "log_context",
    "truncate_long_values",
]

# SDK and transport chatter stays at WARNING and above
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "redis")


def truncate_long_values(max_chars: int) -> structlog.typing.Processor:
    """Build a processor that cuts string values longer than max_chars.

    The event name itself is never cut.
    """

    def processor(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> EventDict:
        for key, value in event_dict.items():
            if key != "event" and isinstance(value, str) and len(value) > max_chars:
                event_dict[key] = f"{value[:max_chars]}...(+{len(value) - max_chars} chars)"
        return event_dict

    return processor


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(
    level: int | str | None = None,
    json_output: bool | None = None,
    add_timestamp: bool | None = None,
    settings: LoggingSettings | None = None,
) -> None:
    """Configure structlog for the application.

    Explicit arguments win over settings; settings default to the
    ``ZHISHI_LOG_*`` environment.

    Args:
        level: Logging level as a number or name such as "DEBUG"
        json_output: If True, output JSON; if False, pretty console output
        add_timestamp: If True, add ISO timestamp to log entries
        settings: Logging settings to read defaults from
    """
    settings = settings or LoggingSettings()
    level = _resolve_level(settings.level if level is None else level)
    json_output = settings.json_output if json_output is None else json_output
    add_timestamp = settings.add_timestamp if add_timestamp is None else add_timestamp

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        truncate_long_values(settings.max_value_chars),
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_output:
        # Card text is mostly Chinese; keep it readable in JSON logs
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # basicConfig is a no-op once handlers exist; reconfiguring must still apply
    logging.getLogger().setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Logger name (usually __name__ of the calling module)

    Returns:
        Configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind values to every log entry emitted inside the block.

    Values that are None are not bound. Bindings are restored on exit,
    including across awaits in the same task.
    """
    bound = {key: value for key, value in values.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


_configured = False


def _ensure_configured() -> None:
    """Ensure logging is configured with defaults."""
    global _configured
    if not _configured:
        configure_logging()
        _configured = True


_ensure_configured()
