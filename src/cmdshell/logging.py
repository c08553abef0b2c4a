"""Structured logging for cmdshell.

Configures structlog with context processors, output formatters,
and redaction of secrets that show up in dispatched command lines.
"""

import logging
import re
import sys
from pathlib import Path

import structlog

# Literal secrets and values following secret-like flags (-password x, -token=x)
_SENSITIVE_RE = re.compile(r"(sk-|key-|token-)[a-zA-Z0-9]{6,}", re.IGNORECASE)
_SECRET_FLAG_RE = re.compile(r"(-{1,2}(?:password|passwd|token|secret|key)[= ])(\S+)", re.IGNORECASE)


def redact_sensitive(logger: object, method_name: str, event_dict: dict) -> dict:
    """Structlog processor that redacts sensitive data."""
    for key, value in event_dict.items():
        if isinstance(value, str):
            value = _SECRET_FLAG_RE.sub(lambda m: m.group(1) + "***", value)
            event_dict[key] = _SENSITIVE_RE.sub(lambda m: m.group(1) + "***", value)
    return event_dict


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_sensitive,
    ]


def setup_logging(
    level: str = "warning",
    json_output: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure structlog for the shell.

    Args:
        level: Log level (debug, info, warning, error).
        json_output: If True, output JSON lines.
        log_file: If set, log to this file instead of stderr so the
            interactive prompt stays clean.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    shared_processors = _shared_processors()

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        stream=sys.stderr,
        force=True,
    )

    if log_file:
        handler = logging.FileHandler(str(log_file))
        handler.setLevel(log_level)
        logging.getLogger().handlers = [handler]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=log_file is None)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in logging.getLogger().handlers:
        handler.setFormatter(formatter)


def get_logger(module: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to a module name.

    Args:
        module: Module name (e.g., "session", "history").

    Returns:
        Bound structlog logger.
    """
    return structlog.get_logger(module=module)


def ensure_logging(level: str = "warning") -> None:
    """Give structlog a configuration unless the application already has one.

    If the root logger already has handlers they are left as they are and
    events reach them as plain rendered strings.
    """
    if structlog.is_configured():
        return
    if not logging.getLogger().handlers:
        setup_logging(level=level)
        return

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
