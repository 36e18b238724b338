"""Logging for gitops-demo.

Log events go to stderr next to the demo's own progress output, so the
default level is warning and ``-v``/``-vv`` open it up. Events can also be
written to a file and rendered as JSON for CI runs.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Any

import structlog

VERBOSITY_LEVELS = {0: "warning", 1: "info"}

SECRET_EVENT_KEYS = frozenset({"token", "git_token", "password"})
URL_CREDENTIALS = re.compile(r"(https?://[^\s:/@]+:)[^\s@]+@")


def level_for_verbosity(verbose: int) -> str:
    """Map a -v count to a log level name."""
    return VERBOSITY_LEVELS.get(verbose, "debug")


def mask_secrets(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor hiding tokens in event fields and in URLs."""
    for key, value in event_dict.items():
        if key in SECRET_EVENT_KEYS and value:
            event_dict[key] = "****"
        elif isinstance(value, str) and "@" in value:
            event_dict[key] = URL_CREDENTIALS.sub(r"\1****@", value)
    return event_dict


def configure_logging(
    level: str = "warning",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Set up stdlib logging and structlog for one CLI invocation.

    Args:
        level: Log level name.
        log_file: Also write events to this file.
        json_output: Render events as JSON instead of console lines.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(str(log_file)))
    logging.basicConfig(level=log_level, handlers=handlers, format="%(message)s", force=True)

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=not log_file and sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            mask_secrets,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
