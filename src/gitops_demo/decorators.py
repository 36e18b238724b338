"""Command decorators.

This module turns demo errors into the CLI's error output and hands the
loaded configuration to each command.
"""

from collections.abc import Callable
from functools import wraps

import click

from .config import DemoConfig
from .errors import DemoError
from .formatters import print_error
from .shared.logging import get_logger

logger = get_logger(__name__)


def handles_demo_errors(func: Callable) -> Callable:
    """Decorator that prints a DemoError with its hint and exits 1.

    The first hard failure ends the command; later steps never run.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DemoError as e:
            logger.debug("command failed", error=type(e).__name__, message=e.message)
            print_error(str(e), e.hint)
            raise SystemExit(1) from e

    return wrapper


def pass_config(func: Callable) -> Callable:
    """Decorator that passes the DemoConfig loaded by the root group."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        config: DemoConfig = ctx.obj["config"]
        return func(config, *args, **kwargs)

    return wrapper
