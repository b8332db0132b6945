"""Error boundary handling for the CLI entry point.

Every expected failure in stew is fatal. The boundary logs it once with
context and exits with code 1; unexpected exceptions keep their traceback.
"""

import functools
import logging
from collections.abc import Callable
from typing import Any

from stew.core.errors import StewError
from stew.core.logging_setup import LOGGER_NAME


def cli_error_boundary[T: Callable[..., Any]](func: T) -> T:
    """Decorator that turns StewError into a logged error and exit code 1.

    Example:
        @click.command()
        @cli_error_boundary
        def my_command():
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except StewError as e:
            logging.getLogger(LOGGER_NAME).error(
                "Exiting... error=%s (%s)", e, type(e).__name__
            )
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]
