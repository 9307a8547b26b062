"""Logging setup for a qfu run."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import LogFileError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    verbose: bool = False,
    silent: bool = False,
    log_file: Path | None = None,
) -> list[logging.Handler]:
    """Setup logging configuration.

    Messages go to stdout at INFO level, or DEBUG if verbose. When silent
    nothing is written to stdout, not even errors. A log file, if given,
    always receives DEBUG messages.

    Returns:
        The handlers installed on the root logger

    Raises:
        LogFileError: If the log file cannot be opened
    """
    handlers: list[logging.Handler] = []
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    if not silent:
        stream = logging.StreamHandler(sys.stdout)
        stream.setLevel(logging.DEBUG if verbose else logging.INFO)
        stream.setFormatter(formatter)
        handlers.append(stream)

    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file)
        except OSError as e:
            for handler in handlers:
                handler.close()
            raise LogFileError(f"couldn't open log file: {e}") from e
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    return handlers


def shutdown_logging(handlers: list[logging.Handler]) -> None:
    """Flush, close and detach handlers installed by setup_logging."""
    root = logging.getLogger()
    for handler in handlers:
        handler.flush()
        handler.close()
        root.removeHandler(handler)


@contextmanager
def log_session(
    verbose: bool = False,
    silent: bool = False,
    log_file: Path | None = None,
) -> Iterator[None]:
    """Keep logging configured for the duration of the block."""
    handlers = setup_logging(verbose=verbose, silent=silent, log_file=log_file)
    try:
        yield
    finally:
        shutdown_logging(handlers)
