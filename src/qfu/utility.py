"""Utility functions for subprocess operations."""

import logging
import subprocess

from .errors import BackendError

logger = logging.getLogger(__name__)


def run_command(
    command: list[str],
    capture_output: bool = False,
    text: bool = True,
    check: bool = False,
) -> subprocess.CompletedProcess:
    """
    Run a command using subprocess.run with common defaults.

    Output is not captured by default so that the progress reported by long
    running firmware operations reaches the terminal.

    Args:
        command: The command and its arguments as a list of strings
        capture_output: Whether to capture stdout and stderr
        text: Whether to return output as text (string) instead of bytes
        check: Whether to raise BackendError on non-zero exit

    Returns:
        CompletedProcess instance containing the result

    Raises:
        BackendError: If the command cannot be started, or if check=True and
            the command returns non-zero
    """
    logger.debug(f"Running: {' '.join(command)}")
    try:
        result = subprocess.run(
            command,
            capture_output=capture_output,
            text=text,
            check=check,
        )
    except OSError as e:
        raise BackendError(f"couldn't run '{command[0]}': {e}") from e
    except subprocess.CalledProcessError as e:
        logger.error(
            f"Command '{' '.join(command)}' failed with exit code {e.returncode}"
        )
        raise BackendError(e.stderr or f"exit code {e.returncode}") from e

    logger.debug(f"'{command[0]}' exited with code {result.returncode}")
    return result
