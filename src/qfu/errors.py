"""Errors raised while validating a qfu invocation."""


class QfuError(Exception):
    """Base error for qfu."""


class FormatError(QfuError):
    """Raised when a device identifier token is malformed."""


class SelectionError(QfuError):
    """Raised when the target device cannot be determined or resolved."""


class ConfigError(QfuError):
    """Raised when device open mode flags contradict each other."""


class UsageError(QfuError):
    """Raised on a wrong number of actions or missing required arguments."""


class RangeError(QfuError):
    """Raised when a numeric argument is out of bounds."""


class BackendError(QfuError):
    """Raised when the external operation tool cannot be launched."""


class LogFileError(QfuError):
    """Raised when the verbose log file cannot be opened."""
