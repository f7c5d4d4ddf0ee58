"""Custom exceptions for the core registry logger."""


class LoggerError(Exception):
    """Base exception for all logger-related errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """Initialize the exception with message and optional original error."""
        super().__init__(message)
        self.original_error = original_error
        self.message = message


class LoggerConfigError(LoggerError):
    """Raised when logger options are missing or invalid."""


class InvalidLogLevelError(LoggerConfigError):
    """Raised when a level name is not part of the severity taxonomy."""


class LogDirectoryError(LoggerError):
    """Raised when the log directory cannot be created."""
