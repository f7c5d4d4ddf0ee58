"""Core Registry Logger.

Project loggers with an eight-level severity taxonomy, a colorized console
and JSON file sinks under the shared Chia root.
"""

__version__ = "0.1.0"

from .exceptions import (
    InvalidLogLevelError,
    LogDirectoryError,
    LoggerConfigError,
    LoggerError,
)
from .levels import SeverityLevel
from .logger_setup import Logger, LoggerOptions, load_options

__all__ = [
    "InvalidLogLevelError",
    "LogDirectoryError",
    "Logger",
    "LoggerConfigError",
    "LoggerError",
    "LoggerOptions",
    "SeverityLevel",
    "load_options",
]
