"""Logger construction and record routing for Core Registry projects.

A ``Logger`` owns a fixed routing table of four sinks: the console, which
receives every record, ``error.log`` for errors and worse, and
``combined.log`` plus the daily ``application-<date>.log`` segments for
records at or above the configured level. Records are handed to a
``QueueHandler`` and written by a ``QueueListener`` thread, so emission
never waits for disk I/O.
"""

import atexit
import json
import logging
import logging.handlers
import queue
import sys
import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, Any

from core_registry_logger.exceptions import LogDirectoryError, LoggerConfigError
from core_registry_logger.formatting import (
    METADATA_ATTRIBUTE,
    ConsoleFormatter,
    JsonFormatter,
    clean_metadata,
)
from core_registry_logger.handlers import DailyRotatingFileHandler, parse_size
from core_registry_logger.levels import SeverityLevel
from core_registry_logger.paths import ensure_log_dir, get_log_dir

logger = logging.getLogger(__name__)

ROTATING_PREFIX = "application"

_OPTION_ALIASES = {
    "projectName": "project_name",
    "logLevel": "log_level",
    "packageVersion": "package_version",
    "rootDir": "root_dir",
    "maxSize": "max_size",
}


@dataclass
class LoggerOptions:
    """Options for a project logger."""

    project_name: str
    log_level: str = "info"
    package_version: str = "0.0.0"
    root_dir: Path | None = None
    max_size: str | int = "20m"
    compress: bool = True
    colorize: bool | None = None

    def __post_init__(self) -> None:
        """Validate options after initialization."""
        self._validate_project_name()
        self._validate_package_version()
        self.log_level = SeverityLevel.parse(self.log_level).label
        self.max_bytes = parse_size(self.max_size)
        if self.root_dir is not None:
            self.root_dir = Path(self.root_dir)

    def _validate_project_name(self) -> None:
        name = self.project_name
        if not isinstance(name, str) or not name.strip():
            error_msg = "Required option 'project_name' cannot be empty"
            raise LoggerConfigError(error_msg)
        if any(char in name for char in ("/", "\\", "\x00")) or name in {".", ".."}:
            error_msg = f"Invalid project name: {name!r}"
            raise LoggerConfigError(error_msg)

    def _validate_package_version(self) -> None:
        if not isinstance(self.package_version, str) or not self.package_version:
            error_msg = "Required option 'package_version' cannot be empty"
            raise LoggerConfigError(error_msg)

    @property
    def threshold(self) -> SeverityLevel:
        """Return the configured level as a ``SeverityLevel``."""
        return SeverityLevel.parse(self.log_level)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LoggerOptions":
        """Create options from a mapping with snake_case or camelCase keys.

        Raises:
            LoggerConfigError: If a key is unknown or a value is invalid

        """
        known = set(cls.__dataclass_fields__)
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                error_msg = f"Unknown logger option: {key!r}"
                raise LoggerConfigError(error_msg)
            kwargs[name] = value
        if "project_name" not in kwargs:
            error_msg = "Required option 'project_name' is missing"
            raise LoggerConfigError(error_msg)
        return cls(**kwargs)


def load_options(config_path: str | Path) -> LoggerOptions:
    """Load logger options from a JSON file.

    Args:
        config_path: Path to the JSON options file

    Returns:
        Validated options

    Raises:
        LoggerConfigError: If the file cannot be read or is invalid

    """
    try:
        with Path(config_path).open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        error_msg = f"Logger options file not found: {config_path}"
        raise LoggerConfigError(error_msg, e) from e
    except json.JSONDecodeError as e:
        error_msg = f"Invalid JSON in logger options file: {e}"
        raise LoggerConfigError(error_msg, e) from e
    except OSError as e:
        error_msg = f"Error loading logger options: {e}"
        raise LoggerConfigError(error_msg, e) from e

    if not isinstance(data, dict):
        error_msg = "Logger options file must contain a JSON object"
        raise LoggerConfigError(error_msg)
    return LoggerOptions.from_mapping(data)


class SinkKind(Enum):
    """Destinations a record can be routed to."""

    CONSOLE = "console"
    ERROR_FILE = "error_file"
    COMBINED_FILE = "combined_file"
    ROTATING_FILE = "rotating_file"


@dataclass(frozen=True)
class SinkConfig:
    """One row of the routing table.

    ``threshold`` is the least severe level the sink accepts, ``None`` means
    the sink accepts every record.
    """

    kind: SinkKind
    threshold: SeverityLevel | None
    filename: str | None = None
    structured: bool = True

    def accepts(self, level: SeverityLevel) -> bool:
        """Check whether the sink takes records of ``level``."""
        return self.threshold is None or level.accepts(self.threshold)


def build_sinks(threshold: SeverityLevel) -> tuple[SinkConfig, ...]:
    """Return the routing table for a logger configured at ``threshold``."""
    return (
        SinkConfig(SinkKind.CONSOLE, None, structured=False),
        SinkConfig(SinkKind.ERROR_FILE, SeverityLevel.ERROR, "error.log"),
        SinkConfig(SinkKind.COMBINED_FILE, threshold, "combined.log"),
        SinkConfig(SinkKind.ROTATING_FILE, threshold, f"{ROTATING_PREFIX}-%DATE%.log"),
    )


@dataclass
class _Dispatch:
    """Queue plumbing shared by the sinks of one logger."""

    queue: "queue.Queue[logging.LogRecord]"
    queue_handler: logging.handlers.QueueHandler
    listener: logging.handlers.QueueListener
    handlers: list[logging.Handler] = field(default_factory=list)


class Logger:
    """Project logger with one emission method per severity level."""

    def __init__(
        self,
        options: LoggerOptions | None = None,
        *,
        stream: IO[str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the logger and create its log directory.

        Args:
            options: Logger options; alternatively pass them as keywords
            stream: Console stream, defaults to ``sys.stdout``
            **kwargs: ``LoggerOptions`` fields when ``options`` is omitted

        Raises:
            LoggerConfigError: If the options are missing or invalid
            LogDirectoryError: If the log directory cannot be created

        """
        if options is None:
            options = LoggerOptions.from_mapping(kwargs)
        elif kwargs:
            error_msg = "Pass either an options object or keyword options, not both"
            raise LoggerConfigError(error_msg)

        self.options = options
        self.level = options.threshold
        self.sinks = build_sinks(self.level)
        self.log_dir = ensure_log_dir(get_log_dir(options.project_name, options.root_dir))
        self._closed = False

        self.logger = logging.Logger(f"core_registry.{options.project_name}")
        self.logger.setLevel(SeverityLevel.TRACE.levelno)
        self.logger.propagate = False

        console = sys.stdout if stream is None else stream
        handlers: list[logging.Handler] = []
        try:
            for sink in self.sinks:
                handlers.append(self._build_handler(sink, console))
        except OSError as e:
            for handler in handlers:
                handler.close()
            error_msg = f"Failed to open log files in {self.log_dir}: {e}"
            raise LogDirectoryError(error_msg, e) from e

        record_queue: queue.Queue[logging.LogRecord] = queue.Queue()
        queue_handler = logging.handlers.QueueHandler(record_queue)
        listener = logging.handlers.QueueListener(
            record_queue,
            *handlers,
            respect_handler_level=True,
        )
        self._dispatch = _Dispatch(record_queue, queue_handler, listener, handlers)
        self.logger.addHandler(queue_handler)
        listener.start()
        atexit.register(self.close)

        logger.debug(
            "Logger for '%s' writing to %s at level %s",
            options.project_name,
            self.log_dir,
            self.level.label,
        )

    def _build_handler(self, sink: SinkConfig, console: IO[str]) -> logging.Handler:
        handler: logging.Handler
        if sink.kind is SinkKind.CONSOLE:
            colorize = self.options.colorize
            if colorize is None:
                colorize = bool(getattr(console, "isatty", lambda: False)())
            handler = logging.StreamHandler(console)
            handler.setFormatter(
                ConsoleFormatter(self.options.package_version, colorize=colorize),
            )
        elif sink.kind is SinkKind.ROTATING_FILE:
            handler = DailyRotatingFileHandler(
                self.log_dir,
                prefix=ROTATING_PREFIX,
                max_bytes=self.options.max_bytes,
                compress=self.options.compress,
                utc=True,
            )
            handler.setFormatter(JsonFormatter(utc=True))
        else:
            handler = logging.FileHandler(
                self.log_dir / str(sink.filename),
                encoding="utf-8",
            )
            handler.setFormatter(JsonFormatter())

        if sink.threshold is not None:
            handler.setLevel(sink.threshold.levelno)
        return handler

    def __enter__(self) -> "Logger":
        """Context manager entry point."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Context manager exit point."""
        self.close()

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        return self._closed

    def is_enabled_for(self, level: SeverityLevel | str) -> bool:
        """Check whether the file sinks would record ``level``."""
        return SeverityLevel.parse(level).accepts(self.level)

    def emit(
        self,
        level: SeverityLevel | str,
        message: object,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Build a record and hand it to every sink that accepts it.

        Args:
            level: Severity of the record
            message: Log message
            metadata: Extra fields stored with the record

        Raises:
            InvalidLogLevelError: If ``level`` is not a known level

        """
        severity = SeverityLevel.parse(level)
        record = self.logger.makeRecord(
            self.logger.name,
            severity.levelno,
            "(unknown file)",
            0,
            str(message),
            (),
            None,
            extra={METADATA_ATTRIBUTE: clean_metadata(metadata)},
        )
        record.levelname = severity.label
        self.logger.handle(record)

    def fatal(self, message: object, metadata: Mapping[str, Any] | None = None) -> None:
        """Log ``message`` at ``fatal`` level."""
        self.emit(SeverityLevel.FATAL, message, metadata)

    def error(self, message: object, metadata: Mapping[str, Any] | None = None) -> None:
        """Log ``message`` at ``error`` level."""
        self.emit(SeverityLevel.ERROR, message, metadata)

    def task_error(
        self,
        message: object,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Log ``message`` at ``task_error`` level."""
        self.emit(SeverityLevel.TASK_ERROR, message, metadata)

    def warn(self, message: object, metadata: Mapping[str, Any] | None = None) -> None:
        """Log ``message`` at ``warn`` level."""
        self.emit(SeverityLevel.WARN, message, metadata)

    def info(self, message: object, metadata: Mapping[str, Any] | None = None) -> None:
        """Log ``message`` at ``info`` level."""
        self.emit(SeverityLevel.INFO, message, metadata)

    def task(self, message: object, metadata: Mapping[str, Any] | None = None) -> None:
        """Log ``message`` at ``task`` level."""
        self.emit(SeverityLevel.TASK, message, metadata)

    def debug(self, message: object, metadata: Mapping[str, Any] | None = None) -> None:
        """Log ``message`` at ``debug`` level."""
        self.emit(SeverityLevel.DEBUG, message, metadata)

    def trace(self, message: object, metadata: Mapping[str, Any] | None = None) -> None:
        """Log ``message`` at ``trace`` level."""
        self.emit(SeverityLevel.TRACE, message, metadata)

    def flush(self) -> None:
        """Block until every queued record has been written."""
        if self._closed:
            return
        self._dispatch.queue.join()
        for handler in self._dispatch.handlers:
            try:
                handler.flush()
            except Exception:
                logger.debug("Failed to flush %r", handler, exc_info=True)

    def close(self) -> None:
        """Drain the queue, stop the listener and close all sinks."""
        if self._closed:
            return
        self._closed = True
        atexit.unregister(self.close)

        self._dispatch.listener.stop()
        self.logger.removeHandler(self._dispatch.queue_handler)
        self.logger.disabled = True
        for handler in self._dispatch.handlers:
            try:
                handler.close()
            except Exception:
                logger.debug("Failed to close %r", handler, exc_info=True)
        logger.debug("Logger for '%s' closed", self.options.project_name)
