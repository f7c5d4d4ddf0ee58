"""Record rendering for the console and file sinks.

Rendering is split in two pure steps: ``entry_from_record`` turns a
``logging.LogRecord`` into a ``LogEntry``, and ``render_structured`` /
``render_human`` turn that entry into the file and console forms. The
formatter classes only glue those functions into ``logging``.
"""

import json
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import coloredlogs

from core_registry_logger.levels import LEVEL_COLORS, SeverityLevel

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
RESERVED_FIELDS = frozenset({"message", "level", "timestamp"})
METADATA_ATTRIBUTE = "metadata"

_JSON_SEPARATORS = (",", ":")


@dataclass(frozen=True)
class LogEntry:
    """A single log event as seen by the sinks."""

    timestamp: str
    level: SeverityLevel
    message: str
    metadata: Mapping[str, Any] = field(default_factory=dict)


def format_timestamp(created: float, *, utc: bool = False) -> str:
    """Format an epoch timestamp as ``YYYY-MM-DD HH:mm:ss``."""
    converter = time.gmtime if utc else time.localtime
    return time.strftime(DATE_FORMAT, converter(created))


def clean_metadata(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of ``metadata`` without the reserved record fields."""
    if not metadata:
        return {}
    return {
        str(key): value
        for key, value in metadata.items()
        if str(key) not in RESERVED_FIELDS
    }


def entry_from_record(record: logging.LogRecord, *, utc: bool = False) -> LogEntry:
    """Build a ``LogEntry`` from a standard library log record."""
    return LogEntry(
        timestamp=format_timestamp(record.created, utc=utc),
        level=SeverityLevel.from_levelno(record.levelno),
        message=record.getMessage(),
        metadata=MappingProxyType(
            clean_metadata(getattr(record, METADATA_ATTRIBUTE, None)),
        ),
    )


def render_metadata(metadata: Mapping[str, Any]) -> str:
    """Render the metadata bag as compact JSON, or ``""`` when empty."""
    if not metadata:
        return ""
    return json.dumps(dict(metadata), separators=_JSON_SEPARATORS, default=str)


def render_structured(entry: LogEntry) -> dict[str, Any]:
    """Render an entry as the flat mapping persisted by the file sinks.

    Metadata is merged at the top level. The reserved fields always win over
    metadata keys of the same name.
    """
    structured: dict[str, Any] = {
        "level": entry.level.label,
        "message": entry.message,
    }
    structured.update(clean_metadata(entry.metadata))
    structured["timestamp"] = entry.timestamp
    return structured


def render_human(entry: LogEntry, package_version: str) -> str:
    """Render an entry as the single human-readable console line."""
    return (
        f"{entry.timestamp} [{package_version}] [{entry.level.label}]: "
        f"{entry.message} {render_metadata(entry.metadata)}"
    )


class JsonFormatter(logging.Formatter):
    """Format records as one JSON object per line."""

    def __init__(self, *, utc: bool = False) -> None:
        """Initialize the formatter.

        Args:
            utc: Render timestamps in UTC instead of local time

        """
        super().__init__(datefmt=DATE_FORMAT)
        self.utc = utc

    def format(self, record: logging.LogRecord) -> str:
        """Serialize the record through ``render_structured``."""
        entry = entry_from_record(record, utc=self.utc)
        return json.dumps(
            render_structured(entry),
            separators=_JSON_SEPARATORS,
            default=str,
        )


class ConsoleFormatter(coloredlogs.ColoredFormatter):
    """Colorized human-readable console format.

    With ``colorize`` disabled the output is exactly ``render_human``.
    """

    def __init__(self, package_version: str, *, colorize: bool = True) -> None:
        """Initialize the formatter.

        Args:
            package_version: Version string embedded in every line
            colorize: Emit ANSI color sequences

        """
        self.package_version = package_version
        self.colorize = colorize
        version = package_version.replace("%", "%%")
        super().__init__(
            fmt=(
                f"%(asctime)s [{version}] [%(levelname)s]: "
                "%(message)s %(metadata_text)s"
            ),
            datefmt=DATE_FORMAT,
            level_styles=console_level_styles() if colorize else {},
            field_styles=console_field_styles() if colorize else {},
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format a copy of ``record`` with the taxonomy label and metadata."""
        entry = entry_from_record(record)
        view = logging.makeLogRecord(record.__dict__)
        view.levelname = entry.level.label
        view.metadata_text = render_metadata(entry.metadata)
        return super().format(view)


def console_level_styles() -> dict[str, dict[str, Any]]:
    """Return coloredlogs level styles for the taxonomy."""
    styles: dict[str, dict[str, Any]] = {
        level.label: {"color": color} for level, color in LEVEL_COLORS.items()
    }
    styles[SeverityLevel.FATAL.label]["bold"] = True
    return styles


def console_field_styles() -> dict[str, dict[str, Any]]:
    """Return coloredlogs field styles for the console line."""
    return {
        "asctime": {"color": "white", "faint": True},
        "levelname": {"bold": True},
    }
