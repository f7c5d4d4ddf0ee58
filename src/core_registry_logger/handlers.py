"""Date and size based rotating file handler."""

import gzip
import logging
import logging.handlers
import os
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path

from core_registry_logger.exceptions import LoggerConfigError

DATE_PATTERN = "%Y-%m-%d"
DEFAULT_MAX_BYTES = 20 * 1024 * 1024  # 20 MB

_SIZE_UNITS = {"": 1, "b": 1, "k": 1024, "m": 1024**2, "g": 1024**3}
_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([kmg]?)b?\s*$", re.IGNORECASE)


def parse_size(size: str | int) -> int:
    """Convert a size such as ``"20m"`` into bytes.

    Args:
        size: Byte count, or a number with a ``k``/``m``/``g`` suffix

    Returns:
        Size in bytes

    Raises:
        LoggerConfigError: If the size cannot be parsed

    """
    if isinstance(size, bool) or not isinstance(size, (int, str)):
        error_msg = f"Invalid size: {size!r}"
        raise LoggerConfigError(error_msg)
    if isinstance(size, int):
        if size < 0:
            error_msg = f"Invalid size: {size}"
            raise LoggerConfigError(error_msg)
        return size
    match = _SIZE_PATTERN.match(size)
    if match is None:
        error_msg = f"Invalid size: {size!r}"
        raise LoggerConfigError(error_msg)
    return int(match.group(1)) * _SIZE_UNITS[match.group(2).lower()]


def _has_content(path: str) -> bool:
    return os.path.exists(path) and os.path.getsize(path) > 0


def gzip_namer(default_name: str) -> str:
    """Name a closed segment after compression."""
    return f"{default_name}.gz"


def gzip_rotator(source: str, dest: str) -> None:
    """Compress ``source`` into ``dest`` and remove the original."""
    if not os.path.exists(source):
        return
    with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.remove(source)


class DailyRotatingFileHandler(logging.handlers.BaseRotatingHandler):
    """Write to ``<prefix>-<date>.log`` and rotate by day and by size.

    A new file is opened when the record date differs from the date of the
    current segment. Within one day a segment that would exceed
    ``max_bytes`` is moved to ``<prefix>-<date>.log.<n>``. Closed segments
    are gzip-compressed when ``compress`` is set.
    """

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "application",
        max_bytes: int = DEFAULT_MAX_BYTES,
        *,
        compress: bool = True,
        utc: bool = True,
        encoding: str | None = "utf-8",
        delay: bool = False,
    ) -> None:
        """Initialize the handler.

        Args:
            directory: Directory holding the segments, must exist
            prefix: File name prefix
            max_bytes: Size cap of one segment, 0 disables size rotation
            compress: Gzip closed segments
            utc: Decide the segment date in UTC instead of local time
            encoding: File encoding
            delay: Defer opening the file until the first record

        """
        self.directory = Path(directory)
        self.prefix = prefix
        self.max_bytes = max_bytes
        self.compress = compress
        self.utc = utc
        self.current_date = self._date_for(datetime.now(timezone.utc).timestamp())
        self._pending_date = self.current_date
        super().__init__(
            str(self.path_for(self.current_date)),
            mode="a",
            encoding=encoding,
            delay=delay,
        )
        if compress:
            self.namer = gzip_namer
            self.rotator = gzip_rotator

    def path_for(self, date: str) -> Path:
        """Return the active segment path for ``date``."""
        return self.directory / f"{self.prefix}-{date}.log"

    def _date_for(self, created: float) -> str:
        tz = timezone.utc if self.utc else None
        moment = datetime.fromtimestamp(created, tz=tz)
        return moment.strftime(DATE_PATTERN)

    def shouldRollover(self, record: logging.LogRecord) -> bool:  # noqa: N802
        """Check whether ``record`` starts a new day or overflows the segment."""
        record_date = self._date_for(record.created)
        if record_date != self.current_date:
            self._pending_date = record_date
            return True
        if self.max_bytes <= 0:
            return False
        if self.stream is None:
            self.stream = self._open()
        self.stream.seek(0, os.SEEK_END)
        position = self.stream.tell()
        if not position:
            return False
        message = f"{self.format(record)}{self.terminator}"
        if position + len(message.encode(self.encoding or "utf-8")) > self.max_bytes:
            self._pending_date = self.current_date
            return True
        return False

    def doRollover(self) -> None:  # noqa: N802
        """Close the current segment and open the next one."""
        if self.stream:
            self.stream.close()
            self.stream = None

        closed = self.baseFilename
        if self._pending_date == self.current_date:
            self.rotate(closed, self.rotation_filename(self._next_segment(closed)))
        elif self.compress and _has_content(closed):
            dest = self.rotation_filename(closed)
            if os.path.exists(dest):
                dest = self.rotation_filename(self._next_segment(closed))
            self.rotate(closed, dest)

        self.current_date = self._pending_date
        self.baseFilename = os.path.abspath(self.path_for(self.current_date))
        if not self.delay:
            self.stream = self._open()

    def _next_segment(self, closed: str) -> str:
        index = 1
        while True:
            candidate = f"{closed}.{index}"
            if not os.path.exists(candidate) and not os.path.exists(
                self.rotation_filename(candidate),
            ):
                return candidate
            index += 1
