"""Severity taxonomy used by the core registry logger.

Levels are ranked most severe first. Each level also carries the numeric
level the standard ``logging`` machinery works with, where a higher number
means more severe, so handler thresholds can be expressed with plain
``Handler.setLevel``.
"""

from enum import IntEnum

from core_registry_logger.exceptions import InvalidLogLevelError


class SeverityLevel(IntEnum):
    """Ordered severity levels, lower rank is more severe."""

    FATAL = 0
    ERROR = 1
    TASK_ERROR = 2
    WARN = 3
    INFO = 4
    TASK = 5
    DEBUG = 6
    TRACE = 7

    @property
    def rank(self) -> int:
        """Return the severity rank (0 is the most severe)."""
        return int(self)

    @property
    def label(self) -> str:
        """Return the public, lowercase name of the level."""
        return self.name.lower()

    @property
    def levelno(self) -> int:
        """Return the matching ``logging`` level number."""
        return LEVEL_NUMBERS[self]

    def accepts(self, threshold: "SeverityLevel") -> bool:
        """Check whether a sink configured at ``threshold`` takes this level."""
        return self.rank <= threshold.rank

    @classmethod
    def parse(cls, value: "SeverityLevel | str") -> "SeverityLevel":
        """Convert a level name (or level) into a ``SeverityLevel``.

        Args:
            value: Level instance or case-insensitive level name

        Returns:
            The matching level

        Raises:
            InvalidLogLevelError: If the value names no known level

        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        names = ", ".join(level.label for level in cls)
        error_msg = f"Invalid log level: {value!r} (expected one of {names})"
        raise InvalidLogLevelError(error_msg)

    @classmethod
    def from_levelno(cls, levelno: int) -> "SeverityLevel":
        """Map a ``logging`` level number onto the taxonomy.

        Numbers between two levels resolve to the less severe one, numbers
        below ``trace`` resolve to ``trace``.
        """
        for level in cls:
            if levelno >= level.levelno:
                return level
        return cls.TRACE


LEVEL_NUMBERS: dict[SeverityLevel, int] = {
    SeverityLevel.FATAL: 50,
    SeverityLevel.ERROR: 40,
    SeverityLevel.TASK_ERROR: 35,
    SeverityLevel.WARN: 30,
    SeverityLevel.INFO: 20,
    SeverityLevel.TASK: 15,
    SeverityLevel.DEBUG: 10,
    SeverityLevel.TRACE: 5,
}

LEVEL_COLORS: dict[SeverityLevel, str] = {
    SeverityLevel.FATAL: "red",
    SeverityLevel.ERROR: "red",
    SeverityLevel.TASK_ERROR: "red",
    SeverityLevel.WARN: "yellow",
    SeverityLevel.INFO: "green",
    SeverityLevel.TASK: "cyan",
    SeverityLevel.DEBUG: "blue",
    SeverityLevel.TRACE: "magenta",
}
