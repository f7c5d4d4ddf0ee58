"""Location of the shared root and the per-project log directory."""

import logging
import os
from pathlib import Path

from core_registry_logger.exceptions import LogDirectoryError

ROOT_ENV_VARIABLE = "CHIA_ROOT"
LOGS_SUBDIR = Path("core-registry") / "logs"

logger = logging.getLogger(__name__)


def get_chia_root() -> Path:
    """Resolve the shared root directory.

    Uses ``CHIA_ROOT`` when set, otherwise ``~/.chia/mainnet``.
    """
    configured = os.environ.get(ROOT_ENV_VARIABLE)
    if configured:
        return Path(configured).expanduser().resolve()
    return (Path.home() / ".chia" / "mainnet").resolve()


def get_log_dir(project_name: str, root: Path | None = None) -> Path:
    """Return ``<root>/core-registry/logs/<project_name>``."""
    base = get_chia_root() if root is None else Path(root)
    return base / LOGS_SUBDIR / project_name


def ensure_log_dir(log_dir: Path) -> Path:
    """Create ``log_dir`` and its parents if needed.

    Raises:
        LogDirectoryError: If the directory cannot be created

    """
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except (OSError, ValueError) as e:
        error_msg = f"Failed to create log directory {log_dir}: {e}"
        raise LogDirectoryError(error_msg, e) from e
    logger.debug("Log directory ready: %s", log_dir)
    return log_dir
