"""Common utilities shared between webfilter modules."""

import fcntl
import os
import stat
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from platformdirs import user_config_dir, user_data_dir

# =============================================================================
# SHARED CONSTANTS
# =============================================================================

APP_NAME = "webfilter"

# Secure file permissions (owner read/write only)
SECURE_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600

NANOS_PER_MINUTE = 60 * 10**9

DEFAULT_OPEN_MINUTES = 30


# =============================================================================
# DIRECTORY MANAGEMENT
# =============================================================================


def get_config_dir() -> Path:
    """Get the platform configuration directory (~/.config/webfilter on Linux)."""
    return Path(user_config_dir(APP_NAME))


def get_data_dir() -> Path:
    """Get the platform data directory (~/.local/share/webfilter on Linux)."""
    return Path(user_data_dir(APP_NAME))


def get_log_dir() -> Path:
    """Get the log directory path (data_dir/logs)."""
    return get_data_dir() / "logs"


def get_audit_log_file() -> Path:
    """Get the audit log file path."""
    return get_log_dir() / "audit.log"


def ensure_log_dir() -> None:
    """Ensure log directory exists. Called lazily when needed."""
    get_log_dir().mkdir(parents=True, exist_ok=True)


# =============================================================================
# PARSING FUNCTIONS
# =============================================================================


def parse_env_value(value: str) -> str:
    """Trim a raw .env value and drop one pair of matching outer quotes."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_non_negative_int(value: Any, name: str = "value") -> int:
    """
    Convert a value to a non-negative int.

    Args:
        value: Value to convert (str from a form or env var, or int)
        name: Name of the value for error messages

    Returns:
        Converted integer

    Raises:
        ValueError: If value is not an integer or is negative
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a valid integer, got: {value!r}")
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a valid integer, got: {value!r}")
    if isinstance(value, float) and value != result:
        raise ValueError(f"{name} must be a valid integer, got: {value!r}")
    if result < 0:
        raise ValueError(f"{name} must be a non-negative integer, got: {value!r}")
    return result


def safe_int(value: Optional[str], default: int, name: str = "value") -> int:
    """
    Safely convert an optional config string to int with validation.

    Args:
        value: String value to convert (can be None)
        default: Default value if value is None
        name: Name of the value for error messages

    Returns:
        Converted integer or default value

    Raises:
        ConfigurationError: If value is not a valid non-negative integer
    """
    from .exceptions import ConfigurationError

    if value is None:
        return default

    try:
        return parse_non_negative_int(value, name)
    except ValueError as e:
        raise ConfigurationError(str(e))


# =============================================================================
# FILE I/O FUNCTIONS
# =============================================================================


def audit_log(action: str, detail: str = "") -> None:
    """
    Append "timestamp | ACTION | detail" to the audit trail.

    Registry mutations are recorded here independently of the process log.
    The trail is best effort: an unwritable log directory drops the entry.

    Args:
        action: Upper-case verb such as 'ADD', 'OPEN' or 'CLOSE'
        detail: Suffix and any parameters of the action
    """
    entry = f"{datetime.now().isoformat()} | {action} | {detail}\n"
    audit_file = get_audit_log_file()
    try:
        ensure_log_dir()
        fd = os.open(audit_file, os.O_WRONLY | os.O_APPEND | os.O_CREAT, SECURE_FILE_MODE)
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            f.write(entry)
    except OSError:
        pass


def write_secure_file(path: Path, content: str) -> None:
    """
    Replace the content of path, readable by the owner only.

    Missing parent directories are created. The file is held under an
    exclusive flock while it is written; closing the file releases it.

    Raises:
        OSError: If the file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        os.chmod(path, SECURE_FILE_MODE)

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECURE_FILE_MODE)
    try:
        f = os.fdopen(fd, "w", encoding="utf-8")
    except Exception:
        os.close(fd)
        raise
    with f:
        fcntl.flock(f, fcntl.LOCK_EX)
        f.write(content)


def read_secure_file(path: Path) -> Optional[str]:
    """
    Read content from a file with shared lock.

    Args:
        path: Path to the file

    Returns:
        File content, or None if the file doesn't exist

    Raises:
        OSError: If the file exists but cannot be read
    """
    if not path.exists():
        return None

    with open(path, "r", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            return f.read().strip()
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
