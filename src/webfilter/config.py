"""Configuration loading and validation for webfilter."""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional, Tuple

from .common import get_config_dir, get_data_dir, parse_env_value, safe_int
from .exceptions import ConfigurationError

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_ADDR = ":5001"
DEFAULT_MASTER = "127.0.0.1:5001"
DEFAULT_TIMEOUT = 10
STATE_FILE_NAME = "hosts.json"
LOG_FILE_NAME = "webfilter.log"

# host:port, host may be empty (all interfaces), a name, IPv4 or [IPv6]
ADDR_PATTERN = re.compile(r"^(?P<host>\[[0-9a-fA-F:.]+\]|[A-Za-z0-9.-]*):(?P<port>\d{1,5})$")

logger = logging.getLogger(__name__)


# =============================================================================
# ADDRESS PARSING
# =============================================================================


def parse_addr(addr: str, default_host: str = "0.0.0.0") -> Tuple[str, int]:
    """
    Split a host:port address.

    Args:
        addr: Address such as ":5001", "127.0.0.1:5001" or "[::1]:5001"
        default_host: Host to use when the host part is empty

    Returns:
        Tuple of (host, port)

    Raises:
        ConfigurationError: If the address is malformed
    """
    match = ADDR_PATTERN.match(addr.strip()) if isinstance(addr, str) else None
    if not match:
        raise ConfigurationError(f"Invalid address '{addr}' (expected host:port)")

    port = int(match.group("port"))
    if not 0 < port < 65536:
        raise ConfigurationError(f"Invalid port in address '{addr}'")

    host = match.group("host").strip("[]") or default_host
    return host, port


def master_url(addr: str) -> str:
    """Base URL of the master for a host:port address."""
    host, port = parse_addr(addr, default_host="127.0.0.1")
    if ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{port}"


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _find_env_dir(config_dir: Optional[Path]) -> Path:
    if config_dir:
        return Path(config_dir)
    cwd = Path.cwd()
    if (cwd / ".env").exists():
        return cwd
    return get_config_dir()


def load_env_file(env_file: Path) -> None:
    """
    Export KEY=value lines from a .env file into the environment.

    Malformed lines are skipped with a warning.
    """
    with open(env_file, encoding="utf-8-sig") as f:  # utf-8-sig handles BOM
        for line_num, line in enumerate(f, 1):
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                logger.warning(f".env line {line_num}: missing '=' separator, skipping")
                continue

            key, value = line.split("=", 1)
            key = key.strip()

            if not key:
                logger.warning(f".env line {line_num}: empty key, skipping")
                continue

            os.environ[key] = parse_env_value(value)


def load_config(config_dir: Optional[Path] = None) -> dict[str, Any]:
    """
    Load configuration from a .env file and environment variables.

    Args:
        config_dir: Optional directory containing .env. Defaults to the
                    current directory if it has one, else the user config dir.

    Returns:
        Configuration dictionary with all settings

    Raises:
        ConfigurationError: If a value is invalid
    """
    env_dir = _find_env_dir(config_dir)
    env_file = env_dir / ".env"
    if env_file.exists():
        load_env_file(env_file)

    data_dir = get_data_dir()
    config: dict[str, Any] = {
        "addr": os.getenv("WEBFILTER_ADDR", DEFAULT_ADDR),
        "state_file": Path(os.getenv("WEBFILTER_STATE_FILE", str(data_dir / STATE_FILE_NAME))),
        "log_file": Path(
            os.getenv("WEBFILTER_LOG_FILE", str(data_dir / "logs" / LOG_FILE_NAME))
        ),
        "master": os.getenv("WEBFILTER_MASTER", DEFAULT_MASTER),
        "timeout": safe_int(os.getenv("WEBFILTER_TIMEOUT"), DEFAULT_TIMEOUT, "WEBFILTER_TIMEOUT"),
        "config_dir": str(env_dir),
    }

    # Fail fast on malformed addresses
    parse_addr(config["addr"])
    parse_addr(config["master"])

    return config
