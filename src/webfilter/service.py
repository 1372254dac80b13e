"""Decision service answering host validation queries."""

import logging
from typing import Union

from .registry import Registry

logger = logging.getLogger(__name__)


class DecisionService:
    """Owns the registry and answers allow/deny queries for hostnames."""

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def validate(self, host: Union[str, bytes]) -> bool:
        """
        Decide whether a connection to host is allowed.

        Every decision is logged together with the queried hostname.

        Args:
            host: Hostname payload; bytes are decoded as UTF-8

        Returns:
            True if allowed, False if blocked
        """
        if isinstance(host, bytes):
            host = host.decode("utf-8", errors="replace")
        ok = self.registry.validate(host)
        logger.info(f"{ok} {host}")
        return ok
