"""Blocked host records and suffix matching."""

from dataclasses import dataclass
from typing import Any, Dict

from .common import NANOS_PER_MINUTE


def match_suffix(hostname: str, suffix: str) -> bool:
    """
    Check whether a hostname ends with a blocked suffix.

    This is a plain trailing-substring test: no wildcards, no case folding
    and no label boundary, so "ample.com" matches "example.com".

    Args:
        hostname: Full hostname being queried
        suffix: Blocked domain suffix

    Returns:
        True if hostname ends with suffix
    """
    return hostname.endswith(suffix)


@dataclass
class HostRecord:
    """A blocked suffix with an optional open window.

    close_time is a wall-clock timestamp in nanoseconds since the epoch.
    The record is open while close_time is in the future and closed
    otherwise; the state is always derived against the caller's clock.
    """

    suffix: str
    close_time: int = 0

    def matches(self, hostname: str) -> bool:
        """Check if hostname is governed by this record."""
        return match_suffix(hostname, self.suffix)

    def is_closed(self, now: int) -> bool:
        """Check if the record is blocking at time now (ns); the window end is closed."""
        return self.close_time <= now

    def mins_remaining(self, now: int) -> int:
        """
        Whole minutes left in the open window.

        Args:
            now: Current time in nanoseconds

        Returns:
            Minutes remaining, truncated toward zero. Non-positive values
            mean the record is not open.
        """
        delta = self.close_time - now
        if delta >= 0:
            return delta // NANOS_PER_MINUTE
        return -(-delta // NANOS_PER_MINUTE)

    def open_for(self, minutes: int, now: int) -> None:
        """Open the record for minutes from now."""
        self.close_time = now + minutes * NANOS_PER_MINUTE

    def close(self) -> None:
        """Close the record immediately."""
        self.close_time = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted layout."""
        return {"suffix": self.suffix, "close_time": self.close_time}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostRecord":
        """
        Build a record from its persisted layout.

        Accepts both the current keys and the legacy capitalised ones
        (Suffix, CloseTime).

        Raises:
            ValueError: If the entry is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"host entry must be an object, got: {data!r}")

        suffix = data.get("suffix", data.get("Suffix"))
        close_time = data.get("close_time", data.get("CloseTime", 0))

        if not isinstance(suffix, str) or not suffix:
            raise ValueError(f"host entry has no suffix: {data!r}")
        if isinstance(close_time, bool) or not isinstance(close_time, int):
            raise ValueError(f"host entry '{suffix}' has invalid close_time: {close_time!r}")

        return cls(suffix=suffix, close_time=close_time)


@dataclass(frozen=True)
class HostStatus:
    """Read-only view of a record for display."""

    suffix: str
    closed: bool
    mins_remaining: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suffix": self.suffix,
            "closed": self.closed,
            "mins_remaining": self.mins_remaining,
        }
