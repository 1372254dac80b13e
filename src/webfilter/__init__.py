"""webfilter - Host blocking decisions with temporary open windows."""

__version__ = "1.0.0"

from .client import MasterClient
from .exceptions import (
    WebFilterError,
    ConfigurationError,
    ClientInputError,
    InvalidMinutesError,
    InvalidSuffixError,
    PersistenceError,
    TransportError,
)
from .hosts import HostRecord, HostStatus, match_suffix
from .registry import Registry
from .service import DecisionService
from .store import HostStore

__all__ = [
    "__version__",
    "DecisionService",
    "HostRecord",
    "HostStatus",
    "HostStore",
    "MasterClient",
    "Registry",
    "match_suffix",
    "WebFilterError",
    "ConfigurationError",
    "ClientInputError",
    "InvalidMinutesError",
    "InvalidSuffixError",
    "PersistenceError",
    "TransportError",
]
