"""Custom exceptions for webfilter."""


class WebFilterError(Exception):
    """Base exception for webfilter."""


class ConfigurationError(WebFilterError):
    """Raised when configuration is invalid or missing."""


class ClientInputError(WebFilterError):
    """Raised when an administrative command carries invalid input.

    The registry is never mutated when this is raised.
    """


class InvalidMinutesError(ClientInputError):
    """Raised when an open duration is not a non-negative integer."""


class InvalidSuffixError(ClientInputError):
    """Raised when a suffix to add is empty."""


class PersistenceError(WebFilterError):
    """Raised when the state file cannot be read or written."""


class TransportError(WebFilterError):
    """Raised when the master cannot be reached or fails mid-call."""
