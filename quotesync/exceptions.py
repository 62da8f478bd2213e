"""Exceptions raised by quotesync.

Only ValidationError and FormatError are meant to reach the user. Storage and
network failures are recovered where they happen and at most logged.
"""


class QuoteSyncError(Exception):
    """Base exception for all quotesync errors."""


class ValidationError(QuoteSyncError):
    """Raised when a quote is missing its text or category."""


class FormatError(QuoteSyncError):
    """Raised when an import document is not a JSON array."""


class StorageReadError(QuoteSyncError):
    """Raised when the durable medium holds an unreadable value."""


class RemoteUnavailable(QuoteSyncError):
    """Raised when the remote endpoint cannot be reached or parsed."""


class ConfigurationError(QuoteSyncError):
    """Raised for invalid configuration values."""
