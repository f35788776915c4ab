"""
Exception types for pastescrape.

Remote and storage failures are reported through these types so callers can
decide whether to skip a unit of work or abort the remaining batch.
"""

from typing import Optional


class PasteScrapeError(Exception):
    """Base class for all pastescrape errors."""
    pass


class ConfigurationError(PasteScrapeError):
    """Raised when a configuration value cannot be interpreted."""
    pass


class StorageError(PasteScrapeError):
    """Raised when the data store cannot complete an operation."""
    pass


class StorageConnectionError(StorageError):
    """Raised when the data store cannot be reached (fatal at startup)."""
    pass


class StorageWriteError(StorageError):
    """Raised when a single insert fails."""
    pass


class RemoteHTTPError(PasteScrapeError):
    """Raised on a non-200 response or a transport failure."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(PasteScrapeError):
    """Raised when a listing response cannot be decoded into entries."""
    pass
