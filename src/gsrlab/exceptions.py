"""gsrlab exception hierarchy.

All package-specific exceptions derive from :class:`GsrError` so callers can
catch every ingestion, configuration and quote error uniformly.
"""

from __future__ import annotations


class GsrError(Exception):
    """Base class for gsrlab exceptions.

    Derived exceptions should extend this class so that callers can catch all
    package-specific errors uniformly.
    """


class ConfigError(GsrError):
    """Raised when configuration files or parameters are invalid."""


class DataSourceError(GsrError):
    """Raised when the primary price table cannot be fetched or read."""


class DataValidationError(GsrError):
    """Raised when a price record fails validation checks.

    Named DataValidationError to avoid conflict with pydantic's ValidationError.
    """


class QuoteError(DataSourceError):
    """Raised when a live quote source returns nothing usable."""


__all__ = [
    "GsrError",
    "ConfigError",
    "DataSourceError",
    "DataValidationError",
    "QuoteError",
]
