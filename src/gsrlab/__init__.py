"""gsrlab package root."""

from gsrlab.exceptions import (
    ConfigError,
    DataSourceError,
    DataValidationError,
    GsrError,
    QuoteError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigError",
    "DataSourceError",
    "DataValidationError",
    "GsrError",
    "QuoteError",
]
