"""Tests for gsrlab exception hierarchy."""

import pytest

from gsrlab.exceptions import (
    ConfigError,
    DataSourceError,
    DataValidationError,
    GsrError,
    QuoteError,
)


def test_gsr_error_is_base_exception() -> None:
    """GsrError should be catchable as Exception."""
    with pytest.raises(Exception):
        raise GsrError("test error")


def test_config_error_inherits_from_gsr_error() -> None:
    """ConfigError should be catchable as GsrError."""
    with pytest.raises(GsrError):
        raise ConfigError("invalid config")


def test_data_source_error_inherits_from_gsr_error() -> None:
    """DataSourceError should be catchable as GsrError."""
    with pytest.raises(GsrError):
        raise DataSourceError("source failed")


def test_data_validation_error_inherits_from_gsr_error() -> None:
    """DataValidationError should be catchable as GsrError."""
    with pytest.raises(GsrError):
        raise DataValidationError("validation failed")


def test_quote_error_is_a_data_source_error() -> None:
    """QuoteError should be catchable as DataSourceError."""
    with pytest.raises(DataSourceError):
        raise QuoteError("quote failed")


def test_exception_messages_preserved() -> None:
    """Exception messages should be accessible via str()."""
    msg = "detailed error message"
    err = ConfigError(msg)
    assert str(err) == msg
