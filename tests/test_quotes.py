"""Tests for live quote sources."""

import sys
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from gsrlab.data.quotes import (
    API_KEY_ENV,
    MetalPriceApiQuoteSource,
    MockQuoteSource,
    QuoteSource,
    YahooQuoteSource,
    resolve_quote_source,
)
from gsrlab.exceptions import QuoteError
from gsrlab.types import QuoteConfig

TODAY = date(2024, 5, 17)


def api_response(payload: object, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload
    return response


class TestQuoteSourceProtocol:
    """Tests for the QuoteSource abstract base class."""

    def test_quote_source_is_abstract(self) -> None:
        """QuoteSource cannot be instantiated directly."""
        with pytest.raises(TypeError, match="abstract"):
            QuoteSource()  # type: ignore[abstract]


class TestMetalPriceApiQuoteSource:
    """Tests for MetalPriceApiQuoteSource."""

    def test_rates_are_inverted_to_usd_prices(self) -> None:
        """XAU/XAG rates per USD should become USD prices per ounce."""
        with patch("gsrlab.data.quotes.requests.get") as mock_get:
            mock_get.return_value = api_response({"rates": {"XAU": 0.0005, "XAG": 0.04}})

            quote = MetalPriceApiQuoteSource(api_key="k").latest_quote(TODAY)

        assert quote.date == TODAY
        assert quote.gold == pytest.approx(2000.0)
        assert quote.silver == pytest.approx(25.0)
        params = mock_get.call_args.kwargs["params"]
        assert params == {"api_key": "k", "base": "USD", "currencies": "XAU,XAG"}

    def test_api_key_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The API key should default to the environment variable."""
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        assert MetalPriceApiQuoteSource().api_key == "env-key"

    def test_missing_key_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a key no request is made."""
        monkeypatch.delenv(API_KEY_ENV, raising=False)

        with patch("gsrlab.data.quotes.requests.get") as mock_get:
            with pytest.raises(QuoteError, match="key missing"):
                MetalPriceApiQuoteSource().latest_quote(TODAY)
            mock_get.assert_not_called()

    def test_error_status_raises(self) -> None:
        """A non-success status should raise QuoteError."""
        with patch("gsrlab.data.quotes.requests.get") as mock_get:
            mock_get.return_value = api_response({}, status_code=429)

            with pytest.raises(QuoteError, match="API HTTP 429"):
                MetalPriceApiQuoteSource(api_key="k").latest_quote(TODAY)

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"rates": None},
            {"rates": {"XAU": 0.0005}},
            {"rates": {"XAU": 0, "XAG": 0.04}},
            {"rates": {"XAU": "abc", "XAG": 0.04}},
            ["not", "a", "mapping"],
        ],
    )
    def test_bad_payload_raises(self, payload: object) -> None:
        """Missing or non-positive rates should raise QuoteError."""
        with patch("gsrlab.data.quotes.requests.get") as mock_get:
            mock_get.return_value = api_response(payload)

            with pytest.raises(QuoteError, match="XAU/XAG"):
                MetalPriceApiQuoteSource(api_key="k").latest_quote(TODAY)

    def test_invalid_json_raises(self) -> None:
        """A body that is not JSON should raise QuoteError."""
        response = api_response(None)
        response.json.side_effect = ValueError("no json")
        with patch("gsrlab.data.quotes.requests.get", return_value=response):
            with pytest.raises(QuoteError, match="invalid JSON"):
                MetalPriceApiQuoteSource(api_key="k").latest_quote(TODAY)

    def test_network_error_raises(self) -> None:
        """Connection failures should raise QuoteError."""
        with patch("gsrlab.data.quotes.requests.get") as mock_get:
            mock_get.side_effect = requests.Timeout("slow")

            with pytest.raises(QuoteError, match="slow"):
                MetalPriceApiQuoteSource(api_key="k").latest_quote(TODAY)


class TestYahooQuoteSource:
    """Tests for YahooQuoteSource."""

    def test_uses_last_close_of_each_future(self) -> None:
        """The latest close of GC=F and SI=F should be returned."""
        import pandas as pd

        histories = {
            "GC=F": pd.DataFrame({"Close": [2300.0, 2350.0]}),
            "SI=F": pd.DataFrame({"Close": [27.0, 28.0]}),
        }

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            mock_yf = sys.modules["yfinance"]
            mock_yf.Ticker.side_effect = lambda symbol: MagicMock(
                history=MagicMock(return_value=histories[symbol])
            )

            quote = YahooQuoteSource().latest_quote(TODAY)

        assert quote.date == TODAY
        assert quote.gold == 2350.0
        assert quote.silver == 28.0

    def test_empty_history_raises(self) -> None:
        """No recent data should raise QuoteError."""
        import pandas as pd

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            mock_yf = sys.modules["yfinance"]
            mock_yf.Ticker.return_value.history.return_value = pd.DataFrame()

            with pytest.raises(QuoteError, match="No recent data"):
                YahooQuoteSource().latest_quote(TODAY)


class TestMockQuoteSource:
    """Tests for MockQuoteSource."""

    def test_returns_configured_prices(self) -> None:
        """The configured prices should be returned and calls counted."""
        source = MockQuoteSource(gold=1900.0, silver=19.0)

        quote = source.latest_quote(TODAY)

        assert (quote.date, quote.gold, quote.silver) == (TODAY, 1900.0, 19.0)
        assert source.calls == 1

    def test_configured_error_raised(self) -> None:
        """A configured error should be raised as QuoteError."""
        with pytest.raises(QuoteError, match="offline"):
            MockQuoteSource(error="offline").latest_quote(TODAY)

    def test_zero_silver_becomes_quote_error(self) -> None:
        """An invalid record should surface as QuoteError."""
        with pytest.raises(QuoteError):
            MockQuoteSource(silver=0.0).latest_quote(TODAY)


class TestResolveQuoteSource:
    """Tests for resolve_quote_source."""

    def test_metalpriceapi(self) -> None:
        """metalpriceapi should give the API source with its settings."""
        source = resolve_quote_source(QuoteConfig(api_key="k", timeout=3))
        assert isinstance(source, MetalPriceApiQuoteSource)
        assert source.api_key == "k"
        assert source.timeout == 3

    def test_yahoo(self) -> None:
        """yahoo should give the Yahoo Finance source."""
        assert isinstance(resolve_quote_source(QuoteConfig(provider="yahoo")), YahooQuoteSource)

    def test_none_disables_top_up(self) -> None:
        """none should disable the top-up."""
        assert resolve_quote_source(QuoteConfig(provider="none")) is None

    def test_unknown_provider_raises(self) -> None:
        """Unknown providers should raise QuoteError."""
        with pytest.raises(QuoteError, match="Unrecognized quote provider"):
            resolve_quote_source(QuoteConfig(provider="bloomberg"))
