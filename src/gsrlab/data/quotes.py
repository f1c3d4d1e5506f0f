"""Live quote sources used to top up the price series with today's prices."""

from __future__ import annotations

import logging
import math
import os
from abc import ABC, abstractmethod
from datetime import date
from typing import TYPE_CHECKING, Any

import requests

from gsrlab.exceptions import DataValidationError, QuoteError
from gsrlab.types import PriceRecord

if TYPE_CHECKING:
    from gsrlab.types import QuoteConfig

log = logging.getLogger(__name__)

METAL_PRICE_API_URL = "https://api.metalpriceapi.com/v1/latest"
API_KEY_ENV = "METAL_API_KEY"


def _positive(value: Any) -> float | None:
    """Coerce to a positive finite float, else None."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


class QuoteSource(ABC):
    """Abstract base class for live gold/silver quote sources."""

    @abstractmethod
    def latest_quote(self, today: date) -> PriceRecord:
        """Get the current gold and silver USD prices as a record dated ``today``.

        :param today: Local calendar date to stamp the quote with.
        :returns: Price record for today.
        :raises QuoteError: If the source is unreachable or returns no usable prices.
        """
        ...


class MetalPriceApiQuoteSource(QuoteSource):
    """Quote source backed by the MetalPriceAPI ``latest`` endpoint.

    The endpoint returns rates relative to USD (troy ounces per dollar), so
    the USD prices are the reciprocals of the XAU and XAG rates.

    :param api_key: API key; defaults to the ``METAL_API_KEY`` environment variable.
    :param timeout: Request timeout in seconds.
    :param url: Endpoint URL.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        url: str = METAL_PRICE_API_URL,
    ) -> None:
        self.api_key = api_key or os.environ.get(API_KEY_ENV, "")
        self.timeout = timeout
        self.url = url

    def latest_quote(self, today: date) -> PriceRecord:
        if not self.api_key:
            raise QuoteError(f"MetalPriceAPI key missing (set {API_KEY_ENV})")

        try:
            response = requests.get(
                self.url,
                params={
                    "api_key": self.api_key,
                    "base": "USD",
                    "currencies": "XAU,XAG",
                },
                timeout=self.timeout,
                headers={"Cache-Control": "no-store"},
            )
        except requests.RequestException as e:
            raise QuoteError(f"MetalPriceAPI request failed: {e}") from e

        if not response.ok:
            raise QuoteError(f"API HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise QuoteError(f"API returned invalid JSON: {e}") from e

        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise QuoteError("API missing XAU/XAG")

        xau = _positive(rates.get("XAU"))
        xag = _positive(rates.get("XAG"))
        if xau is None or xag is None:
            raise QuoteError("API missing XAU/XAG")

        return PriceRecord(date=today, gold=1 / xau, silver=1 / xag)


class YahooQuoteSource(QuoteSource):
    """Quote source using Yahoo Finance futures via yfinance.

    Uses the last daily close of the gold and silver front-month futures.

    :param gold_symbol: Yahoo ticker for gold.
    :param silver_symbol: Yahoo ticker for silver.
    """

    def __init__(self, gold_symbol: str = "GC=F", silver_symbol: str = "SI=F") -> None:
        self.gold_symbol = gold_symbol
        self.silver_symbol = silver_symbol

    def _last_close(self, yf: Any, symbol: str) -> float:
        try:
            hist = yf.Ticker(symbol).history(period="5d")
        except Exception as e:
            raise QuoteError(f"Failed to fetch quote for '{symbol}': {e}") from e

        if hist.empty:
            raise QuoteError(f"No recent data for '{symbol}'")

        price = _positive(hist.iloc[-1]["Close"])
        if price is None:
            raise QuoteError(f"Invalid close for '{symbol}'")
        return price

    def latest_quote(self, today: date) -> PriceRecord:
        try:
            import yfinance as yf
        except ImportError as e:
            raise QuoteError(
                "yfinance is not installed. Install it with: pip install yfinance"
            ) from e

        gold = self._last_close(yf, self.gold_symbol)
        silver = self._last_close(yf, self.silver_symbol)
        return PriceRecord(date=today, gold=gold, silver=silver)


class MockQuoteSource(QuoteSource):
    """Mock quote source for testing.

    Returns pre-configured prices, or raises a pre-configured error.

    :param gold: Gold price to return.
    :param silver: Silver price to return.
    :param error: Error message to raise as QuoteError instead.
    """

    def __init__(
        self,
        gold: float = 2000.0,
        silver: float = 25.0,
        error: str | None = None,
    ) -> None:
        self.gold = gold
        self.silver = silver
        self.error = error
        self.calls = 0

    def latest_quote(self, today: date) -> PriceRecord:
        """Return the configured prices dated ``today``."""
        self.calls += 1
        if self.error is not None:
            raise QuoteError(self.error)
        try:
            return PriceRecord(date=today, gold=self.gold, silver=self.silver)
        except DataValidationError as e:
            raise QuoteError(str(e)) from e


def resolve_quote_source(config: QuoteConfig) -> QuoteSource | None:
    """Construct a quote source from configuration.

    :param config: Quote configuration.
    :returns: QuoteSource, or None when top-up is disabled.
    :raises QuoteError: If the provider is unrecognized.
    """
    provider = config.provider.lower()

    if provider == "metalpriceapi":
        return MetalPriceApiQuoteSource(api_key=config.api_key, timeout=config.timeout)
    elif provider == "yahoo":
        return YahooQuoteSource()
    elif provider == "none":
        return None
    else:
        raise QuoteError(
            f"Unrecognized quote provider: '{config.provider}'. "
            f"Supported providers: metalpriceapi, yahoo, none"
        )


__all__ = [
    "METAL_PRICE_API_URL",
    "QuoteSource",
    "MetalPriceApiQuoteSource",
    "YahooQuoteSource",
    "MockQuoteSource",
    "resolve_quote_source",
]
