"""Price table ingestion, table sources and live quote sources."""

from gsrlab.data.ingest import ingest, parse_series, top_up
from gsrlab.data.quotes import (
    MetalPriceApiQuoteSource,
    MockQuoteSource,
    QuoteSource,
    YahooQuoteSource,
    resolve_quote_source,
)
from gsrlab.data.sources import (
    FileTextSource,
    HttpTextSource,
    TextSource,
    resolve_text_source,
)

__all__ = [
    "TextSource",
    "FileTextSource",
    "HttpTextSource",
    "resolve_text_source",
    "QuoteSource",
    "MetalPriceApiQuoteSource",
    "YahooQuoteSource",
    "MockQuoteSource",
    "resolve_quote_source",
    "ingest",
    "parse_series",
    "top_up",
]
