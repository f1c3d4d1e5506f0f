"""Price table ingestion.

Turns raw delimited text into a :class:`~gsrlab.types.Series`:

1. Every row is first mapped to canonical column names (lower-cased, trimmed,
   byte-order mark removed), then read as a ``date``/``gold``/``silver``
   triple.
2. Rows missing any of the three, or with a zero silver price, are dropped.
3. The table is parsed once with an auto-detected dialect and, if that yields
   no usable rows, once more with the delimiter read off the header line.
4. Records are de-duplicated by date (later rows win) and sorted.
5. If the newest record is older than today, a live quote for today may be
   appended. Failures in this step never fail ingestion.
"""

from __future__ import annotations

import csv
import io
import logging
import math
import re
from datetime import date
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from gsrlab.dates import parse_flexible, to_key
from gsrlab.exceptions import DataSourceError, DataValidationError
from gsrlab.types import IngestResult, PriceRecord, Series

if TYPE_CHECKING:
    from gsrlab.data.quotes import QuoteSource
    from gsrlab.data.sources import TextSource

log = logging.getLogger(__name__)

# Date columns tried in order.
DATE_COLUMNS = ("date", "datetime", "day")

_NUMBER_JUNK_RE = re.compile(r"[^0-9.\-]")
_NUMBER_PREFIX_RE = re.compile(r"^-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")

_LEADING_BLANK_RE = re.compile(r"^(?:[ \t]*\r?\n)+")

_SNIFF_DELIMITERS = ",\t;|"
_SNIFF_SAMPLE = 8192


def parse_number(value: Any) -> float | None:
    """Lenient numeric parse for price cells.

    Everything except digits, ``.`` and ``-`` is stripped first (currency
    symbols, thousands separators, spaces), then the longest leading number
    is read, so "$1,234.50" gives 1234.5.

    :returns: Finite float, or None.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    match = _NUMBER_PREFIX_RE.match(_NUMBER_JUNK_RE.sub("", text))
    if not match:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def normalize_header(name: Any) -> str:
    return str(name if name is not None else "").lower().replace("\ufeff", "").strip()


def canonical_row(row: Mapping[Any, Any]) -> dict[str, Any]:
    """Map a parsed row onto canonical column names.

    Overflow cells (which :class:`csv.DictReader` files under a ``None`` key)
    are discarded. If two headers normalize to the same name the later wins.
    """
    return {normalize_header(k): v for k, v in row.items() if k is not None}


def record_from_row(row: Mapping[str, Any]) -> PriceRecord | None:
    """Build a record from a canonical row, or None if the row is unusable."""
    parsed_date = None
    for column in DATE_COLUMNS:
        parsed_date = parse_flexible(row.get(column))
        if parsed_date is not None:
            break

    gold = parse_number(row.get("gold"))
    silver = parse_number(row.get("silver"))
    if parsed_date is None or gold is None or silver is None:
        return None

    try:
        return PriceRecord(date=parsed_date, gold=gold, silver=silver)
    except DataValidationError:
        return None


def normalize_newlines(text: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def detect_delimiter(text: str) -> str:
    """Delimiter of the first non-blank line: tab, then semicolon, else comma."""
    header = next((line for line in text.splitlines() if line.strip()), "")
    if "\t" in header:
        return "\t"
    if ";" in header:
        return ";"
    return ","


def sniff_delimiter(text: str) -> str:
    """Guess the delimiter from a sample of the table, defaulting to comma."""
    sample = _LEADING_BLANK_RE.sub("", text)[:_SNIFF_SAMPLE]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=_SNIFF_DELIMITERS)
    except csv.Error:
        return ","
    return dialect.delimiter


def parse_rows(text: str, delimiter: str) -> list[PriceRecord]:
    """Parse a headed table into records, in file order, dropping bad rows.

    :raises DataSourceError: If the text is not readable as a table at all.
    """
    body = _LEADING_BLANK_RE.sub("", normalize_newlines(text))
    reader = csv.DictReader(io.StringIO(body), delimiter=delimiter)
    records = []
    try:
        for row in reader:
            record = record_from_row(canonical_row(row))
            if record is not None:
                records.append(record)
    except csv.Error as e:
        raise DataSourceError(f"CSV parsing error: {e}") from e
    return records


def build_series(records: Iterable[PriceRecord]) -> Series:
    """Sort records by date, keeping the last record seen for each date."""
    by_date: dict[date, PriceRecord] = {}
    for record in records:
        by_date[record.date] = record
    return Series(records=tuple(sorted(by_date.values(), key=lambda r: r.date)))


def _parse_pass(text: str, delimiter: str) -> list[PriceRecord]:
    try:
        return parse_rows(text, delimiter)
    except DataSourceError as e:
        log.warning("Could not read table with delimiter %r: %s", delimiter, e)
        return []


def parse_series(text: str) -> Series:
    """Parse raw table text into a series.

    An unusable table produces an empty series rather than an error.
    """
    text = normalize_newlines(text)
    records = _parse_pass(text, sniff_delimiter(text))
    if not records:
        delimiter = detect_delimiter(text)
        log.info("No usable rows with sniffed dialect; retrying with %r", delimiter)
        records = _parse_pass(text, delimiter)

    series = build_series(records)
    if series:
        log.info(
            "Parsed %d records from %s to %s",
            len(series),
            series.first_date,
            series.last_date,
        )
    else:
        log.warning("Price table contained no usable rows")
    return series


def top_up(
    series: Series,
    quote_source: QuoteSource | None,
    today: date | None = None,
) -> tuple[Series, bool]:
    """Append a live quote for today if the series stops before today.

    The quote is only added when no record already has today's date. Any
    failure leaves the series unchanged.

    :returns: The (possibly extended) series and whether a record was added.
    """
    if quote_source is None or not series:
        return series, False

    today = today or date.today()
    if series.last_date is None or series.last_date >= today:
        return series, False

    try:
        quote = quote_source.latest_quote(today)
        if series.has_key(to_key(quote.date)):
            return series, False
        extended = build_series([*series.records, quote])
    except Exception as e:
        log.warning("Top-up merge failed: %s", e)
        return series, False

    log.info("Topped up series with live quote for %s (gsr %.2f)", quote.date, quote.gsr)
    return extended, True


def ingest(
    source: TextSource,
    quote_source: QuoteSource | None = None,
    today: date | None = None,
) -> IngestResult:
    """Run the full ingestion pipeline.

    :param source: Where to read the price table from.
    :param quote_source: Optional live quote source for the top-up.
    :param today: Override for the local date (defaults to today).
    :raises DataSourceError: If the table cannot be fetched.
    """
    text = source.fetch_text()
    series = parse_series(text)
    series, topped_up = top_up(series, quote_source, today)
    return IngestResult(series=series, topped_up=topped_up)


__all__ = [
    "DATE_COLUMNS",
    "parse_number",
    "normalize_header",
    "canonical_row",
    "record_from_row",
    "detect_delimiter",
    "sniff_delimiter",
    "parse_rows",
    "build_series",
    "parse_series",
    "top_up",
    "ingest",
]
