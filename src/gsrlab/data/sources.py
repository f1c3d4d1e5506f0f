"""Sources for the raw price table.

This module provides an abstract interface for fetching the delimited price
table as text, with concrete implementations for local files and HTTP. Both
try a list of candidate locations in order and reject HTML pages (a web
server's error page is not a price table).
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Sequence
from urllib.parse import urljoin

import requests

from gsrlab.exceptions import DataSourceError

if TYPE_CHECKING:
    from gsrlab.types import SourceConfig

log = logging.getLogger(__name__)

DEFAULT_CANDIDATES = ("prices.csv", "data/prices.csv")

_DOCTYPE_RE = re.compile(r"^\s*<!doctype", re.IGNORECASE)


def looks_like_html(text: str, content_type: str = "") -> bool:
    """Whether a response is an HTML page rather than a table."""
    return "text/html" in content_type.lower() or bool(_DOCTYPE_RE.match(text))


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


def decode_body(response: requests.Response) -> str:
    """Response body as text, UTF-8 unless the server names a charset.

    requests falls back to ISO-8859-1 for any ``text/*`` response without a
    charset, which garbles a UTF-8 byte-order mark.
    """
    if "charset=" in response.headers.get("content-type", "").lower():
        return response.text
    try:
        return response.content.decode("utf-8")
    except UnicodeDecodeError:
        return response.text


class TextSource(ABC):
    """Abstract base class for price table sources.

    All implementations must inherit from this class and implement
    :meth:`fetch_text`.
    """

    @abstractmethod
    def fetch_text(self) -> str:
        """Fetch the raw table text.

        :returns: Table text with any leading byte-order mark removed.
        :raises DataSourceError: If no candidate location yields a table.
        """
        ...


class FileTextSource(TextSource):
    """Reads the price table from the first existing candidate file.

    :param base_dir: Directory the candidates are resolved against.
    :param candidates: Relative or absolute paths tried in order.
    :param encoding: File encoding.
    """

    def __init__(
        self,
        base_dir: str | Path = ".",
        candidates: Sequence[str] = DEFAULT_CANDIDATES,
        encoding: str = "utf-8",
    ) -> None:
        self.base_dir = Path(base_dir)
        self.candidates = list(candidates)
        self.encoding = encoding

    def fetch_text(self) -> str:
        last_error: str | None = None

        for candidate in self.candidates:
            path = self.base_dir / candidate
            if not path.is_file():
                last_error = f"CSV file not found: {path}"
                continue

            try:
                text = path.read_text(encoding=self.encoding)
            except (OSError, UnicodeDecodeError) as e:
                last_error = f"Failed to read CSV file {path}: {e}"
                continue

            if looks_like_html(text):
                last_error = f"Got HTML instead of CSV from {path}"
                continue

            log.debug("Read price table from %s", path)
            return strip_bom(text)

        raise DataSourceError(last_error or "prices.csv not found")


class HttpTextSource(TextSource):
    """Fetches the price table over HTTP from the first working candidate URL.

    :param base_url: Base URL the candidates are resolved against.
    :param candidates: Relative paths (or absolute URLs) tried in order.
    :param timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        candidates: Sequence[str] = DEFAULT_CANDIDATES,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.candidates = list(candidates)
        self.timeout = timeout

    def fetch_text(self) -> str:
        last_error: str | None = None

        for candidate in self.candidates:
            url = urljoin(self.base_url, candidate)
            try:
                response = requests.get(
                    url,
                    timeout=self.timeout,
                    headers={"Cache-Control": "no-store"},
                )
            except requests.RequestException as e:
                last_error = f"Request for {url} failed: {e}"
                continue

            if not response.ok:
                last_error = f"CSV HTTP {response.status_code} for {url}"
                continue

            content_type = response.headers.get("content-type", "")
            text = decode_body(response)
            if looks_like_html(text, content_type):
                last_error = f"Got HTML instead of CSV from {url}"
                continue

            log.debug("Fetched price table from %s", url)
            return strip_bom(text)

        raise DataSourceError(last_error or "prices.csv not found")


def resolve_text_source(config: SourceConfig) -> TextSource:
    """Construct a table source from configuration.

    An explicit ``path`` wins, then ``base_url``, then the default candidates
    under ``base_dir`` (or the working directory).

    :param config: Source configuration.
    :returns: TextSource instance.
    """
    if config.path:
        return FileTextSource(candidates=[config.path])
    if config.base_url:
        return HttpTextSource(config.base_url, timeout=config.timeout)
    return FileTextSource(base_dir=config.base_dir or ".")


__all__ = [
    "DEFAULT_CANDIDATES",
    "TextSource",
    "FileTextSource",
    "HttpTextSource",
    "decode_body",
    "looks_like_html",
    "resolve_text_source",
    "strip_bom",
]
