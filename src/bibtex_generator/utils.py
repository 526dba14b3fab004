"""Shared utilities for the BibTeX generator.

Includes text normalization used to score title matches, DOI helpers,
and the HTTP infrastructure (rate limiting, bounded timeouts) that the
resolver and fetcher share.
"""

from __future__ import annotations

import re
import threading
import time
import unicodedata
from typing import Any
from urllib.parse import quote

import httpx

# ------------- Constants -------------

CROSSREF_API = "https://api.crossref.org/works"
DOI_RESOLVER = "https://doi.org"
BIBTEX_MIME = "application/x-bibtex"
DOI_PREFIX = "10."


# ------------- Text Normalization -------------


def strip_diacritics(text: str) -> str:
    """Remove diacritics from text (e.g., 'café' -> 'cafe')."""
    nfkd = unicodedata.normalize("NFKD", text)
    return "".join([c for c in nfkd if not unicodedata.combining(c)])


_LATEX_CMD_RE = re.compile(r"\\[a-zA-Z]+(\s*\[[^\]]*\])?(\s*\{[^}]*\})?")
_LATEX_MATH_RE = re.compile(r"\$[^$]*\$")
_BRACES_RE = re.compile(r"[{}]")


def latex_to_plain(text: str) -> str:
    """Remove LaTeX commands, math, and braces from text."""
    if not text:
        return ""
    t = _LATEX_MATH_RE.sub(" ", text)
    t = _LATEX_CMD_RE.sub(" ", t)
    t = _BRACES_RE.sub("", t)
    t = re.sub(r"\s+", " ", t)
    return t.strip()


def normalize_title_for_match(title: str) -> str:
    """Normalize a title for fuzzy matching.

    Removes LaTeX, diacritics, punctuation, and extra whitespace.
    Converts to lowercase.
    """
    t = latex_to_plain(title)
    t = strip_diacritics(t).lower()
    t = re.sub(r"[^a-z0-9\s]", " ", t)
    t = re.sub(r"\s+", " ", t).strip()
    return t


# ------------- DOI Utilities -------------


def is_doi(query: str) -> bool:
    """Return True when the query is treated as a bare DOI (prefix check only)."""
    return query.startswith(DOI_PREFIX)


def doi_url(doi: str, resolver: str = DOI_RESOLVER) -> str:
    """Convert a DOI to a resolver URL.

    Characters that would end the URL path early (``#``, ``?``, ``%``, spaces)
    are percent-encoded; the usual DOI punctuation is kept.
    """
    return f"{resolver.rstrip('/')}/{quote(doi, safe='/:;()')}"


# ------------- Rate Limiting -------------


class RateLimiter:
    """Thread-safe sliding-window rate limiter for API requests."""

    def __init__(self, req_per_min: int) -> None:
        self.req_per_min = max(req_per_min, 1)
        self.lock = threading.Lock()
        self.timestamps: list[float] = []

    def wait(self) -> None:
        """Block until a request can be made within the rate limit."""
        with self.lock:
            now = time.time()
            window = 60.0
            self.timestamps = [t for t in self.timestamps if now - t < window]
            if len(self.timestamps) >= self.req_per_min:
                earliest = min(self.timestamps)
                sleep_for = window - (now - earliest) + 0.01
                if sleep_for > 0:
                    time.sleep(sleep_for)
                    now = time.time()
                    self.timestamps = [t for t in self.timestamps if now - t < window]
            self.timestamps.append(time.time())


# ------------- HTTP Client -------------


class HttpClient:
    """HTTP client with a bounded timeout and rate limiting.

    Every request is a single attempt: transport errors (including timeouts)
    propagate as ``httpx.HTTPError`` and are handled per entry by the caller.
    """

    def __init__(
        self,
        timeout: float,
        user_agent: str,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds, applied to connect, read and write
            user_agent: User-Agent header value
            rate_limiter: Optional RateLimiter spacing outgoing requests
            transport: Optional httpx transport (used to plug in a mock transport)
        """
        self.client = httpx.Client(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            transport=transport,
        )
        self.rate_limiter = rate_limiter

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> httpx.Response:
        """Make one HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            params: Query parameters
            accept: Accept header value
        """
        if self.rate_limiter is not None:
            self.rate_limiter.wait()
        headers = {"Accept": accept} if accept else {}
        return self.client.request(method, url, params=params, headers=headers)

    def close(self) -> None:
        """Close the underlying connection pool."""
        self.client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
