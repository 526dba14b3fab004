"""Resolve queries to DOIs and fetch BibTeX records.

Title lookup uses the Crossref REST API (``query.title``, one row); records
are retrieved from doi.org via content negotiation for BibTeX. Each request
is a single attempt.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from rapidfuzz.fuzz import token_sort_ratio

from bibtex_generator.errors import ResolutionFailure
from bibtex_generator.utils import (
    BIBTEX_MIME,
    CROSSREF_API,
    DOI_RESOLVER,
    HttpClient,
    doi_url,
    is_doi,
    normalize_title_for_match,
)


def title_match_score(query: str, candidate_title: str) -> float:
    """Score (0-100) how well a Crossref title matches the typed query."""
    return token_sort_ratio(normalize_title_for_match(query), normalize_title_for_match(candidate_title))


class Resolver:
    """Turns a query into a DOI, searching Crossref by title when needed."""

    def __init__(self, http: HttpClient, logger: logging.Logger | None = None, crossref_api: str = CROSSREF_API):
        self.http = http
        self.logger = logger or logging.getLogger(__name__)
        self.crossref_api = crossref_api
        # Title similarity of the last Crossref hit, None for DOI pass-through or no match
        self.last_match_score: float | None = None

    def crossref_title_search(self, title: str, rows: int = 1) -> list[dict[str, Any]]:
        """Return up to ``rows`` ranked Crossref works for a title.

        Raises:
            ResolutionFailure: On transport errors or a non-200 response.
        """
        params = {"query.title": title, "rows": rows}
        try:
            resp = self.http._request("GET", self.crossref_api, params=params, accept="application/json")
        except httpx.HTTPError as e:
            self.logger.debug("Crossref search failed '%s': %s", title, e)
            raise ResolutionFailure(title, str(e) or type(e).__name__) from e
        if resp.status_code != 200:
            self.logger.debug("Crossref search '%s' returned status %d", title, resp.status_code)
            raise ResolutionFailure(title, f"HTTP {resp.status_code}")
        try:
            return resp.json().get("message", {}).get("items", []) or []
        except ValueError as e:
            raise ResolutionFailure(title, "invalid JSON response") from e

    def resolve(self, query: str) -> str | None:
        """Return the DOI for a query, or None when the search has no result."""
        self.last_match_score = None
        if is_doi(query):
            return query

        items = self.crossref_title_search(query, rows=1)
        if not items:
            self.logger.debug("Crossref: no results for '%s'", query)
            return None
        top = items[0]
        doi = top.get("DOI")
        if not doi:
            return None
        titles = top.get("title") or []
        if titles:
            self.last_match_score = title_match_score(query, titles[0])
            self.logger.debug("Crossref: '%s' -> %s (title score %.0f)", query, doi, self.last_match_score)
        return doi


class Fetcher:
    """Retrieves the canonical BibTeX record for a DOI from doi.org."""

    def __init__(self, http: HttpClient, logger: logging.Logger | None = None, doi_resolver: str = DOI_RESOLVER):
        self.http = http
        self.logger = logger or logging.getLogger(__name__)
        self.doi_resolver = doi_resolver

    def fetch(self, doi: str) -> str | None:
        """Return the BibTeX text for ``doi``, or None on any failure."""
        try:
            resp = self.http._request("GET", doi_url(doi, self.doi_resolver), accept=BIBTEX_MIME)
        except httpx.HTTPError as e:
            self.logger.debug("BibTeX fetch failed for %s: %s", doi, e)
            return None
        if resp.status_code != 200:
            self.logger.debug("BibTeX fetch for %s returned status %d", doi, resp.status_code)
            return None
        text = resp.text.strip()
        return text or None
