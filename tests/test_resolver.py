"""Tests for DOI resolution and BibTeX fetching."""

from __future__ import annotations

import httpx
import pytest

from bibtex_generator import Fetcher, ResolutionFailure, Resolver, title_match_score


class TestResolver:
    """Tests for Resolver.resolve."""

    def test_doi_passthrough_makes_no_request(self, fake_http, logger):
        resolver = Resolver(fake_http, logger=logger)
        assert resolver.resolve("10.48550/arXiv.1706.03762") == "10.48550/arXiv.1706.03762"
        assert fake_http.calls == []
        assert resolver.last_match_score is None

    def test_title_lookup_returns_first_doi(self, services, fake_http, logger):
        services.titles["Attention is All You Need"] = [{"DOI": "10.xxxx"}]
        resolver = Resolver(fake_http, logger=logger)

        assert resolver.resolve("Attention is All You Need") == "10.xxxx"

        url, params, accept = fake_http.calls[0]
        assert url == "https://api.crossref.org/works"
        assert params == {"query.title": "Attention is All You Need", "rows": 1}
        assert accept == "application/json"

    def test_title_lookup_empty_result(self, services, fake_http, logger):
        services.titles["Nonexistent Paper"] = []
        resolver = Resolver(fake_http, logger=logger)
        assert resolver.resolve("Nonexistent Paper") is None

    def test_item_without_doi(self, services, fake_http, logger):
        services.titles["Odd Record"] = [{"title": ["Odd Record"]}]
        assert Resolver(fake_http, logger=logger).resolve("Odd Record") is None

    def test_match_score_recorded(self, services, fake_http, logger):
        services.titles["attention is all you need"] = [
            {"DOI": "10.5555/3295222.3295349", "title": ["Attention Is All You Need"]}
        ]
        resolver = Resolver(fake_http, logger=logger)
        resolver.resolve("attention is all you need")
        assert resolver.last_match_score == pytest.approx(100.0)

    def test_transport_error_raises_resolution_failure(self, services, fake_http, logger):
        services.titles["Slow Paper"] = httpx.ReadTimeout("timed out")
        with pytest.raises(ResolutionFailure, match="Slow Paper"):
            Resolver(fake_http, logger=logger).resolve("Slow Paper")

    def test_non_200_raises_resolution_failure(self, services, fake_http, logger):
        services.titles["Busy"] = 503
        with pytest.raises(ResolutionFailure, match="HTTP 503"):
            Resolver(fake_http, logger=logger).resolve("Busy")


class TestFetcher:
    """Tests for Fetcher.fetch."""

    def test_fetch_returns_body(self, services, fake_http, logger, make_record):
        record = make_record("Vaswani_2017", "Attention is All You Need")
        services.records["10.48550/arXiv.1706.03762"] = record

        assert Fetcher(fake_http, logger=logger).fetch("10.48550/arXiv.1706.03762") == record

        url, _, accept = fake_http.calls[0]
        assert url == "https://doi.org/10.48550/arXiv.1706.03762"
        assert accept == "application/x-bibtex"

    def test_not_found_is_absent(self, services, fake_http, logger):
        services.records["10.0000/missing"] = 404
        assert Fetcher(fake_http, logger=logger).fetch("10.0000/missing") is None

    def test_transport_error_is_absent(self, services, fake_http, logger):
        services.records["10.0000/down"] = httpx.ConnectError("connection refused")
        assert Fetcher(fake_http, logger=logger).fetch("10.0000/down") is None

    def test_blank_body_is_absent(self, services, fake_http, logger):
        services.records["10.0000/blank"] = "   "
        assert Fetcher(fake_http, logger=logger).fetch("10.0000/blank") is None

    def test_custom_resolver_base(self, services, fake_http, logger):
        Fetcher(fake_http, logger=logger, doi_resolver="https://dx.doi.org/").fetch("10.1/x")
        assert fake_http.calls[0][0] == "https://dx.doi.org/10.1/x"


class TestTitleMatchScore:
    def test_identical_after_normalization(self):
        assert title_match_score("Deep Learning!", "deep learning") == pytest.approx(100.0)

    def test_unrelated_titles_score_low(self):
        assert title_match_score("Attention is All You Need", "Quokka physiology") < 60
