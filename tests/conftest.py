"""Shared fixtures for bibtex_generator tests."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from bibtex_generator import (
    BibtexGenerator,
    Fetcher,
    GeneratorConfig,
    HttpClient,
    Notifier,
    Resolver,
    Session,
)

CROSSREF_URL = "https://api.crossref.org/works"


def make_bibtex(key: str, title: str, entry_type: str = "article") -> str:
    """Build a BibTeX record the way doi.org returns it."""
    return f"@{entry_type}{{{key},\n  title = {{{title}}},\n  year = {{2020}}\n}}"


class FakeHttpClient(HttpClient):
    """Fake HTTP client for testing without network calls.

    ``handler`` receives (url, params, accept) and returns an httpx.Response
    or raises an httpx.HTTPError.
    """

    def __init__(self, handler: Callable[[str, dict[str, Any] | None, str | None], httpx.Response]):
        # Don't call parent __init__ to avoid setting up real HTTP
        self.handler = handler
        self.calls: list[tuple[str, dict[str, Any] | None, str | None]] = []

    def _request(self, method, url, params=None, accept=None):
        self.calls.append((url, params, accept))
        return self.handler(url, params, accept)

    def close(self):
        pass


class FakeServices:
    """Scripted Crossref + doi.org backends keyed by title and DOI."""

    def __init__(self) -> None:
        self.titles: dict[str, list[dict[str, Any]] | Exception | int] = {}
        self.records: dict[str, str | Exception | int] = {}

    def __call__(self, url: str, params: dict[str, Any] | None, accept: str | None) -> httpx.Response:
        request = httpx.Request("GET", url)
        if url == CROSSREF_URL:
            outcome = self.titles.get(params["query.title"], [])
            if isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, int):
                return httpx.Response(outcome, request=request)
            return httpx.Response(200, json={"message": {"items": outcome}}, request=request)
        doi = url.removeprefix("https://doi.org/")
        outcome = self.records.get(doi, 404)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            return httpx.Response(outcome, text="Not Found", request=request)
        return httpx.Response(200, text=outcome + "\n", request=request)


class RecordingNotifier(Notifier):
    """Notifier that keeps every message for assertions."""

    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.progress_calls: list[tuple[int, int, str]] = []
        self.opened: list[Path] = []
        self.shown: list[str] = []

    def info(self, message):
        self.infos.append(message)

    def warn(self, message):
        self.warnings.append(message)

    def error(self, message):
        self.errors.append(message)

    def progress(self, current, total, label):
        self.progress_calls.append((current, total, label))

    def open_and_focus_end(self, path):
        self.opened.append(path)

    def show_records(self, records):
        self.shown.extend(records)


@pytest.fixture
def logger():
    """Create a test logger."""
    return logging.getLogger("test")


@pytest.fixture
def services():
    return FakeServices()


@pytest.fixture
def fake_http(services):
    """Create a fake HTTP client backed by scripted services."""
    return FakeHttpClient(services)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def workspace(tmp_path):
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def make_generator(fake_http, notifier, logger):
    """Factory fixture for generators sharing the fake HTTP client."""

    def _make(filename: str | None = None, workspace: Path | None = None, **config: Any) -> BibtexGenerator:
        return BibtexGenerator(
            resolver=Resolver(fake_http, logger=logger),
            fetcher=Fetcher(fake_http, logger=logger),
            notifier=notifier,
            session=Session(filename=filename, workspace=workspace),
            config=GeneratorConfig(**config),
            logger=logger,
        )

    return _make


@pytest.fixture
def make_record():
    """Factory fixture for BibTeX record text."""
    return make_bibtex
