"""BibTeX Generator - Fetch BibTeX entries for paper titles and DOIs.

This package provides:
- Parsing of prompt input into `/file` commands or batches of queries
- Resolving titles to DOIs via the Crossref works search
- Fetching BibTeX records from doi.org by content negotiation
- Appending records to a .bib file in the workspace

Example usage:
    from pathlib import Path

    from bibtex_generator import BibtexGenerator, ConsoleNotifier, Fetcher, HttpClient, Resolver, Session

    http = HttpClient(timeout=20.0, user_agent="bibtex-generator/1.0")
    generator = BibtexGenerator(
        resolver=Resolver(http),
        fetcher=Fetcher(http),
        notifier=ConsoleNotifier(),
        session=Session(filename="refs.bib", workspace=Path(".")),
    )
    generator.handle("Attention is All You Need; 10.1038/nature14539")
"""

from bibtex_generator._version import __version__
from bibtex_generator.config import GeneratorConfig
from bibtex_generator.errors import (
    BibGeneratorError,
    FetchFailure,
    InputError,
    PersistenceError,
    ResolutionFailure,
)
from bibtex_generator.extract import (
    UNKNOWN_KEY,
    UNKNOWN_TITLE,
    citation_key,
    match_citation_key,
    match_title,
    record_title,
)
from bibtex_generator.generator import (
    BatchResult,
    BibtexGenerator,
    CancellationToken,
    CommandResult,
    EntryResult,
    Session,
)
from bibtex_generator.notify import ConsoleNotifier, Notifier
from bibtex_generator.parser import FileCommand, parse_input, sanitize_filename, split_queries
from bibtex_generator.resolver import Fetcher, Resolver, title_match_score
from bibtex_generator.utils import HttpClient, RateLimiter, doi_url, is_doi, normalize_title_for_match
from bibtex_generator.writer import BibFile, join_records

__all__ = [
    # Version
    "__version__",
    # Pipeline
    "BibtexGenerator",
    "Session",
    "CancellationToken",
    "BatchResult",
    "CommandResult",
    "EntryResult",
    "GeneratorConfig",
    # Parsing
    "FileCommand",
    "parse_input",
    "sanitize_filename",
    "split_queries",
    # Resolution
    "Resolver",
    "Fetcher",
    "title_match_score",
    # Extraction
    "UNKNOWN_KEY",
    "UNKNOWN_TITLE",
    "citation_key",
    "match_citation_key",
    "match_title",
    "record_title",
    # Output
    "BibFile",
    "join_records",
    "Notifier",
    "ConsoleNotifier",
    # HTTP
    "HttpClient",
    "RateLimiter",
    "doi_url",
    "is_doi",
    "normalize_title_for_match",
    # Errors
    "BibGeneratorError",
    "InputError",
    "ResolutionFailure",
    "FetchFailure",
    "PersistenceError",
]
