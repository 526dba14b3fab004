#!/usr/bin/env python3
"""
generator.py — Fetch BibTeX entries for paper titles or DOIs.

Type a title or DOI (or several, separated by ';') and the matching BibTeX
record is retrieved and appended to a .bib file in the workspace:
  1) titles are resolved to a DOI with the Crossref works search (one row),
  2) DOIs are passed through unchanged,
  3) the record is fetched from doi.org with content negotiation (application/x-bibtex),
  4) all records of a batch are appended to the target file in one write.

Notes
-----
* `/file <name>` sets the output file; only the bare filename is kept and it is
  resolved against the workspace root. Until it is set, records are printed.
* Entries are processed one at a time; a failed entry produces a warning and the
  rest of the batch continues. Ctrl-C stops the batch at the next entry.

Examples
--------
$ bibtex-generator --file refs.bib "Attention is All You Need; 10.1038/nature14539"
$ bibtex-generator --workspace ~/paper
> /file refs.bib
> Deep Residual Learning for Image Recognition；10.48550/arXiv.1706.03762
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import os
import signal
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from bibtex_generator.config import GeneratorConfig
from bibtex_generator.errors import (
    FetchFailure,
    InputError,
    PersistenceError,
    ResolutionFailure,
)
from bibtex_generator.extract import citation_key, record_title
from bibtex_generator.notify import ConsoleNotifier, Notifier
from bibtex_generator.parser import FileCommand, parse_input, sanitize_filename
from bibtex_generator.resolver import Fetcher, Resolver
from bibtex_generator.utils import HttpClient, RateLimiter
from bibtex_generator.writer import BibFile, join_records

PROMPT = "bib> "
PROMPT_HELP = (
    "Type /file <name> to set the output file, or a paper title / DOI "
    "(several separated by ';').\n"
    "Examples: /file refs.bib | Attention is All You Need | 10.48550/arXiv.1706.03762\n"
    "Ctrl-D or /quit to exit."
)
QUIT_COMMANDS = ("/quit", "/exit")


# ------------- Session State -------------


@dataclass
class Session:
    """State that outlives a single command.

    ``filename`` is unset at startup, replaced by every ``/file`` command and
    never cleared. ``workspace`` is the root the filename is resolved against.
    """

    filename: str | None = None
    workspace: Path | None = None

    def target_path(self) -> Path | None:
        """Return the output path, or None when no filename is remembered.

        Raises:
            PersistenceError: If a filename is set but there is no workspace.
        """
        if not self.filename:
            return None
        if self.workspace is None:
            raise PersistenceError("Please open a workspace first")
        return Path(self.workspace) / self.filename


class CancellationToken:
    """Cooperative cancellation flag checked between entries."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


# ------------- Results -------------


@dataclass
class EntryResult:
    query: str
    action: str  # "fetched", "no_match", "fetch_failed", "error"
    doi: str | None = None
    record: str | None = None
    key: str | None = None
    title: str | None = None
    match_score: float | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.action == "fetched"


@dataclass
class BatchResult:
    entries: list[EntryResult] = field(default_factory=list)
    cancelled: bool = False
    written_to: Path | None = None

    @property
    def records(self) -> list[str]:
        """Fetched records in input order."""
        return [e.record for e in self.entries if e.ok and e.record]

    @property
    def failures(self) -> list[EntryResult]:
        return [e for e in self.entries if not e.ok]


@dataclass
class CommandResult:
    """Outcome of one prompt submission."""

    ok: bool
    batch: BatchResult | None = None
    message: str | None = None


# ------------- Pipeline -------------


class BibtexGenerator:
    """Runs prompt submissions through parse, resolve, fetch and write."""

    def __init__(
        self,
        resolver: Resolver,
        fetcher: Fetcher,
        notifier: Notifier,
        session: Session | None = None,
        config: GeneratorConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        self.resolver = resolver
        self.fetcher = fetcher
        self.notifier = notifier
        self.session = session or Session()
        self.config = config or GeneratorConfig()
        self.logger = logger or logging.getLogger(__name__)

    def handle(self, text: str, token: CancellationToken | None = None) -> CommandResult:
        """Handle one prompt submission; never raises."""
        batch: BatchResult | None = None
        try:
            parsed = parse_input(text)
            if isinstance(parsed, FileCommand):
                self.session.filename = parsed.filename
                self.notifier.info(f"File name set to: {parsed.filename}")
                return CommandResult(ok=True)

            # Checked before any request so a missing workspace fails fast
            target = self.session.target_path()
            batch = self.run_batch(parsed, token)
            self.finish(batch, target)
            return CommandResult(ok=True, batch=batch)
        except (InputError, PersistenceError) as e:
            self.notifier.error(str(e))
            return CommandResult(ok=False, batch=batch, message=str(e))
        except Exception as e:
            self.logger.debug("Unexpected error handling %r", text, exc_info=True)
            self.notifier.error(f"Error: {e}")
            return CommandResult(ok=False, batch=batch, message=str(e))

    def run_batch(self, queries: list[str], token: CancellationToken | None = None) -> BatchResult:
        """Process queries one at a time, isolating failures per entry."""
        batch = BatchResult()
        total = len(queries)
        for i, query in enumerate(queries, start=1):
            if token is not None and token.cancelled:
                batch.cancelled = True
                self.logger.info("Cancelled after %d of %d entries", i - 1, total)
                break
            self.notifier.progress(i, total, query)
            try:
                res = self.process_query(query)
            except FetchFailure as e:
                res = EntryResult(query=query, action="fetch_failed", doi=e.doi, message=str(e))
            except ResolutionFailure as e:
                res = EntryResult(query=query, action="error", message=str(e))
            except Exception as e:
                self.logger.debug("Processing failed for '%s'", query, exc_info=True)
                res = EntryResult(query=query, action="error", message=str(e) or type(e).__name__)
            if token is not None and token.cancelled:
                # The request was not aborted; its result is dropped
                batch.cancelled = True
                self.logger.info("Cancelled during entry %d of %d; discarding '%s'", i, total, query)
                break
            batch.entries.append(res)

            if res.ok:
                self.notifier.info(f"Fetched {res.key}: {res.title}")
                if res.match_score is not None and res.match_score < self.config.min_title_score:
                    self.notifier.warn(
                        f"Low title match ({res.match_score:.0f}) for '{query}': using {res.doi} ({res.title})"
                    )
            else:
                self.notifier.warn(f"Could not fetch BibTeX for '{query}': {res.message}")
        return batch

    def process_query(self, query: str) -> EntryResult:
        """Resolve, fetch and extract a single query.

        Raises:
            ResolutionFailure: If the title lookup service fails.
            FetchFailure: If no record could be retrieved for the DOI.
        """
        doi = self.resolver.resolve(query)
        if doi is None:
            return EntryResult(query=query, action="no_match", message="no DOI found")
        record = self.fetcher.fetch(doi)
        if record is None:
            raise FetchFailure(doi)
        return EntryResult(
            query=query,
            action="fetched",
            doi=doi,
            record=record,
            key=citation_key(record),
            title=record_title(record),
            match_score=self.resolver.last_match_score,
        )

    def finish(self, batch: BatchResult, target: Path | None) -> None:
        """Write or surface the fetched records of a batch.

        Raises:
            PersistenceError: If the target file cannot be written.
        """
        summarize(batch, self.logger)
        records = batch.records
        if not records:
            if batch.cancelled and not batch.entries:
                self.notifier.info("Cancelled before any entry completed")
            else:
                self.notifier.error("Could not fetch BibTeX for any entry")
            return
        if target is None:
            self.notifier.show_records(records)
            return

        BibFile(target).append(join_records(records))
        batch.written_to = target
        self.notifier.info(f"BibTeX written to {target} ({len(records)} entries)")
        self.notifier.open_and_focus_end(target)


def summarize(batch: BatchResult, logger: logging.Logger) -> dict[str, int]:
    fetched = sum(1 for e in batch.entries if e.ok)
    failed = len(batch.entries) - fetched
    logger.info(
        "Summary: fetched=%d failed=%d%s",
        fetched,
        failed,
        " (cancelled)" if batch.cancelled else "",
    )
    return {"fetched": fetched, "failed": failed, "cancelled": int(batch.cancelled)}


# ------------- CLI -------------


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Fetch BibTeX for paper titles or DOIs and append it to a .bib file",
    )
    p.add_argument(
        "queries",
        nargs="*",
        help="Titles or DOIs (joined with ';'); omit to start the interactive prompt",
    )
    p.add_argument("--file", dest="filename", help="Output file name inside the workspace (like /file)")
    ws = p.add_mutually_exclusive_group()
    ws.add_argument("--workspace", help="Workspace root (default: current directory)")
    ws.add_argument("--no-workspace", action="store_true", help="Run without a workspace root")
    p.add_argument("--config", help="YAML config file")
    p.add_argument("--timeout", type=float, help="HTTP timeout seconds (default 20)")
    p.add_argument("--rate-limit", type=int, help="Requests per minute (default 50)")
    p.add_argument("--mailto", help="Contact e-mail for the Crossref polite pool")
    p.add_argument("--min-title-score", type=float, help="Warn below this title match score 0-100 (default 60)")
    p.add_argument("--open-editor", action="store_true", help="Open $EDITOR at the end of the file after writing")
    p.add_argument("--verbose", action="store_true", help="Verbose logging")
    return p


def init_logging(verbose: bool) -> logging.Logger:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    return logging.getLogger("bibtex_generator")


def load_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build the config from an optional YAML file overridden by flags."""
    config = GeneratorConfig.from_yaml(args.config) if args.config else GeneratorConfig()
    overrides = {
        "timeout": args.timeout,
        "rate_limit": args.rate_limit,
        "mailto": args.mailto,
        "min_title_score": args.min_title_score,
        "workspace": args.workspace,
        "filename": args.filename,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    if args.open_editor:
        config.open_editor = True
    if args.verbose:
        config.verbose = True
    if args.no_workspace:
        config.workspace = None
    elif config.workspace is None:
        config.workspace = os.getcwd()
    return config


def build_generator(config: GeneratorConfig, logger: logging.Logger) -> tuple[BibtexGenerator, HttpClient]:
    """Wire HTTP client, resolver, fetcher and notifier from a config."""
    session = Session(
        filename=sanitize_filename(config.filename) if config.filename else None,
        workspace=Path(config.workspace).expanduser() if config.workspace else None,
    )
    http = HttpClient(
        timeout=config.timeout,
        user_agent=config.get_user_agent(),
        rate_limiter=RateLimiter(config.rate_limit),
    )
    generator = BibtexGenerator(
        resolver=Resolver(http, logger=logger, crossref_api=config.crossref_api),
        fetcher=Fetcher(http, logger=logger, doi_resolver=config.doi_resolver),
        notifier=ConsoleNotifier(logger=logger, open_editor=config.open_editor),
        session=session,
        config=config,
        logger=logger,
    )
    return generator, http


@contextlib.contextmanager
def cancel_on_interrupt(token: CancellationToken, logger: logging.Logger) -> Iterator[None]:
    """Turn the first Ctrl-C into a cancellation request; the second one interrupts."""

    def _handler(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt
        logger.warning("Cancelling after the current entry (Ctrl-C again to abort)")
        token.cancel()

    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:
        # Not on the main thread; cancellation stays programmatic only
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def handle_with_interrupts(generator: BibtexGenerator, text: str) -> CommandResult:
    token = CancellationToken()
    with cancel_on_interrupt(token, generator.logger):
        return generator.handle(text, token)


def run_interactive(generator: BibtexGenerator) -> int:
    """Prompt loop: one submission per line until EOF or /quit."""
    print(PROMPT_HELP)
    while True:
        try:
            line = input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            print()
            return 0
        if line.strip() in QUIT_COMMANDS:
            return 0
        handle_with_interrupts(generator, line)


def exit_code(result: CommandResult) -> int:
    if not result.ok:
        return 1
    if result.batch is not None and (result.batch.failures or not result.batch.records):
        return 2
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the BibTeX generator.

    Args:
        argv: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code: 0=success, 1=error, 2=some entries failed.
    """
    args = build_arg_parser().parse_args(argv)
    logger = init_logging(args.verbose)

    try:
        config = load_config(args)
    except (OSError, ValueError) as e:
        logger.error("Failed to load config: %s", e)
        return 1
    if config.verbose:
        logger.setLevel(logging.DEBUG)

    try:
        generator, http = build_generator(config, logger)
    except InputError as e:
        logger.error(str(e))
        return 1

    with http:
        if args.queries:
            return exit_code(handle_with_interrupts(generator, ";".join(args.queries)))
        return run_interactive(generator)


if __name__ == "__main__":
    sys.exit(main())
