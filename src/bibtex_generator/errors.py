"""Exceptions raised by the BibTeX generator pipeline.

Input and persistence errors abort the current command and are reported to
the user. Resolution and fetch failures are scoped to a single entry and are
downgraded to warnings by the batch loop.
"""

from __future__ import annotations


class BibGeneratorError(Exception):
    """Base class for all generator errors."""


class InputError(BibGeneratorError):
    """Raised for empty input or a ``/file`` command without a usable name."""


class ResolutionFailure(BibGeneratorError):
    """Raised when the title lookup service cannot be queried."""

    def __init__(self, query: str, reason: str):
        super().__init__(f"Title lookup failed for '{query}': {reason}")
        self.query = query
        self.reason = reason


class FetchFailure(BibGeneratorError):
    """Raised when no BibTeX record could be retrieved for a DOI."""

    def __init__(self, doi: str):
        super().__init__(f"No BibTeX record available for DOI {doi}")
        self.doi = doi


class PersistenceError(BibGeneratorError):
    """Raised when results cannot be written to the target file."""
