"""Configuration for the BibTeX generator."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from bibtex_generator._version import __version__
from bibtex_generator.utils import CROSSREF_API, DOI_RESOLVER


@dataclass
class GeneratorConfig:
    """Settings for a generator session.

    Attributes:
        timeout: Per-request HTTP timeout in seconds
        rate_limit: Maximum requests per minute across both services
        mailto: Contact address advertised to Crossref (polite pool)
        user_agent: Explicit User-Agent; derived from version and mailto if unset
        crossref_api: Crossref works endpoint used for title search
        doi_resolver: Base URL for DOI content negotiation
        min_title_score: Warn when a title search hit scores below this (0-100)
        workspace: Workspace root the output filename is resolved against
        filename: Initial output filename (sanitized like ``/file``)
        open_editor: Launch $EDITOR at the end of the file after writing
        verbose: Enable debug logging
    """

    timeout: float = 20.0
    rate_limit: int = 50
    mailto: str | None = None
    user_agent: str | None = None
    crossref_api: str = CROSSREF_API
    doi_resolver: str = DOI_RESOLVER
    min_title_score: float = 60.0
    workspace: str | None = None
    filename: str | None = None
    open_editor: bool = False
    verbose: bool = False

    def get_user_agent(self) -> str:
        """Get the User-Agent header, including the mailto when configured."""
        if self.user_agent:
            return self.user_agent
        ua = f"bibtex-generator/{__version__}"
        if self.mailto:
            ua += f" (mailto:{self.mailto})"
        return ua

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeneratorConfig:
        """Create config from a dictionary (e.g., loaded from YAML)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> GeneratorConfig:
        """Load config from a YAML file; an empty file yields the defaults."""
        import yaml

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary for serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
