"""Input parsing for the generator prompt.

Raw prompt text is either a ``/file <name>`` command, which sets the file
that results are appended to, or a batch of queries separated by ``;`` (or
the full-width ``；``). Each query is a bare DOI or a free-text title.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from bibtex_generator.errors import InputError

FILE_COMMAND = "/file"
QUERY_SEPARATORS = (";", "；")

_FILE_COMMAND_RE = re.compile(rf"^{re.escape(FILE_COMMAND)}(?:\s+(?P<name>.*))?$", re.DOTALL)
_SEPARATOR_RE = re.compile("|".join(re.escape(s) for s in QUERY_SEPARATORS))


@dataclass(frozen=True)
class FileCommand:
    """A request to change the remembered output filename."""

    filename: str


def sanitize_filename(candidate: str) -> str:
    """Reduce a user-supplied name to a bare filename.

    Directory components are dropped so the file always lands directly in the
    workspace root: ``../../etc/passwd`` becomes ``passwd``.
    """
    name = candidate.strip().replace("\\", "/").rstrip("/")
    name = name.rsplit("/", 1)[-1].strip()
    if name in ("", ".", ".."):
        raise InputError(f"Invalid file name: {candidate!r}")
    return name


def split_queries(text: str) -> list[str]:
    """Split a batch into trimmed, non-empty queries (order and duplicates kept)."""
    return [piece.strip() for piece in _SEPARATOR_RE.split(text) if piece.strip()]


def parse_input(text: str) -> FileCommand | list[str]:
    """Parse raw prompt text.

    Args:
        text: Text as typed by the user

    Returns:
        A FileCommand for ``/file <name>``, otherwise the ordered list of queries.

    Raises:
        InputError: If the text is empty, only separators, or ``/file`` has no name.
    """
    text = (text or "").strip()
    if not text:
        raise InputError("Input must not be empty")

    m = _FILE_COMMAND_RE.match(text)
    if m:
        name = (m.group("name") or "").strip()
        if not name:
            raise InputError("Please provide a file name")
        return FileCommand(sanitize_filename(name))

    queries = split_queries(text)
    if not queries:
        raise InputError("No references found in input")
    return queries
