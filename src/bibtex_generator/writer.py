"""Append-only writer for the target .bib file."""

from __future__ import annotations

import os
from pathlib import Path

from bibtex_generator.errors import PersistenceError

RECORD_SEPARATOR = "\n\n"


def join_records(records: list[str]) -> str:
    """Join a batch of records with one blank line between them."""
    return RECORD_SEPARATOR.join(r.strip("\n") for r in records)


class BibFile:
    """A bibliography file that is only ever created or appended to."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> str | None:
        """Return the file contents, or None if it does not exist."""
        if not self.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e

    def _separator(self) -> str:
        """Prefix that leaves exactly one blank line after the existing bytes."""
        with open(self.path, "rb") as f:
            if f.seek(0, os.SEEK_END) == 0:
                return ""
            f.seek(-1, os.SEEK_END)
            last = f.read(1)
        return "\n" if last == b"\n" else RECORD_SEPARATOR

    def append(self, content: str) -> None:
        """Append ``content`` as new record(s).

        A new or empty file gets ``content`` plus a trailing newline. An
        existing file gets a blank-line separator first, sized by whether it
        already ends in a newline; prior bytes are never rewritten.

        Raises:
            PersistenceError: If the file cannot be created or written.
        """
        try:
            if not self.exists():
                with open(self.path, "x", encoding="utf-8", newline="") as f:
                    f.write(content + "\n")
            else:
                prefix = self._separator()
                with open(self.path, "a", encoding="utf-8", newline="") as f:
                    f.write(prefix + content + "\n")
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e

    def line_count(self) -> int:
        """Number of lines in the file (0 if absent)."""
        text = self.read()
        return len(text.splitlines()) if text else 0
