"""User-facing notification surface.

The pipeline reports everything through a Notifier so that it does not
depend on how results are shown. ConsoleNotifier is the terminal
implementation used by the CLI.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO

from bibtex_generator.errors import PersistenceError
from bibtex_generator.writer import BibFile


class Notifier(ABC):
    """Abstract notification sink for the generator."""

    @abstractmethod
    def info(self, message: str) -> None: ...

    @abstractmethod
    def warn(self, message: str) -> None: ...

    @abstractmethod
    def error(self, message: str) -> None: ...

    @abstractmethod
    def progress(self, current: int, total: int, label: str) -> None:
        """Report that entry ``current`` of ``total`` is being processed."""

    def open_and_focus_end(self, path: Path) -> None:
        """Show the written file positioned at its end (optional affordance)."""

    def show_records(self, records: list[str]) -> None:
        """Surface records to the user when no output file is set."""
        for record in records:
            self.info(f"BibTeX:\n{record}")


class ConsoleNotifier(Notifier):
    """Notifier that logs messages and prints records to stdout.

    Args:
        logger: Logger used for info/warn/error/progress
        stream: Stream surfaced records are printed to
        open_editor: Launch ``$EDITOR +<line> <path>`` after a write
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        stream: TextIO | None = None,
        open_editor: bool = False,
    ) -> None:
        self.logger = logger or logging.getLogger("bibtex_generator")
        self.stream = stream if stream is not None else sys.stdout
        self.open_editor = open_editor

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def progress(self, current: int, total: int, label: str) -> None:
        self.logger.info("[%d/%d] %s", current, total, label)

    def show_records(self, records: list[str]) -> None:
        for record in records:
            print(record, file=self.stream)
            print(file=self.stream)

    def open_and_focus_end(self, path: Path) -> None:
        try:
            last_line = BibFile(path).line_count()
        except PersistenceError as e:
            self.logger.debug("Could not reopen %s: %s", path, e)
            return
        self.logger.info("%s now has %d lines", path, last_line)
        if not self.open_editor:
            return
        editor = os.environ.get("VISUAL") or os.environ.get("EDITOR")
        if not editor:
            self.logger.warning("--open-editor given but neither $VISUAL nor $EDITOR is set")
            return
        try:
            subprocess.run([*shlex.split(editor), f"+{last_line}", str(path)], check=False)
        except OSError as e:
            self.logger.warning("Could not launch editor '%s': %s", editor, e)
