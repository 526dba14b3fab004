#!/usr/bin/env python3
"""CLI entry point for bibtex-generator command.

Fetches BibTeX for titles or DOIs and appends it to a .bib file.
"""

import sys


def main() -> None:
    """Entry point for bibtex-generator command."""
    from bibtex_generator.generator import main as generator_main

    sys.exit(generator_main())


if __name__ == "__main__":
    main()
