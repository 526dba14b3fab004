"""Best-effort field extraction from raw BibTeX text.

Only the citation key and the title are extracted, for user feedback. The
``match_*`` functions return None when nothing matches; ``citation_key`` and
``record_title`` substitute the display sentinels.
"""

from __future__ import annotations

import re

UNKNOWN_KEY = "unknown"
UNKNOWN_TITLE = "Unknown Title"

_KEY_RE = re.compile(r"@\s*\w+\s*\{\s*([^,\s{}]+)\s*,")
# (?<!\w) keeps "booktitle" from matching
_TITLE_RE = re.compile(r"(?<!\w)title\s*=\s*", re.IGNORECASE)


def match_citation_key(text: str) -> str | None:
    """Return the key from ``@type{key,`` or None."""
    m = _KEY_RE.search(text or "")
    return m.group(1) if m else None


def _braced_value(rest: str) -> str | None:
    depth = 0
    for i, ch in enumerate(rest):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return rest[1:i]
    return None


def match_title(text: str) -> str | None:
    """Return the value of the ``title`` field (braced or quoted) or None."""
    for m in _TITLE_RE.finditer(text or ""):
        rest = text[m.end() :]
        if rest.startswith("{"):
            value = _braced_value(rest)
        elif rest.startswith('"'):
            end = rest.find('"', 1)
            value = rest[1:end] if end != -1 else None
        else:
            value = None
        if value is not None:
            return re.sub(r"\s+", " ", value).strip()
    return None


def citation_key(text: str) -> str:
    return match_citation_key(text) or UNKNOWN_KEY


def record_title(text: str) -> str:
    return match_title(text) or UNKNOWN_TITLE
