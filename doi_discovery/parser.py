"""Reference parser — split pasted text into ``[n]``-labelled entries.

Labels are bracketed integers written with ASCII digits (``[1]``, ``[12]``,
...).  Each label starts a new entry; everything up to the next label is that
entry's text.  Text in front of the first label has no entry to belong to and
is dropped.
"""

import logging
import re

from doi_discovery.models import ReferenceEntry

logger = logging.getLogger(__name__)

_LABEL_SPLIT = re.compile(r"(\[\d+\])", re.ASCII)
_LABEL = re.compile(r"^\[\d+\]$", re.ASCII)
_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines included) to one space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def parse_references(text: str | None) -> list[ReferenceEntry]:
    """Split ``text`` into an ordered list of ``ReferenceEntry``.

    Args:
        text: Raw pasted references, possibly wrapped over several lines.

    Returns:
        One entry per label, in input order.  Empty when ``text`` is empty or
        contains no label.  A label with nothing after it yields an entry
        whose ``text`` is ``""``.
    """
    if not text:
        return []

    pieces = [p for p in _LABEL_SPLIT.split(text) if p.strip()]

    raw_entries: list[tuple[str, list[str]]] = []
    current: tuple[str, list[str]] | None = None

    for piece in pieces:
        stripped = piece.strip()
        if _LABEL.match(stripped):
            if current is not None:
                raw_entries.append(current)
            current = (stripped, [])
        elif current is not None:
            current[1].append(stripped)

    if current is not None:
        raw_entries.append(current)

    entries = [
        ReferenceEntry(id=label, text=normalize_whitespace(" ".join(parts)))
        for label, parts in raw_entries
    ]
    logger.debug("Parsed %d reference(s)", len(entries))
    return entries
