"""Render resolution results as plain text.

Two audiences:

* **Copy text**: one line per result, in original order, meant for the
  clipboard: the DOI URL for resolved references, a fixed marker otherwise,
  optionally prefixed with the reference label.
* **Display text**: the per-item status lines and the results heading shown
  while a run is in progress.

No I/O is performed here; the caller decides where the strings go.
"""

from typing import Sequence

from doi_discovery.models import NETWORK_ERROR_MESSAGE, ResolutionResult

UNRESOLVED_MARKER = "Unknown/Unidentified"

_STATUS_TEXT: dict[str, str] = {
    "pending": "Resolving...",
    "not-found": "DOI Not Found",
    "error": NETWORK_ERROR_MESSAGE,
}


# ---------------------------------------------------------------------------
# Copy text
# ---------------------------------------------------------------------------


def format_copy_line(result: ResolutionResult, include_indices: bool = True) -> str:
    """One clipboard line for ``result``.

    ``"[3] https://doi.org/10.1/x"`` with indices, ``"https://doi.org/10.1/x"``
    without.  Non-resolved results render as ``UNRESOLVED_MARKER``.
    """
    content = result.doi_url or UNRESOLVED_MARKER
    if include_indices:
        return f"[{result.label}] {content}"
    return content


def format_copy_text(
    results: Sequence[ResolutionResult], include_indices: bool = True
) -> str:
    """All results as newline-joined clipboard lines, in original order."""
    return "\n".join(format_copy_line(r, include_indices) for r in results)


# ---------------------------------------------------------------------------
# Display text
# ---------------------------------------------------------------------------


def render_status(result: ResolutionResult) -> str:
    if result.status == "success":
        return f"{result.doi}  {result.title or ''}".rstrip()
    return _STATUS_TEXT[result.status]


def render_result(result: ResolutionResult) -> str:
    """Status line followed by the source line (``SRC [n] text``)."""
    return f"{render_status(result)}\n  SRC {result.id} {result.text}".rstrip()


def render_heading(results: Sequence[ResolutionResult]) -> str:
    resolved = sum(1 for r in results if r.status == "success")
    return f"Results ({resolved} / {len(results)} Resolved)"
