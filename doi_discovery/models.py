"""Pydantic models, dataclass Config, and exceptions for DOI discovery.

This module only defines the *schema* of the data that flows through the
resolver: parsed reference entries, per-item resolution results, the
normalized lookup answer, the subset of the Crossref works response that is
read, and runtime configuration.
"""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DOI_RESOLVER_URL = "https://doi.org/"

UNKNOWN_TITLE = "Unknown Title"
"""Placeholder title used when the matched work carries no title."""

NETWORK_ERROR_MESSAGE = "Network Error"

_DEFAULT_DELAY_S = 0.3

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

ResolutionStatus = Literal["pending", "success", "not-found", "error"]
"""``pending`` is the only non-terminal state."""

# ---------------------------------------------------------------------------
# Parsed references
# ---------------------------------------------------------------------------


class ReferenceEntry(BaseModel):
    """One labelled reference split out of the pasted text.

    ``id`` is the label exactly as it appeared (e.g. ``"[1]"``); ``text`` has
    all whitespace runs collapsed to single spaces.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    text: str

    @property
    def label(self) -> str:
        """The id with its brackets stripped (``"[3]"`` -> ``"3"``)."""
        return self.id.replace("[", "").replace("]", "")


class ResolutionResult(ReferenceEntry):
    """A reference entry plus its resolution state.

    Created in the ``pending`` state by ``from_entry`` and updated in place by
    the orchestrator once its lookup has finished.
    """

    model_config = ConfigDict(frozen=False)

    status: ResolutionStatus = "pending"
    doi: str | None = None
    title: str | None = None
    message: str | None = None

    @classmethod
    def from_entry(cls, entry: ReferenceEntry) -> "ResolutionResult":
        return cls(id=entry.id, text=entry.text)

    @property
    def doi_url(self) -> str | None:
        if self.status != "success" or not self.doi:
            return None
        return f"{DOI_RESOLVER_URL}{self.doi}"


class Progress(BaseModel):
    """Count of entries processed so far out of the total."""

    current: int = 0
    total: int = 0


# ---------------------------------------------------------------------------
# Lookup answer (Resolver Client output)
# ---------------------------------------------------------------------------


class LookupResult(BaseModel):
    """Normalized answer for a single reference lookup.

    ``found=False`` with ``message=None`` means the service answered but had
    no candidate.  ``found=False`` with a ``message`` means the lookup itself
    failed and the failure was absorbed by the client.
    """

    found: bool
    doi: str | None = None
    title: str | None = None
    score: float | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Crossref works response (only the fields that are read)
# ---------------------------------------------------------------------------


class CrossrefWork(BaseModel):
    """One candidate work.  ``score`` is Crossref's opaque relevance score."""

    DOI: str
    score: float | None = None
    title: list[str] = Field(default_factory=list)


class CrossrefWorksMessage(BaseModel):
    items: list[CrossrefWork] = Field(default_factory=list)
    total_results: int | None = Field(None, alias="total-results")


class CrossrefWorksResponse(BaseModel):
    status: str = "ok"
    message: CrossrefWorksMessage


# ---------------------------------------------------------------------------
# Config (dataclass, not pydantic; holds runtime settings)
# ---------------------------------------------------------------------------


@dataclass
class Config:
    """Runtime configuration for a resolution run.

    All fields correspond to CLI flags.

    Attributes:
        mailto:          Contact address sent with every Crossref request so
                         that it is served from the polite pool.  ``None``
                         sends no address.
        delay_s:         Fixed pause, in seconds, between consecutive lookups.
        include_indices: If True, copy-text lines are prefixed with the
                         bracketed reference label.
        verbose:         If True, log at DEBUG level.
    """

    mailto: str | None = None
    delay_s: float = _DEFAULT_DELAY_S
    include_indices: bool = True
    verbose: bool = False


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ResolverError(Exception):
    """Raised when a Crossref request fails or returns an unusable response.

    Attributes:
        status_code: HTTP status of the failed response, if one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SessionBusyError(Exception):
    """Raised when a session is reset or restarted while a run is in flight."""
