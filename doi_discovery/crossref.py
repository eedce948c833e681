"""Resolver client — look up one reference on the Crossref works API.

Wraps ``habanero.Crossref``.  Each lookup is a single bibliographic query
asking for the top candidate only (``rows=1``); Crossref's own relevance
ranking decides which work comes first and that work is accepted as is.

The public entry point is ``resolve_doi(text, ...)`` returning a
``LookupResult``.  It never raises: transport failures, error statuses and
malformed bodies all come back as ``found=False`` with a ``message``.
"""

import logging
from functools import partial
from typing import Any, Callable

import httpx2
from habanero import Crossref
from habanero.exceptions import RequestError
from pydantic import ValidationError

from doi_discovery import __version__
from doi_discovery.models import (
    UNKNOWN_TITLE,
    Config,
    CrossrefWork,
    CrossrefWorksResponse,
    LookupResult,
    ResolverError,
)

logger = logging.getLogger(__name__)

_USER_AGENT = f"doi-discovery/{__version__}"

Resolver = Callable[[str], LookupResult]
"""Anything that maps one reference text to a ``LookupResult``."""


# ---------------------------------------------------------------------------
# Client wrapper
# ---------------------------------------------------------------------------


class CrossrefClient:
    """Thin wrapper around ``habanero.Crossref`` for bibliographic lookups.

    Attributes:
        mailto: Contact address sent with every request (polite pool), or
                ``None``.
    """

    def __init__(self, mailto: str | None = None) -> None:
        self.mailto = mailto or None
        self._client = Crossref(mailto=self.mailto, ua_string=_USER_AGENT)

    @property
    def raw_client(self) -> Crossref:
        return self._client

    def top_match(self, text: str) -> CrossrefWork | None:
        """Return the first candidate for ``text``, or ``None`` if there is none.

        Raises:
            ResolverError: if the request fails, the service answers with a
                non-success status, or the body is not a works listing.
        """
        logger.debug("Querying Crossref: rows=1 mailto=%s query=%r", self.mailto, text)
        raw = self._works(text)
        response = _validate_response(raw)
        items = response.message.items
        logger.debug(
            "Crossref answered: %s total result(s), %d returned",
            response.message.total_results,
            len(items),
        )
        if not items:
            return None
        return items[0]

    def _works(self, text: str) -> Any:
        try:
            return self.raw_client.works(query_bibliographic=text, limit=1)
        except RequestError as exc:
            raise _api_error(exc.status_code, exc) from exc
        except httpx2.HTTPStatusError as exc:
            # non-JSON error body, re-raised by habanero unwrapped
            raise _api_error(exc.response.status_code, exc) from exc
        except RuntimeError as exc:
            # habanero wraps transport failures (DNS, timeout, reset) this way
            raise ResolverError(f"Request failed: {exc}") from exc


def _api_error(status: int, cause: Exception) -> ResolverError:
    logger.debug("Crossref error body: %s", cause)
    return ResolverError(f"API Error: {status}", status_code=status)


def _validate_response(raw: Any) -> CrossrefWorksResponse:
    if not isinstance(raw, dict):
        raise ResolverError(
            f"Unexpected response type from Crossref: {type(raw).__name__}"
        )
    try:
        response = CrossrefWorksResponse.model_validate(raw)
    except ValidationError as exc:
        raise ResolverError(f"Malformed Crossref response: {exc}") from exc
    if response.status != "ok":
        raise ResolverError(f"Crossref returned status {response.status!r}")
    return response


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def create_client(config: Config) -> CrossrefClient:
    """Create a client from configuration."""
    return CrossrefClient(mailto=config.mailto)


def resolve_doi(
    text: str,
    mailto: str | None = None,
    client: CrossrefClient | None = None,
) -> LookupResult:
    """Look up a single reference and return the normalized answer.

    Args:
        text:   The reference text, whitespace already normalized.
        mailto: Contact address for the polite pool.  Ignored when ``client``
                is given.
        client: A pre-built client to reuse across lookups.

    Returns:
        ``found=True`` with ``doi``, ``title`` and ``score`` of the first
        candidate; ``found=False`` when there is no candidate; ``found=False``
        with ``message`` when the lookup failed.
    """
    try:
        if client is None:
            client = CrossrefClient(mailto=mailto)
        work = client.top_match(text)
    except ResolverError as exc:
        logger.warning("Crossref lookup failed: %s", exc)
        return LookupResult(found=False, message=str(exc))
    except Exception as exc:
        logger.error("Error resolving DOI: %s: %s", exc.__class__.__name__, exc)
        return LookupResult(found=False, message=str(exc))

    if work is None:
        return LookupResult(found=False)

    return LookupResult(
        found=True,
        doi=work.DOI,
        title=work.title[0] if work.title else UNKNOWN_TITLE,
        score=work.score,
    )


def make_resolver(config: Config) -> Resolver:
    """Return a ``Resolver`` bound to one shared client for a whole run."""
    return partial(resolve_doi, client=create_client(config))
