"""Resolution orchestrator — resolve parsed references one at a time.

Each run goes through the same steps:

1. Every entry gets a ``pending`` result and the full list is published.
2. Entries are looked up strictly in order, one request in flight at most.
3. After each lookup the entry's result is updated in place, progress is
   advanced, and the full list is published again.
4. A fixed pause separates consecutive lookups.

A fault raised by the resolver only marks that entry as ``error``; the run
always continues to the last entry.

``ResolutionSession`` holds the state an interactive surface needs (input
text, toggles, results, progress) and lets that surface subscribe to updates.
"""

import logging
import sys
import threading
import time
from typing import Callable, Sequence

from tqdm.auto import tqdm

from doi_discovery.crossref import Resolver, make_resolver
from doi_discovery.models import (
    NETWORK_ERROR_MESSAGE,
    _DEFAULT_DELAY_S,
    Config,
    LookupResult,
    Progress,
    ReferenceEntry,
    ResolutionResult,
    SessionBusyError,
)
from doi_discovery.parser import parse_references
from doi_discovery.renderer import format_copy_text

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[list[ResolutionResult], Progress], None]


# ---------------------------------------------------------------------------
# Per-entry step
# ---------------------------------------------------------------------------


def apply_lookup(result: ResolutionResult, lookup: LookupResult) -> None:
    """Move ``result`` out of ``pending`` according to the lookup answer."""
    if lookup.found:
        result.status = "success"
        result.doi = lookup.doi
        result.title = lookup.title
        result.message = None
    else:
        result.status = "not-found"
        result.doi = None
        result.title = None
        result.message = lookup.message


def apply_error(result: ResolutionResult) -> None:
    result.status = "error"
    result.doi = None
    result.title = None
    result.message = NETWORK_ERROR_MESSAGE


def _resolve_one(result: ResolutionResult, resolver: Resolver) -> None:
    try:
        lookup = resolver(result.text)
    except Exception as exc:
        logger.error(
            "  %s Lookup raised %s: %s", result.id, exc.__class__.__name__, exc
        )
        apply_error(result)
        return
    apply_lookup(result, lookup)


def _snapshot(results: Sequence[ResolutionResult]) -> list[ResolutionResult]:
    return [r.model_copy() for r in results]


# ---------------------------------------------------------------------------
# Sequential runner
# ---------------------------------------------------------------------------


def resolve_all(
    entries: Sequence[ReferenceEntry],
    resolver: Resolver,
    delay_s: float = _DEFAULT_DELAY_S,
    on_update: UpdateCallback | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[ResolutionResult]:
    """Resolve every entry in order and return the final results.

    Args:
        entries:   Parsed references, in display order.
        resolver:  Called once per entry with the entry's text.
        delay_s:   Pause between consecutive lookups.  No pause follows the
                   last entry.
        on_update: Called with a snapshot of all results and the current
                   progress: once after initialization, then once per entry.
        sleep:     Pause implementation; replaced in tests.

    Returns:
        One ``ResolutionResult`` per entry, same length and order as
        ``entries``, every one in a terminal state.
    """
    results = [ResolutionResult.from_entry(e) for e in entries]
    total = len(results)
    progress = Progress(current=0, total=total)

    def publish() -> None:
        if on_update is not None:
            on_update(_snapshot(results), progress.model_copy())

    publish()
    logger.info("Resolving %d reference(s)", total)

    show_progress = sys.stderr.isatty()

    with tqdm(
        total=total,
        desc="Resolve",
        unit="ref",
        disable=not show_progress,
        leave=True,
    ) as bar:
        for idx, result in enumerate(results, start=1):
            _resolve_one(result, resolver)
            progress.current = idx
            _log_outcome(result, idx, total)
            publish()

            bar.update(1)
            bar.set_postfix(ok=sum(r.status == "success" for r in results[:idx]))

            if idx < total and delay_s > 0:
                sleep(delay_s)

    return results


def _log_outcome(result: ResolutionResult, idx: int, total: int) -> None:
    if result.status == "success":
        logger.info("  [%d/%d] %s -> %s", idx, total, result.id, result.doi)
    elif result.status == "error":
        logger.error("  [%d/%d] %s -> %s", idx, total, result.id, result.message)
    elif result.message:
        logger.warning(
            "  [%d/%d] %s -> not found (%s)", idx, total, result.id, result.message
        )
    else:
        logger.info("  [%d/%d] %s -> not found", idx, total, result.id)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class ResolutionSession:
    """Mutable state behind one interactive resolver surface.

    Holds the pasted text, the contact address, the copy toggle, and the
    results and progress of the latest run.  Subscribers are called with a
    snapshot after every change made by ``resolve`` or ``clear``.

    Only one run may be in flight: ``resolve`` and ``clear`` both raise
    ``SessionBusyError`` while a run is active.
    """

    def __init__(
        self,
        config: Config | None = None,
        resolver: Resolver | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or Config()
        self.input_text = ""
        self.mailto = self.config.mailto
        self.include_indices = self.config.include_indices
        self.results: list[ResolutionResult] = []
        self.progress = Progress()
        self._resolver = resolver
        self._sleep = sleep
        self._subscribers: list[UpdateCallback] = []
        self._lock = threading.Lock()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def subscribe(self, callback: UpdateCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: UpdateCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def resolve(self) -> list[ResolutionResult]:
        """Parse ``input_text`` and resolve every reference in it.

        Blank input is a no-op and returns an empty list without notifying
        subscribers.

        Raises:
            SessionBusyError: if a run is already in flight.
        """
        if not self.input_text.strip():
            return []

        self._start()
        try:
            entries = parse_references(self.input_text)
            resolver = self._resolver or make_resolver(
                Config(mailto=self.mailto, delay_s=self.config.delay_s)
            )
            return resolve_all(
                entries,
                resolver,
                delay_s=self.config.delay_s,
                on_update=self._on_update,
                sleep=self._sleep,
            )
        finally:
            with self._lock:
                self._running = False

    def clear(self) -> None:
        """Reset input, results, and progress.

        Raises:
            SessionBusyError: if a run is in flight.
        """
        with self._lock:
            if self._running:
                raise SessionBusyError("Cannot clear while a resolution is running")
            self.input_text = ""
            self.results = []
            self.progress = Progress()
        self._notify()

    def copy_text(self) -> str:
        """Plain-text rendering of the current results for the clipboard."""
        return format_copy_text(self.results, include_indices=self.include_indices)

    def _start(self) -> None:
        with self._lock:
            if self._running:
                raise SessionBusyError("A resolution is already running")
            self._running = True

    def _on_update(self, results: list[ResolutionResult], progress: Progress) -> None:
        self.results = results
        self.progress = progress
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(_snapshot(self.results), self.progress.model_copy())
