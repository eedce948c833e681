"""Logging setup for the doi-discovery CLI.

Call ``setup_logging`` once from ``cli.main()``.  Module loggers obtained via
``logging.getLogger(__name__)`` propagate to the ``"doi_discovery"`` package
logger configured here.

Console output goes through ``tqdm.write`` so that log lines printed while a
run is in progress do not tear the progress bar.  With ``verbose`` the same
handler is attached to the ``httpx2`` logger that habanero's HTTP transport
writes to, which puts every Crossref request URL and response status in the
log next to the resolver's own records.
"""

import logging
import sys
from pathlib import Path

from tqdm.auto import tqdm

_FMT = "%(asctime)s  %(levelname)-7s %(name)s: %(message)s"
_DATE = "%H:%M:%S"

HTTP_LOGGER = "httpx2"
"""Logger used by the HTTP client underneath ``habanero.Crossref``."""


class _TqdmHandler(logging.StreamHandler):
    """StreamHandler that writes above an active tqdm bar instead of through it."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure the ``doi_discovery`` logger for a CLI session.

    Args:
        verbose:  If True, set level to DEBUG (query text, Crossref result
                  counts and the per-request HTTP lines).  Default is INFO,
                  and the HTTP client is limited to warnings.
        log_file: If provided, attach a ``FileHandler`` that writes to this
                  path in addition to stderr.  Parent directories are created
                  automatically.

    Calling this function a second time (e.g., in tests) is safe: existing
    handlers are cleared before new ones are added.
    """
    logger = logging.getLogger("doi_discovery")
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    fmt = logging.Formatter(_FMT, datefmt=_DATE)

    handlers: list[logging.Handler] = []

    console = _TqdmHandler(sys.stderr)
    console.setFormatter(fmt)
    handlers.append(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        handlers.append(fh)

    for handler in handlers:
        logger.addHandler(handler)

    http_logger = logging.getLogger(HTTP_LOGGER)
    http_logger.handlers.clear()
    if verbose:
        http_logger.setLevel(logging.INFO)
        http_logger.propagate = False
        for handler in handlers:
            http_logger.addHandler(handler)
    else:
        http_logger.setLevel(logging.WARNING)
        http_logger.propagate = True
