"""Tests for doi_discovery/log.py — console, file and HTTP client logging."""

import logging
import re
from unittest.mock import patch

from doi_discovery.log import HTTP_LOGGER, setup_logging


def _console_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [
        h
        for h in logger.handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
    ]


# ---------------------------------------------------------------------------
# Package logger  (state reset handled by conftest._reset_doi_discovery_logger)
# ---------------------------------------------------------------------------


def test_setup_logging_adds_one_console_handler():
    setup_logging()
    assert len(_console_handlers(logging.getLogger("doi_discovery"))) == 1


def test_setup_logging_levels():
    setup_logging()
    assert logging.getLogger("doi_discovery").level == logging.INFO
    setup_logging(verbose=True)
    assert logging.getLogger("doi_discovery").level == logging.DEBUG


def test_setup_logging_is_idempotent():
    setup_logging(verbose=True)
    setup_logging(verbose=True)
    assert len(_console_handlers(logging.getLogger("doi_discovery"))) == 1
    assert len(_console_handlers(logging.getLogger(HTTP_LOGGER))) == 1


def test_setup_logging_file_handler_created(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    setup_logging(log_file=log_file)
    logging.getLogger("doi_discovery.crossref").warning("Crossref lookup failed: x")
    logger = logging.getLogger("doi_discovery")
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert "Crossref lookup failed: x" in log_file.read_text(encoding="utf-8")


def test_module_records_reach_stderr_with_timestamp_and_name(capsys):
    setup_logging()
    logging.getLogger("doi_discovery.orchestrator").info("[1/2] success  [1]")
    err = capsys.readouterr().err
    assert re.search(r"\d{2}:\d{2}:\d{2}", err), f"No timestamp found in: {err!r}"
    assert "doi_discovery.orchestrator: [1/2] success  [1]" in err


def test_debug_records_hidden_unless_verbose(capsys):
    setup_logging()
    logging.getLogger("doi_discovery.crossref").debug("Querying Crossref: rows=1")
    assert "Querying Crossref" not in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Progress bar interplay
# ---------------------------------------------------------------------------


def test_console_output_goes_through_tqdm_write():
    """Log lines are printed above the bar rather than into it."""
    setup_logging()
    with patch("doi_discovery.log.tqdm.write") as mock_write:
        logging.getLogger("doi_discovery.cli").info("Done: Results (1 / 2 Resolved)")
    mock_write.assert_called_once()
    line = mock_write.call_args.args[0]
    assert line.endswith("doi_discovery.cli: Done: Results (1 / 2 Resolved)")


# ---------------------------------------------------------------------------
# HTTP client logger
# ---------------------------------------------------------------------------


def test_verbose_shows_http_request_lines(capsys):
    setup_logging(verbose=True)
    logging.getLogger(HTTP_LOGGER).info(
        'HTTP Request: GET https://api.crossref.org/works?rows=1 "HTTP/1.1 200 OK"'
    )
    err = capsys.readouterr().err
    assert "httpx2: HTTP Request: GET https://api.crossref.org/works" in err


def test_http_request_lines_hidden_by_default(capsys):
    setup_logging()
    http_logger = logging.getLogger(HTTP_LOGGER)
    assert http_logger.level == logging.WARNING
    assert http_logger.handlers == []
    http_logger.info("HTTP Request: GET https://api.crossref.org/works")
    assert "HTTP Request" not in capsys.readouterr().err


def test_dropping_verbose_detaches_http_handlers():
    setup_logging(verbose=True)
    setup_logging(verbose=False)
    http_logger = logging.getLogger(HTTP_LOGGER)
    assert http_logger.handlers == []
    assert http_logger.propagate is True
