"""Shared pytest fixtures for the doi_discovery test suite."""

import logging

import pytest

from doi_discovery.models import LookupResult


# ---------------------------------------------------------------------------
# Logger isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_doi_discovery_logger():
    """Clear the doi_discovery and HTTP client loggers between tests.

    Tests that call ``main()`` trigger ``setup_logging()``, which attaches
    handlers and sets ``propagate=False``.  Without this fixture the state
    leaks into subsequent tests and breaks ``caplog`` capture.
    """
    _clear_loggers()
    yield
    _clear_loggers()


def _clear_loggers():
    for name in ("doi_discovery", "httpx2"):
        logger = logging.getLogger(name)
        for h in logger.handlers[:]:
            try:
                h.close()
            except Exception:
                pass
            logger.removeHandler(h)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Sample input
# ---------------------------------------------------------------------------

SAMPLE_REFERENCES = """
[1] J. Hammer and C. J. L. Newth, "Assessment of thoraco-abdominal asyn chrony," Paediatric Respiratory Reviews, vol. 10, no. 2, pp. 75-80, 2009.
[2] P. -H. Huang, W. -C. Chung, C. -C. Sheu, J. -R. Tsai, and T. -C. Hsiao, "Is 
the asynchronous phase of thoracoabdominal movement a novel feature of 
successful extubation? A preliminary result," in 2021 43rd Annual Inter national Conference of the IEEE Engineering in Medicine & Biology So ciety (EMBC), Mexico, pp. 752-756, 2021.
"""


@pytest.fixture
def sample_references() -> str:
    """Two wrapped references as they come out of a PDF copy/paste."""
    return SAMPLE_REFERENCES


# ---------------------------------------------------------------------------
# Mock Crossref responses (dicts habanero would return)
# ---------------------------------------------------------------------------

MOCK_WORK = {
    "DOI": "10.1016/j.prrv.2009.03.002",
    "score": 87.4,
    "title": ["Assessment of thoraco-abdominal asynchrony"],
    "publisher": "Elsevier BV",
    "type": "journal-article",
}

MOCK_WORKS_RESPONSE = {
    "status": "ok",
    "message-type": "work-list",
    "message-version": "1.0.0",
    "message": {
        "total-results": 1234,
        "items-per-page": 1,
        "items": [MOCK_WORK],
    },
}

MOCK_EMPTY_RESPONSE = {
    "status": "ok",
    "message-type": "work-list",
    "message": {"total-results": 0, "items": []},
}


@pytest.fixture
def mock_works_response() -> dict:
    """A one-item works listing."""
    return {**MOCK_WORKS_RESPONSE, "message": {**MOCK_WORKS_RESPONSE["message"]}}


@pytest.fixture
def mock_empty_response() -> dict:
    return {**MOCK_EMPTY_RESPONSE, "message": {**MOCK_EMPTY_RESPONSE["message"]}}


# ---------------------------------------------------------------------------
# Stub resolvers
# ---------------------------------------------------------------------------


class StubResolver:
    """Resolver returning queued answers in order and recording each query.

    Queue items may be ``LookupResult`` instances or exceptions to raise.
    """

    def __init__(self, answers):
        self.answers = list(answers)
        self.queries: list[str] = []

    def __call__(self, text: str) -> LookupResult:
        self.queries.append(text)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def stub_resolver():
    """Factory fixture: ``stub_resolver([LookupResult(...), RuntimeError()])``."""
    return StubResolver
