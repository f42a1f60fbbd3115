# tests/conftest.py

from pathlib import Path

import pytest

from kubelet_summary_exporter.core.exceptions import ScrapeError, ScrapeErrorType

DATA_DIR = Path(__file__).parent / "data"

CONFIG_ENV_VARS = (
    "PROM_LISTEN",
    "METRICS_PATH",
    "NODE_HOST",
    "LOOK_UP_HOSTNAME",
    "TIMEOUT",
    "INSECURE",
    "CA_CRT",
    "TOKEN",
    "REQUIRE_TOKEN",
    "LOG_LEVEL",
)


class StubFetcher:
    """Stands in for SummaryFetcher: returns a fixed body or raises a fixed error."""

    url = "https://ip-1:10250/stats/summary"

    def __init__(self, body: bytes = None, error: ScrapeError = None):
        self.body = body
        self.error = error
        self.calls = 0

    def fetch(self) -> bytes:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.body


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    """
    Removes exporter configuration from the environment so each test starts
    from the documented defaults.
    """
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def load_data():
    """Returns the raw bytes of a file in tests/data."""

    def _load(name: str) -> bytes:
        return (DATA_DIR / name).read_bytes()

    return _load


@pytest.fixture
def token_file(tmp_path):
    """A bearer token file as mounted from a service account."""
    path = tmp_path / "token"
    path.write_text("test-token\n")
    return path


@pytest.fixture
def stub_fetcher():
    """Factory for StubFetcher instances."""

    def _make(body: bytes = None, error_type: ScrapeErrorType = None) -> StubFetcher:
        error = ScrapeError(error_type, f"simulated {error_type.value}") if error_type else None
        return StubFetcher(body=body, error=error)

    return _make
