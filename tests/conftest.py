import pytest
import sys
from pathlib import Path
import os
from dotenv import load_dotenv

# Add the project root to the Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment from .env for all tests (does not override existing env)
load_dotenv(project_root / ".env")


@pytest.fixture(scope="session")
def test_project_root():
    """Provide a test project root path."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def mock_environment(monkeypatch, request):
    """Mock environment variables for unit tests only.

    Skips mocking when running tests marked with `integration` so that real
    environment variables from .env are used for live server tests.
    """
    if request.node.get_closest_marker("integration") is not None:
        return

    monkeypatch.setenv("DISCORD_TOKEN", "test_discord_token")
    monkeypatch.setenv("SEERR_URL", "http://localhost:5055")
    monkeypatch.setenv("SEERR_API_KEY", "test_seerr_key")
    monkeypatch.setenv("OMDB_API_KEY", "test_omdb_key")
    monkeypatch.setenv("OPENAI_API_KEY", "test_openai_key")
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("DISCORD_GUILD_ID", raising=False)


# ---------------------- Integration CLI options ----------------------
def pytest_addoption(parser):
    parser.addoption("--seerr-url", action="store", default=None, help="Seerr server URL for integration tests (overrides .env)")
    parser.addoption("--seerr-key", action="store", default=None, help="Seerr API key for integration tests (overrides .env)")


@pytest.fixture(scope="session")
def seerr_config(request):
    url = request.config.getoption("--seerr-url") or os.getenv("SEERR_URL")
    key = request.config.getoption("--seerr-key") or os.getenv("SEERR_API_KEY")
    if not url or not key:
        pytest.skip("Seerr URL or API key not provided (set .env or pass CLI options)")
    return {"url": url, "api_key": key}


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
