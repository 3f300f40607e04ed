"""
Integration Test Fixtures.

Fixtures for integration tests - real configuration files and a real audit
log, with HTTP answered by httpx.MockTransport. Secrets never come from the
developer's environment.
"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from modules.core.config import Settings, get_app_config, get_settings


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """No secrets from the environment; diagnostic logging left as conftest set it."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_ORGANIZATION", raising=False)
    get_settings.cache_clear()
    get_app_config.cache_clear()
    with patch("chat.get_settings", return_value=Settings(_env_file=None)), \
         patch("chat.setup_logging"):
        yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


@pytest.fixture
def runner() -> CliRunner:
    """Create Click test runner."""
    return CliRunner()
