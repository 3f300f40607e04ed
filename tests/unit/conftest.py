"""
Unit Test Fixtures.

Fixtures for unit tests - the HTTP layer is mocked.
Unit tests should be fast and isolated, never touching the network.
"""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from modules.completion.client import CompletionClient
from modules.core.audit import AuditLog, open_audit_log


@pytest.fixture
def mock_client() -> MagicMock:
    """
    Mock CompletionClient for session tests.

    Usage:
        def test_turn(mock_client):
            mock_client.complete.return_value = [DisplayChoice(index=0, text="Hi")]
    """
    client = MagicMock(spec=CompletionClient)
    client.complete.return_value = []
    return client


@pytest.fixture
def audit_path(tmp_path: Path) -> Path:
    return tmp_path / "audit.log"


@pytest.fixture
def audit_log(audit_path: Path) -> Generator[AuditLog, None, None]:
    """Real audit log in a temporary directory, closed after the test."""
    audit = open_audit_log(audit_path)
    yield audit
    audit.close()
