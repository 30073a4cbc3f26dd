"""
Component Test Layer Configuration

Structure:
    tests/component/
    ├── hosted/       Hosted service client against MockHttpClient
    ├── web_service/  Business services and FastAPI routes
    └── mocks/        Mock implementations

Usage:
    pytest tests/component -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tenacity import wait_none

from tests.component.mocks import MockHttpClient


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


# =============================================================================
# HTTP Client Mocks
# =============================================================================

@pytest.fixture
def mock_http_client() -> MockHttpClient:
    """Mock HTTP client for hosted service calls"""
    return MockHttpClient()


@pytest.fixture
def no_retry_wait(monkeypatch):
    """Make token refresh retries immediate"""
    from core.hosted import auth as auth_module

    original_init = auth_module.AuthClient.__init__

    def init(self, *args, **kwargs):
        original_init(self, *args, **kwargs)
        self.refresh_wait = wait_none()

    monkeypatch.setattr(auth_module.AuthClient, "__init__", init)


# =============================================================================
# Bridged Handles
# =============================================================================

@pytest.fixture
def make_bridged(hosted_config, mock_http_client):
    """Factory: bridged handle for a request presenting the given Cookie header"""
    from types import SimpleNamespace

    from core.session_bridge import SessionBridgingClient

    def _make(cookie_header=None):
        request = SimpleNamespace(headers={"cookie": cookie_header} if cookie_header else {})
        return SessionBridgingClient(hosted_config, mock_http_client).create_handle(request)

    return _make
