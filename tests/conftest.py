"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/: Component tests (mocked hosted service HTTP)
    - unit/     : Unit tests (pure functions, no I/O)
"""
import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

# Set testing environment BEFORE any imports
os.environ.setdefault("ENV", "testing")

from tests.fixtures import (
    make_email,
    make_hosted_config,
    make_session_payload,
    make_user_payload,
    make_web_config,
)


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def hosted_config():
    """Hosted service config for a fake project"""
    return make_hosted_config()


@pytest.fixture
def web_config():
    """Web service config for a fake project"""
    return make_web_config()


# =============================================================================
# Auth Payload Fixtures
# =============================================================================

@pytest.fixture
def user_payload():
    """Auth user payload"""
    return make_user_payload(email=make_email("alice"))


@pytest.fixture
def session_payload(user_payload):
    """Valid session payload for user_payload"""
    return make_session_payload(user=user_payload)
