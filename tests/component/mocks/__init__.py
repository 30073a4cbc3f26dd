"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (hosted service HTTP calls).
"""

from .http_mock import MockHttpClient, MockHttpResponse
from .service_handle_mock import MockAuthClient, MockServiceHandle, MockTable, MockTableQuery

__all__ = [
    'MockHttpClient',
    'MockHttpResponse',
    'MockAuthClient',
    'MockServiceHandle',
    'MockTable',
    'MockTableQuery',
]
