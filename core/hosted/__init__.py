"""
Hosted auth/database service client.

Per-request handle whose session state lives in cookies.
"""
from .client import HostedServiceHandle
from .errors import (
    AuthApiError,
    AuthRetryableFetchError,
    AuthSessionMissingError,
    HostedServiceError,
    PostgrestError,
)
from .models import APIResponse, AuthResponse, AuthSession, AuthUser
from .protocols import CookieMethodsProtocol, CookieToSet

__all__ = [
    "HostedServiceHandle",
    "HostedServiceError",
    "AuthApiError",
    "AuthRetryableFetchError",
    "AuthSessionMissingError",
    "PostgrestError",
    "APIResponse",
    "AuthResponse",
    "AuthSession",
    "AuthUser",
    "CookieMethodsProtocol",
    "CookieToSet",
]
