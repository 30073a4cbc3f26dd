"""
Hosted Service Errors

Errors raised by calls issued through a service handle. None of them are
handled inside the handle; they propagate to the caller.
"""
from typing import Optional


class HostedServiceError(Exception):
    """Base error for any failure reported by the hosted service"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthApiError(HostedServiceError):
    """Auth endpoint rejected the request"""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message, status_code)
        self.code = code


class AuthSessionMissingError(AuthApiError):
    """No session is presented by the request"""

    def __init__(self):
        super().__init__("Auth session missing!", 400, "session_missing")


class AuthRetryableFetchError(AuthApiError):
    """Transport failure or gateway error; the call may be retried"""
    pass


class PostgrestError(HostedServiceError):
    """Table endpoint rejected the request"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message, status_code)
        self.code = code
        self.details = details
        self.hint = hint


__all__ = [
    "HostedServiceError",
    "AuthApiError",
    "AuthSessionMissingError",
    "AuthRetryableFetchError",
    "PostgrestError",
]
