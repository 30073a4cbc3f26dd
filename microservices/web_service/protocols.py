"""
Web Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, Optional, Protocol, runtime_checkable


# Custom exceptions

class WebServiceError(Exception):
    """Base web service error"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(WebServiceError):
    """Submitted form is incomplete"""
    pass


class InvalidActionError(WebServiceError):
    """Unknown CRUD action type"""
    pass


@runtime_checkable
class AuthApiProtocol(Protocol):
    """Interface for the handle's auth client"""

    async def get_user(self) -> Optional[Any]:
        """Current user or None"""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> Any:
        """Sign in"""
        ...

    async def sign_up(self, email: str, password: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Register"""
        ...

    async def sign_out(self, scope: str = "global") -> None:
        """Sign out"""
        ...


@runtime_checkable
class ServiceHandleProtocol(Protocol):
    """Interface for a request-bound hosted service handle"""

    auth: AuthApiProtocol

    def table(self, name: str) -> Any:
        """Query builder for one table"""
        ...
