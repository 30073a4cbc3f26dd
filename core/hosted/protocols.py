"""
Hosted Service Protocols (Interfaces)

Cookie access contract between a service handle and whoever owns the
request/response pair. NO import-time I/O dependencies.
"""
from typing import Dict, List, NamedTuple, Protocol, runtime_checkable

from core.cookies import CookieOptions


class CookieToSet(NamedTuple):
    """One Set-Cookie instruction requested by the service handle"""
    name: str
    value: str
    options: CookieOptions


@runtime_checkable
class CookieMethodsProtocol(Protocol):
    """
    Interface for request-bound cookie access.

    get_all exposes the cookies the request presented; set_all receives
    instructions in the order they must reach the browser.
    """

    def get_all(self) -> Dict[str, str]:
        """Cookies presented by the request"""
        ...

    def set_all(self, cookies: List[CookieToSet]) -> None:
        """Queue Set-Cookie instructions for the response"""
        ...
