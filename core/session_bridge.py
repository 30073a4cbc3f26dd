"""
Session Bridging Client

Builds a per-request hosted service handle whose session cookies are read
from the inbound request and whose cookie changes (sign-in, token refresh,
sign-out) are collected as Set-Cookie headers for the outgoing response.

Lifecycle of one bridge: created -> handle in use -> headers finalized.
A bridge, its handle and its header accumulator belong to one request only.

Usage:
    bridge = SessionBridgingClient(config.hosted, http_client)
    bridged = bridge.create_handle(request)
    user = await bridged.handle.auth.get_user()
    return bridged.apply_to(response)
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

import httpx

from core.config import HostedServiceConfig
from core.cookies import CookieOptions, cookie_mapping, parse_cookie_header, serialize_cookie_header
from core.hosted import CookieToSet, HostedServiceHandle

logger = logging.getLogger(__name__)


class InboundCookieSet:
    """Immutable snapshot of the cookies one request presented"""

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Tuple[Tuple[str, str], ...] = ()):
        self._pairs = tuple(pairs)

    @classmethod
    def from_header(cls, header: Optional[str]) -> "InboundCookieSet":
        """Parse a Cookie header; anything unparsable yields an empty set"""
        try:
            return cls(tuple(parse_cookie_header(header)))
        except Exception as e:
            logger.debug(f"Ignoring malformed Cookie header: {e}")
            return cls()

    @property
    def pairs(self) -> Tuple[Tuple[str, str], ...]:
        return self._pairs

    def as_mapping(self) -> Dict[str, str]:
        return cookie_mapping(list(self._pairs))

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._pairs)


class OutboundHeaderAccumulator:
    """
    Append-only response headers of one request.

    Appends are lock-guarded so concurrent calls through one handle keep
    their order. Once finalized, no more headers are accepted.
    """

    def __init__(self):
        self._headers: List[Tuple[str, str]] = []
        self._lock = threading.Lock()
        self._finalized = False

    def append(self, name: str, value: str) -> None:
        with self._lock:
            if self._finalized:
                raise RuntimeError("Response headers already finalized")
            self._headers.append((name, value))

    def items(self) -> List[Tuple[str, str]]:
        with self._lock:
            return list(self._headers)

    def get_all(self, name: str) -> List[str]:
        lowered = name.lower()
        return [value for key, value in self.items() if key.lower() == lowered]

    def finalize(self) -> List[Tuple[str, str]]:
        """Mark the accumulator read and return its headers"""
        with self._lock:
            self._finalized = True
            return list(self._headers)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def __len__(self) -> int:
        with self._lock:
            return len(self._headers)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.items())


class BridgedCookieMethods:
    """Cookie callbacks handed to the service handle"""

    def __init__(self, inbound: InboundCookieSet, headers: OutboundHeaderAccumulator):
        self.inbound = inbound
        self.headers = headers

    def get_all(self) -> Dict[str, str]:
        return self.inbound.as_mapping()

    def set_all(self, cookies: List[CookieToSet]) -> None:
        for name, value, options in cookies:
            self.headers.append("Set-Cookie", serialize_cookie_header(name, value, options))


@dataclass
class BridgedHandle:
    """A service handle plus the headers its calls produced"""
    handle: HostedServiceHandle
    response_headers: OutboundHeaderAccumulator
    cookies: BridgedCookieMethods

    def apply_to(self, response: Any) -> Any:
        """Finalize the accumulated headers onto a Starlette response"""
        for name, value in self.response_headers.finalize():
            response.headers.append(name, value)
        return response


def _cookie_header(request: Any) -> Optional[str]:
    headers = getattr(request, "headers", None)
    if headers is None:
        return None
    # HTTP/2 clients may split cookies over several Cookie headers
    if hasattr(headers, "getlist"):
        return "; ".join(headers.getlist("cookie")) or None
    return headers.get("cookie") or headers.get("Cookie")


class SessionBridgingClient:
    """
    Creates the service handle of one request.

    Args:
        config: Hosted service endpoint and access key (validated at startup)
        http_client: Process-wide HTTP client shared by all handles
        cookie_options: Attributes for session cookies
    """

    def __init__(
        self,
        config: HostedServiceConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        cookie_options: Optional[CookieOptions] = None,
    ):
        self.config = config
        self.http_client = http_client
        self.cookie_options = cookie_options
        self._bridged: Optional[BridgedHandle] = None

    def create_handle(self, request: Any) -> BridgedHandle:
        """
        Bind a new service handle to the request's cookies.

        Raises:
            RuntimeError: If this bridge already produced a handle
        """
        if self._bridged is not None:
            raise RuntimeError("SessionBridgingClient cannot be reused across requests")

        inbound = InboundCookieSet.from_header(_cookie_header(request))
        headers = OutboundHeaderAccumulator()
        cookies = BridgedCookieMethods(inbound, headers)
        handle = HostedServiceHandle(
            self.config,
            cookies,
            http_client=self.http_client,
            cookie_options=self.cookie_options,
        )
        self._bridged = BridgedHandle(handle=handle, response_headers=headers, cookies=cookies)
        logger.debug(f"Bridged handle created ({len(inbound)} inbound cookie(s))")
        return self._bridged


def get_server_client(
    request: Any,
    config: HostedServiceConfig,
    http_client: Optional[httpx.AsyncClient] = None,
) -> BridgedHandle:
    """Shortcut: fresh bridge + handle for one request"""
    return SessionBridgingClient(config, http_client).create_handle(request)


__all__ = [
    "InboundCookieSet",
    "OutboundHeaderAccumulator",
    "BridgedCookieMethods",
    "BridgedHandle",
    "SessionBridgingClient",
    "get_server_client",
]
