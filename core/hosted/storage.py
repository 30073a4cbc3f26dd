"""
Cookie Session Storage

Stores the auth session in browser cookies. The session JSON is encoded as
``base64-<base64url>`` and split into numbered chunk cookies when it does not
fit a single cookie.
"""

import base64
import binascii
import logging
from typing import Dict, List, Optional
from urllib.parse import urlparse

from core.cookies import CookieOptions, session_cookie_options

from .protocols import CookieMethodsProtocol, CookieToSet

logger = logging.getLogger(__name__)

BASE64_PREFIX = "base64-"
MAX_CHUNK_SIZE = 3180


def storage_key_for(supabase_url: str) -> str:
    """sb-<project-ref>-auth-token, project-ref being the first host label"""
    host = urlparse(supabase_url).hostname or ""
    project_ref = host.split(".")[0] if host else "local"
    return f"sb-{project_ref}-auth-token"


def encode_session_value(raw: str) -> str:
    encoded = base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")
    return f"{BASE64_PREFIX}{encoded}"


def decode_session_value(value: str) -> Optional[str]:
    """Decode a stored value; plain JSON is returned unchanged, garbage as None"""
    if not value.startswith(BASE64_PREFIX):
        return value
    payload = value[len(BASE64_PREFIX):]
    padding = "=" * (-len(payload) % 4)
    try:
        return base64.urlsafe_b64decode(payload + padding).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.debug("Discarding undecodable session cookie")
        return None


def chunk_value(value: str, size: int = MAX_CHUNK_SIZE) -> List[str]:
    return [value[i:i + size] for i in range(0, len(value), size)] or [""]


class CookieSessionStorage:
    """
    Session storage on top of request-bound cookie methods.

    Writes are kept in an overlay so later reads within the same request see
    them, while the cookies the request presented stay untouched.
    """

    def __init__(
        self,
        storage_key: str,
        cookies: CookieMethodsProtocol,
        cookie_options: Optional[CookieOptions] = None,
    ):
        self.storage_key = storage_key
        self.cookies = cookies
        self.cookie_options = cookie_options or session_cookie_options()
        self._overlay: Dict[str, Optional[str]] = {}

    def _current(self) -> Dict[str, str]:
        current = dict(self.cookies.get_all())
        for name, value in self._overlay.items():
            if value is None:
                current.pop(name, None)
            else:
                current[name] = value
        return current

    def _owned_names(self, current: Dict[str, str]) -> List[str]:
        prefix = f"{self.storage_key}."
        return [
            name for name in current
            if name == self.storage_key
            or (name.startswith(prefix) and name[len(prefix):].isdigit())
        ]

    def get_item(self) -> Optional[str]:
        """Stored session JSON, or None"""
        current = self._current()
        if self.storage_key in current:
            value = current[self.storage_key]
        else:
            chunks = []
            index = 0
            while f"{self.storage_key}.{index}" in current:
                chunks.append(current[f"{self.storage_key}.{index}"])
                index += 1
            if not chunks:
                return None
            value = "".join(chunks)
        if not value:
            return None
        return decode_session_value(value)

    def set_item(self, raw: str) -> None:
        """Store session JSON, replacing whatever cookies held it before"""
        current = self._current()
        chunks = chunk_value(encode_session_value(raw))
        if len(chunks) == 1:
            to_set = {self.storage_key: chunks[0]}
        else:
            to_set = {f"{self.storage_key}.{i}": chunk for i, chunk in enumerate(chunks)}

        stale = [name for name in self._owned_names(current) if name not in to_set]
        self._write(removals=stale, values=to_set)

    def remove_item(self) -> None:
        """Expire every cookie holding the session"""
        names = self._owned_names(self._current())
        if names:
            self._write(removals=names, values={})

    def _write(self, removals: List[str], values: Dict[str, str]) -> None:
        removal_options = self.cookie_options.model_copy(update={"max_age": 0, "expires": None})
        instructions = [CookieToSet(name, "", removal_options) for name in removals]
        instructions.extend(
            CookieToSet(name, value, self.cookie_options) for name, value in values.items()
        )
        for name in removals:
            self._overlay[name] = None
        self._overlay.update(values)
        logger.debug(
            f"Session cookies: set={list(values)} removed={removals}"
        )
        self.cookies.set_all(instructions)


__all__ = [
    "CookieSessionStorage",
    "storage_key_for",
    "encode_session_value",
    "decode_session_value",
    "chunk_value",
    "MAX_CHUNK_SIZE",
]
