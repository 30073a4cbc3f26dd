"""
Cookie Header Codec

Parsing of the ``Cookie`` request header and serialization of ``Set-Cookie``
response headers.

Values are percent-encoded on the way out and percent-decoded on the way in,
so any string survives a round trip through the browser.
"""

import logging
import re
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# RFC 6265 cookie-name is an RFC 7230 token
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
# Characters allowed in Domain/Path attribute values
_ATTRIBUTE_VALUE_RE = re.compile(r"^[!-:<-~]*$")

# Left unescaped by encodeURIComponent in addition to what quote() keeps
_VALUE_SAFE = "!'()*"

# 400 days, the longest lifetime browsers accept
DEFAULT_MAX_AGE = 400 * 24 * 60 * 60

_SAME_SITE_VALUES = {"strict": "Strict", "lax": "Lax", "none": "None"}
_PRIORITY_VALUES = {"low": "Low", "medium": "Medium", "high": "High"}


class CookieOptions(BaseModel):
    """Attributes of a Set-Cookie instruction"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    path: Optional[str] = None
    domain: Optional[str] = None
    max_age: Optional[int] = Field(None, alias="maxAge")
    expires: Optional[datetime] = None
    http_only: bool = Field(False, alias="httpOnly")
    secure: bool = False
    partitioned: bool = False
    priority: Optional[str] = None
    same_site: Optional[Union[bool, str]] = Field(None, alias="sameSite")


def session_cookie_options(
    secure: bool = False,
    domain: Optional[str] = None,
) -> CookieOptions:
    """Default attributes for session cookies: site-wide, lax, long-lived"""
    return CookieOptions(
        path="/",
        same_site="lax",
        http_only=False,
        max_age=DEFAULT_MAX_AGE,
        secure=secure,
        domain=domain,
    )


def coerce_options(options: Union[CookieOptions, Mapping[str, Any], None]) -> CookieOptions:
    if options is None:
        return CookieOptions()
    if isinstance(options, CookieOptions):
        return options
    return CookieOptions.model_validate(dict(options))


def _decode(value: str) -> str:
    if "%" not in value:
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def parse_cookie_header(header: Optional[str]) -> List[Tuple[str, str]]:
    """
    Parse a Cookie header into ordered (name, value) pairs.

    Pairs without ``=`` or with an empty name are skipped. Surrounding double
    quotes are stripped and values are percent-decoded; a value that does not
    decode is kept as-is. Never raises.

    Args:
        header: Raw Cookie header value (may be None or empty)

    Returns:
        List of (name, value) pairs in header order
    """
    if not header or not isinstance(header, str):
        return []

    pairs: List[Tuple[str, str]] = []
    for chunk in header.split(";"):
        if "=" not in chunk:
            continue
        name, _, value = chunk.partition("=")
        name = name.strip()
        if not name:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            value = value[1:-1]
        pairs.append((name, _decode(value)))
    return pairs


def cookie_mapping(pairs: List[Tuple[str, str]]) -> Dict[str, str]:
    """Mapping view of parsed pairs; the first occurrence of a name wins"""
    result: Dict[str, str] = {}
    for name, value in pairs:
        result.setdefault(name, value)
    return result


def serialize_cookie_header(
    name: str,
    value: str,
    options: Union[CookieOptions, Mapping[str, Any], None] = None,
) -> str:
    """
    Serialize one Set-Cookie header value.

    Args:
        name: Cookie name (must be a token)
        value: Cookie value, percent-encoded on output
        options: CookieOptions or a mapping of attribute names

    Returns:
        e.g. ``sid=abc; Max-Age=60; Path=/; HttpOnly; SameSite=Lax``

    Raises:
        ValueError: If the name or an attribute is invalid
    """
    if not _TOKEN_RE.match(name or ""):
        raise ValueError(f"Invalid cookie name: {name!r}")

    opts = coerce_options(options)
    parts = [f"{name}={quote(value or '', safe=_VALUE_SAFE)}"]

    if opts.max_age is not None:
        parts.append(f"Max-Age={int(opts.max_age)}")

    if opts.domain:
        if not _ATTRIBUTE_VALUE_RE.match(opts.domain):
            raise ValueError(f"Invalid cookie domain: {opts.domain!r}")
        parts.append(f"Domain={opts.domain}")

    if opts.path:
        if not _ATTRIBUTE_VALUE_RE.match(opts.path):
            raise ValueError(f"Invalid cookie path: {opts.path!r}")
        parts.append(f"Path={opts.path}")

    if opts.expires is not None:
        expires = opts.expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        parts.append(f"Expires={format_datetime(expires.astimezone(timezone.utc), usegmt=True)}")

    if opts.http_only:
        parts.append("HttpOnly")

    if opts.secure:
        parts.append("Secure")

    if opts.partitioned:
        parts.append("Partitioned")

    if opts.priority:
        priority = _PRIORITY_VALUES.get(opts.priority.lower())
        if not priority:
            raise ValueError(f"Invalid cookie priority: {opts.priority!r}")
        parts.append(f"Priority={priority}")

    if opts.same_site is True:
        parts.append("SameSite=Strict")
    elif isinstance(opts.same_site, str):
        same_site = _SAME_SITE_VALUES.get(opts.same_site.lower())
        if not same_site:
            raise ValueError(f"Invalid cookie SameSite: {opts.same_site!r}")
        parts.append(f"SameSite={same_site}")

    return "; ".join(parts)


__all__ = [
    "CookieOptions",
    "DEFAULT_MAX_AGE",
    "session_cookie_options",
    "coerce_options",
    "parse_cookie_header",
    "cookie_mapping",
    "serialize_cookie_header",
]
