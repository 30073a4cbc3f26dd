"""
Hosted Service Handle

Per-request capability object: auth calls plus table queries, with session
state read from and written to the request's cookie methods.
"""

import logging
from typing import Optional

import httpx

from core.config import HostedServiceConfig
from core.cookies import CookieOptions, session_cookie_options

from .auth import AuthClient
from .protocols import CookieMethodsProtocol
from .query import TableQuery
from .storage import CookieSessionStorage, storage_key_for

logger = logging.getLogger(__name__)


class HostedServiceHandle:
    """
    Hosted auth + database handle bound to one request.

    Example:
        handle = HostedServiceHandle(config, cookies, http_client)
        user = await handle.auth.get_user()
        rows = (await handle.table("items").select("*").execute()).data
    """

    def __init__(
        self,
        config: HostedServiceConfig,
        cookies: CookieMethodsProtocol,
        http_client: Optional[httpx.AsyncClient] = None,
        cookie_options: Optional[CookieOptions] = None,
    ):
        self.config = config
        self.cookies = cookies
        self.http_client = http_client
        self.storage = CookieSessionStorage(
            storage_key_for(config.base_url),
            cookies,
            cookie_options or session_cookie_options(
                secure=config.cookie_secure, domain=config.cookie_domain
            ),
        )
        self.auth = AuthClient(config, self.storage, http_client)

    def table(self, name: str) -> TableQuery:
        """Start a query on the named table"""
        return TableQuery(self.config, name, self.auth.access_token, self.auth.client)

    from_ = table

    async def close(self):
        await self.auth.close()


__all__ = ["HostedServiceHandle"]
