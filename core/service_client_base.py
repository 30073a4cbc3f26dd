"""
Base Client for the Hosted Auth/Database Service

Base class of the per-request hosted service clients. Adds the project access
key to every request and wraps a shared httpx.AsyncClient.
"""

import httpx
import logging
from typing import Optional, Dict, Any, List, Tuple, Union
from abc import ABC

from core.config import HostedServiceConfig

logger = logging.getLogger(__name__)

# Mapping, or a list of pairs when a key repeats
QueryParams = Union[Dict[str, Any], List[Tuple[str, str]]]


class BaseServiceClient(ABC):
    """
    Hosted service client base

    Handles:
    1. Base URL and API prefix
    2. Access key headers (apikey + anon bearer fallback)
    3. HTTP client ownership (shared client is never closed here)

    Example:
        class StorageClient(BaseServiceClient):
            api_prefix = "/storage/v1"

            async def list_buckets(self):
                response = await self.get("/bucket")
                return response.json()
    """

    # Subclasses set their API prefix, e.g. "/auth/v1"
    api_prefix: str = ""
    client_info: str = "items-web-python/1.0.0"

    def __init__(
        self,
        config: HostedServiceConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize hosted service client

        Args:
            config: Hosted service endpoint and access key
            http_client: Shared HTTP client (a private one is created if omitted)
        """
        self.config = config
        self.base_url = f"{config.base_url}{self.api_prefix}"
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=config.http_timeout)

        logger.debug(
            f"Initialized {self.__class__.__name__}: {self.base_url} "
            f"(shared_client={'no' if self._owns_client else 'yes'})"
        )

    def _build_headers(
        self,
        access_token: Optional[str] = None,
        extra: Optional[Dict[str, str]] = None,
    ) -> Dict[str, str]:
        """
        Build request headers

        Args:
            access_token: User JWT; the anon key is used as bearer when absent
            extra: Additional headers

        Returns:
            Headers dict
        """
        headers = {
            "apikey": self.config.supabase_anon_key or "",
            "Authorization": f"Bearer {access_token or self.config.supabase_anon_key}",
            "X-Client-Info": self.client_info,
        }
        if extra:
            headers.update(extra)
        return headers

    async def close(self):
        """Close the HTTP client if this instance created it"""
        if self._owns_client:
            await self.client.aclose()
            logger.debug(f"Closed {self.__class__.__name__} client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================
    # HTTP methods
    # ========================================

    async def get(
        self,
        path: str,
        params: Optional[QueryParams] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """GET request"""
        url = f"{self.base_url}{path}"
        return await self.client.get(url, params=params, headers=headers)

    async def post(
        self,
        path: str,
        json: Optional[Any] = None,
        params: Optional[QueryParams] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """POST request"""
        url = f"{self.base_url}{path}"
        return await self.client.post(url, json=json, params=params, headers=headers)

    async def patch(
        self,
        path: str,
        json: Optional[Any] = None,
        params: Optional[QueryParams] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """PATCH request"""
        url = f"{self.base_url}{path}"
        return await self.client.patch(url, json=json, params=params, headers=headers)

    async def delete(
        self,
        path: str,
        params: Optional[QueryParams] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """DELETE request"""
        url = f"{self.base_url}{path}"
        return await self.client.delete(url, params=params, headers=headers)

    @staticmethod
    def json_body(response: httpx.Response) -> Optional[Any]:
        """Decoded JSON body, or None for empty/non-JSON bodies"""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None


__all__ = ["BaseServiceClient"]
