"""
Table Query Builder

Builds select/insert/update/delete requests against the hosted REST endpoint
(/rest/v1/<table>). Requests are authorized with the caller's session token,
so row-level policies apply to the signed-in user.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import httpx

from core.service_client_base import BaseServiceClient

from .errors import PostgrestError
from .models import APIResponse

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[Optional[str]]]


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class TableQuery(BaseServiceClient):
    """One request against one table"""

    api_prefix = "/rest/v1"

    def __init__(
        self,
        config,
        table: str,
        token_provider: TokenProvider,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config, http_client)
        self.table = table
        self._token_provider = token_provider
        self._method = "get"
        self._params: Dict[str, str] = {}
        self._filters: List[Tuple[str, str]] = []
        self._body: Optional[Any] = None
        self._prefer: List[str] = []

    # =============================================================================
    # Operations
    # =============================================================================

    def select(self, columns: str = "*", count: Optional[str] = None) -> "TableQuery":
        self._method = "get"
        self._params["select"] = columns
        if count:
            self._prefer.append(f"count={count}")
        return self

    def insert(self, rows: Union[Dict[str, Any], List[Dict[str, Any]]]) -> "TableQuery":
        self._method = "post"
        self._body = rows
        self._prefer.append("return=representation")
        return self

    def update(self, values: Dict[str, Any]) -> "TableQuery":
        self._method = "patch"
        self._body = values
        self._prefer.append("return=representation")
        return self

    def delete(self) -> "TableQuery":
        self._method = "delete"
        self._prefer.append("return=representation")
        return self

    # =============================================================================
    # Modifiers
    # =============================================================================

    def eq(self, column: str, value: Any) -> "TableQuery":
        self._filters.append((column, f"eq.{_format_value(value)}"))
        return self

    def order(self, column: str, desc: bool = False) -> "TableQuery":
        self._params["order"] = f"{column}.{'desc' if desc else 'asc'}"
        return self

    def limit(self, count: int) -> "TableQuery":
        self._params["limit"] = str(count)
        return self

    # =============================================================================
    # Execution
    # =============================================================================

    def _request_params(self) -> List[Tuple[str, str]]:
        # A column may carry several filters, so params stay a list of pairs
        return list(self._params.items()) + list(self._filters)

    async def execute(self) -> APIResponse:
        """
        Send the request.

        Returns:
            APIResponse with the affected/selected rows

        Raises:
            PostgrestError: If the service rejects the request or cannot be reached
        """
        access_token = await self._token_provider()
        extra = {"Prefer": ",".join(self._prefer)} if self._prefer else None
        headers = self._build_headers(access_token, extra)
        params = self._request_params()

        send = getattr(super(), self._method)
        try:
            if self._method in ("post", "patch"):
                response = await send(f"/{self.table}", json=self._body, params=params, headers=headers)
            else:
                response = await send(f"/{self.table}", params=params, headers=headers)
        except httpx.TransportError as e:
            raise PostgrestError(
                f"Database request failed: {e}", status_code=None, code="network_error"
            ) from e

        body = self.json_body(response)
        if response.status_code >= 400:
            body = body if isinstance(body, dict) else {}
            raise PostgrestError(
                body.get("message") or response.text or f"HTTP {response.status_code}",
                status_code=response.status_code,
                code=body.get("code"),
                details=body.get("details"),
                hint=body.get("hint"),
            )

        if body is None:
            data = []
        elif isinstance(body, list):
            data = body
        else:
            data = [body]

        logger.debug(f"{self._method.upper()} {self.table}: {len(data)} row(s)")
        return APIResponse(data=data, count=self._parse_count(response))

    @staticmethod
    def _parse_count(response: httpx.Response) -> Optional[int]:
        content_range = response.headers.get("content-range") or response.headers.get("Content-Range")
        if not content_range or "/" not in content_range:
            return None
        total = content_range.rsplit("/", 1)[1]
        return int(total) if total.isdigit() else None


__all__ = ["TableQuery"]
