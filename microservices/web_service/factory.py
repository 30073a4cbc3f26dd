"""
Web Service Factory

Factory functions wiring a request's bridged handle to the business services.
This is the ONLY place that constructs the hosted service handle.

Usage:
    from .factory import create_bridged_handle, create_auth_service
    bridged = create_bridged_handle(request, config, http_client)
    auth_service = create_auth_service(bridged)
"""
from typing import Any, Optional

import httpx

from core.config import WebServiceConfig
from core.session_bridge import BridgedHandle, SessionBridgingClient

from .auth_service import AuthenticationService
from .items_service import ItemsService


def create_bridged_handle(
    request: Any,
    config: WebServiceConfig,
    http_client: Optional[httpx.AsyncClient] = None,
) -> BridgedHandle:
    """
    Create a fresh bridge and handle for one request.

    Args:
        request: Incoming request (its Cookie header is read)
        config: Service configuration
        http_client: Shared HTTP client

    Returns:
        BridgedHandle whose headers must be applied to the response
    """
    return SessionBridgingClient(config.hosted, http_client).create_handle(request)


def create_auth_service(bridged: BridgedHandle) -> AuthenticationService:
    return AuthenticationService(bridged.handle)


def create_items_service(bridged: BridgedHandle, config: WebServiceConfig) -> ItemsService:
    return ItemsService(bridged.handle, table=config.items_table)
