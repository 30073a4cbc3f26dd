"""
Hosted Auth Client

Session-aware client for the hosted auth endpoints (/auth/v1). The session
lives in cookies through CookieSessionStorage; refreshing, signing in and
signing out all end up as Set-Cookie instructions.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.service_client_base import BaseServiceClient

from .errors import AuthApiError, AuthRetryableFetchError
from .models import AuthResponse, AuthSession, AuthUser
from .storage import CookieSessionStorage

logger = logging.getLogger(__name__)

# Refresh when the access token expires within this many seconds
EXPIRY_MARGIN_SECONDS = 90

RETRYABLE_STATUS_CODES = {502, 503, 504}


class AuthClient(BaseServiceClient):
    """Auth endpoints bound to one request's session storage"""

    api_prefix = "/auth/v1"

    def __init__(self, config, storage: CookieSessionStorage, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(config, http_client)
        self.storage = storage
        self._session: Optional[AuthSession] = None
        self._session_loaded = False
        # Serializes load-and-refresh so concurrent calls share one refresh
        self._session_lock = asyncio.Lock()
        self.refresh_attempts = 3
        self.refresh_wait = wait_exponential(multiplier=0.2, min=0.2, max=2)

    # =============================================================================
    # Response handling
    # =============================================================================

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await getattr(self, method)(path, **kwargs)
        except httpx.TransportError as e:
            raise AuthRetryableFetchError(f"Auth request failed: {e}", None, "network_error") from e

        if response.status_code >= 400:
            body = self.json_body(response)
            body = body if isinstance(body, dict) else {}
            message = (
                body.get("msg")
                or body.get("message")
                or body.get("error_description")
                or body.get("error")
                or response.text
                or f"HTTP {response.status_code}"
            )
            code = body.get("error_code") or body.get("code")
            if response.status_code in RETRYABLE_STATUS_CODES:
                raise AuthRetryableFetchError(message, response.status_code, code)
            raise AuthApiError(message, response.status_code, code)
        return response

    # =============================================================================
    # Session
    # =============================================================================

    def _load_session(self) -> Optional[AuthSession]:
        raw = self.storage.get_item()
        if not raw:
            return None
        try:
            return AuthSession.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored session is malformed, removing it")
            self.storage.remove_item()
            return None

    def _save_session(self, session: AuthSession) -> None:
        self._session = session
        self._session_loaded = True
        self.storage.set_item(session.model_dump_json())

    def _remove_session(self) -> None:
        self._session = None
        self._session_loaded = True
        self.storage.remove_item()

    async def get_session(self) -> Optional[AuthSession]:
        """
        Current session, refreshed if it is about to expire.

        Concurrent callers wait for a refresh in progress and reuse its result.

        Returns:
            AuthSession or None when the request presents no session

        Raises:
            AuthApiError: If the refresh token is rejected (session is removed)
        """
        async with self._session_lock:
            if not self._session_loaded:
                self._session = self._load_session()
                self._session_loaded = True

            session = self._session
            if session is None or not session.expires_within(EXPIRY_MARGIN_SECONDS):
                return session

            logger.debug("Access token expiring, refreshing session")
            try:
                return await self.refresh_session(session.refresh_token)
            except AuthRetryableFetchError:
                raise
            except AuthApiError:
                self._remove_session()
                raise

    async def refresh_session(self, refresh_token: str) -> AuthSession:
        """Exchange a refresh token for a new session and store it"""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.refresh_attempts),
            wait=self.refresh_wait,
            retry=retry_if_exception_type(AuthRetryableFetchError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._send(
                    "post",
                    "/token",
                    params={"grant_type": "refresh_token"},
                    json={"refresh_token": refresh_token},
                    headers=self._build_headers(),
                )
        session = AuthSession.model_validate(self.json_body(response))
        self._save_session(session)
        logger.info("Session refreshed")
        return session

    async def access_token(self) -> Optional[str]:
        session = await self.get_session()
        return session.access_token if session else None

    # =============================================================================
    # User
    # =============================================================================

    async def get_user(self) -> Optional[AuthUser]:
        """
        User owning the presented session, verified against the auth endpoint.

        Returns:
            AuthUser, or None when no session is presented

        Raises:
            AuthApiError: If the service rejects the session (session is removed)
        """
        session = await self.get_session()
        if session is None:
            return None
        try:
            response = await self._send(
                "get", "/user", headers=self._build_headers(session.access_token)
            )
        except AuthApiError as e:
            if e.status_code in (401, 403):
                logger.info(f"Session rejected by auth service: {e.message}")
                self._remove_session()
            raise
        return AuthUser.model_validate(self.json_body(response))

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        """
        Sign in with email and password and store the new session.

        Raises:
            AuthApiError: Invalid credentials or other rejection
        """
        response = await self._send(
            "post",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._build_headers(),
        )
        session = AuthSession.model_validate(self.json_body(response))
        self._save_session(session)
        logger.info(f"Signed in {email}")
        return AuthResponse(user=session.user, session=session)

    async def sign_up(
        self,
        email: str,
        password: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> AuthResponse:
        """
        Register a new user.

        The session is stored only when the service issues one right away
        (email confirmation disabled).
        """
        payload: Dict[str, Any] = {"email": email, "password": password}
        if data:
            payload["data"] = data
        response = await self._send(
            "post", "/signup", json=payload, headers=self._build_headers()
        )
        body = self.json_body(response) or {}

        if body.get("access_token"):
            session = AuthSession.model_validate(body)
            self._save_session(session)
            logger.info(f"Signed up {email} with immediate session")
            return AuthResponse(user=session.user, session=session)

        user_data = body.get("user") or body
        user = AuthUser.model_validate(user_data) if user_data.get("id") else None
        logger.info(f"Signed up {email}, confirmation pending")
        return AuthResponse(user=user, session=None)

    async def sign_out(self, scope: str = "global") -> None:
        """
        Revoke the session and clear session cookies.

        Cookies are cleared even when the service no longer knows the session.
        """
        try:
            session = await self.get_session()
        except AuthApiError:
            session = None

        if session is not None:
            try:
                await self._send(
                    "post",
                    "/logout",
                    params={"scope": scope},
                    headers=self._build_headers(session.access_token),
                )
            except AuthApiError as e:
                if e.status_code not in (401, 403, 404):
                    raise
                logger.debug(f"Session already gone on sign out: {e.message}")

        self._remove_session()
        logger.info("Signed out")


__all__ = ["AuthClient", "EXPIRY_MARGIN_SECONDS"]
