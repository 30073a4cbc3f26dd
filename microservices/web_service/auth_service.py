"""
Authentication Business Logic

Sign-in, registration, sign-out and current-user lookup for the pages,
on top of a request-bound hosted service handle.
"""

from typing import Optional
import logging

from core.hosted import AuthApiError, AuthResponse, AuthSessionMissingError, AuthUser

from .models import CredentialsForm
from .protocols import FormValidationError, ServiceHandleProtocol

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthenticationService:
    """
    Authentication operations of one request.

    Remote failures (AuthApiError and friends) propagate to the route, which
    decides what the user sees.
    """

    def __init__(self, handle: ServiceHandleProtocol):
        self.handle = handle

    async def current_user(self) -> Optional[AuthUser]:
        """
        Signed-in user, or None when there is no valid session.

        A session rejected by the auth service counts as signed out.
        """
        try:
            return await self.handle.auth.get_user()
        except AuthApiError as e:
            logger.info(f"No valid session: {e.message}")
            return None

    async def require_user(self) -> AuthUser:
        """
        Signed-in user

        Raises:
            AuthSessionMissingError: If nobody is signed in
        """
        user = await self.current_user()
        if user is None:
            raise AuthSessionMissingError()
        return user

    async def sign_in(self, form: CredentialsForm) -> AuthResponse:
        """
        Sign in with email and password

        Raises:
            FormValidationError: Missing email or password
            AuthApiError: Credentials rejected
        """
        if not form.email or not form.password:
            raise FormValidationError("Email and password are required")
        return await self.handle.auth.sign_in_with_password(form.email, form.password)

    async def register(self, form: CredentialsForm) -> AuthResponse:
        """
        Register a new account

        Raises:
            FormValidationError: Missing email or too short password
            AuthApiError: Registration rejected
        """
        if not form.email or not form.password:
            raise FormValidationError("Email and password are required")
        if len(form.password) < MIN_PASSWORD_LENGTH:
            raise FormValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        return await self.handle.auth.sign_up(form.email, form.password)

    async def sign_out(self) -> None:
        """Revoke the session and clear its cookies"""
        await self.handle.auth.sign_out()
