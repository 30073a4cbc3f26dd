"""
Hosted Service Models

Auth users, sessions and table responses as returned by the hosted service.
"""

import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AuthUser(BaseModel):
    """Authenticated user"""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="User ID")
    aud: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    email_confirmed_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    app_metadata: Dict[str, Any] = Field(default_factory=dict)
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class AuthSession(BaseModel):
    """Token pair issued by the auth endpoint"""
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = 3600
    expires_at: Optional[int] = None
    user: Optional[AuthUser] = None

    @model_validator(mode="after")
    def _fill_expires_at(self) -> "AuthSession":
        if self.expires_at is None:
            self.expires_at = int(time.time()) + self.expires_in
        return self

    def expires_within(self, seconds: int, now: Optional[float] = None) -> bool:
        """True if the access token expires within the given number of seconds"""
        now = time.time() if now is None else now
        return self.expires_at <= now + seconds


class AuthResponse(BaseModel):
    """Result of sign-in / sign-up"""
    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None


class APIResponse(BaseModel):
    """Rows returned by a table query"""
    data: List[Dict[str, Any]] = Field(default_factory=list)
    count: Optional[int] = None
