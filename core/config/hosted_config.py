#!/usr/bin/env python3
"""Hosted auth/database service configuration

Endpoint and access key of the hosted backend (Supabase-compatible API).
Both values are required; a missing value is a fatal error at process start.
"""
import os
from dataclasses import dataclass
from typing import List, Optional


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


class ConfigurationError(Exception):
    """Required configuration is missing or invalid"""
    pass


@dataclass
class HostedServiceConfig:
    """Hosted auth + database service endpoint"""

    # ===========================================
    # Supabase project
    # ===========================================
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # ===========================================
    # HTTP
    # ===========================================
    http_timeout: float = 30.0

    # ===========================================
    # Session cookies
    # ===========================================
    cookie_secure: bool = False
    cookie_domain: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'HostedServiceConfig':
        """Load hosted service config from environment"""
        return cls(
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY"),
            http_timeout=_float(os.getenv("SUPABASE_HTTP_TIMEOUT", "30"), 30.0),
            cookie_secure=_bool(os.getenv("COOKIE_SECURE", "false")),
            cookie_domain=os.getenv("COOKIE_DOMAIN") or None,
        )

    def missing_keys(self) -> List[str]:
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key:
            missing.append("SUPABASE_ANON_KEY")
        return missing

    def validate(self) -> 'HostedServiceConfig':
        """Raise ConfigurationError if endpoint or access key is absent"""
        missing = self.missing_keys()
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )
        return self

    @property
    def base_url(self) -> str:
        return (self.supabase_url or "").rstrip("/")
