"""
Shared test fixtures and factories.
"""
from .common import make_email, make_timestamp, make_token, make_user_id
from .hosted_fixtures import (
    ANON_KEY,
    AUTH_URL,
    REST_URL,
    STORAGE_KEY,
    SUPABASE_URL,
    make_expired_session_payload,
    make_hosted_config,
    make_item_row,
    make_item_rows,
    make_session_cookie_header,
    make_session_payload,
    make_user_payload,
    make_web_config,
)

__all__ = [
    "make_email",
    "make_timestamp",
    "make_token",
    "make_user_id",
    "ANON_KEY",
    "AUTH_URL",
    "REST_URL",
    "STORAGE_KEY",
    "SUPABASE_URL",
    "make_expired_session_payload",
    "make_hosted_config",
    "make_item_row",
    "make_item_rows",
    "make_session_cookie_header",
    "make_session_payload",
    "make_user_payload",
    "make_web_config",
]
