"""
Common/Shared Fixtures

Base factories and generators used across the test layers.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional


def make_user_id() -> str:
    """Generate a unique user ID"""
    return str(uuid.uuid4())


def make_email(prefix: Optional[str] = None) -> str:
    """Generate a unique email"""
    prefix = prefix or f"test_{uuid.uuid4().hex[:8]}"
    return f"{prefix}@example.com"


def make_token(prefix: str = "tok") -> str:
    """Generate an opaque token"""
    return f"{prefix}_{uuid.uuid4().hex}"


def make_timestamp() -> str:
    """Generate current UTC timestamp"""
    return datetime.now(timezone.utc).isoformat()
