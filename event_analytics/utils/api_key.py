"""API key generation utility"""
import re
import uuid
from typing import Optional

from event_analytics.core.config import settings

_HEX_BODY = re.compile(r"^[0-9a-f]{32}$")


def generate_api_key(prefix: Optional[str] = None) -> str:
    """
    Generate a new API key.

    Args:
        prefix: Key prefix (default: settings.API_KEY_PREFIX, "ak_")

    Returns:
        The prefix followed by a random 128-bit identifier as 32 lowercase hex chars
    """
    return f"{prefix if prefix is not None else settings.API_KEY_PREFIX}{uuid.uuid4().hex}"


def is_api_key_format(api_key: Optional[str], prefix: Optional[str] = None) -> bool:
    """
    Validate an API key format.

    Args:
        api_key: The API key to validate
        prefix: Expected prefix (default: settings.API_KEY_PREFIX)

    Returns:
        True if valid, False otherwise
    """
    if not api_key:
        return False

    prefix = prefix if prefix is not None else settings.API_KEY_PREFIX
    if not api_key.startswith(prefix):
        return False

    return bool(_HEX_BODY.match(api_key[len(prefix):]))
