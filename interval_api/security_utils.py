"""
Security helpers for booking access credentials
"""

import secrets
from typing import Optional

# 32 random bytes -> 43 url-safe characters
ACCESS_TOKEN_BYTES = 32


def generate_secure_token(length: int = ACCESS_TOKEN_BYTES) -> str:
    """Generate a cryptographically secure random token"""
    return secrets.token_urlsafe(length)


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks

    Args:
        a: First string
        b: Second string

    Returns:
        True if both are present and exactly equal, False otherwise
    """
    if a is None or b is None:
        return False
    return secrets.compare_digest(a.encode(), b.encode())


def mask_sensitive_data(data: Optional[str], visible_chars: int = 4) -> str:
    """
    Mask sensitive data for logging/display

    Args:
        data: Sensitive data to mask
        visible_chars: Number of characters to show at the end

    Returns:
        Masked string
    """
    if not data:
        return ""
    if len(data) <= visible_chars:
        return "*" * len(data)

    return "*" * (len(data) - visible_chars) + data[-visible_chars:]
