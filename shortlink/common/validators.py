"""Validation utilities for short links."""

import re
from urllib.parse import urlparse
from typing import Tuple

MAX_URL_LENGTH = 2048
MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 20

SHORT_CODE_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')

# Path segments served by the app itself; a link under one of these would
# be shadowed by (or shadow) a real route.
RESERVED_WORDS = frozenset({
    "api", "health", "admin", "static", "assets", "favicon",
    "robots", "sitemap", "create", "delete", "list", "stats",
    "docs", "redoc", "links", "resolve",
})


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a destination URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    if any(ch.isspace() for ch in url):
        return False, "URL must not contain whitespace"

    try:
        result = urlparse(url)

        if result.scheme not in ("http", "https"):
            return False, "URL must use http or https protocol"

        # hostname is None for things like "http://:80" or "http://user@"
        if not result.netloc or not result.hostname:
            return False, "URL must have a valid domain"

        # Accessing .port raises ValueError for out-of-range or non-numeric ports
        result.port

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"


def is_valid_short_code(
    short_code: str,
    min_length: int = MIN_CODE_LENGTH,
    max_length: int = MAX_CODE_LENGTH,
) -> Tuple[bool, str]:
    """Validate a short code.

    Args:
        short_code: The short code to validate
        min_length: Minimum length for short code
        max_length: Maximum length for short code

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Short code is required"

    if len(short_code) < min_length:
        return False, f"Short code must be at least {min_length} characters"

    if len(short_code) > max_length:
        return False, f"Short code must be at most {max_length} characters"

    if not SHORT_CODE_PATTERN.match(short_code):
        return False, "Short code can only contain letters, numbers, hyphens, and underscores"

    if short_code.lower() in RESERVED_WORDS:
        return False, f"'{short_code}' is a reserved word and cannot be used"

    return True, ""
