"""Common utilities for the short link service."""

from .validators import is_valid_url, is_valid_short_code
from .headers import extract_forwarded_headers, build_base_url, get_path_prefix, build_short_url
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_valid_short_code",
    "extract_forwarded_headers",
    "build_base_url",
    "get_path_prefix",
    "build_short_url",
    "setup_logging",
]
