"""Core business logic for the short link service."""

from .shortcode import ShortCodeGenerator
from .allocation import LinkAllocator
from .resolution import LinkResolver
from .lifecycle import LinkLifecycleManager
from .service import ShortLinkService
from .errors import (
    ShortenerError,
    InvalidUrlError,
    InvalidAliasError,
    DuplicateAliasError,
    AllocationExhaustedError,
    LinkNotFoundError,
)

__all__ = [
    "ShortCodeGenerator",
    "LinkAllocator",
    "LinkResolver",
    "LinkLifecycleManager",
    "ShortLinkService",
    "ShortenerError",
    "InvalidUrlError",
    "InvalidAliasError",
    "DuplicateAliasError",
    "AllocationExhaustedError",
    "LinkNotFoundError",
]
