"""Header parsing utilities for building public short URLs."""

from typing import Dict, Mapping, Optional


def _lower_keys(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k.lower(): v for k, v in headers.items()}


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers from request.

    Args:
        headers: Request headers mapping

    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for, forwarded_prefix
    """
    headers_lower = _lower_keys(headers)

    # Proxies may append to X-Forwarded-*; the first hop is the client-facing one
    def first(name: str) -> Optional[str]:
        value = headers_lower.get(name)
        if not value:
            return None
        return value.split(",")[0].strip() or None

    return {
        "forwarded_proto": first("x-forwarded-proto"),
        "forwarded_host": first("x-forwarded-host"),
        "forwarded_for": first("x-forwarded-for"),
        "forwarded_prefix": first("x-forwarded-prefix"),
    }


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Build the public base URL for short links.

    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Request scheme + host
    3. Fallback base URL from config

    Returns:
        Base URL without trailing slash (e.g., https://example.com)
    """
    forwarded = extract_forwarded_headers(headers)

    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        return f"{forwarded['forwarded_proto']}://{forwarded['forwarded_host']}"

    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    return fallback_base_url.rstrip("/")


def get_path_prefix(headers: Mapping[str, str], configured_prefix: str = "") -> str:
    """Path prefix for short URLs: X-Forwarded-Prefix wins over the configured one.

    Returns normalized prefix with leading slash, no trailing (e.g. '/s'), or ''.
    """
    prefix = extract_forwarded_headers(headers)["forwarded_prefix"] or configured_prefix or ""
    prefix = prefix.strip().strip("/")
    return "/" + prefix if prefix else ""


def build_short_url(
    short_code: str,
    headers: Mapping[str, str],
    fallback_base_url: str,
    configured_prefix: str = "",
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Public short URL for a code as seen by the client that sent ``headers``.

    Combines build_base_url and get_path_prefix, e.g. https://sho.rt/s/abc123.
    """
    base_url = build_base_url(headers, fallback_base_url, request_scheme, request_host)
    return f"{base_url}{get_path_prefix(headers, configured_prefix)}/{short_code}"
