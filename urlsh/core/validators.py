"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
These functions help prevent security issues and ensure data integrity.

Security Considerations:
- Input validation prevents injection attacks
- Sanitization prevents XSS and other attacks
- Length limits prevent DoS attacks
"""

import ipaddress
import re
from typing import Optional
from urllib.parse import urlparse

from starlette.requests import Request

# Base62 plus the two extra symbols of URL-safe base64 (HASH and SECURE codes)
SHORT_CODE_PATTERN = r'^[0-9A-Za-z_-]+$'
MAX_SHORT_CODE_LENGTH = 64
MAX_IP_ADDRESS_LENGTH = 45

# Paths served by the app itself; a short code with these names never redirects
RESERVED_SHORT_CODES = frozenset({"docs", "redoc", "health", "openapi"})

_short_code_re = re.compile(SHORT_CODE_PATTERN)


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Short codes may only contain [0-9A-Za-z_-]. Random codes are base62,
    hash and secure codes are URL-safe base64, custom aliases are checked
    against the same pattern when they are submitted.

    Args:
        short_code: The short code to sanitize

    Returns:
        Sanitized short code if valid, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if len(short_code) > MAX_SHORT_CODE_LENGTH:
        return None

    if not _short_code_re.match(short_code):
        return None

    return short_code


def validate_url_length(url: str, max_length: int = 2048) -> bool:
    """
    Validate URL length to prevent DoS attacks.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length (default: 2048 per RFC 7230)

    Returns:
        True if URL length is valid, False otherwise
    """
    return bool(url) and len(url) <= max_length


def is_valid_url(url: str, max_length: int = 2048) -> bool:
    """
    Validate URL format and security.

    Checks that URL uses http/https, has valid domain, and doesn't contain
    malicious patterns. Prevents javascript:, file:, and other dangerous schemes.

    Args:
        url: The URL string to validate
        max_length: Longest accepted URL

    Returns:
        True if valid and safe, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    if not validate_url_length(url, max_length):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    if not result.scheme or not result.netloc:
        return False

    if result.scheme.lower() not in {'http', 'https'}:
        return False

    domain = result.hostname or ''
    if domain != 'localhost' and '.' not in domain:
        return False

    malicious_patterns = ['javascript:', 'data:', 'file:', 'vbscript:']
    url_lower = url.lower()
    if any(pattern in url_lower for pattern in malicious_patterns):
        return False

    return True


def _valid_ip(value: str) -> Optional[str]:
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers: X-Forwarded-For first (its first
    entry is the client), then X-Real-Ip, then the socket peer. Header
    values that are not IP addresses are skipped.

    Args:
        request: Incoming request

    Returns:
        IP address as string, at most MAX_IP_ADDRESS_LENGTH characters
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        ip_address = _valid_ip(forwarded_for.split(",")[0])
        if ip_address:
            return ip_address

    real_ip = request.headers.get("X-Real-Ip")
    if real_ip:
        ip_address = _valid_ip(real_ip)
        if ip_address:
            return ip_address

    host = request.client.host if request.client else "unknown"
    return host[:MAX_IP_ADDRESS_LENGTH]
