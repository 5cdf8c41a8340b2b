"""
Short Code Generation

This module turns an original URL into a short code using one of four
strategies and composes the public short URL.

Methods:
- CUSTOM: the caller's alias, verbatim
- RANDOM: 8 base62 characters from a cryptographically secure source
- HASH: first 8 characters of the URL-safe base64 SHA-256 digest (deterministic)
- SECURE: first 12 characters of URL-safe base64(nonce + AES-256-GCM ciphertext)

The SECURE key is generated per call and thrown away, so a SECURE code
cannot be decrypted back into the URL. It behaves as a high-entropy random
token. Only the nonce survives the 12 character truncation.

Generation performs no I/O and keeps no state between calls. Uniqueness of
the produced codes is the persistence layer's concern.
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from urlsh.core.exceptions import GenerationError, InvalidInputError


BASE62_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

DEFAULT_RANDOM_LENGTH = 8
HASH_LENGTH = 8
SECURE_LENGTH = 12

# AES-256 key and the standard 96-bit GCM nonce, in bytes
KEY_SIZE = 32
NONCE_SIZE = 12


class Method(str, Enum):
    """Strategy used to generate a short code."""
    CUSTOM = "CUSTOM"
    RANDOM = "RANDOM"
    HASH = "HASH"
    SECURE = "SECURE"

    @classmethod
    def parse(cls, value: Union["Method", str]) -> "Method":
        """
        Convert stored or submitted text into a Method.

        Raises:
            InvalidInputError: If the value names no known method
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError("invalid shortening method") from None


@dataclass(frozen=True)
class ShortenerResult:
    """Successful generation: the code and the URL that resolves it."""
    short_code: str
    short_url: str


def format_short_url(base_url: str, short_code: str) -> str:
    """
    Join base URL and short code with exactly one slash.

    Example:
        format_short_url("http://x/", "/abc") -> "http://x/abc"
    """
    return f"{base_url.rstrip('/')}/{short_code.lstrip('/')}"


def generate_random_string(length: int = DEFAULT_RANDOM_LENGTH) -> str:
    """
    Generate a random base62 string.

    Every character is drawn independently with secrets.choice, which picks
    an index with an unbiased randbelow(62).

    Raises:
        GenerationError: If the system randomness source fails
    """
    try:
        return "".join(secrets.choice(BASE62_CHARS) for _ in range(length))
    except OSError as e:
        raise GenerationError("failed to read from randomness source", original_error=e) from e


def generate_hash_code(original_url: str, length: int = HASH_LENGTH) -> str:
    """
    Hash the URL with SHA-256 and keep the first characters of its base64 form.

    Same URL, same code. Different URLs may collide and are not checked here.
    """
    digest = hashlib.sha256(original_url.encode("utf-8")).digest()
    encoded = base64.urlsafe_b64encode(digest).decode("ascii")
    return encoded[:length]


def generate_secure_code(original_url: str, length: int = SECURE_LENGTH) -> str:
    """
    Encrypt the URL under a throwaway AES-256-GCM key and truncate the result.

    Raises:
        GenerationError: If key/nonce generation or cipher setup fails
    """
    try:
        key = secrets.token_bytes(KEY_SIZE)
        nonce = secrets.token_bytes(NONCE_SIZE)
        ciphertext = AESGCM(key).encrypt(nonce, original_url.encode("utf-8"), None)
    except (OSError, ValueError) as e:
        raise GenerationError("failed to encrypt URL", original_error=e) from e

    encoded = base64.urlsafe_b64encode(nonce + ciphertext).decode("ascii")
    return encoded[:length]


def generate(
    method: Union[Method, str],
    original_url: str,
    custom_alias: Optional[str],
    base_url: str,
) -> ShortenerResult:
    """
    Produce a short code for ``original_url`` and compose its short URL.

    Args:
        method: Generation strategy (enum member or its text form)
        original_url: The long URL; not validated here
        custom_alias: Required for CUSTOM, ignored otherwise
        base_url: Public origin the short code is appended to

    Returns:
        ShortenerResult with a non-empty short code

    Raises:
        InvalidInputError: Empty alias for CUSTOM, or unknown method
        GenerationError: Randomness or cipher failure
    """
    method = Method.parse(method)

    if method is Method.CUSTOM:
        if not custom_alias:
            raise InvalidInputError("custom alias cannot be empty")
        short_code = custom_alias
    elif method is Method.RANDOM:
        short_code = generate_random_string()
    elif method is Method.HASH:
        short_code = generate_hash_code(original_url)
    else:
        short_code = generate_secure_code(original_url)

    return ShortenerResult(
        short_code=short_code,
        short_url=format_short_url(base_url, short_code),
    )


class CodeGenerator:
    """
    Short code generator bound to the service's base URL.

    Holds configuration only, so a single instance is created at startup
    and shared by every request.
    """

    def __init__(self, base_url: str):
        self.base_url = base_url

    def generate(
        self,
        method: Union[Method, str],
        original_url: str,
        custom_alias: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> ShortenerResult:
        """
        Generate a short code with ``generate``.

        ``base_url`` overrides the configured base URL when given, an empty
        string included.
        """
        if base_url is None:
            base_url = self.base_url
        return generate(method, original_url, custom_alias, base_url)

    def compose(self, short_code: str) -> str:
        """Short URL for an existing code under the configured base URL."""
        return format_short_url(self.base_url, short_code)
