"""Refresh token generation and one-way digests (storage hash, audit fingerprint).

Refresh tokens are high-entropy random values, so an unsalted SHA-256 is
sufficient for lookup-by-hash; passwords use bcrypt.
"""

import base64
import hashlib
import secrets

REFRESH_TOKEN_BYTES = 32
FINGERPRINT_HEX_LENGTH = 32


def generate_refresh_token(nbytes: int = REFRESH_TOKEN_BYTES) -> str:
    """Return nbytes of CSPRNG output, URL-safe base64 without padding."""
    if nbytes < 16:
        raise ValueError("Refresh tokens need at least 128 bits of entropy")
    return base64.urlsafe_b64encode(secrets.token_bytes(nbytes)).rstrip(b"=").decode("ascii")


def hash_refresh_token(token: str) -> str:
    """SHA-256 hex digest stored in place of the plaintext refresh token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_fingerprint(token: str) -> str:
    """Short deterministic digest of a bearer token for audit correlation.

    Truncated SHA-256; never equal to (or reversible into) the token itself.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:FINGERPRINT_HEX_LENGTH]
