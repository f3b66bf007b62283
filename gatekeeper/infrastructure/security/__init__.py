"""Security: JWT signing/verification, token issuance, password hashing."""

from gatekeeper.infrastructure.security.jwt import decode_token, encode_token
from gatekeeper.infrastructure.security.password import (
    BcryptPasswordHasher,
    get_password_hash,
    verify_password,
)
from gatekeeper.infrastructure.security.token_issuer import TokenIssuer

__all__ = [
    "BcryptPasswordHasher",
    "TokenIssuer",
    "decode_token",
    "encode_token",
    "get_password_hash",
    "verify_password",
]
