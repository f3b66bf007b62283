"""JWT encoding and verification (python-jose, HMAC).

Thin wrappers that normalize jose errors to ValueError so callers decide
how a bad token maps to the domain error taxonomy.
"""

from typing import Any, cast

from jose import JWTError, jwt


def encode_token(claims: dict[str, Any], key: str, algorithm: str) -> str:
    """Sign claims and return the compact JWT string."""
    return cast(str, jwt.encode(claims, key, algorithm=algorithm))


def decode_token(
    token: str,
    key: str,
    algorithm: str,
    *,
    issuer: str,
    audience: str,
    leeway_seconds: int = 0,
    verify_exp: bool = True,
) -> dict[str, Any]:
    """Verify signature, issuer, audience and (optionally) lifetime; return claims.

    Enforces presence of sub and jti.

    Raises:
        ValueError: If the token is malformed, badly signed, expired (when
            verify_exp is True) or missing required claims.
    """
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[algorithm],
            issuer=issuer,
            audience=audience,
            options={
                "verify_exp": verify_exp,
                "leeway": leeway_seconds,
                "require_sub": True,
                "require_jti": True,
            },
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not payload.get("sub"):
        raise ValueError("Token missing required claim: sub")
    return payload
