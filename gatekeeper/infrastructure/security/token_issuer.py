"""Token issuer: signed access tokens and opaque refresh tokens.

Pure computation: issuing never touches storage (the caller persists the
refresh token hash), so issuance can be audited and tested on its own.
Configuration is validated in the constructor; a weak key or missing
issuer/audience raises ConfigurationException at startup.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from gatekeeper.application.dtos.tenant import TenantResult
from gatekeeper.application.services.token_digest import generate_refresh_token
from gatekeeper.core.config import MIN_SIGNING_KEY_BYTES, Settings
from gatekeeper.domain.exceptions import ConfigurationException
from gatekeeper.domain.value_objects import ClaimSet, TokenPair
from gatekeeper.infrastructure.security.jwt import decode_token, encode_token
from gatekeeper.shared.utils.datetime import utc_now
from gatekeeper.shared.utils.generators import generate_cuid

_SUPPORTED_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


class TokenIssuer:
    """Creates and verifies access tokens; generates refresh tokens."""

    def __init__(
        self,
        signing_key: str,
        issuer: str,
        audience: str,
        *,
        algorithm: str = "HS256",
        access_token_lifetime: timedelta = timedelta(minutes=30),
        refresh_token_lifetime: timedelta = timedelta(days=7),
        clock_skew: timedelta = timedelta(minutes=2),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if len(signing_key.encode("utf-8")) < MIN_SIGNING_KEY_BYTES:
            raise ConfigurationException(
                f"Signing key must be at least {MIN_SIGNING_KEY_BYTES} bytes",
                setting="jwt_signing_key",
            )
        if not issuer:
            raise ConfigurationException("Issuer is required", setting="jwt_issuer")
        if not audience:
            raise ConfigurationException("Audience is required", setting="jwt_audience")
        if algorithm not in _SUPPORTED_ALGORITHMS:
            raise ConfigurationException(
                f"Unsupported JWT algorithm {algorithm!r}; use an HMAC algorithm",
                setting="jwt_algorithm",
            )
        if access_token_lifetime <= timedelta(0) or refresh_token_lifetime <= timedelta(0):
            raise ConfigurationException("Token lifetimes must be positive")
        self._key = signing_key
        self.issuer = issuer
        self.audience = audience
        self.algorithm = algorithm
        self.access_token_lifetime = access_token_lifetime
        self.refresh_token_lifetime = refresh_token_lifetime
        self.clock_skew = clock_skew
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        """Build from application settings (raises ConfigurationException when invalid)."""
        return cls(
            settings.jwt_signing_key.get_secret_value(),
            settings.jwt_issuer,
            settings.jwt_audience,
            algorithm=settings.jwt_algorithm,
            access_token_lifetime=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_token_lifetime=timedelta(days=settings.refresh_token_expire_days),
            clock_skew=timedelta(seconds=settings.jwt_clock_skew_seconds),
        )

    def issue(
        self, subject_id: str, claims: ClaimSet, tenant_context: TenantResult
    ) -> TokenPair:
        """Return a new access/refresh pair for subject_id.

        Raises:
            ValueError: If claims belong to another subject or tenant.
        """
        if claims.subject != subject_id:
            raise ValueError("Claim subject does not match the subject being issued")
        if claims.tenant_id != tenant_context.id:
            raise ValueError("Claim tenant does not match the tenant context")
        now = self._clock()
        access_expires = now + self.access_token_lifetime
        jti = claims.jti or generate_cuid()
        payload: dict[str, Any] = {
            "jti": jti,
            "sub": subject_id,
            "email": claims.email,
            "name": claims.display_name,
            "tenant": tenant_context.id,
            "roles": list(claims.roles),
            "iat": int(now.timestamp()),
            "nbf": int(now.timestamp()),
            "exp": int(access_expires.timestamp()),
            "iss": self.issuer,
            "aud": self.audience,
        }
        access_token = encode_token(payload, self._key, self.algorithm)
        return TokenPair(
            access_token=access_token,
            refresh_token=generate_refresh_token(),
            access_token_expires_at=access_expires,
            refresh_token_expires_at=now + self.refresh_token_lifetime,
            jti=jti,
        )

    def decode_access_token(self, token: str) -> ClaimSet:
        """Fully validate an access token (signature, issuer, audience, lifetime).

        Raises:
            ValueError: If the token is not valid.
        """
        payload = decode_token(
            token,
            self._key,
            self.algorithm,
            issuer=self.issuer,
            audience=self.audience,
            leeway_seconds=int(self.clock_skew.total_seconds()),
        )
        return _claims_from_payload(payload)

    def read_subject_hint(self, token: str) -> str:
        """Return the subject of a previously issued access token, ignoring expiry.

        Signature, issuer and audience are still verified: an expired token is
        an acceptable hint, a forged one is not.

        Raises:
            ValueError: If the token is malformed or not signed by this issuer.
        """
        payload = decode_token(
            token,
            self._key,
            self.algorithm,
            issuer=self.issuer,
            audience=self.audience,
            verify_exp=False,
        )
        return str(payload["sub"])


def _claims_from_payload(payload: dict[str, Any]) -> ClaimSet:
    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return ClaimSet(
        subject=str(payload["sub"]),
        email=str(payload.get("email", "")),
        display_name=str(payload.get("name", "")),
        tenant_id=str(payload.get("tenant", "")),
        roles=tuple(sorted(str(r) for r in roles)),
        jti=str(payload.get("jti", "")),
    )
