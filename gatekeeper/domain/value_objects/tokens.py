"""Token value objects: the claim set embedded in an access token and the issued pair.

Both are immutable and never persisted as a whole.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ClaimSet:
    """Assertions embedded in a signed access token.

    Built identically by the credential and refresh paths; only jti differs
    between two claim sets for the same principal.
    """

    subject: str
    email: str
    display_name: str
    tenant_id: str
    roles: tuple[str, ...] = ()
    jti: str = ""

    def identity(self) -> tuple[str, str, str, str, tuple[str, ...]]:
        """Return the claim fields that must match across entry points (jti excluded)."""
        return (self.subject, self.email, self.display_name, self.tenant_id, self.roles)


@dataclass(frozen=True)
class TokenPair:
    """Signed access token plus opaque refresh token issued together.

    The plaintext refresh token only ever leaves the process in the HTTP
    response; storage keeps its SHA-256 hash.
    """

    access_token: str
    refresh_token: str
    access_token_expires_at: datetime
    refresh_token_expires_at: datetime
    jti: str = field(default="", compare=False)
