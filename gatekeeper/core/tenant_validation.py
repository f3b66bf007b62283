"""Tenant ID format validation for the tenant header.

Rejects malformed identifiers before any database lookup so that header
values never reach queries or logs unchecked.
"""

import re

# CUID/UUID/slug-style: alphanumeric, hyphen, underscore; bounded length.
TENANT_ID_MAX_LENGTH = 64
_TENANT_ID_RE = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(TENANT_ID_MAX_LENGTH) + r"}$"
)


def is_valid_tenant_id_format(value: str) -> bool:
    """Return True if value is safe for use as a tenant identifier."""
    if not value or len(value) > TENANT_ID_MAX_LENGTH:
        return False
    return bool(_TENANT_ID_RE.fullmatch(value))
