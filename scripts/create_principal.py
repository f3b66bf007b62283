"""Create a confirmed principal in an existing tenant.

Usage:
    python -m scripts.create_principal <tenant_id> <email> [password] [--role=<name>]...
If password is omitted, a random one is printed.
"""

import asyncio
import secrets
import sys

from gatekeeper.application.services import normalize_email
from gatekeeper.infrastructure.persistence.database import dispose_engine, get_session_factory
from gatekeeper.infrastructure.persistence.repositories import TenantRepository, UserRepository
from gatekeeper.infrastructure.security.password import hash_password_async


async def main() -> None:
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    roles = [a.split("=", 1)[1] for a in sys.argv[1:] if a.startswith("--role=")]
    if len(args) < 2:
        print(
            "Usage: python -m scripts.create_principal <tenant_id> <email> [password] [--role=<name>]",
            file=sys.stderr,
        )
        sys.exit(1)
    tenant_id, email = args[0], args[1]
    password = args[2] if len(args) > 2 else secrets.token_urlsafe(12)

    async with get_session_factory()() as session:
        async with session.begin():
            tenant = await TenantRepository(session).get_by_id(tenant_id)
            if not tenant:
                print(f"Tenant not found: {tenant_id}", file=sys.stderr)
                sys.exit(1)
            principal = await UserRepository(session).create_principal(
                tenant.id,
                email,
                normalize_email(email),
                email.split("@", 1)[0],
                await hash_password_async(password),
                email_confirmed=True,
                roles=roles,
            )
    await dispose_engine()
    print(f"Created principal: {principal.id} ({principal.email}) in tenant {tenant.id}")
    print(f"Password: {password}")


if __name__ == "__main__":
    asyncio.run(main())
