"""Create a tenant with its admin principal (local development and bootstrap).

Usage:
    python -m scripts.create_tenant <tenant_id> <name> <admin_email> [valid_days] [--create-tables]
The admin password is generated and printed once. --create-tables creates
the schema first (development databases without migrations).
"""

import asyncio
import secrets
import sys
from datetime import timedelta

from gatekeeper.application.services import TenantService
from gatekeeper.core.config import get_settings
from gatekeeper.infrastructure.persistence.database import (
    create_all,
    dispose_engine,
    get_session_factory,
)
from gatekeeper.infrastructure.persistence.repositories import (
    OutboxRepository,
    TenantRepository,
    UserRepository,
)
from gatekeeper.infrastructure.security.password import BcryptPasswordHasher
from gatekeeper.shared.context import RequestContext
from gatekeeper.shared.utils.datetime import utc_now

USAGE = (
    "Usage: python -m scripts.create_tenant <tenant_id> <name> <admin_email> "
    "[valid_days] [--create-tables]"
)


async def main() -> None:
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if len(args) < 3:
        print(USAGE, file=sys.stderr)
        sys.exit(1)
    tenant_id, name, admin_email = args[:3]
    valid_days = int(args[3]) if len(args) > 3 else 365

    settings = get_settings()
    if "--create-tables" in sys.argv:
        await create_all()

    password = secrets.token_urlsafe(16)
    async with get_session_factory()() as session:
        async with session.begin():
            service = TenantService(
                TenantRepository(session),
                UserRepository(session),
                BcryptPasswordHasher(),
                OutboxRepository(session),
                admin_role=settings.admin_role,
            )
            result = await service.create_tenant(
                RequestContext.system(tenant_id, source="script"),
                tenant_id,
                name,
                utc_now() + timedelta(days=valid_days),
                admin_email,
                password,
            )
    await dispose_engine()
    print(f"Created tenant: {result.tenant.id} (valid until {result.tenant.valid_upto.isoformat()})")
    print(f"Admin: {result.admin_email} ({result.admin_user_id})")
    print(f"Password: {password}")


if __name__ == "__main__":
    asyncio.run(main())
