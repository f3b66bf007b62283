"""Rate limiter instance for SlowAPI.

Rate limiting is applied in front of the auth components; the components
themselves never back off. Shared so both main (app.state.limiter) and route
modules use the same instance without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Single source of truth for rate limit strings and decorators.
TOKEN_LIMIT = "10/minute"
REFRESH_LIMIT = "30/minute"
REGISTER_LIMIT = "5/minute"
ADMIN_LIMIT = "30/minute"

limit_token = limiter.limit(TOKEN_LIMIT)
limit_refresh = limiter.limit(REFRESH_LIMIT)
limit_register = limiter.limit(REGISTER_LIMIT)
limit_admin = limiter.limit(ADMIN_LIMIT)
