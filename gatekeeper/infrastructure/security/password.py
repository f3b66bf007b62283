"""Password hashing (bcrypt with SHA-256 pre-hash).

Bcrypt truncates inputs at 72 bytes; pre-hashing with SHA-256 yields a fixed-length
input so long passwords are not silently truncated. bcrypt.checkpw compares in
constant time. The async helpers run bcrypt in a worker thread so verification
does not stall other requests on the event loop.
"""

import asyncio
import base64
import hashlib

import bcrypt

# Valid bcrypt hash for dummy comparison when the principal does not exist;
# computed once, lazily, in a worker thread.
_dummy_hash_cache: str | None = None


def _prehash(password: str) -> bytes:
    """SHA-256 pre-hash to avoid bcrypt's 72-byte truncation."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches hashed_password."""
    try:
        return bool(
            bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))
        )
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    """Return bcrypt hash of password (SHA-256 pre-hashed before bcrypt)."""
    hashed = bcrypt.hashpw(_prehash(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


async def hash_password_async(password: str) -> str:
    """get_password_hash in a worker thread."""
    return await asyncio.to_thread(get_password_hash, password)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    """verify_password in a worker thread."""
    return await asyncio.to_thread(verify_password, plain_password, hashed_password)


async def burn_dummy_verification(plain_password: str) -> None:
    """Spend one bcrypt verification against a dummy hash (timing-attack mitigation)."""
    global _dummy_hash_cache
    if _dummy_hash_cache is None:
        _dummy_hash_cache = await asyncio.to_thread(get_password_hash, "not-a-real-password")
    await asyncio.to_thread(verify_password, plain_password, _dummy_hash_cache)


class BcryptPasswordHasher:
    """IPasswordHasher backed by the bcrypt helpers above."""

    async def hash(self, password: str) -> str:
        return await hash_password_async(password)

    async def verify(self, plain_password: str, hashed_password: str) -> bool:
        return await verify_password_async(plain_password, hashed_password)

    async def burn_dummy(self, plain_password: str) -> None:
        await burn_dummy_verification(plain_password)
