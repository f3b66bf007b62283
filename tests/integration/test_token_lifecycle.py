"""Token lifecycle against a real database: claim symmetry, tenant gate, rotation atomicity."""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import select

from gatekeeper.application.services import (
    AuthService,
    CredentialValidator,
    SecurityAuditService,
)
from gatekeeper.application.services.token_digest import hash_refresh_token
from gatekeeper.domain.enums import AuditEventType
from gatekeeper.domain.exceptions import (
    InvalidCredentialsException,
    SubjectMismatchException,
    TenantInvalidException,
    UserAlreadyExistsException,
)
from gatekeeper.infrastructure.persistence.models import OutboxMessage
from gatekeeper.infrastructure.persistence.repositories import (
    OutboxRepository,
    TenantRepository,
    UserRepository,
)
from gatekeeper.infrastructure.security.password import BcryptPasswordHasher
from gatekeeper.infrastructure.security.token_issuer import TokenIssuer
from gatekeeper.shared.context import RequestContext
from gatekeeper.shared.utils.datetime import utc_now

PASSWORD = "CorrectHorse9!"
ISSUER = TokenIssuer(
    "integration-signing-key-0123456789abcdef", "https://gatekeeper.test", "integration"
)


class RecordingPublisher:
    def __init__(self) -> None:
        self.envelopes = []

    def publish(self, envelope) -> bool:
        self.envelopes.append(envelope)
        return True

    @property
    def dropped_count(self) -> int:
        return 0

    def of_type(self, event_type: AuditEventType) -> list:
        return [e for e in self.envelopes if e.event_type == event_type]


def _auth_service(session, publisher: RecordingPublisher, unit_of_work=None) -> AuthService:
    tenant_repo = TenantRepository(session)
    user_repo = UserRepository(session)
    hasher = BcryptPasswordHasher()
    return AuthService(
        CredentialValidator(tenant_repo, user_repo, hasher, ISSUER),
        ISSUER,
        tenant_repo,
        user_repo,
        hasher,
        OutboxRepository(session),
        SecurityAuditService(publisher),
        unit_of_work=unit_of_work,
    )


async def _login(session_factory, publisher, email="alice@example.com", tenant_id="acme"):
    async with session_factory() as session:
        async with session.begin():
            return await _auth_service(session, publisher).login(
                RequestContext(tenant_id=tenant_id), email, PASSWORD
            )


async def _refresh(session_factory, publisher, refresh_token, access_token=None):
    async with session_factory() as session:
        async with session.begin():
            return await _auth_service(session, publisher).refresh(
                RequestContext(tenant_id="acme"), refresh_token, access_token
            )


@pytest.mark.requires_db
async def test_login_stores_only_refresh_hash(session_factory, principal) -> None:
    publisher = RecordingPublisher()
    pair = await _login(session_factory, publisher)
    async with session_factory() as session:
        stored = await UserRepository(session).get_by_id(principal.id)
    assert stored.refresh_token_hash == hash_refresh_token(pair.refresh_token)
    assert stored.refresh_token_hash != pair.refresh_token
    assert [e.event_type for e in publisher.envelopes] == [
        AuditEventType.LOGIN_SUCCEEDED,
        AuditEventType.TOKEN_ISSUED,
    ]


@pytest.mark.requires_db
async def test_claim_symmetry_between_login_and_refresh(
    session_factory, tenant, create_principal
) -> None:
    """Tokens from both entry points carry identical claims apart from jti."""
    await create_principal(tenant.id, roles=("zeta", "alpha"))
    publisher = RecordingPublisher()
    pair = await _login(session_factory, publisher)
    refreshed = await _refresh(session_factory, publisher, pair.refresh_token)

    first = ISSUER.decode_access_token(pair.access_token)
    second = ISSUER.decode_access_token(refreshed.access_token)
    assert first.identity() == second.identity()
    assert first.roles == ("alpha", "zeta")
    assert first.jti != second.jti


@pytest.mark.requires_db
@pytest.mark.parametrize(
    "tenant_kwargs",
    [
        {"is_active": False},
        {"valid_upto": utc_now() - timedelta(minutes=1)},
    ],
)
async def test_tenant_gate_blocks_correct_password(
    session_factory, create_tenant, create_principal, tenant_kwargs
) -> None:
    """Correct credentials never produce tokens for an inactive or expired tenant."""
    await create_tenant("frozen", **tenant_kwargs)
    await create_principal("frozen", "bob@example.com")
    publisher = RecordingPublisher()
    with pytest.raises(TenantInvalidException):
        await _login(session_factory, publisher, email="bob@example.com", tenant_id="frozen")
    [failed] = publisher.of_type(AuditEventType.LOGIN_FAILED)
    assert failed.payload["reason"] in {"tenant_inactive", "tenant_expired"}
    assert not publisher.of_type(AuditEventType.TOKEN_ISSUED)


@pytest.mark.requires_db
async def test_deactivated_tenant_blocks_refresh(session_factory, principal) -> None:
    publisher = RecordingPublisher()
    pair = await _login(session_factory, publisher)
    async with session_factory() as session:
        async with session.begin():
            await TenantRepository(session).set_active("acme", False)
    with pytest.raises(TenantInvalidException):
        await _refresh(session_factory, publisher, pair.refresh_token)


@pytest.mark.requires_db
async def test_refresh_rotates_and_old_token_stops_working(session_factory, principal) -> None:
    publisher = RecordingPublisher()
    pair = await _login(session_factory, publisher)
    rotated = await _refresh(session_factory, publisher, pair.refresh_token)
    assert rotated.refresh_token != pair.refresh_token

    with pytest.raises(InvalidCredentialsException) as exc_info:
        await _refresh(session_factory, publisher, pair.refresh_token)
    assert exc_info.value.reason == "refresh_token_unknown"
    assert await _refresh(session_factory, publisher, rotated.refresh_token)


@pytest.mark.requires_db
async def test_rotation_compare_and_swap(session_factory, principal) -> None:
    """Only the caller presenting the currently stored hash wins."""
    expires = utc_now() + timedelta(days=1)
    async with session_factory() as session:
        async with session.begin():
            await UserRepository(session).set_refresh_token(principal.id, "h0", expires)
    async with session_factory() as session:
        async with session.begin():
            assert await UserRepository(session).rotate_refresh_token(
                principal.id, "h0", "h1", expires
            )
    async with session_factory() as session:
        async with session.begin():
            assert not await UserRepository(session).rotate_refresh_token(
                principal.id, "h0", "h2", expires
            )
    async with session_factory() as session:
        assert (await UserRepository(session).get_by_id(principal.id)).refresh_token_hash == "h1"


@pytest.mark.requires_db
async def test_concurrent_refresh_has_exactly_one_winner(session_factory, principal) -> None:
    publisher = RecordingPublisher()
    pair = await _login(session_factory, publisher)

    results = await asyncio.gather(
        *(_refresh(session_factory, publisher, pair.refresh_token) for _ in range(4)),
        return_exceptions=True,
    )
    winners = [r for r in results if not isinstance(r, BaseException)]
    losers = [r for r in results if isinstance(r, BaseException)]
    assert len(winners) == 1
    assert all(isinstance(e, InvalidCredentialsException) for e in losers)

    async with session_factory() as session:
        stored = await UserRepository(session).get_by_id(principal.id)
    assert stored.refresh_token_hash == hash_refresh_token(winners[0].refresh_token)


@pytest.mark.requires_db
async def test_subject_mismatch_is_audited_and_does_not_rotate(
    session_factory, principal, create_principal
) -> None:
    """A refresh paired with another subject's access token is refused and flagged."""
    await create_principal("acme", "mallory@example.com", display_name="Mallory")
    publisher = RecordingPublisher()
    alice = await _login(session_factory, publisher)
    mallory = await _login(session_factory, publisher, email="mallory@example.com")

    with pytest.raises(SubjectMismatchException):
        await _refresh(session_factory, publisher, alice.refresh_token, mallory.access_token)

    [anomaly] = publisher.of_type(AuditEventType.REFRESH_TOKEN_SUBJECT_MISMATCH)
    assert anomaly.user_id == principal.id
    assert anomaly.payload["hinted_subject"] != principal.id
    async with session_factory() as session:
        stored = await UserRepository(session).get_by_id(principal.id)
    assert stored.refresh_token_hash == hash_refresh_token(alice.refresh_token)


@pytest.mark.requires_db
async def test_revoke_clears_refresh_token(session_factory, principal) -> None:
    publisher = RecordingPublisher()
    pair = await _login(session_factory, publisher)
    async with session_factory() as session:
        async with session.begin():
            await _auth_service(session, publisher).revoke(
                RequestContext(tenant_id="acme"), principal.id, pair.access_token
            )
    with pytest.raises(InvalidCredentialsException):
        await _refresh(session_factory, publisher, pair.refresh_token)
    assert publisher.of_type(AuditEventType.TOKEN_REVOKED)


@pytest.mark.requires_db
async def test_register_stages_event_and_rejects_duplicates(session_factory, tenant) -> None:
    publisher = RecordingPublisher()
    async with session_factory() as session:
        async with session.begin():
            created = await _auth_service(session, publisher).register(
                RequestContext(tenant_id="acme", correlation_id="corr-9"),
                "New.User@Example.com",
                PASSWORD,
                "New User",
            )
    assert created.normalized_email == "new.user@example.com"
    assert created.email_confirmed is False

    async with session_factory() as session:
        [message] = (await session.execute(select(OutboxMessage))).scalars().all()
    assert message.type == "UserRegisteredIntegrationEvent"
    assert message.correlation_id == "corr-9"

    async with session_factory() as session:
        with pytest.raises(UserAlreadyExistsException):
            await _auth_service(session, publisher).register(
                RequestContext(tenant_id="acme"), "new.user@example.com", PASSWORD
            )


@pytest.mark.requires_db
async def test_change_password_revokes_refresh_token(session_factory, principal) -> None:
    publisher = RecordingPublisher()
    pair = await _login(session_factory, publisher)
    async with session_factory() as session:
        async with session.begin():
            await _auth_service(session, publisher).change_password(
                RequestContext(tenant_id="acme"), principal.id, PASSWORD, "N3w-Passw0rd!"
            )
    with pytest.raises(InvalidCredentialsException):
        await _refresh(session_factory, publisher, pair.refresh_token)
    with pytest.raises(InvalidCredentialsException):
        await _login(session_factory, publisher)
    async with session_factory() as session:
        types = (await session.execute(select(OutboxMessage.type))).scalars().all()
    assert types == ["PasswordChangedIntegrationEvent"]


class FailingUnitOfWork:
    def __init__(self) -> None:
        self.commits = 0

    async def commit(self) -> None:
        self.commits += 1
        raise RuntimeError("commit rejected")


@pytest.mark.requires_db
async def test_service_commits_before_auditing_issuance(session_factory, principal) -> None:
    """With the session as unit of work the pair is durable once login returns."""
    publisher = RecordingPublisher()
    async with session_factory() as session:
        pair = await _auth_service(session, publisher, unit_of_work=session).login(
            RequestContext(tenant_id="acme"), "alice@example.com", PASSWORD
        )
        assert not session.in_transaction()
    async with session_factory() as session:
        stored = await UserRepository(session).get_by_id(principal.id)
    assert stored.refresh_token_hash == hash_refresh_token(pair.refresh_token)
    assert publisher.of_type(AuditEventType.TOKEN_ISSUED)


@pytest.mark.requires_db
async def test_failed_commit_publishes_no_success_audit(session_factory, principal) -> None:
    publisher = RecordingPublisher()
    unit_of_work = FailingUnitOfWork()
    async with session_factory() as session:
        service = _auth_service(session, publisher, unit_of_work=unit_of_work)
        with pytest.raises(RuntimeError):
            await service.login(RequestContext(tenant_id="acme"), "alice@example.com", PASSWORD)
        with pytest.raises(RuntimeError):
            await service.revoke(RequestContext(tenant_id="acme"), principal.id)
    assert unit_of_work.commits == 2
    assert publisher.of_type(AuditEventType.LOGIN_SUCCEEDED) == []
    assert publisher.of_type(AuditEventType.TOKEN_ISSUED) == []
    assert publisher.of_type(AuditEventType.TOKEN_REVOKED) == []
