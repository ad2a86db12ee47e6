from __future__ import annotations

import json

import pytest

from pointbridge.clients.local_auth import (
    OAUTH_PLACEHOLDER_EMAIL,
    SESSION_STORAGE_KEY,
    LocalAuthClient,
)
from pointbridge.clients.session_storage import MemorySessionStorage, SessionStorageError
from pointbridge.core.security import SessionRecordCipher
from pointbridge.core.session_state import AuthChangeEvent


class BrokenStorage:
    """Storage whose every operation fails, like a full or disabled localStorage."""

    def get_item(self, key: str) -> str | None:
        raise SessionStorageError("read failed")

    def set_item(self, key: str, value: str) -> None:
        raise SessionStorageError("write failed")

    def remove_item(self, key: str) -> None:
        raise SessionStorageError("remove failed")


def _client(storage, settings, clock, cipher=None) -> LocalAuthClient:
    return LocalAuthClient(storage=storage, settings=settings, cipher=cipher, clock=clock)


@pytest.mark.asyncio
async def test_admin_credentials_sign_in_as_admin(local_auth_settings, clock) -> None:
    client = _client(MemorySessionStorage(), local_auth_settings, clock)

    response = await client.sign_in_with_password(
        email="admin@rac-rewards.com", password="admin123!"
    )

    assert response.error is None
    assert response.data.user is not None
    assert response.data.user.role == "admin"
    assert response.data.user.aud == "authenticated"
    session = response.data.session
    assert session is not None
    assert session.token_type == "bearer"
    assert session.expires_in == 3600
    assert abs(session.expires_at - (clock.now + 3600)) <= 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("email", "password"),
    [
        ("x@y.com", "wrong"),
        ("admin@rac-rewards.com", "wrong"),
        ("ADMIN@rac-rewards.com", "admin123!"),
        ("", ""),
    ],
)
async def test_other_credentials_are_rejected(local_auth_settings, clock, email, password) -> None:
    client = _client(MemorySessionStorage(), local_auth_settings, clock)

    response = await client.sign_in_with_password(email=email, password=password)

    assert response.data.user is None
    assert response.data.session is None
    assert response.error is not None
    assert response.error.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_token_synthesis_uses_user_id_and_second_timestamp(local_auth_settings, clock) -> None:
    clock.now = 1_700_000_123.75
    client = _client(MemorySessionStorage(), local_auth_settings, clock)

    response = await client.sign_in_with_password(
        email="admin@rac-rewards.com", password="admin123!"
    )

    session = response.data.session
    user_id = response.data.user.id
    assert session.access_token == f"local-token-{user_id}-1700000123"
    assert session.refresh_token == f"local-refresh-{user_id}-1700000123"
    assert session.expires_at == 1_700_000_123 + 3600


@pytest.mark.asyncio
async def test_sign_up_always_succeeds_as_merchant(local_auth_settings, clock) -> None:
    storage = MemorySessionStorage()
    client = _client(storage, local_auth_settings, clock)

    response = await client.sign_up(
        email="shop@example.com",
        password="anything",
        options={"data": {"business_name": "Corner Shop"}},
    )

    assert response.error is None
    assert response.data.user.role == "merchant"
    assert response.data.user.email == "shop@example.com"
    assert storage.get_item(SESSION_STORAGE_KEY) is not None


@pytest.mark.asyncio
async def test_sign_out_then_get_session_returns_none(local_auth_settings, clock) -> None:
    storage = MemorySessionStorage()
    client = _client(storage, local_auth_settings, clock)
    await client.sign_in_with_password(email="admin@rac-rewards.com", password="admin123!")

    sign_out = await client.sign_out()
    session = await client.get_session()

    assert sign_out.error is None
    assert session.data.session is None
    assert storage.get_item(SESSION_STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_expired_session_is_purged_and_not_resurrected(local_auth_settings, clock) -> None:
    storage = MemorySessionStorage()
    client = _client(storage, local_auth_settings, clock)
    await client.sign_in_with_password(email="admin@rac-rewards.com", password="admin123!")

    clock.advance(3601)
    session = await client.get_session()
    user = await client.get_user()

    assert session.data.session is None
    assert session.error is None
    assert user.data.user is None
    assert storage.get_item(SESSION_STORAGE_KEY) is None

    fresh = _client(storage, local_auth_settings, clock)
    assert (await fresh.get_session()).data.session is None


@pytest.mark.asyncio
async def test_expired_persisted_record_is_purged_on_construction(local_auth_settings, clock) -> None:
    storage = MemorySessionStorage()
    first = _client(storage, local_auth_settings, clock)
    await first.sign_in_with_password(email="admin@rac-rewards.com", password="admin123!")

    clock.advance(7200)
    _client(storage, local_auth_settings, clock)

    assert storage.get_item(SESSION_STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_valid_persisted_session_is_restored(local_auth_settings, clock) -> None:
    storage = MemorySessionStorage()
    first = _client(storage, local_auth_settings, clock)
    signed_in = await first.sign_in_with_password(
        email="admin@rac-rewards.com", password="admin123!"
    )

    clock.advance(60)
    second = _client(storage, local_auth_settings, clock)
    restored = await second.get_session()

    assert restored.data.session == signed_in.data.session
    assert (await second.get_user()).data.user.email == "admin@rac-rewards.com"


@pytest.mark.asyncio
async def test_corrupt_persisted_record_is_discarded(local_auth_settings, clock) -> None:
    storage = MemorySessionStorage()
    storage.set_item(SESSION_STORAGE_KEY, "{not json")

    client = _client(storage, local_auth_settings, clock)

    assert (await client.get_session()).data.session is None
    assert storage.get_item(SESSION_STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_encrypted_record_round_trips_and_rejects_other_secret(local_auth_settings, clock) -> None:
    storage = MemorySessionStorage()
    cipher = SessionRecordCipher(secret="local-secret")
    client = _client(storage, local_auth_settings, clock, cipher=cipher)
    await client.sign_in_with_password(email="admin@rac-rewards.com", password="admin123!")

    sealed = storage.get_item(SESSION_STORAGE_KEY)
    assert "local-token-" not in sealed
    assert json.loads(cipher.unseal(sealed))["user"]["role"] == "admin"

    restored = _client(storage, local_auth_settings, clock, cipher=cipher)
    assert (await restored.get_session()).data.session is not None

    other = _client(storage, local_auth_settings, clock, cipher=SessionRecordCipher(secret="other"))
    assert (await other.get_session()).data.session is None
    assert storage.get_item(SESSION_STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_storage_failures_degrade_to_in_memory_session(local_auth_settings, clock) -> None:
    client = _client(BrokenStorage(), local_auth_settings, clock)

    response = await client.sign_in_with_password(
        email="admin@rac-rewards.com", password="admin123!"
    )
    session = await client.get_session()
    sign_out = await client.sign_out()

    assert response.error is None
    assert session.data.session == response.data.session
    assert sign_out.error is None


@pytest.mark.asyncio
async def test_oauth_ignores_provider_and_fabricates_placeholder_user(local_auth_settings, clock) -> None:
    client = _client(MemorySessionStorage(), local_auth_settings, clock)

    response = await client.sign_in_with_oauth(provider="github")

    assert response.error is None
    assert response.data.provider == "github"
    assert response.data.url is None
    assert response.data.user.email == OAUTH_PLACEHOLDER_EMAIL
    assert response.data.session is not None


def test_on_auth_state_change_reports_signed_out_immediately(local_auth_settings, clock) -> None:
    client = _client(MemorySessionStorage(), local_auth_settings, clock)
    events: list[tuple] = []

    subscription = client.on_auth_state_change(lambda event, session: events.append((event, session)))

    assert events == [("SIGNED_OUT", None)]
    subscription.unsubscribe()


@pytest.mark.asyncio
async def test_on_auth_state_change_follows_sign_in_and_sign_out(local_auth_settings, clock) -> None:
    client = _client(MemorySessionStorage(), local_auth_settings, clock)
    events: list[AuthChangeEvent] = []
    subscription = client.on_auth_state_change(lambda event, _session: events.append(event))

    await client.sign_in_with_password(email="admin@rac-rewards.com", password="admin123!")
    await client.sign_out()
    subscription.unsubscribe()
    await client.sign_in_with_password(email="admin@rac-rewards.com", password="admin123!")

    assert events == [
        AuthChangeEvent.SIGNED_OUT,
        AuthChangeEvent.SIGNED_IN,
        AuthChangeEvent.SIGNED_OUT,
    ]


@pytest.mark.asyncio
async def test_on_auth_state_change_treats_expired_session_as_signed_out(local_auth_settings, clock) -> None:
    storage = MemorySessionStorage()
    client = _client(storage, local_auth_settings, clock)
    await client.sign_in_with_password(email="admin@rac-rewards.com", password="admin123!")
    clock.advance(3600)

    events: list[tuple] = []
    client.on_auth_state_change(lambda event, session: events.append((event, session)))

    assert events == [(AuthChangeEvent.SIGNED_OUT, None)]
    assert storage.get_item(SESSION_STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_expiry_is_reported_once_on_next_access(local_auth_settings, clock) -> None:
    client = _client(MemorySessionStorage(), local_auth_settings, clock)
    await client.sign_in_with_password(email="admin@rac-rewards.com", password="admin123!")
    events: list[AuthChangeEvent] = []
    client.on_auth_state_change(lambda event, _session: events.append(event))

    clock.advance(3600)
    assert events == [AuthChangeEvent.SIGNED_IN]

    await client.get_user()
    await client.get_session()

    assert events == [AuthChangeEvent.SIGNED_IN, AuthChangeEvent.SIGNED_OUT]
