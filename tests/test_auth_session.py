from __future__ import annotations

import pytest

from showcase.schemas.auth import AuthEventType, AuthTokens, Identity
from showcase.services.auth_session import AuthSession
from showcase.services.errors import AuthenticationFailedError
from showcase.utils.http import SupabaseError


class FakeAuthClient:
    def __init__(self) -> None:
        self.users: dict[str, Identity] = {}
        self.signed_out: list[str] = []
        self.fail_sign_in = False

    async def get_user(self, access_token: str) -> Identity | None:
        return self.users.get(access_token)

    async def sign_in_with_password(self, email: str, password: str):
        if self.fail_sign_in:
            raise SupabaseError("Invalid login credentials", status_code=400)
        identity = Identity(id="u1", email=email)
        self.users["access-1"] = identity
        return identity, AuthTokens(access_token="access-1", refresh_token="refresh-1", expires_in=3600)

    async def sign_up(self, email: str, password: str):
        return Identity(id="u2", email=email), None

    async def refresh_session(self, refresh_token: str):
        identity = Identity(id="u1", email="a@example.com")
        self.users["access-2"] = identity
        return identity, AuthTokens(access_token="access-2", refresh_token="refresh-2")

    async def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)


@pytest.mark.asyncio
async def test_sign_in_refresh_sign_out_emit_typed_events() -> None:
    session = AuthSession(FakeAuthClient())
    events = []

    async def listener(event) -> None:
        events.append((event.type, event.identity.id if event.identity else None))

    session.on_identity_change(listener)

    await session.sign_in("a@example.com", "secret")
    await session.refresh()
    await session.sign_out()

    assert events == [
        (AuthEventType.SIGNED_IN, "u1"),
        (AuthEventType.TOKEN_REFRESHED, "u1"),
        (AuthEventType.SIGNED_OUT, None),
    ]
    assert session.access_token is None


@pytest.mark.asyncio
async def test_unsubscribed_listener_receives_nothing_and_no_replay() -> None:
    session = AuthSession(FakeAuthClient())
    await session.sign_in("a@example.com", "secret")

    received = []

    async def listener(event) -> None:
        received.append(event.type)

    subscription = session.on_identity_change(listener)
    assert received == []

    subscription.unsubscribe()
    await session.sign_out()

    assert received == []
    assert subscription.active is False


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others() -> None:
    session = AuthSession(FakeAuthClient())
    received = []

    async def broken(event) -> None:
        raise RuntimeError("boom")

    async def healthy(event) -> None:
        received.append(event.type)

    session.on_identity_change(broken)
    session.on_identity_change(healthy)
    await session.sign_in("a@example.com", "secret")

    assert received == [AuthEventType.SIGNED_IN]


@pytest.mark.asyncio
async def test_identity_is_fetched_every_time_and_updates_are_reported() -> None:
    client = FakeAuthClient()
    session = AuthSession(client, access_token="token")
    client.users["token"] = Identity(id="u1", email="old@example.com")
    received = []

    async def listener(event) -> None:
        received.append((event.type, event.identity.email))

    session.on_identity_change(listener)

    first = await session.get_current_identity()
    client.users["token"] = Identity(id="u1", email="new@example.com")
    second = await session.get_current_identity()

    assert first.email == "old@example.com"
    assert second.email == "new@example.com"
    assert received == [(AuthEventType.USER_UPDATED, "new@example.com")]

    del client.users["token"]
    assert await session.get_current_identity() is None


@pytest.mark.asyncio
async def test_sign_in_failure_raises_authentication_error() -> None:
    client = FakeAuthClient()
    client.fail_sign_in = True
    session = AuthSession(client)

    with pytest.raises(AuthenticationFailedError) as excinfo:
        await session.sign_in("a@example.com", "wrong")

    assert "Invalid login credentials" in excinfo.value.message
    assert await session.get_current_identity() is None


@pytest.mark.asyncio
async def test_refresh_without_token_is_rejected() -> None:
    session = AuthSession(FakeAuthClient())

    with pytest.raises(AuthenticationFailedError):
        await session.refresh()
