try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from _stubs import ADMIN, MEMBER, StubSession, StubTables, profile_rows
from showcase.schemas.auth import Identity
from showcase.services.access_guard import AccessGuard
from showcase.services.errors import (
    NETWORK,
    NotAuthenticatedError,
    NotAuthorizedError,
    UnreachableError,
)
from showcase.utils.http import SupabaseError


def _guard(identity, rows=None):
    session = StubSession(identity)
    tables = StubTables(rows if rows is not None else profile_rows())
    return AccessGuard(session, tables), session, tables


@pytest.mark.asyncio
async def test_verify_admin_access_returns_admin_identity():
    guard, _, _ = _guard(ADMIN)

    identity = await guard.verify_admin_access()

    assert identity.id == ADMIN.id


@pytest.mark.asyncio
async def test_verify_admin_access_rejects_signed_out_session():
    guard, _, tables = _guard(None)

    with pytest.raises(NotAuthenticatedError):
        await guard.verify_admin_access()

    assert tables.calls == []


@pytest.mark.asyncio
async def test_verify_admin_access_rejects_non_admin():
    guard, _, _ = _guard(MEMBER)

    with pytest.raises(NotAuthorizedError):
        await guard.verify_admin_access()


@pytest.mark.asyncio
async def test_missing_profile_counts_as_not_admin():
    guard, _, _ = _guard(Identity(id="ghost"))

    with pytest.raises(NotAuthorizedError):
        await guard.verify_admin_access()


@pytest.mark.asyncio
async def test_lookup_failure_is_fatal_for_gate_but_false_for_display_check():
    guard, _, tables = _guard(ADMIN)
    tables.errors["select_one"] = SupabaseError("Network error: connection refused", network=True)

    with pytest.raises(UnreachableError) as excinfo:
        await guard.verify_admin_access()
    assert excinfo.value.category == NETWORK
    assert "connection refused" in excinfo.value.message

    assert await guard.check_if_admin(ADMIN.id) is False


@pytest.mark.asyncio
async def test_check_if_admin_without_user_id_skips_lookup():
    guard, _, tables = _guard(ADMIN)

    assert await guard.check_if_admin(None) is False
    assert tables.calls == []
    assert await guard.check_if_admin(ADMIN.id) is True


@pytest.mark.asyncio
async def test_every_check_refetches_identity_and_profile():
    rows = profile_rows()
    guard, session, tables = _guard(ADMIN, rows)

    await guard.verify_admin_access()
    rows["profiles"][0]["is_admin"] = False

    with pytest.raises(NotAuthorizedError):
        await guard.verify_admin_access()
    assert session.lookups == 2
    assert [call[0] for call in tables.calls] == ["select_one", "select_one"]
