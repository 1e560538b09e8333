try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
from contextlib import asynccontextmanager

import httpx
import pytest

from _stubs import (
    ADMIN,
    MEMBER,
    PUBLIC_PREFIX,
    StubSession,
    StubStorage,
    StubTables,
    build_workflow,
    profile_rows,
)
from showcase import dependencies
from showcase.core.config import StorageSettings, TableSettings
from showcase.main import app
from showcase.services.access_guard import AccessGuard
from showcase.services.bucket_cache import BucketExistenceCache
from showcase.services.catalog import MediaCatalogService


@asynccontextmanager
async def _client(overrides):
    app.dependency_overrides.clear()
    app.dependency_overrides.update(overrides)
    try:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


def _add_payload(**extra):
    payload = {
        "title": "Song A",
        "description": "",
        "primary_file": {"filename": "song.mp3", "mime_type": "audio/mpeg", "file_b64": _b64(b"ID3")},
    }
    payload.update(extra)
    return payload


@pytest.mark.asyncio
async def test_admin_can_add_music():
    workflow, _, tables, _ = build_workflow(ADMIN)

    async with _client({dependencies.get_media_workflow: lambda: workflow}) as client:
        response = await client.post("/api/admin/media/music", json=_add_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Song A"
    assert body["audio_url"] == f"{PUBLIC_PREFIX}music/1700000000000_song.mp3"
    assert body["cover_url"] is None
    assert tables.rows["music"][0]["created_by"] == ADMIN.id


@pytest.mark.asyncio
async def test_non_admin_add_is_forbidden():
    workflow, _, _, storage = build_workflow(MEMBER)

    async with _client({dependencies.get_media_workflow: lambda: workflow}) as client:
        response = await client.post("/api/admin/media/music", json=_add_payload())

    assert response.status_code == 403
    assert storage.uploads == []


@pytest.mark.asyncio
async def test_add_without_primary_file_is_bad_request():
    workflow, _, _, _ = build_workflow(ADMIN)

    async with _client({dependencies.get_media_workflow: lambda: workflow}) as client:
        response = await client.post("/api/admin/media/video", json=_add_payload(primary_file=None))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_invalid_base64_is_rejected_before_workflow_runs():
    workflow, session, _, _ = build_workflow(ADMIN)
    payload = _add_payload(primary_file={"filename": "a.mp3", "mime_type": "audio/mpeg", "file_b64": "%%%"})

    async with _client({dependencies.get_media_workflow: lambda: workflow}) as client:
        response = await client.post("/api/admin/media/music", json=payload)

    assert response.status_code == 400
    assert session.lookups == 0


@pytest.mark.asyncio
async def test_missing_bucket_surfaces_available_buckets():
    workflow, _, _, _ = build_workflow(ADMIN, buckets=("images",))

    async with _client({dependencies.get_media_workflow: lambda: workflow}) as client:
        response = await client.post("/api/admin/media/music", json=_add_payload())

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["bucket"] == "music"
    assert detail["available_buckets"] == ["images"]


@pytest.mark.asyncio
async def test_delete_reports_cleanup_warnings():
    rows = profile_rows()
    rows["videos"] = [{"id": 3, "title": "Clip", "video_url": "https://elsewhere.example/v.mp4"}]
    workflow, _, tables, _ = build_workflow(ADMIN, rows=rows)

    async with _client({dependencies.get_media_workflow: lambda: workflow}) as client:
        response = await client.delete("/api/admin/media/video/3")

    assert response.status_code == 200
    body = response.json()
    assert body["record_id"] == "3"
    assert len(body["warnings"]) == 1
    assert tables.rows["videos"] == []


@pytest.mark.asyncio
async def test_public_listing_and_unknown_kind():
    tables = StubTables({"music": [{"id": 1, "title": "Song", "created_at": "2025-01-01T00:00:00+00:00"}]})
    catalog = MediaCatalogService(tables, StorageSettings(), TableSettings())

    async with _client({dependencies.get_catalog_service: lambda: catalog}) as client:
        listing = await client.get("/api/media/music")
        unknown = await client.get("/api/media/podcasts")

    assert listing.status_code == 200
    assert listing.json()[0]["title"] == "Song"
    assert unknown.status_code == 422


@pytest.mark.asyncio
async def test_me_uses_lenient_admin_check():
    session = StubSession(MEMBER)
    tables = StubTables(profile_rows())
    guard = AccessGuard(session, tables)

    async with _client(
        {
            dependencies.get_auth_session: lambda: session,
            dependencies.get_access_guard: lambda: guard,
        }
    ) as client:
        response = await client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.json()["user"]["id"] == MEMBER.id
    assert response.json()["is_admin"] is False


@pytest.mark.asyncio
async def test_health_endpoint():
    async with _client({}) as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def _bucket_overrides(identity, buckets):
    session = StubSession(identity)
    tables = StubTables(profile_rows())
    storage = StubStorage(buckets)
    overrides = {
        dependencies.get_access_guard: lambda: AccessGuard(session, tables),
        dependencies.get_bucket_cache: lambda: BucketExistenceCache(storage),
    }
    return overrides, storage


@pytest.mark.asyncio
async def test_bucket_check_confirms_existing_bucket():
    overrides, _ = _bucket_overrides(ADMIN, ("images", "music"))

    async with _client(overrides) as client:
        response = await client.get("/api/admin/buckets/music")

    assert response.status_code == 200
    assert response.json()["bucket"] == "music"


@pytest.mark.asyncio
async def test_bucket_check_missing_bucket_lists_available_names():
    overrides, _ = _bucket_overrides(ADMIN, ("images",))

    async with _client(overrides) as client:
        response = await client.get("/api/admin/buckets/videos")

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["bucket"] == "videos"
    assert detail["available_buckets"] == ["images"]
    assert "videos" in detail["message"]


@pytest.mark.asyncio
async def test_bucket_check_is_admin_only():
    overrides, storage = _bucket_overrides(MEMBER, ("images", "music"))

    async with _client(overrides) as client:
        response = await client.get("/api/admin/buckets/music")

    assert response.status_code == 403
    assert storage.list_calls == 0
