try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from _stubs import StubTables
from showcase.core.config import StorageSettings, TableSettings
from showcase.schemas.media import MediaKind, MusicRecord, VideoRecord
from showcase.services.catalog import MediaCatalogService
from showcase.services.errors import NotFoundError, UnreachableError
from showcase.utils.http import SupabaseError


def _service(rows=None) -> tuple[MediaCatalogService, StubTables]:
    tables = StubTables(rows or {})
    return MediaCatalogService(tables, StorageSettings(), TableSettings()), tables


@pytest.mark.asyncio
async def test_list_media_returns_newest_first():
    service, _ = _service(
        {
            "music": [
                {"id": 1, "title": "Old", "created_at": "2024-01-01T00:00:00+00:00"},
                {"id": 2, "title": "New", "created_at": "2025-01-01T00:00:00+00:00"},
            ]
        }
    )

    records = await service.list_media(MediaKind.MUSIC)

    assert [record.title for record in records] == ["New", "Old"]
    assert all(isinstance(record, MusicRecord) for record in records)


@pytest.mark.asyncio
async def test_get_media_reads_videos_table():
    service, tables = _service({"videos": [{"id": "v1", "title": "Clip", "video_url": "https://x/v.mp4"}]})

    record = await service.get_media(MediaKind.VIDEO, "v1")

    assert isinstance(record, VideoRecord)
    assert record.video_url == "https://x/v.mp4"
    assert tables.calls == [("select_one", "videos")]

    with pytest.raises(NotFoundError):
        await service.get_media(MediaKind.VIDEO, "missing")


@pytest.mark.asyncio
async def test_missing_table_gets_friendly_message():
    service, tables = _service()
    tables.errors["select"] = SupabaseError(
        'relation "public.music" does not exist', status_code=404, code="42P01"
    )

    with pytest.raises(NotFoundError) as excinfo:
        await service.list_media(MediaKind.MUSIC)

    assert "ask an administrator" in excinfo.value.message


@pytest.mark.asyncio
async def test_other_read_failures_are_unreachable():
    service, tables = _service()
    tables.errors["select"] = SupabaseError("Internal Server Error", status_code=500)

    with pytest.raises(UnreachableError) as excinfo:
        await service.list_media(MediaKind.VIDEO)

    assert "Internal Server Error" in excinfo.value.message
