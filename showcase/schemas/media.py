"""
Pydantic models for catalog records, uploads and back-office requests.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from showcase.core.config import StorageSettings, TableSettings


class MediaKind(str, Enum):
    MUSIC = "music"
    VIDEO = "video"


class MediaRecord(BaseModel):
    """Fields shared by every catalog entry."""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    title: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None


class MusicRecord(MediaRecord):
    """A row of the music table."""

    audio_url: Optional[str] = None
    cover_url: Optional[str] = None


class VideoRecord(MediaRecord):
    """A row of the videos table."""

    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None


class MediaLayout(BaseModel):
    """Where a media kind keeps its row and its two assets."""

    kind: MediaKind
    table: str
    primary_field: str
    primary_bucket: str
    aux_field: str
    aux_bucket: str

    @property
    def record_model(self) -> Type[MediaRecord]:
        return MusicRecord if self.kind is MediaKind.MUSIC else VideoRecord

    @property
    def label(self) -> str:
        return self.kind.value


def media_layout(
    kind: MediaKind, storage: StorageSettings, tables: TableSettings
) -> MediaLayout:
    """Resolve table, column and bucket names for a media kind."""
    if kind is MediaKind.MUSIC:
        return MediaLayout(
            kind=kind,
            table=tables.music_table,
            primary_field="audio_url",
            primary_bucket=storage.music_bucket,
            aux_field="cover_url",
            aux_bucket=storage.images_bucket,
        )
    return MediaLayout(
        kind=kind,
        table=tables.videos_table,
        primary_field="video_url",
        primary_bucket=storage.videos_bucket,
        aux_field="thumbnail_url",
        aux_bucket=storage.images_bucket,
    )


class MediaFile(BaseModel):
    """Binary asset ready to be uploaded to a bucket."""

    filename: str = Field(..., min_length=1)
    content_type: str = "application/octet-stream"
    data: bytes


class MediaAttachment(BaseModel):
    """Base64-encoded asset as submitted through the API."""

    filename: str = Field(..., description="Original file name including extension.")
    mime_type: str = Field(..., description="MIME type for the asset (e.g., audio/mpeg).")
    file_b64: str = Field(..., description="Base64-encoded file contents.")


class MediaCreateRequest(BaseModel):
    """Payload for adding a song or a video to the catalog."""

    title: str = Field(..., min_length=1)
    description: str = ""
    primary_file: Optional[MediaAttachment] = Field(
        None,
        description="Audio file for music, video file for videos. Required.",
    )
    aux_file: Optional[MediaAttachment] = Field(
        None,
        description="Optional cover image (music) or thumbnail (video).",
    )


class PartialCleanupFailure(BaseModel):
    """Storage object that could not be removed after its row was deleted."""

    bucket: str
    url: str
    message: str


class DeleteMediaResult(BaseModel):
    """Outcome of a catalog deletion; warnings never undo the row removal."""

    kind: MediaKind
    record_id: str
    warnings: List[PartialCleanupFailure] = Field(default_factory=list)


class Bucket(BaseModel):
    """Storage bucket descriptor as listed by the storage service."""

    model_config = ConfigDict(extra="ignore")

    name: str
    id: Optional[str] = None
    public: bool = False

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Bucket":
        return cls.model_validate(payload)


class BucketStatusResponse(BaseModel):
    bucket: str
    exists: bool = True


__all__ = [
    "Bucket",
    "BucketStatusResponse",
    "DeleteMediaResult",
    "MediaAttachment",
    "MediaCreateRequest",
    "MediaFile",
    "MediaKind",
    "MediaLayout",
    "MediaRecord",
    "MusicRecord",
    "PartialCleanupFailure",
    "VideoRecord",
    "media_layout",
]
