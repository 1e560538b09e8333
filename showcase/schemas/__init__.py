"""Public schema exports."""

from .auth import (
    AuthEvent,
    AuthEventType,
    AuthTokens,
    CredentialsPayload,
    CurrentUserResponse,
    Identity,
    Profile,
    SessionResponse,
)
from .media import (
    Bucket,
    BucketStatusResponse,
    DeleteMediaResult,
    MediaAttachment,
    MediaCreateRequest,
    MediaFile,
    MediaKind,
    MediaLayout,
    MediaRecord,
    MusicRecord,
    PartialCleanupFailure,
    VideoRecord,
    media_layout,
)

__all__ = [
    "AuthEvent",
    "AuthEventType",
    "AuthTokens",
    "Bucket",
    "BucketStatusResponse",
    "CredentialsPayload",
    "CurrentUserResponse",
    "DeleteMediaResult",
    "Identity",
    "MediaAttachment",
    "MediaCreateRequest",
    "MediaFile",
    "MediaKind",
    "MediaLayout",
    "MediaRecord",
    "MusicRecord",
    "PartialCleanupFailure",
    "Profile",
    "SessionResponse",
    "VideoRecord",
    "media_layout",
]
