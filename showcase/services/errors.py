"""
Failure taxonomy for the back-office services.

Every error carries a human-readable message suitable for showing to an
operator. Backend call failures are classified so callers never have to
interpret raw transport text.
"""

from __future__ import annotations

from typing import Iterable, List

from showcase.utils.http import SupabaseError

NETWORK = "network"
AUTHENTICATION = "authentication"
SERVICE = "service"

_NETWORK_HINTS = ("failed to fetch", "networkerror", "network error", "connection", "timed out")
_AUTH_HINTS = ("invalid authentication credentials", "invalid jwt", "jwt expired", "invalid api key")


class ShowcaseError(Exception):
    """Base class for errors surfaced to callers of the services."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotAuthenticatedError(ShowcaseError):
    """The session has no signed-in user."""

    def __init__(self, message: str = "User is not signed in.") -> None:
        super().__init__(message)


class NotAuthorizedError(ShowcaseError):
    """The signed-in user lacks admin rights."""

    def __init__(self, message: str = "Administrator access is required.") -> None:
        super().__init__(message)


class AuthenticationFailedError(ShowcaseError):
    """The auth service rejected the supplied credentials or token."""


class MissingRequiredAssetError(ShowcaseError):
    """An add request did not include its primary asset."""


class NotFoundError(ShowcaseError):
    """A row or a storage bucket does not exist."""


class BucketNotFoundError(NotFoundError):
    """The target bucket is absent; lists what is available for diagnosis."""

    def __init__(self, bucket: str, available: Iterable[str]) -> None:
        self.bucket = bucket
        self.available: List[str] = list(available)
        names = ", ".join(self.available) or "none"
        message = (
            f'Storage bucket "{bucket}" does not exist.\n'
            f"Available buckets: {names}\n\n"
            "To create it:\n"
            "1. Open the project dashboard\n"
            "2. Go to the Storage page\n"
            '3. Click "Create bucket"\n'
            f'4. Enter the name "{bucket}" and create it\n'
            "5. Make the bucket public"
        )
        super().__init__(message)


class UnreachableError(ShowcaseError):
    """An external call failed; ``category`` is one of network, authentication or service."""

    def __init__(self, message: str, *, category: str = SERVICE, detail: str | None = None) -> None:
        super().__init__(message)
        self.category = category
        self.detail = detail


class UploadFailedError(UnreachableError):
    """An asset upload was rejected or could not be sent."""


def classify_backend_error(exc: Exception) -> str:
    """Place a backend failure into the network / authentication / service taxonomy."""
    text = str(exc).lower()
    if isinstance(exc, SupabaseError):
        if exc.network:
            return NETWORK
        if exc.status_code == 401:
            return AUTHENTICATION
    if any(hint in text for hint in _AUTH_HINTS):
        return AUTHENTICATION
    if any(hint in text for hint in _NETWORK_HINTS):
        return NETWORK
    return SERVICE


def unreachable(action: str, exc: Exception) -> UnreachableError:
    """Wrap a backend failure with a message describing what was being attempted."""
    detail = getattr(exc, "message", None) or str(exc)
    category = classify_backend_error(exc)
    if category == NETWORK:
        message = f"{action} failed: network connection failed, check connectivity and retry later ({detail})"
    elif category == AUTHENTICATION:
        message = f"{action} failed: authentication was rejected, check the configured API keys ({detail})"
    else:
        message = f"{action} failed: {detail}"
    return UnreachableError(message, category=category, detail=detail)


def is_missing_relation(exc: SupabaseError) -> bool:
    """True when the table store reports the queried table does not exist."""
    text = exc.message.lower()
    if exc.code in ("42P01", "PGRST205"):
        return True
    return ("relation" in text and "does not exist" in text) or "could not find the table" in text


__all__ = [
    "AUTHENTICATION",
    "AuthenticationFailedError",
    "BucketNotFoundError",
    "MissingRequiredAssetError",
    "NETWORK",
    "NotAuthenticatedError",
    "NotAuthorizedError",
    "NotFoundError",
    "SERVICE",
    "ShowcaseError",
    "UnreachableError",
    "UploadFailedError",
    "classify_backend_error",
    "is_missing_relation",
    "unreachable",
]
