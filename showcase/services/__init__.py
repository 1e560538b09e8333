"""Service layer exports."""

from .access_guard import AccessGuard
from .accounts import AccountService
from .auth_session import AuthSession, AuthSubscription
from .bucket_cache import BucketExistenceCache, BucketExistenceEntry
from .catalog import MediaCatalogService
from .context import ShowcaseContext
from .diagnostics import BackendDiagnostics, DiagnosticsReport, check_table_exists
from .media_workflow import MediaWriteWorkflow

__all__ = [
    "AccessGuard",
    "AccountService",
    "AuthSession",
    "AuthSubscription",
    "BackendDiagnostics",
    "BucketExistenceCache",
    "BucketExistenceEntry",
    "DiagnosticsReport",
    "MediaCatalogService",
    "MediaWriteWorkflow",
    "ShowcaseContext",
    "check_table_exists",
]
