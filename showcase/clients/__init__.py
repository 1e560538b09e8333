"""Expose constructed client wrappers."""

from showcase.utils.http import SupabaseError

from .supabase_auth import SupabaseAuthClient
from .supabase_storage import SupabaseStorageClient
from .supabase_tables import SupabaseTableClient

__all__ = [
    "SupabaseAuthClient",
    "SupabaseError",
    "SupabaseStorageClient",
    "SupabaseTableClient",
]
