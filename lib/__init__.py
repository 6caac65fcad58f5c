# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains the persistence layer:
# - store.py: Store/Table interface and the in-process backend
# - supabase_client.py: Supabase (PostgREST) backend
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.store import InMemoryStore, Store, StoreError, Table
from lib.supabase_client import SupabaseClientError, SupabaseStore

__all__ = [
    "InMemoryStore",
    "Store",
    "StoreError",
    "Table",
    "SupabaseClientError",
    "SupabaseStore",
]
