"""Storage layer: Store contract with SQLite and Supabase adapters."""

from __future__ import annotations

from ..common.config import Config
from .connection import get_connection, init_db
from .models import StoredModel
from .sqlite_store import SQLiteStore
from .store import Store
from .supabase_store import SupabaseStore


def create_store(config: Config | None = None) -> Store:
    """Build the store named by ``config.store_backend``.

    Raises:
        ValueError: On an unknown backend.
    """
    config = config or Config()
    backend = config.store_backend.lower()
    if backend == "sqlite":
        return SQLiteStore(config)
    if backend == "supabase":
        return SupabaseStore(config.supabase_url, config.supabase_key)
    raise ValueError(f"Unknown store backend: {config.store_backend}")


__all__ = [
    "SQLiteStore",
    "Store",
    "StoredModel",
    "SupabaseStore",
    "create_store",
    "get_connection",
    "init_db",
]
