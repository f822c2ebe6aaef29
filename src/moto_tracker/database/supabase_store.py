"""Supabase-backed Store for the hosted catalog database.

Tables: ``brands`` (name, slug, is_active), ``models`` and
``price_history``, matching the local SQLite schema column for column.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Mapping

from src.common.models import CanonicalRecord, PriceHistoryEntry, generate_slug

from ..errors import StoreError
from .models import StoredModel
from .store import identity_string, record_to_columns, row_to_stored, to_columns

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SupabaseStore:
    """Store implementation over the Supabase REST client.

    PostgREST offers no multi-statement transaction, so ``atomic()`` is a
    plain scope; the reconciler's write order (history row before price
    update) carries the consistency guarantee instead.
    """

    def __init__(
        self,
        supabase_url: str | None = None,
        supabase_key: str | None = None,
        client: Any = None,
    ) -> None:
        self._supabase_url = supabase_url or os.getenv("SUPABASE_URL", "")
        self._supabase_key = supabase_key or os.getenv("SUPABASE_SERVICE_KEY", "")
        self._client = client  # Lazy init
        self._brand_ids: dict[str, Any] = {}

    def _get_client(self):
        """Lazy-initialize Supabase client (only when actually uploading)."""
        if self._client is not None:
            return self._client
        if not self._supabase_url or not self._supabase_key:
            raise ValueError(
                "SUPABASE_URL / SUPABASE_SERVICE_KEY must be set in .env"
            )
        from supabase import create_client

        self._client = create_client(self._supabase_url, self._supabase_key)
        logger.info("Connected to Supabase: %s", self._supabase_url)
        return self._client

    # --- Store contract ---

    def find_by_identity(self, brand: str, name: str) -> StoredModel | None:
        key = identity_string(brand, name)
        result = self._run(
            "find_by_identity",
            lambda c: c.table("models").select("*").ilike("brand", _escape_like(brand.strip())),
        )

        for row in result.data or []:
            if identity_string(row["brand"], row["name"]) == key:
                return row_to_stored(row)
        return None

    def insert(self, record: CanonicalRecord, brand_id: int | str | None = None) -> Any:
        data = record_to_columns(record, brand_id)
        result = self._run("insert", lambda c: c.table("models").insert(data))
        rows = result.data or []
        if not rows:
            raise StoreError(f"Insert of {record.brand} {record.name} returned no row", operation="insert")
        return rows[0]["id"]

    def update(self, model_id: int | str, partial: Mapping[str, Any]) -> None:
        data = to_columns(partial)
        if not data:
            return
        data["updated_at"] = datetime.now().isoformat()
        self._run("update", lambda c: c.table("models").update(data).eq("id", model_id))

    def insert_price_history(self, entry: PriceHistoryEntry) -> None:
        data = {
            "model_id": entry.model_id,
            "old_price": entry.old_price,
            "new_price": entry.new_price,
            "price_change": entry.price_change,
            "percentage_change": entry.percentage_change,
            "change_date": entry.changed_at.isoformat(),
        }
        self._run("insert_price_history", lambda c: c.table("price_history").insert(data))

    def ensure_brand(self, name: str) -> Any:
        slug = generate_slug(name, "", None)
        if slug in self._brand_ids:
            return self._brand_ids[slug]

        result = self._run(
            "ensure_brand",
            lambda c: c.table("brands").select("id").eq("slug", slug).limit(1),
        )
        if result.data:
            brand_id = result.data[0]["id"]
        else:
            created = self._run(
                "ensure_brand",
                lambda c: c.table("brands").insert(
                    {"name": name, "slug": slug, "is_active": True}
                ),
            )
            if not created.data:
                raise StoreError(f"Creating brand {name} returned no row", operation="ensure_brand")
            brand_id = created.data[0]["id"]
            logger.info("Created brand %s (id=%s)", name, brand_id)

        self._brand_ids[slug] = brand_id
        return brand_id

    @contextmanager
    def atomic(self) -> Iterator[None]:
        yield

    # --- Internals ---

    def _run(self, operation: str, build):
        """Execute a query builder, wrapping client errors as StoreError."""
        client = self._get_client()
        try:
            return build(client).execute()
        except Exception as e:
            logger.error("Supabase %s failed: %s", operation, e)
            raise StoreError(f"Supabase {operation} failed: {e}", operation=operation) from e
