"""SQLite-backed Store for local runs and tests."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Mapping

from src.common.models import CanonicalRecord, PriceHistoryEntry, generate_slug

from ..common.config import Config
from ..errors import StoreError
from .connection import get_connection, init_db
from .models import StoredModel
from .store import identity_string, record_to_columns, row_to_stored, to_columns

logger = logging.getLogger(__name__)


class SQLiteStore:
    """Store implementation over the local SQLite schema.

    Statements outside ``atomic()`` autocommit. ``atomic()`` opens a
    BEGIN IMMEDIATE transaction, so a second writer waits instead of
    interleaving its read-then-write with ours.
    """

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        init_db(self.config)
        self._conn = get_connection(self.config)
        self._conn.isolation_level = None
        self._in_transaction = False

    # --- Store contract ---

    def find_by_identity(self, brand: str, name: str) -> StoredModel | None:
        row = self._execute(
            "SELECT * FROM models WHERE identity_key = ?",
            (identity_string(brand, name),),
            operation="find_by_identity",
        ).fetchone()
        return self._to_stored(row) if row else None

    def insert(self, record: CanonicalRecord, brand_id: int | str | None = None) -> int:
        columns = record_to_columns(record, brand_id)
        columns["specifications"] = _dump_json(columns["specifications"])
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        cur = self._execute(
            f"INSERT INTO models ({names}) VALUES ({placeholders})",
            tuple(columns.values()),
            operation="insert",
        )
        return int(cur.lastrowid)

    def update(self, model_id: int | str, partial: Mapping[str, Any]) -> None:
        columns = to_columns(partial)
        if not columns:
            return
        if "specifications" in columns:
            columns["specifications"] = _dump_json(columns["specifications"])
        columns["updated_at"] = datetime.now().isoformat(timespec="seconds")
        assignments = ", ".join(f"{c} = ?" for c in columns)
        self._execute(
            f"UPDATE models SET {assignments} WHERE id = ?",
            (*columns.values(), model_id),
            operation="update",
        )

    def insert_price_history(self, entry: PriceHistoryEntry) -> None:
        self._execute(
            """INSERT INTO price_history
               (model_id, old_price, new_price, price_change, percentage_change, change_date)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                entry.model_id,
                entry.old_price,
                entry.new_price,
                entry.price_change,
                entry.percentage_change,
                entry.changed_at.isoformat(timespec="seconds"),
            ),
            operation="insert_price_history",
        )

    def ensure_brand(self, name: str) -> int:
        slug = generate_slug(name, "", None)
        row = self._execute(
            "SELECT id FROM brands WHERE slug = ?", (slug,), operation="ensure_brand"
        ).fetchone()
        if row:
            return int(row["id"])
        cur = self._execute(
            "INSERT INTO brands (name, slug, is_active) VALUES (?, ?, 1)",
            (name, slug),
            operation="ensure_brand",
        )
        logger.info("Created brand %s (id=%d)", name, cur.lastrowid)
        return int(cur.lastrowid)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._in_transaction:
            yield
            return
        self._execute("BEGIN IMMEDIATE", operation="begin")
        self._in_transaction = True
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            self._execute("COMMIT", operation="commit")
        finally:
            self._in_transaction = False

    # --- Reporting helpers ---

    def count_models(self) -> int:
        row = self._execute("SELECT COUNT(*) AS n FROM models", operation="count").fetchone()
        return int(row["n"])

    def all_models(self) -> list[StoredModel]:
        rows = self._execute(
            "SELECT * FROM models ORDER BY brand, name", operation="all_models"
        ).fetchall()
        return [self._to_stored(r) for r in rows]

    def price_history_for(self, model_id: int | str) -> list[dict]:
        rows = self._execute(
            "SELECT * FROM price_history WHERE model_id = ? ORDER BY id",
            (model_id,),
            operation="price_history_for",
        ).fetchall()
        return [dict(r) for r in rows]

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SQLiteStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # --- Internals ---

    def _execute(
        self, sql: str, params: tuple = (), operation: str = ""
    ) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise StoreError(f"SQLite {operation} failed: {exc}", operation=operation) from exc

    @staticmethod
    def _to_stored(row: sqlite3.Row) -> StoredModel:
        data = dict(row)
        if data.get("specifications"):
            data["specifications"] = json.loads(data["specifications"])
        return row_to_stored(data)


def _dump_json(value: Any) -> str | None:
    return json.dumps(value, ensure_ascii=False) if value is not None else None
