"""Store contract consumed by the reconciler, plus shared column mapping."""

from __future__ import annotations

from contextlib import AbstractContextManager
from enum import Enum
from typing import Any, Mapping, Protocol

from src.common.models import CanonicalRecord, PriceHistoryEntry, identity_key

from .models import StoredModel

# Record field -> storage column, where they differ.
COLUMN_MAP: dict[str, str] = {
    "power": "power_hp",
    "torque": "torque_nm",
    "weight": "weight_kg",
}
FIELD_MAP: dict[str, str] = {v: k for k, v in COLUMN_MAP.items()}

# Fields a partial update may carry.
UPDATABLE_FIELDS = (
    "price",
    "previous_price",
    "year",
    "category",
    "engine_capacity",
    "power",
    "torque",
    "weight",
    "image_url",
    "specifications",
)


class Store(Protocol):
    """Narrow read/write contract for persisted records."""

    def find_by_identity(self, brand: str, name: str) -> StoredModel | None: ...

    def insert(self, record: CanonicalRecord, brand_id: int | str | None = None) -> int | str: ...

    def update(self, model_id: int | str, partial: Mapping[str, Any]) -> None: ...

    def insert_price_history(self, entry: PriceHistoryEntry) -> None: ...

    def ensure_brand(self, name: str) -> int | str: ...

    def atomic(self) -> AbstractContextManager[None]: ...


def identity_string(brand: str, name: str) -> str:
    """Flatten the identity key into one indexable column value."""
    return "|".join(identity_key(brand, name))


def to_columns(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Map record field names onto storage columns.

    Raises:
        ValueError: On a field the stores do not persist.
    """
    columns: dict[str, Any] = {}
    for key, value in partial.items():
        if key not in UPDATABLE_FIELDS:
            raise ValueError(f"Field '{key}' cannot be updated")
        if isinstance(value, Enum):
            value = value.value
        columns[COLUMN_MAP.get(key, key)] = value
    return columns


def record_to_columns(record: CanonicalRecord, brand_id: int | str | None) -> dict[str, Any]:
    """Full column dict for inserting a new model."""
    columns = to_columns(
        {
            "price": record.price,
            "year": record.year,
            "category": record.category,
            "engine_capacity": record.engine_capacity,
            "power": record.power,
            "torque": record.torque,
            "weight": record.weight,
            "image_url": record.image_url,
            "specifications": record.specifications,
        }
    )
    columns.update(
        brand_id=brand_id,
        brand=record.brand,
        name=record.name,
        slug=record.slug,
        identity_key=identity_string(record.brand, record.name),
    )
    return columns


def row_to_stored(row: Mapping[str, Any]) -> StoredModel:
    """Build a StoredModel from a storage row (column names)."""
    return StoredModel(
        id=row["id"],
        brand=row["brand"],
        name=row["name"],
        price=row["price"],
        year=row["year"],
        category=row.get("category"),
        engine_capacity=row.get("engine_capacity"),
        power=row.get("power_hp"),
        torque=row.get("torque_nm"),
        weight=row.get("weight_kg"),
        image_url=row.get("image_url"),
        specifications=row.get("specifications"),
        previous_price=row.get("previous_price"),
        brand_id=row.get("brand_id"),
        updated_at=row.get("updated_at"),
    )
