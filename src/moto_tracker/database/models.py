"""Data models for the storage layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class StoredModel:
    """A motorcycle model as currently held by a store."""

    id: int | str
    brand: str
    name: str
    price: float
    year: int
    category: str | None = None
    engine_capacity: int | None = None
    power: float | None = None
    torque: float | None = None
    weight: float | None = None
    image_url: str | None = None
    specifications: dict[str, Any] | None = None
    previous_price: float | None = None
    brand_id: int | str | None = None
    updated_at: str | None = None
