"""Shared Pydantic data models for the motorcycle price tracker.

These models define the data contracts between the extractors, the
orchestrator, the reconciler and the export/store collaborators.
All modules import from here.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field

# Records priced below this are listing noise (deposits, accessories, typos).
MIN_PLAUSIBLE_PRICE = 10_000


# === Enums ===

class Category(str, Enum):
    """Closed motorcycle category taxonomy."""
    SPORT = "Sport"
    NAKED = "Naked"
    ADVENTURE = "Adventure"
    TOURING = "Touring"
    CRUISER = "Cruiser"
    SCOOTER = "Scooter"
    OFF_ROAD = "Off-Road"
    RETRO_CLASSIC = "Retro/Classic"
    HYBRID = "Hybrid"


class ExtractionStatus(str, Enum):
    """Terminal state of one extraction attempt."""
    VALIDATED = "validated"  # live records from the source
    FALLBACK = "fallback"    # fixed sample catalog
    FAILED = "failed"        # extractor raised; no records


# === Identity helpers ===

_WS_RE = re.compile(r"\s+")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def normalize_identity_part(value: str) -> str:
    """Casefold and collapse whitespace for identity comparisons."""
    return _WS_RE.sub(" ", value or "").strip().casefold()


def identity_key(brand: str, name: str) -> tuple[str, str]:
    """Return the case-insensitive, whitespace-normalized (brand, name) key."""
    return normalize_identity_part(brand), normalize_identity_part(name)


def generate_slug(brand: str, name: str, year: int | str | None) -> str:
    """Build a URL slug from brand, name and year.

    Empty parts (including year 0) are skipped, so re-slugging a slug with
    empty name/year yields the same slug.
    """
    parts = [str(p) for p in (brand, name, year) if p]
    joined = "-".join(parts)
    folded = (
        unicodedata.normalize("NFKD", joined.replace("ı", "i"))
        .encode("ascii", "ignore")
        .decode("ascii")
        .lower()
    )
    return _SLUG_RE.sub("-", folded).strip("-")


def is_valid_record(
    fields: Mapping[str, Any], min_price: float = MIN_PLAUSIBLE_PRICE
) -> bool:
    """Check the validity rule for a candidate record.

    Valid iff name, brand, year and price are present, price > 0 and
    price is at least ``min_price``.
    """
    name = fields.get("name")
    brand = fields.get("brand")
    year = fields.get("year")
    price = fields.get("price")
    if not name or not str(name).strip():
        return False
    if not brand or not str(brand).strip():
        return False
    if not year:
        return False
    if price is None or isinstance(price, bool):
        return False
    try:
        price = float(price)
    except (TypeError, ValueError):
        return False
    return price > 0 and price >= min_price


# === Records ===

class CanonicalRecord(BaseModel):
    """One normalized motorcycle model observation."""
    name: str = Field(min_length=1)
    brand: str = Field(min_length=1)
    category: Category | None = None
    year: int = Field(default_factory=lambda: date.today().year, gt=0)
    price: int | float = Field(gt=0)
    previous_price: int | float | None = Field(default=None, alias="previousPrice")
    engine_capacity: int | None = Field(default=None, alias="engineCapacity")
    power: float | None = None
    torque: float | None = None
    weight: float | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    specifications: dict[str, Any] | None = None

    model_config = {"populate_by_name": True}

    @property
    def identity_key(self) -> tuple[str, str]:
        return identity_key(self.brand, self.name)

    @property
    def slug(self) -> str:
        return generate_slug(self.brand, self.name, self.year)

    def to_export_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase interchange shape, dropping absent fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PriceHistoryEntry(BaseModel):
    """Immutable record of one detected price change."""
    model_id: int | str | None = None
    brand: str
    name: str
    old_price: int | float = Field(alias="oldPrice")
    new_price: int | float = Field(alias="newPrice")
    price_change: int | float = Field(alias="priceChange")
    percentage_change: float = Field(alias="percentageChange")
    changed_at: datetime = Field(default_factory=datetime.now, alias="changedAt")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def from_change(
        cls,
        brand: str,
        name: str,
        old_price: int | float,
        new_price: int | float,
        model_id: int | str | None = None,
        changed_at: datetime | None = None,
    ) -> PriceHistoryEntry:
        """Build an entry, deriving the signed change and rounded percentage.

        Raises:
            ValueError: If ``old_price`` is not positive.
        """
        if not old_price or old_price <= 0:
            raise ValueError(f"old_price must be positive, got {old_price!r}")
        change = new_price - old_price
        return cls(
            model_id=model_id,
            brand=brand,
            name=name,
            old_price=old_price,
            new_price=new_price,
            price_change=change,
            percentage_change=round(change / old_price * 100, 2),
            changed_at=changed_at or datetime.now(),
        )
