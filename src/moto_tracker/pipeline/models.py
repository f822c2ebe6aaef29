"""Run-scoped result types for the extraction pipeline."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.common.models import CanonicalRecord, ExtractionStatus

from ..extractors.base import ExtractionOutcome


@dataclass
class BrandStats:
    """Price spread for one brand within a run."""

    count: int
    min_price: float
    max_price: float
    avg_price: int

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "minPrice": self.min_price,
            "maxPrice": self.max_price,
            "avgPrice": self.avg_price,
        }


@dataclass
class SourceSummary:
    """Per-source outcome shown to operators."""

    source: str
    brand: str
    status: ExtractionStatus
    count: int
    duration_seconds: float
    error: str | None = None
    fetched_at: datetime | None = None

    @property
    def is_fallback(self) -> bool:
        return self.status == ExtractionStatus.FALLBACK

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "brand": self.brand,
            "status": self.status.value,
            "isFallback": self.is_fallback,
            "count": self.count,
            "durationSeconds": round(self.duration_seconds, 2),
            "error": self.error,
            "fetchedAt": self.fetched_at.isoformat() if self.fetched_at else None,
        }


@dataclass
class ExtractionStats:
    """Ephemeral statistics for one run; reported, never persisted."""

    total_records: int
    by_brand: dict[str, BrandStats]
    duration_seconds: float
    errors: list[str] = field(default_factory=list)
    sources: list[SourceSummary] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_outcomes(
        cls, outcomes: list[ExtractionOutcome], duration_seconds: float
    ) -> ExtractionStats:
        prices: dict[str, list[float]] = defaultdict(list)
        for outcome in outcomes:
            for record in outcome.records:
                prices[record.brand].append(record.price)

        by_brand = {
            brand: BrandStats(
                count=len(values),
                min_price=min(values),
                max_price=max(values),
                avg_price=round(sum(values) / len(values)),
            )
            for brand, values in prices.items()
        }
        errors = [f"{o.source}: {o.error}" for o in outcomes if o.error]
        sources = [
            SourceSummary(
                source=o.source,
                brand=o.brand,
                status=o.status,
                count=o.count,
                duration_seconds=o.duration_seconds,
                error=o.error,
                fetched_at=o.fetched_at,
            )
            for o in outcomes
        ]
        return cls(
            total_records=sum(o.count for o in outcomes),
            by_brand=by_brand,
            duration_seconds=duration_seconds,
            errors=errors,
            sources=sources,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "byBrand": {b: s.to_dict() for b, s in self.by_brand.items()},
            "durationSeconds": round(self.duration_seconds, 2),
            "errors": list(self.errors),
            "sources": [s.to_dict() for s in self.sources],
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class PipelineRun:
    """Aggregate of one orchestrator run."""

    records: list[CanonicalRecord]
    stats: ExtractionStats
    outcomes: list[ExtractionOutcome]

    @property
    def is_empty(self) -> bool:
        return not self.records
