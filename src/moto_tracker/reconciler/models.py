"""Result types for reconciliation runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.common.models import CanonicalRecord, PriceHistoryEntry


class ChangeAction(str, Enum):
    """What the reconciler does with one incoming record."""
    INSERT = "insert"
    UPDATE = "update"
    UNCHANGED = "unchanged"


@dataclass
class RecordChange:
    """Diff of one incoming record against stored state."""

    action: ChangeAction
    record: CanonicalRecord
    model_id: int | str | None = None
    updates: dict[str, Any] = field(default_factory=dict)
    history: PriceHistoryEntry | None = None

    @property
    def price_changed(self) -> bool:
        return "price" in self.updates


@dataclass
class ReconcileFailure:
    """A record whose writes failed; the run continued past it."""

    brand: str
    name: str
    error: str

    def __str__(self) -> str:
        return f"{self.brand} {self.name}: {self.error}"


@dataclass
class ReconcileSummary:
    """Upload summary for one reconciliation run."""

    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    price_changes: list[PriceHistoryEntry] = field(default_factory=list)
    failures: list[ReconcileFailure] = field(default_factory=list)
    changed_records: list[CanonicalRecord] = field(default_factory=list)
    skipped_sources: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    def add(self, change: RecordChange) -> None:
        if change.action == ChangeAction.INSERT:
            self.inserted += 1
        elif change.action == ChangeAction.UPDATE:
            self.updated += 1
            self.changed_records.append(change.record)
        else:
            self.unchanged += 1
        if change.history is not None:
            self.price_changes.append(change.history)
