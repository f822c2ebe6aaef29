"""Reconciler: diff incoming records against the store and write changes.

Per record:
- unknown identity      -> insert (brand created if missing)
- price differs         -> price history row, then update with the new
                           price, previous price and present detail fields
- price equal           -> update only if a present non-price field differs
Stored models missing from the batch are never touched; missing this run
does not mean discontinued. Outcomes that ended in fallback sample data are
not reconciled at all, so a failing source never rewrites live prices.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from enum import Enum
from typing import Iterable

from src.common.models import CanonicalRecord, ExtractionStatus, PriceHistoryEntry

from ..database.models import StoredModel
from ..database.store import Store
from ..errors import StoreError
from ..extractors.base import ExtractionOutcome
from .models import ChangeAction, ReconcileFailure, ReconcileSummary, RecordChange

logger = logging.getLogger(__name__)

# Non-price fields compared on every record; absent incoming values are skipped.
COMPARED_FIELDS = (
    "year",
    "category",
    "engine_capacity",
    "power",
    "torque",
    "weight",
    "image_url",
    "specifications",
)


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def diff_record(
    incoming: CanonicalRecord,
    stored: StoredModel | None,
    now: datetime | None = None,
) -> RecordChange:
    """Compute the change for one record. Pure; performs no writes."""
    if stored is None:
        return RecordChange(action=ChangeAction.INSERT, record=incoming)

    updates: dict = {}
    for field_name in COMPARED_FIELDS:
        new_value = _plain(getattr(incoming, field_name))
        if new_value is None:
            continue
        if new_value != _plain(getattr(stored, field_name)):
            updates[field_name] = new_value

    old_price = _plain(stored.price)
    if incoming.price != old_price:
        updates["price"] = incoming.price
        history = None
        record = incoming
        if old_price and old_price > 0:
            updates["previous_price"] = old_price
            record = incoming.model_copy(update={"previous_price": old_price})
            history = PriceHistoryEntry.from_change(
                brand=incoming.brand,
                name=incoming.name,
                old_price=old_price,
                new_price=incoming.price,
                model_id=stored.id,
                changed_at=now,
            )
        return RecordChange(
            action=ChangeAction.UPDATE,
            record=record,
            model_id=stored.id,
            updates=updates,
            history=history,
        )

    if updates:
        return RecordChange(
            action=ChangeAction.UPDATE, record=incoming, model_id=stored.id, updates=updates
        )
    return RecordChange(action=ChangeAction.UNCHANGED, record=incoming, model_id=stored.id)


class Reconciler:
    """Apply a batch of records to a store.

    Usage:
        reconciler = Reconciler(SQLiteStore(config))
        summary = reconciler.reconcile_outcomes(run.outcomes)
    """

    def __init__(self, store: Store) -> None:
        self.store = store
        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: tuple[str, str]) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def reconcile_one(self, record: CanonicalRecord) -> RecordChange:
        """Diff and write one record under its identity lock and a store transaction.

        Raises:
            StoreError: If any store call fails; the transaction is rolled back.
        """
        with self._lock_for(record.identity_key), self.store.atomic():
            stored = self.store.find_by_identity(record.brand, record.name)
            change = diff_record(record, stored)

            if change.action == ChangeAction.INSERT:
                brand_id = self.store.ensure_brand(record.brand)
                change.model_id = self.store.insert(record, brand_id)
                logger.info("New model: %s %s (%s TL)", record.brand, record.name, f"{record.price:,}")
            elif change.action == ChangeAction.UPDATE:
                # History first: no reader may see a new price without its history row.
                if change.history is not None:
                    self.store.insert_price_history(change.history)
                    logger.info(
                        "Price change: %s %s %s -> %s TL (%+.2f%%)",
                        record.brand,
                        record.name,
                        f"{change.history.old_price:,}",
                        f"{change.history.new_price:,}",
                        change.history.percentage_change,
                    )
                self.store.update(change.model_id, change.updates)  # type: ignore[arg-type]
            return change

    def reconcile(self, records: Iterable[CanonicalRecord]) -> ReconcileSummary:
        """Reconcile a batch; failed records are reported and skipped."""
        summary = ReconcileSummary()
        start = time.monotonic()

        for record in records:
            try:
                change = self.reconcile_one(record)
            except StoreError as e:
                logger.error("Failed to reconcile %s %s: %s", record.brand, record.name, e)
                summary.failures.append(
                    ReconcileFailure(brand=record.brand, name=record.name, error=str(e))
                )
                continue
            summary.add(change)

        summary.duration_seconds = time.monotonic() - start
        logger.info(
            "Reconcile complete: %d inserted, %d updated, %d unchanged, "
            "%d price changes, %d failed (%.1fs)",
            summary.inserted,
            summary.updated,
            summary.unchanged,
            len(summary.price_changes),
            len(summary.failures),
            summary.duration_seconds,
        )
        return summary

    def reconcile_outcomes(self, outcomes: Iterable[ExtractionOutcome]) -> ReconcileSummary:
        """Reconcile the live records of an extraction run.

        Records from fallback or failed outcomes are stale sample data and
        never reach the store; their sources are listed in
        ``skipped_sources``.
        """
        live: list[CanonicalRecord] = []
        skipped: list[str] = []
        for outcome in outcomes:
            if outcome.status != ExtractionStatus.VALIDATED:
                logger.warning(
                    "[%s] Not reconciling %d %s records",
                    outcome.source,
                    outcome.count,
                    outcome.status.value,
                )
                skipped.append(outcome.source)
                continue
            live.extend(outcome.records)

        summary = self.reconcile(live)
        summary.skipped_sources = skipped
        return summary
