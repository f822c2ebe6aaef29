"""Reconciler: diff incoming records against stored state, record price history."""

from .models import ChangeAction, ReconcileFailure, ReconcileSummary, RecordChange
from .reconciler import COMPARED_FIELDS, Reconciler, diff_record

__all__ = [
    "COMPARED_FIELDS",
    "ChangeAction",
    "ReconcileFailure",
    "ReconcileSummary",
    "Reconciler",
    "RecordChange",
    "diff_record",
]
