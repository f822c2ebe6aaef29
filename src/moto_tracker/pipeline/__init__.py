"""Extraction pipeline: orchestrator, run statistics and JSON export."""

from .exporter import export_records, export_stats, load_records
from .models import BrandStats, ExtractionStats, PipelineRun, SourceSummary
from .orchestrator import ExtractionOrchestrator

__all__ = [
    "BrandStats",
    "ExtractionOrchestrator",
    "ExtractionStats",
    "PipelineRun",
    "SourceSummary",
    "export_records",
    "export_stats",
    "load_records",
]
