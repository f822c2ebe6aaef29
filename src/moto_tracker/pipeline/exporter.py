"""JSON export of pipeline output.

One pretty-printed UTF-8 file per run, ``motorcycles-YYYY-MM-DD.json``,
holding an array of records in the camelCase interchange shape. Run
statistics go to a sibling ``extraction-stats-YYYY-MM-DD.json``.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from src.common.models import MIN_PLAUSIBLE_PRICE, CanonicalRecord, is_valid_record

from ..errors import ParseError
from .models import ExtractionStats

logger = logging.getLogger(__name__)


def export_filename(run_date: date | None = None) -> str:
    return f"motorcycles-{(run_date or date.today()).isoformat()}.json"


def export_records(
    records: Iterable[CanonicalRecord],
    output_dir: str | Path,
    run_date: date | None = None,
) -> Path:
    """Write records to ``<output_dir>/motorcycles-YYYY-MM-DD.json``."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(run_date)

    data = [r.to_export_dict() for r in records]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    logger.info("Exported %d records to %s", len(data), path)
    return path


def export_stats(
    stats: ExtractionStats,
    output_dir: str | Path,
    run_date: date | None = None,
) -> Path:
    """Write run statistics next to the record export."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"extraction-stats-{(run_date or date.today()).isoformat()}.json"

    with open(path, "w", encoding="utf-8") as f:
        json.dump(stats.to_dict(), f, ensure_ascii=False, indent=2)

    logger.info("Exported run statistics to %s", path)
    return path


def load_records(
    path: str | Path, min_price: float = MIN_PLAUSIBLE_PRICE
) -> list[CanonicalRecord]:
    """Read an exported record file back into CanonicalRecords.

    Entries failing the validity rule (including prices below
    ``min_price``) are dropped, the same as extractor output.

    Raises:
        ParseError: If the file is not a JSON array of records.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ParseError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ParseError(f"{path} must contain a JSON array of records")

    try:
        parsed = [CanonicalRecord.model_validate(item) for item in data]
    except ValidationError as exc:
        raise ParseError(f"{path} holds an invalid record: {exc}") from exc

    records = []
    for record in parsed:
        if not is_valid_record(record.model_dump(), min_price):
            logger.warning(
                "Dropping %s %s from %s: price %s below %s",
                record.brand,
                record.name,
                path,
                record.price,
                min_price,
            )
            continue
        records.append(record)

    logger.info("Loaded %d records from %s", len(records), path)
    return records
