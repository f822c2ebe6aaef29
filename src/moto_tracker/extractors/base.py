"""Shared extractor contract and the steps every variant composes.

An extraction attempt runs one state machine:

    Idle -> Fetching -> ParseSuccess     -> Validated (live records)
                     -> FetchError       -> Fallback  (sample records)
                     -> ParseEmptyResult -> Fallback

Both terminal states are "completed" for the orchestrator; the outcome's
status tells them apart. Network calls are never retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

from pydantic import ValidationError

from src.common.config import PROJECT_ROOT
from src.common.models import CanonicalRecord, ExtractionStatus

from ..common.config import Config
from ..common.http_client import AsyncHTTPClient
from ..common.renderer import PageRenderer, PlaywrightRenderer
from ..errors import ExtractionError, FetchError
from ..normalizers import (
    clean_model_name,
    guess_category,
    guess_engine_capacity,
    is_valid_record,
    resolve_image_url,
)
from .fallback import fallback_records
from .sources import SourceConfig

logger = logging.getLogger(__name__)

ParseFn = Callable[[str], list[dict[str, Any]]]


@dataclass
class ExtractionOutcome:
    """Result of one extraction attempt for one source."""

    source: str
    brand: str
    status: ExtractionStatus
    records: list[CanonicalRecord] = field(default_factory=list)
    error: str | None = None
    duration_seconds: float = 0.0
    items_found: int = 0
    fetched_at: datetime = field(default_factory=datetime.now)

    @property
    def is_fallback(self) -> bool:
        return self.status == ExtractionStatus.FALLBACK

    @property
    def count(self) -> int:
        return len(self.records)

    def summary(self) -> str:
        """One-line operator message for this source."""
        head = f"{self.source}: {self.count} records in {self.duration_seconds:.1f}s"
        if self.status == ExtractionStatus.VALIDATED:
            return f"{head} (live)"
        if self.status == ExtractionStatus.FALLBACK:
            return f"{head} (fallback sample data: {self.error})"
        return f"{self.source}: failed after {self.duration_seconds:.1f}s ({self.error})"


class Extractor(Protocol):
    """Contract shared by every extractor variant."""

    source: SourceConfig

    @property
    def name(self) -> str: ...

    @property
    def brand(self) -> str: ...

    async def extract(self) -> ExtractionOutcome: ...


# ---------------------------------------------------------------------------
# Acquire
# ---------------------------------------------------------------------------

def _read_payload_file(path_str: str) -> str:
    path = Path(path_str)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FetchError(f"Cannot read payload file {path}: {exc}", url=str(path)) from exc


async def acquire_payload(
    source: SourceConfig,
    config: Config,
    client: AsyncHTTPClient | None = None,
    renderer: PageRenderer | None = None,
) -> str:
    """Fetch the raw payload for a source, exactly once.

    A configured ``payload_path`` wins over the network. Rendered-text
    sources go through the page renderer; everything else is a plain GET.

    Raises:
        FetchError: On any acquisition failure.
    """
    if source.payload_path:
        logger.info("[%s] Reading provided payload %s", source.name, source.payload_path)
        return _read_payload_file(source.payload_path)

    timeout = source.timeout_seconds or config.request_timeout

    if source.kind == "rendered_text":
        renderer = renderer or PlaywrightRenderer()
        logger.info("[%s] Rendering %s", source.name, source.url)
        return await renderer.render(source.url, timeout=timeout, user_agent=config.user_agent)

    logger.info("[%s] Fetching %s", source.name, source.url)
    if client is not None:
        return await client.get_text(
            source.url, headers=source.headers, cache_key=source.name, timeout=timeout
        )
    async with AsyncHTTPClient(config) as own_client:
        return await own_client.get_text(
            source.url, headers=source.headers, cache_key=source.name, timeout=timeout
        )


# ---------------------------------------------------------------------------
# Normalize & validate
# ---------------------------------------------------------------------------

def build_candidate(
    source: SourceConfig,
    raw_name: str | None,
    price: int | float | None,
    *,
    year: int | None = None,
    category: Any = None,
    engine_capacity: int | None = None,
    power: float | None = None,
    torque: float | None = None,
    weight: float | None = None,
    image_url: str | None = None,
    specifications: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Assemble a candidate record dict, filling gaps from brand rules."""
    name = clean_model_name(raw_name, source.brand)
    return {
        "name": name,
        "brand": source.brand,
        "category": category or guess_category(name, source.brand),
        "year": year or date.today().year,
        "price": price,
        "engine_capacity": engine_capacity or guess_engine_capacity(name, source.brand),
        "power": power,
        "torque": torque,
        "weight": weight,
        "image_url": resolve_image_url(image_url, source.base_url),
        "specifications": specifications or None,
    }


def finalize_records(
    candidates: Iterable[dict[str, Any]],
    min_price: float,
    source_name: str = "",
) -> list[CanonicalRecord]:
    """Drop invalid candidates and dedupe by identity key, first seen wins.

    Document order is preserved.
    """
    records: list[CanonicalRecord] = []
    seen: set[tuple[str, str]] = set()
    for candidate in candidates:
        if not is_valid_record(candidate, min_price):
            logger.debug("[%s] Rejected invalid candidate: %s", source_name, candidate.get("name"))
            continue
        try:
            record = CanonicalRecord(**candidate)
        except ValidationError:
            logger.debug("[%s] Candidate failed schema validation", source_name, exc_info=True)
            continue
        key = record.identity_key
        if key in seen:
            logger.debug("[%s] Duplicate dropped: %s %s", source_name, record.brand, record.name)
            continue
        seen.add(key)
        records.append(record)
    return records


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

async def run_extraction(
    source: SourceConfig,
    config: Config,
    parse: ParseFn,
    client: AsyncHTTPClient | None = None,
    renderer: PageRenderer | None = None,
) -> ExtractionOutcome:
    """Run one extraction attempt and land in Validated or Fallback.

    Fetch errors, timeouts, parse errors and empty results all resolve to
    the brand's fallback catalog. Anything else propagates to the caller.
    """
    timeout = source.timeout_seconds or config.request_timeout
    start = time.monotonic()
    items_found = 0

    try:
        payload = await asyncio.wait_for(
            acquire_payload(source, config, client=client, renderer=renderer),
            timeout=timeout,
        )
        candidates = parse(payload)
        items_found = len(candidates)
    except asyncio.TimeoutError:
        error = f"Timed out after {timeout:.0f}s"
    except ExtractionError as exc:
        logger.debug("[%s] %s", source.name, exc.to_dict())
        error = exc.message
    else:
        records = finalize_records(candidates, config.min_plausible_price, source.name)
        if records:
            return ExtractionOutcome(
                source=source.name,
                brand=source.brand,
                status=ExtractionStatus.VALIDATED,
                records=records,
                duration_seconds=time.monotonic() - start,
                items_found=items_found,
            )
        error = f"No valid records found ({items_found} items parsed)"

    logger.warning("[%s] Falling back to sample data: %s", source.name, error)
    return ExtractionOutcome(
        source=source.name,
        brand=source.brand,
        status=ExtractionStatus.FALLBACK,
        records=fallback_records(source.brand),
        error=error,
        duration_seconds=time.monotonic() - start,
        items_found=items_found,
    )
