"""Extraction orchestrator: run extractors, isolate failures, aggregate.

Sequential runs sleep between sources to stay polite to the sites;
concurrent runs settle all extractors, so one source raising never
cancels or fails the others.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Sequence

from src.common.models import CanonicalRecord, ExtractionStatus

from ..common.config import Config
from ..common.http_client import AsyncHTTPClient
from ..common.renderer import PageRenderer
from ..extractors import Extractor, build_extractor, enabled_sources
from ..extractors.base import ExtractionOutcome
from .models import ExtractionStats, PipelineRun

logger = logging.getLogger(__name__)


class ExtractionOrchestrator:
    """Run a configured set of extractors.

    Usage:
        orchestrator = ExtractionOrchestrator.from_config()
        run = await orchestrator.run_all()
        for line in orchestrator.summary_lines(run):
            print(line)
    """

    def __init__(
        self,
        extractors: Sequence[Extractor],
        delay_seconds: float = 2.0,
    ) -> None:
        names = [e.name for e in extractors]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate extractor names: {names}")
        self.extractors = list(extractors)
        self.delay_seconds = delay_seconds

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        client: AsyncHTTPClient | None = None,
        renderer: PageRenderer | None = None,
    ) -> ExtractionOrchestrator:
        """Build an orchestrator over every enabled default source."""
        config = config or Config()
        extractors = [
            build_extractor(source, config=config, client=client, renderer=renderer)
            for source in enabled_sources()
        ]
        return cls(extractors, delay_seconds=config.source_delay_seconds)

    @property
    def source_names(self) -> list[str]:
        return [e.name for e in self.extractors]

    async def run_all(self, parallel: bool = False) -> PipelineRun:
        """Run every extractor and aggregate the results."""
        start = time.monotonic()
        logger.info(
            "Running %d extractors (%s)",
            len(self.extractors),
            "parallel" if parallel else "sequential",
        )

        if parallel:
            results = await asyncio.gather(
                *(e.extract() for e in self.extractors), return_exceptions=True
            )
            outcomes = [
                self._settle(extractor, result, start_time=start)
                for extractor, result in zip(self.extractors, results)
            ]
        else:
            outcomes = []
            for i, extractor in enumerate(self.extractors):
                if i > 0 and self.delay_seconds > 0:
                    await asyncio.sleep(self.delay_seconds)
                outcomes.append(await self._run_isolated(extractor))

        return self._aggregate(outcomes, time.monotonic() - start)

    async def run_one(self, name: str) -> PipelineRun:
        """Run a single named extractor.

        Raises:
            KeyError: If no configured extractor has that name.
        """
        extractor = next((e for e in self.extractors if e.name == name), None)
        if extractor is None:
            raise KeyError(f"Unknown source: {name} (known: {', '.join(self.source_names)})")
        start = time.monotonic()
        outcome = await self._run_isolated(extractor)
        return self._aggregate([outcome], time.monotonic() - start)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run_isolated(self, extractor: Extractor) -> ExtractionOutcome:
        start = time.monotonic()
        try:
            result: ExtractionOutcome | BaseException = await extractor.extract()
        except Exception as exc:
            result = exc
        return self._settle(extractor, result, start_time=start)

    def _settle(
        self,
        extractor: Extractor,
        result: ExtractionOutcome | BaseException,
        start_time: float,
    ) -> ExtractionOutcome:
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error(
                "[%s] Extractor raised: %s", extractor.name, result, exc_info=result
            )
            outcome = ExtractionOutcome(
                source=extractor.name,
                brand=extractor.brand,
                status=ExtractionStatus.FAILED,
                error=str(result) or result.__class__.__name__,
                duration_seconds=time.monotonic() - start_time,
            )
        else:
            outcome = result

        if outcome.status == ExtractionStatus.VALIDATED:
            logger.info(outcome.summary())
        else:
            logger.warning(outcome.summary())
        return outcome

    @staticmethod
    def _aggregate(outcomes: list[ExtractionOutcome], duration: float) -> PipelineRun:
        records: list[CanonicalRecord] = []
        for outcome in outcomes:
            records.extend(outcome.records)
        stats = ExtractionStats.from_outcomes(outcomes, duration)
        logger.info(
            "Extraction complete: %d records from %d sources in %.1fs (%d errors)",
            stats.total_records,
            len(outcomes),
            duration,
            len(stats.errors),
        )
        return PipelineRun(records=records, stats=stats, outcomes=outcomes)

    @staticmethod
    def summary_lines(run: PipelineRun) -> list[str]:
        """Per-source outcome messages plus per-brand price spread."""
        lines = [o.summary() for o in run.outcomes]
        for brand, stats in sorted(run.stats.by_brand.items()):
            lines.append(
                f"{brand}: {stats.count} models, "
                f"{stats.min_price:,.0f} - {stats.max_price:,.0f} TL "
                f"(avg {stats.avg_price:,} TL)"
            )
        return lines
