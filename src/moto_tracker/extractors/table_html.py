"""Extractor for price-list tables (one model per <tr>)."""

from __future__ import annotations

import logging
import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from ..common.config import Config
from ..common.http_client import AsyncHTTPClient
from ..common.renderer import PageRenderer
from ..normalizers import category_from_label, parse_price, parse_year
from .base import ExtractionOutcome, build_candidate, run_extraction
from .sources import SourceConfig, TableLayout

logger = logging.getLogger(__name__)


class TableHtmlExtractor:
    """Read a price-list table where cells hold name, category/year and price.

    Usage:
        extractor = TableHtmlExtractor(get_source("kawasaki"))
        outcome = await extractor.extract()
    """

    kind = "table_html"

    def __init__(
        self,
        source: SourceConfig,
        config: Config | None = None,
        client: AsyncHTTPClient | None = None,
        renderer: PageRenderer | None = None,
    ) -> None:
        if source.table is None:
            raise ValueError(f"Source '{source.name}' has no table layout")
        self.source = source
        self.config = config or Config()
        self._client = client
        self._renderer = renderer

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def brand(self) -> str:
        return self.source.brand

    async def extract(self) -> ExtractionOutcome:
        return await run_extraction(
            self.source, self.config, self.parse, client=self._client, renderer=self._renderer
        )

    def parse(self, html: str) -> list[dict[str, Any]]:
        """Parse table rows into candidate records, in document order."""
        layout: TableLayout = self.source.table  # type: ignore[assignment]
        soup = BeautifulSoup(html, "lxml")
        price_re = re.compile(layout.price_pattern)

        candidates: list[dict[str, Any]] = []
        for row in soup.select(layout.row_selector):
            try:
                candidate = self._parse_row(row, layout, price_re)
                if candidate:
                    candidates.append(candidate)
            except Exception:
                logger.debug("[%s] Failed to parse row", self.name, exc_info=True)
                continue

        logger.info("[%s] Parsed %d table rows", self.name, len(candidates))
        return candidates

    def _parse_row(
        self, row: Tag, layout: TableLayout, price_re: re.Pattern[str]
    ) -> dict[str, Any] | None:
        cells = row.select(layout.cell_selector)
        if len(cells) < layout.min_cells:
            return None

        name_text = self._cell_text(cells, layout.name_col, layout)
        price_match = price_re.search(self._cell_text(cells, layout.price_col, layout))
        if not name_text or not price_match:
            return None

        category = None
        if layout.category_col is not None:
            category = category_from_label(
                self._cell_text(cells, layout.category_col, layout), self.brand
            )

        year = None
        if layout.year_col is not None:
            year = parse_year(self._cell_text(cells, layout.year_col, layout))

        return build_candidate(
            self.source,
            name_text,
            parse_price(price_match.group(1)),
            year=year,
            category=category,
        )

    @staticmethod
    def _cell_text(cells: list[Tag], index: int, layout: TableLayout) -> str:
        if index >= len(cells):
            return ""
        cell = cells[index]
        if layout.cell_text_selector:
            cell = cell.select_one(layout.cell_text_selector) or cell
        return cell.get_text(" ", strip=True)
