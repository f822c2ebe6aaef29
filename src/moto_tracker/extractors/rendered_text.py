"""Extractor for unstructured text: rendered pages and pre-extracted price lists.

Lines are scanned in order. A line matching the name pattern closes the
item in progress and opens a new one; price, engine and power patterns
fill the open item. The remainder of a name line is scanned too, so
"CB500X 275.000 TL" yields both fields.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ..common.config import Config
from ..common.http_client import AsyncHTTPClient
from ..common.renderer import PageRenderer
from ..normalizers import parse_engine_capacity, parse_power, parse_price
from .base import ExtractionOutcome, build_candidate, run_extraction
from .sources import SourceConfig, TextLayout

logger = logging.getLogger(__name__)


class RenderedTextExtractor:
    """Line-oriented scanner over rendered page text."""

    kind = "rendered_text"

    def __init__(
        self,
        source: SourceConfig,
        config: Config | None = None,
        client: AsyncHTTPClient | None = None,
        renderer: PageRenderer | None = None,
    ) -> None:
        self.source = source
        self.layout = source.text or TextLayout()
        self.config = config or Config()
        self._client = client
        self._renderer = renderer

        flags = re.IGNORECASE if self.layout.ignore_case else 0
        self._name_re = re.compile(self.layout.name_pattern, flags)
        self._field_res: list[tuple[str, re.Pattern[str]]] = [
            ("price", re.compile(self.layout.price_pattern, re.IGNORECASE))
        ]
        if self.layout.engine_pattern:
            self._field_res.append(("engine", re.compile(self.layout.engine_pattern, re.IGNORECASE)))
        if self.layout.power_pattern:
            self._field_res.append(("power", re.compile(self.layout.power_pattern, re.IGNORECASE)))

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

    def parse(self, text: str) -> list[dict[str, Any]]:
        """Scan text line by line into candidate records."""
        items: list[dict[str, str]] = []
        current: dict[str, str] | None = None

        for line in text.splitlines():
            trimmed = line.strip()
            if not trimmed:
                continue

            name_match = self._name_re.search(trimmed)
            if name_match:
                if current is not None:
                    items.append(current)
                current = {"name": name_match.group(1).strip()}
                self._scan_fields(trimmed[name_match.end():], current)
                continue

            if current is not None:
                self._scan_fields(trimmed, current)

        if current is not None:
            items.append(current)

        candidates = [
            build_candidate(
                self.source,
                item["name"],
                parse_price(item.get("price")),
                engine_capacity=parse_engine_capacity(item.get("engine")),
                power=parse_power(item.get("power")),
            )
            for item in items
        ]
        logger.info("[%s] Scanned %d items from %d chars", self.name, len(candidates), len(text))
        return candidates

    def _scan_fields(self, text: str, item: dict[str, str]) -> None:
        # First match per field wins within one item.
        for field_name, pattern in self._field_res:
            if field_name in item:
                continue
            if match := pattern.search(text):
                item[field_name] = match.group(0)
