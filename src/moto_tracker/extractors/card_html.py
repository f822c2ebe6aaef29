"""Extractor for card-based catalogs (repeating product containers)."""

from __future__ import annotations

import logging
from typing import Any

from bs4 import BeautifulSoup, Tag

from ..common.config import Config
from ..common.http_client import AsyncHTTPClient
from ..common.renderer import PageRenderer
from ..normalizers import (
    category_from_label,
    parse_engine_capacity,
    parse_power,
    parse_price,
    parse_year,
)
from .base import ExtractionOutcome, build_candidate, run_extraction
from .sources import CardLayout, SourceConfig

logger = logging.getLogger(__name__)


class CardHtmlExtractor:
    """Read product cards located by a container selector.

    The BMW Borusan price list keeps the clean numeric price in hidden
    inputs, so the layout can point the price at the Nth hidden input
    instead of a visible element.
    """

    kind = "card_html"

    def __init__(
        self,
        source: SourceConfig,
        config: Config | None = None,
        client: AsyncHTTPClient | None = None,
        renderer: PageRenderer | None = None,
    ) -> None:
        if source.card is None:
            raise ValueError(f"Source '{source.name}' has no card layout")
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
        """Parse every card container into a candidate record."""
        layout: CardLayout = self.source.card  # type: ignore[assignment]
        soup = BeautifulSoup(html, "lxml")

        candidates: list[dict[str, Any]] = []
        for card in soup.select(layout.container):
            try:
                candidate = self._parse_card(card, layout)
                if candidate:
                    candidates.append(candidate)
            except Exception:
                logger.debug("[%s] Failed to parse card", self.name, exc_info=True)
                continue

        logger.info("[%s] Parsed %d cards", self.name, len(candidates))
        return candidates

    def _parse_card(self, card: Tag, layout: CardLayout) -> dict[str, Any] | None:
        model = _select_text(card, layout.name)
        if not model:
            return None
        variant = _select_text(card, layout.variant)
        full_name = f"{model} {variant}" if variant else model

        price_text: str | None = None
        if layout.price_input_index is not None:
            inputs = card.select('input[type="hidden"]')
            if len(inputs) > layout.price_input_index:
                price_text = inputs[layout.price_input_index].get("value") or None
        if price_text is None and layout.price:
            price_text = _select_text(card, layout.price)
        if not price_text:
            return None

        image_url = None
        if layout.image and (img := card.select_one(layout.image)):
            image_url = img.get("src") or img.get("data-src")

        return build_candidate(
            self.source,
            full_name,
            parse_price(price_text),
            year=parse_year(_select_text(card, layout.year)),
            category=category_from_label(_select_text(card, layout.category), self.brand),
            engine_capacity=parse_engine_capacity(_select_text(card, layout.engine)),
            power=parse_power(_select_text(card, layout.power)),
            image_url=image_url,
        )


def _select_text(card: Tag, selector: str | None) -> str:
    if not selector:
        return ""
    el = card.select_one(selector)
    return el.get_text(" ", strip=True) if el else ""
