"""Extractor for JSON catalog endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..common.config import Config
from ..common.http_client import AsyncHTTPClient
from ..common.renderer import PageRenderer
from ..errors import ParseError
from ..normalizers import (
    category_from_label,
    parse_engine_capacity,
    parse_number,
    parse_power,
    parse_price,
    parse_year,
)
from .base import ExtractionOutcome, build_candidate, run_extraction
from .sources import JsonLayout, SourceConfig

logger = logging.getLogger(__name__)


class JsonApiExtractor:
    """Read a JSON array of models, at the root or under a wrapper key.

    Field names vary between feeds (``modelName``/``title``/``name``,
    ``fiyat``, ``guc``, ...); the layout lists aliases per field and the
    first present one is used.
    """

    kind = "json_api"

    def __init__(
        self,
        source: SourceConfig,
        config: Config | None = None,
        client: AsyncHTTPClient | None = None,
        renderer: PageRenderer | None = None,
    ) -> None:
        self.source = source
        self.layout = source.json_layout or JsonLayout()
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

    def parse(self, payload: str) -> list[dict[str, Any]]:
        """Parse the JSON document into candidate records.

        Raises:
            ParseError: If the payload is not JSON or holds no item array.
        """
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid JSON payload: {exc}", source=self.name) from exc

        items = self._locate_items(data)
        if items is None:
            raise ParseError("JSON payload holds no item array", source=self.name)

        candidates: list[dict[str, Any]] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                candidates.append(self._parse_item(item))
            except Exception:
                logger.debug("[%s] Failed to parse item", self.name, exc_info=True)
                continue

        logger.info("[%s] Parsed %d JSON items", self.name, len(candidates))
        return candidates

    def _locate_items(self, data: Any) -> list[Any] | None:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in self.layout.items_keys:
                if isinstance(data.get(key), list):
                    return data[key]
        return None

    def _parse_item(self, item: dict[str, Any]) -> dict[str, Any]:
        layout = self.layout
        category_raw = _pick(item, layout.category_keys)

        specifications = _pick(item, layout.specification_keys)
        specifications = dict(specifications) if isinstance(specifications, dict) else {}
        if engine_type := _pick(item, layout.engine_type_keys):
            specifications["engineType"] = engine_type

        image = _pick(item, layout.image_keys)

        return build_candidate(
            self.source,
            str(_pick(item, layout.name_keys) or ""),
            parse_price(_pick(item, layout.price_keys)),
            year=parse_year(_pick(item, layout.year_keys)),
            category=category_from_label(str(category_raw), self.brand) if category_raw else None,
            engine_capacity=parse_engine_capacity(_pick(item, layout.engine_keys)),
            power=parse_power(_pick(item, layout.power_keys), default_unit=layout.power_unit),
            torque=parse_number(_pick(item, layout.torque_keys)),
            weight=parse_number(_pick(item, layout.weight_keys)),
            image_url=image if isinstance(image, str) else None,
            specifications=specifications,
        )


def _pick(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Return the first present, non-empty value among alias keys."""
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None
