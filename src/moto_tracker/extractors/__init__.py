"""Source extractors: one contract, four payload variants selected by config."""

from __future__ import annotations

from ..common.config import Config
from ..common.http_client import AsyncHTTPClient
from ..common.renderer import PageRenderer
from .base import (
    ExtractionOutcome,
    Extractor,
    acquire_payload,
    build_candidate,
    finalize_records,
    run_extraction,
)
from .card_html import CardHtmlExtractor
from .fallback import fallback_records
from .json_api import JsonApiExtractor
from .rendered_text import RenderedTextExtractor
from .sources import (
    DEFAULT_SOURCES,
    CardLayout,
    JsonLayout,
    SourceConfig,
    TableLayout,
    TextLayout,
    all_sources,
    enabled_sources,
    get_source,
)
from .table_html import TableHtmlExtractor

EXTRACTOR_TYPES: dict[str, type] = {
    "table_html": TableHtmlExtractor,
    "card_html": CardHtmlExtractor,
    "json_api": JsonApiExtractor,
    "rendered_text": RenderedTextExtractor,
}


def build_extractor(
    source: SourceConfig,
    config: Config | None = None,
    client: AsyncHTTPClient | None = None,
    renderer: PageRenderer | None = None,
) -> Extractor:
    """Instantiate the extractor variant named by ``source.kind``.

    Raises:
        ValueError: If the kind has no registered extractor.
    """
    extractor_type = EXTRACTOR_TYPES.get(source.kind)
    if extractor_type is None:
        raise ValueError(f"No extractor registered for kind '{source.kind}'")
    return extractor_type(source, config=config, client=client, renderer=renderer)


__all__ = [
    "DEFAULT_SOURCES",
    "EXTRACTOR_TYPES",
    "CardHtmlExtractor",
    "CardLayout",
    "ExtractionOutcome",
    "Extractor",
    "JsonApiExtractor",
    "JsonLayout",
    "RenderedTextExtractor",
    "SourceConfig",
    "TableHtmlExtractor",
    "TableLayout",
    "TextLayout",
    "acquire_payload",
    "all_sources",
    "build_candidate",
    "build_extractor",
    "enabled_sources",
    "fallback_records",
    "finalize_records",
    "get_source",
    "run_extraction",
]
