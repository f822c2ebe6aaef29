"""Source descriptions: where each extractor fetches from and how it reads.

Every source is an immutable SourceConfig handed to its extractor at
construction. Layout models carry the per-site selectors and patterns so
the four extractor variants stay generic.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

from src.common.config import settings

logger = logging.getLogger(__name__)

SourceKind = Literal["table_html", "card_html", "json_api", "rendered_text"]


class TableLayout(BaseModel):
    """Rows of an HTML table, one model per row."""
    row_selector: str = "table tr"
    cell_selector: str = "td"
    cell_text_selector: str | None = None  # e.g. "h6" when text sits in a child
    min_cells: int = 3
    name_col: int = 0
    category_col: int | None = None
    year_col: int | None = None
    price_col: int = 2
    price_pattern: str = r"([\d.]+(?:,\d{2})?)\s*₺"

    model_config = {"frozen": True}


class CardLayout(BaseModel):
    """Repeating card containers with per-field selectors."""
    container: str
    name: str
    variant: str | None = None
    year: str | None = None
    price: str | None = None
    price_input_index: int | None = None  # price read from the Nth hidden input
    image: str | None = None
    category: str | None = None
    engine: str | None = None
    power: str | None = None

    model_config = {"frozen": True}


class JsonLayout(BaseModel):
    """Field aliases for JSON catalogs (English and Turkish keys)."""
    items_keys: tuple[str, ...] = ("products", "motorcycles", "data")
    name_keys: tuple[str, ...] = ("modelName", "title", "name", "model")
    price_keys: tuple[str, ...] = ("price", "listPrice", "fiyat")
    year_keys: tuple[str, ...] = ("modelYear", "year", "yil")
    category_keys: tuple[str, ...] = ("category", "type", "kategori")
    engine_keys: tuple[str, ...] = ("displacement", "engineCapacity", "engine", "motor")
    power_keys: tuple[str, ...] = ("power", "hp", "guc")
    torque_keys: tuple[str, ...] = ("torque", "tork")
    weight_keys: tuple[str, ...] = ("weight", "agirlik")
    image_keys: tuple[str, ...] = ("imageUrl", "thumbnail", "image", "gorsel")
    specification_keys: tuple[str, ...] = ("specifications", "ozellikler")
    engine_type_keys: tuple[str, ...] = ("engineType", "motorTipi")
    power_unit: str = "hp"

    model_config = {"frozen": True}


class TextLayout(BaseModel):
    """Line patterns for rendered page text or pre-extracted price lists."""
    name_pattern: str = r"^([A-Z][A-Z0-9\-\s]+)"
    price_pattern: str = r"(\d{1,3}(?:[.,]\d{3})*(?:[.,]\d{2})?)\s*(?:TL|₺)"
    engine_pattern: str | None = r"(\d+)\s*c?c\b"
    power_pattern: str | None = r"(\d+(?:\.\d+)?)\s*(?:hp|ps|bhp|kw)\b"
    ignore_case: bool = False

    model_config = {"frozen": True}


class SourceConfig(BaseModel):
    """Immutable description of one extraction source."""
    name: str
    brand: str
    kind: SourceKind
    url: str
    base_url: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    enabled: bool = True
    timeout_seconds: float | None = None
    payload_path: str | None = None  # read a provided buffer instead of fetching
    table: TableLayout | None = None
    card: CardLayout | None = None
    json_layout: JsonLayout | None = None
    text: TextLayout | None = None

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Default sources
# ---------------------------------------------------------------------------

_HTML_ACCEPT = {"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9"}

DEFAULT_SOURCES: tuple[SourceConfig, ...] = (
    SourceConfig(
        name="bmw",
        brand="BMW",
        kind="card_html",
        # iframe behind bmw-motorrad.com.tr/tr/fiyat-listesi.html
        url="https://www.borusanotomotiv.com/motorrad/stage2/fiyatlistesi/default.aspx",
        base_url="https://www.borusanotomotiv.com",
        headers={
            **_HTML_ACCEPT,
            "Referer": "https://www.bmw-motorrad.com.tr/tr/fiyat-listesi.html",
        },
        card=CardLayout(
            container="div.price",
            name=".col1_1",
            variant=".col1_2",
            year=".col8",
            price_input_index=4,  # "Azami Satış Fiyatı"
        ),
    ),
    SourceConfig(
        name="yamaha",
        brand="Yamaha",
        kind="table_html",
        url="https://tr-yamaha-motor.com/fiyat-listesi/road-price-list.html",
        base_url="https://tr-yamaha-motor.com",
        headers=_HTML_ACCEPT,
        table=TableLayout(name_col=0, year_col=1, price_col=2),
    ),
    SourceConfig(
        name="kawasaki",
        brand="Kawasaki",
        kind="table_html",
        url="https://www.kawasaki.com.tr/Home/FiyatListesi",
        base_url="https://www.kawasaki.com.tr",
        headers=_HTML_ACCEPT,
        table=TableLayout(
            cell_text_selector="h6", name_col=0, category_col=1, price_col=2
        ),
    ),
    SourceConfig(
        name="honda",
        brand="Honda",
        kind="rendered_text",
        url="https://www.honda.com.tr/motorsiklet",
        base_url="https://www.honda.com.tr",
        text=TextLayout(
            name_pattern=(
                r"^(CBR\s*\d+[A-Z]*|CB\s*\d+[A-Z]*|CRF\s*\d+[A-Z]*"
                r"|NC\s*\d+[A-Z]*|X-ADV|PCX|Forza\s+\d{3}(?![.,\d]))\b"
            ),
            price_pattern=r"([\d.]+(?:,\d{2})?)\s*(?:TL|₺)",
            ignore_case=True,
        ),
    ),
    SourceConfig(
        name="bmw-api",
        brand="BMW",
        kind="json_api",
        url="https://www.bmw-motorrad.com.tr/tr/json/vdm-odm.json.html",
        base_url="https://www.bmw-motorrad.com.tr",
        headers={"Accept": "application/json"},
        enabled=False,
        json_layout=JsonLayout(),
    ),
)


def _apply_overrides(source: SourceConfig) -> SourceConfig:
    """Apply settings.yaml overrides matched by source name."""
    for override in settings.sources:
        if override.name != source.name:
            continue
        changes = override.model_dump(exclude={"name"}, exclude_none=True)
        if changes:
            logger.debug("Applying overrides to %s: %s", source.name, changes)
            source = source.model_copy(update=changes)
    return source


def all_sources() -> list[SourceConfig]:
    """Every known source, with configured overrides applied."""
    return [_apply_overrides(s) for s in DEFAULT_SOURCES]


def enabled_sources() -> list[SourceConfig]:
    return [s for s in all_sources() if s.enabled]


def get_source(name: str) -> SourceConfig:
    """Look up a source by name.

    Raises:
        KeyError: If no source has that name.
    """
    for source in all_sources():
        if source.name == name:
            return source
    raise KeyError(f"Unknown source: {name}")
