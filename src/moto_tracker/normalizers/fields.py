"""Field normalizers: raw source text to typed values.

All functions here are pure and total. Unparseable input yields None
instead of raising, so extractors can apply them to whatever a page holds.
Turkish number formatting is assumed throughout: ``.`` groups thousands and
``,`` marks decimals ("185.000,50" is 185000.5).
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urljoin

from src.common.models import (
    generate_slug,
    identity_key,
    is_valid_record,
)

from .brand_rules import get_brand_rules, map_category

logger = logging.getLogger(__name__)

KW_TO_HP = 1.341

_PRICE_CHARS_RE = re.compile(r"[^\d,.]")
_LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_CAPACITY_RE = re.compile(r"(?<!\d)(\d{2,4})(?!\d)\s*(?:cc)?", re.IGNORECASE)
_HP_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:bhp|hp|ps)\b", re.IGNORECASE)
_KW_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*kw\b", re.IGNORECASE)
_BARE_NUMBER_RE = re.compile(r"(\d+(?:[.,]\d+)?)")
_WS_RE = re.compile(r"\s+")
_YEAR_RE = re.compile(r"(?<!\d)(19[5-9]\d|20\d\d)(?!\d)")

__all__ = [
    "KW_TO_HP",
    "parse_price",
    "parse_engine_capacity",
    "parse_power",
    "parse_number",
    "parse_year",
    "clean_model_name",
    "map_category",
    "resolve_image_url",
    "generate_slug",
    "identity_key",
    "is_valid_record",
]


def _as_number(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


def parse_price(text: Any) -> int | float | None:
    """Parse a Turkish-formatted price.

    Every character except digits, ``,`` and ``.`` is dropped, all dots are
    removed as thousands separators and the first comma becomes the decimal
    point. Integral results come back as int.

    >>> parse_price("185.000,50")
    185000.5
    >>> parse_price("582.000 ₺")
    582000
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return _as_number(text) if text >= 0 else None

    cleaned = _PRICE_CHARS_RE.sub("", str(text))
    normalized = cleaned.replace(".", "").replace(",", ".", 1)
    match = _LEADING_NUMBER_RE.match(normalized)
    if not match:
        return None
    return _as_number(float(match.group(0)))


def parse_engine_capacity(text: Any) -> int | None:
    """Extract displacement in cc from the first 2-4 digit run.

    Returns None when no run is found or the value is zero.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return int(text) if text > 0 else None

    match = _CAPACITY_RE.search(str(text))
    if not match:
        return None
    capacity = int(match.group(1))
    return capacity if capacity > 0 else None


def parse_power(text: Any, default_unit: str | None = None) -> float | None:
    """Parse power in horsepower.

    HP, PS and BHP are read as-is; kW is converted at 1 kW = 1.341 hp.
    A number without unit is accepted only when ``default_unit`` is given
    ("hp" or "kw"), which is how JSON feeds publish power.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        value = float(text)
        if default_unit == "kw":
            value = round(value * KW_TO_HP, 1)
        return value if value > 0 else None

    raw = str(text)
    if match := _HP_RE.search(raw):
        return float(match.group(1).replace(",", "."))
    if match := _KW_RE.search(raw):
        return round(float(match.group(1).replace(",", ".")) * KW_TO_HP, 1)
    if default_unit and (match := _BARE_NUMBER_RE.search(raw)):
        value = float(match.group(1).replace(",", "."))
        return round(value * KW_TO_HP, 1) if default_unit == "kw" else value
    return None


def parse_number(text: Any) -> float | None:
    """Parse the first plain number (torque in Nm, weight in kg)."""
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return float(text) if text > 0 else None
    match = _BARE_NUMBER_RE.search(str(text))
    if not match:
        return None
    value = float(match.group(1).replace(",", "."))
    return value if value > 0 else None


def clean_model_name(text: str | None, brand: str | None = None) -> str:
    """Strip the brand prefix and source noise from a model designation.

    Noise patterns come from the brand's rule table (regulatory suffixes
    such as ``(EU5+)``). Whitespace is collapsed and the result trimmed.
    """
    if not text:
        return ""
    name = str(text)
    if brand:
        rules = get_brand_rules(brand)
        for token in (*rules.aliases, rules.brand):
            name = re.sub(rf"^\s*{re.escape(token)}\b\s*", "", name, flags=re.IGNORECASE)
        for pattern in rules.noise_patterns:
            name = re.sub(pattern, " ", name, flags=re.IGNORECASE)
    return _WS_RE.sub(" ", name).strip()


def resolve_image_url(url: str | None, base_url: str | None = None) -> str | None:
    """Resolve an image reference to an absolute URL.

    ``//cdn/x.jpg`` gets https, ``/img/x.jpg`` is joined onto ``base_url``.
    """
    if not url:
        return None
    url = url.strip()
    if not url or url.startswith("data:"):
        return None
    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if base_url:
        return urljoin(base_url.rstrip("/") + "/", url.lstrip("/"))
    return None


def parse_year(text: Any) -> int | None:
    """Parse a four-digit model year (1950-2099)."""
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text if 1950 <= text <= 2099 else None
    match = _YEAR_RE.search(str(text))
    return int(match.group(1)) if match else None
