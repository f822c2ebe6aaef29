"""Per-brand heuristic rule tables.

Category guessing and displacement parsing differ per manufacturer and are
kept as ordered data tables resolved through a registry keyed by brand.
Adding a brand means registering a new BrandRules; nothing here branches
on brand names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from src.common.models import Category

_GENERIC_CAPACITY = r"(?<!\d)(\d{2,4})(?!\d)"


@dataclass(frozen=True)
class CategoryRule:
    """Match when the uppercased name contains or starts with a token."""

    category: Category
    contains: tuple[str, ...] = ()
    prefixes: tuple[str, ...] = ()

    def matches(self, upper_name: str) -> bool:
        return any(t in upper_name for t in self.contains) or any(
            upper_name.startswith(p) for p in self.prefixes
        )


@dataclass(frozen=True)
class BrandRules:
    """Brand knowledge used by the normalizers.

    Attributes:
        brand: Canonical brand tag as stored on records.
        aliases: Extra leading tokens stripped from model names.
        noise_patterns: Regexes removed from model names.
        category_rules: Ordered name rules; first match wins.
        category_labels: Ordered (label substring, category) pairs for
            source-provided category text, checked before generic labels.
        capacity_pattern: Regex whose first group is the displacement.
        short_code_scale: Multiplier for values below 100 ("MT-07" -> 700).
        capacity_corrections: Displayed value -> documented displacement.
    """

    brand: str
    aliases: tuple[str, ...] = ()
    noise_patterns: tuple[str, ...] = ()
    category_rules: tuple[CategoryRule, ...] = ()
    category_labels: tuple[tuple[str, Category], ...] = ()
    capacity_pattern: str = _GENERIC_CAPACITY
    short_code_scale: int | None = None
    capacity_corrections: dict[int, int] = field(default_factory=dict)


_REGISTRY: dict[str, BrandRules] = {}


def register_brand_rules(rules: BrandRules) -> None:
    """Register (or replace) the rule table for a brand."""
    _REGISTRY[rules.brand.casefold()] = rules


def get_brand_rules(brand: str) -> BrandRules:
    """Look up rules for a brand; unknown brands get a neutral table."""
    rules = _REGISTRY.get((brand or "").strip().casefold())
    if rules is None:
        return BrandRules(brand=brand or "")
    return rules


def registered_brands() -> list[str]:
    return sorted(r.brand for r in _REGISTRY.values())


# Generic category labels as printed by sources; order matters
# ("SUPERSPORT" must hit Sport before anything else).
_CATEGORY_LABELS: list[tuple[tuple[str, ...], Category]] = [
    (("SUPERSPORT", "SPORT"), Category.SPORT),
    (("NAKED", "ROADSTER"), Category.NAKED),
    (("TOURING",), Category.TOURING),
    (("ADVENTURE",), Category.ADVENTURE),
    (("CRUISER",), Category.CRUISER),
    (("OFF", "ENDURO", "MOTOCROSS"), Category.OFF_ROAD),
    (("HYBRID",), Category.HYBRID),
    (("SCOOTER",), Category.SCOOTER),
    (("RETRO", "HERITAGE", "CLASSIC"), Category.RETRO_CLASSIC),
]


def map_category(text: str | None) -> Category | None:
    """Map a source-printed category label onto the closed taxonomy."""
    if not text:
        return None
    upper = str(text).upper()
    for tokens, category in _CATEGORY_LABELS:
        if any(token in upper for token in tokens):
            return category
    return None


def guess_category(name: str | None, brand: str) -> Category | None:
    """Guess a category from the model name using the brand's rule order."""
    if not name:
        return None
    upper = name.upper()
    for rule in get_brand_rules(brand).category_rules:
        if rule.matches(upper):
            return rule.category
    return None


def category_from_label(label: str | None, brand: str) -> Category | None:
    """Map a source category label, brand table first, then generic labels."""
    if not label:
        return None
    lowered = str(label).casefold()
    for token, category in get_brand_rules(brand).category_labels:
        if token in lowered:
            return category
    return map_category(label)


def guess_engine_capacity(name: str | None, brand: str) -> int | None:
    """Parse displacement from a model name with brand-specific handling."""
    if not name:
        return None
    rules = get_brand_rules(brand)
    match = re.search(rules.capacity_pattern, name)
    if not match:
        return None
    capacity = int(match.group(1))
    if capacity <= 0:
        return None
    if rules.short_code_scale and capacity < 100:
        capacity *= rules.short_code_scale
    return rules.capacity_corrections.get(capacity, capacity)


# ---------------------------------------------------------------------------
# Shipped rule tables
# ---------------------------------------------------------------------------

BMW_RULES = BrandRules(
    brand="BMW",
    aliases=("BMW Motorrad",),
    category_rules=(
        CategoryRule(Category.SPORT, contains=("RR",)),
        CategoryRule(Category.ADVENTURE, contains=("GS",)),
        CategoryRule(Category.TOURING, contains=("RT",)),
        CategoryRule(Category.NAKED, contains=("R ",)),
        CategoryRule(Category.SPORT, contains=("S ",)),
        CategoryRule(Category.ADVENTURE, contains=("F ",)),
        CategoryRule(Category.NAKED, contains=("G ",)),
        CategoryRule(Category.SPORT, contains=("K ",)),
        CategoryRule(Category.SCOOTER, contains=("C ",)),
        CategoryRule(Category.SPORT, contains=("M ",)),
    ),
    category_labels=(
        ("roadster", Category.NAKED),
        ("heritage", Category.RETRO_CLASSIC),
        ("urban mobility", Category.SCOOTER),
        ("adventure", Category.ADVENTURE),
        ("tour", Category.TOURING),
        ("sport", Category.SPORT),
    ),
    capacity_pattern=r"(?<!\d)(\d{3,4})(?!\d)",
    capacity_corrections={
        310: 313,
        850: 895,
        900: 895,
        1000: 999,
        1250: 1254,
        1300: 1254,
    },
)

YAMAHA_RULES = BrandRules(
    brand="Yamaha",
    noise_patterns=(r"\(EU5\+?\)", r"\(Y-AMT\)"),
    category_rules=(
        CategoryRule(Category.SPORT, contains=("YZF-R", "YZFR")),
        CategoryRule(Category.NAKED, contains=("MT-", "MT ")),
        CategoryRule(Category.RETRO_CLASSIC, contains=("XSR",)),
        CategoryRule(Category.ADVENTURE, contains=("TRACER",)),
        CategoryRule(Category.ADVENTURE, contains=("TÉNÉRÉ", "TENERE")),
        CategoryRule(Category.SCOOTER, contains=("NMAX", "XMAX", "TMAX")),
        CategoryRule(Category.TOURING, contains=("FJR",)),
    ),
    capacity_pattern=_GENERIC_CAPACITY,
    short_code_scale=100,
)

KAWASAKI_RULES = BrandRules(
    brand="Kawasaki",
    category_rules=(
        CategoryRule(Category.SPORT, contains=("NINJA",)),
        CategoryRule(Category.NAKED, contains=("Z ",), prefixes=("Z",)),
        CategoryRule(Category.ADVENTURE, contains=("VERSYS",)),
        CategoryRule(Category.RETRO_CLASSIC, contains=("W ",)),
        CategoryRule(Category.CRUISER, contains=("VULCAN",)),
        CategoryRule(Category.OFF_ROAD, contains=("KLX", "KX")),
        CategoryRule(Category.HYBRID, contains=("HYBRID",)),
    ),
    capacity_pattern=r"(?<!\d)(\d{3,4})(?!\d)",
)

HONDA_RULES = BrandRules(
    brand="Honda",
    category_rules=(
        CategoryRule(Category.SPORT, contains=("CBR",)),
        CategoryRule(Category.NAKED, contains=("CB",)),
        CategoryRule(Category.OFF_ROAD, contains=("CRF",)),
        CategoryRule(Category.ADVENTURE, contains=("NC",)),
        CategoryRule(Category.ADVENTURE, contains=("X-ADV",)),
        CategoryRule(Category.SCOOTER, contains=("PCX", "FORZA")),
    ),
    capacity_pattern=_GENERIC_CAPACITY,
)

for _rules in (BMW_RULES, YAMAHA_RULES, KAWASAKI_RULES, HONDA_RULES):
    register_brand_rules(_rules)
