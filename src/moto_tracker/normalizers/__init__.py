"""Field normalizers and per-brand rule tables."""

from .brand_rules import (
    BrandRules,
    CategoryRule,
    category_from_label,
    get_brand_rules,
    guess_category,
    guess_engine_capacity,
    map_category,
    register_brand_rules,
)
from .fields import (
    clean_model_name,
    generate_slug,
    identity_key,
    is_valid_record,
    parse_engine_capacity,
    parse_number,
    parse_power,
    parse_price,
    parse_year,
    resolve_image_url,
)

__all__ = [
    "BrandRules",
    "CategoryRule",
    "category_from_label",
    "clean_model_name",
    "generate_slug",
    "get_brand_rules",
    "guess_category",
    "guess_engine_capacity",
    "identity_key",
    "is_valid_record",
    "map_category",
    "parse_engine_capacity",
    "parse_number",
    "parse_power",
    "parse_price",
    "parse_year",
    "register_brand_rules",
    "resolve_image_url",
]
