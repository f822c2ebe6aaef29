"""Fixed sample catalogs returned when a live source cannot be read.

Known-good 2024 list prices per brand. They keep downstream consumers
supplied when a site is down; the outcome status marks them as fallback.
"""

from __future__ import annotations

from src.common.models import CanonicalRecord, Category

FALLBACK_YEAR = 2024

# brand -> (name, category, price, engine cc, power hp)
_CATALOGS: dict[str, list[tuple[str, Category, int, int, float]]] = {
    "BMW": [
        ("G 310 R", Category.NAKED, 245_000, 313, 34),
        ("G 310 GS", Category.ADVENTURE, 258_000, 313, 34),
        ("F 900 R", Category.NAKED, 485_000, 895, 105),
        ("F 900 XR", Category.ADVENTURE, 525_000, 895, 105),
        ("S 1000 R", Category.NAKED, 765_000, 999, 165),
        ("S 1000 RR", Category.SPORT, 895_000, 999, 207),
        ("S 1000 XR", Category.ADVENTURE, 825_000, 999, 165),
        ("R 1250 GS", Category.ADVENTURE, 925_000, 1254, 136),
        ("R 1250 GS Adventure", Category.ADVENTURE, 1_050_000, 1254, 136),
        ("R 1250 RT", Category.TOURING, 975_000, 1254, 136),
    ],
    "Yamaha": [
        ("MT-07", Category.NAKED, 289_000, 689, 73),
        ("MT-09", Category.NAKED, 385_000, 890, 117),
        ("YZF-R7", Category.SPORT, 325_000, 689, 73),
        ("XSR 900", Category.RETRO_CLASSIC, 425_000, 890, 117),
        ("Tracer 9", Category.ADVENTURE, 465_000, 890, 117),
    ],
    "Kawasaki": [
        ("Ninja 650", Category.SPORT, 295_000, 649, 68),
        ("Z 900", Category.NAKED, 425_000, 948, 125),
    ],
    "Honda": [
        ("CB 500X", Category.ADVENTURE, 275_000, 471, 47),
        ("CBR 650R", Category.SPORT, 385_000, 649, 95),
        ("CRF 1100L Africa Twin", Category.ADVENTURE, 575_000, 1084, 102),
    ],
}


def fallback_records(brand: str) -> list[CanonicalRecord]:
    """Return a fresh copy of the brand's sample catalog (empty if unknown)."""
    rows = _CATALOGS.get(brand)
    if rows is None:
        rows = next(
            (v for k, v in _CATALOGS.items() if k.casefold() == (brand or "").casefold()),
            [],
        )
    return [
        CanonicalRecord(
            name=name,
            brand=brand,
            category=category,
            year=FALLBACK_YEAR,
            price=price,
            engine_capacity=engine,
            power=power,
        )
        for name, category, price, engine, power in rows
    ]
