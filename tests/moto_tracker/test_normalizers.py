"""Tests for the field normalizers."""

from __future__ import annotations

import pytest

from src.common.models import Category
from src.moto_tracker.normalizers import (
    clean_model_name,
    map_category,
    parse_engine_capacity,
    parse_number,
    parse_power,
    parse_price,
    parse_year,
    resolve_image_url,
)


class TestParsePrice:
    """Turkish number formatting: '.' thousands, ',' decimals."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("185.000,50", 185000.5),
            ("582.000 ₺", 582000),
            ("1.250.000 TL", 1250000),
            ("699.000,00", 699000),
            ("Fiyat: 275.000 TL", 275000),
            ("411000", 411000),
        ],
    )
    def test_turkish_format(self, text, expected):
        assert parse_price(text) == expected

    def test_integral_result_is_int(self):
        assert isinstance(parse_price("699.000,00 ₺"), int)
        assert isinstance(parse_price("185.000,50"), float)

    def test_numbers_pass_through(self):
        assert parse_price(1_350_000) == 1_350_000
        assert parse_price(289_500.0) == 289_500

    @pytest.mark.parametrize("text", [None, "", "Bayinize sorunuz", "₺", -5])
    def test_unparseable(self, text):
        assert parse_price(text) is None

    def test_never_negative(self):
        assert parse_price("-250.000 TL") == 250000


class TestParseEngineCapacity:
    def test_with_unit(self):
        assert parse_engine_capacity("471 cc") == 471
        assert parse_engine_capacity("1254cc") == 1254

    def test_first_run_wins(self):
        assert parse_engine_capacity("R 1300 GS 2025") == 1300

    def test_embedded_in_model_code(self):
        assert parse_engine_capacity("CB500X") == 500

    def test_numeric(self):
        assert parse_engine_capacity(999) == 999
        assert parse_engine_capacity(0) is None

    def test_no_digits(self):
        assert parse_engine_capacity("Vulcan S") is None
        assert parse_engine_capacity(None) is None


class TestParsePower:
    def test_horsepower_units(self):
        assert parse_power("47 HP") == 47.0
        assert parse_power("136 PS") == 136.0
        assert parse_power("201 bhp") == 201.0

    def test_kilowatt_converted(self):
        assert parse_power("35 kW") == 46.9
        assert parse_power("100 kw") == 134.1

    def test_bare_number_needs_default_unit(self):
        assert parse_power("109") is None
        assert parse_power("109", default_unit="hp") == 109.0
        assert parse_power(31, default_unit="kw") == 41.6

    def test_decimal_comma(self):
        assert parse_power("73,4 HP") == 73.4

    def test_unparseable(self):
        assert parse_power("yok") is None
        assert parse_power(None) is None


class TestParseNumber:
    def test_units_ignored(self):
        assert parse_number("62 Nm") == 62.0
        assert parse_number("231 kg") == 231.0

    def test_non_positive(self):
        assert parse_number(0) is None
        assert parse_number("") is None


class TestParseYear:
    def test_four_digit(self):
        assert parse_year("2025") == 2025
        assert parse_year("Model Yılı 2024") == 2024

    def test_out_of_range(self):
        assert parse_year("1234") is None
        assert parse_year(3000) is None
        assert parse_year(None) is None


class TestCleanModelName:
    def test_strips_brand_prefix(self):
        assert clean_model_name("Kawasaki Versys 650", "Kawasaki") == "Versys 650"
        assert clean_model_name("YAMAHA MT-07", "Yamaha") == "MT-07"

    def test_strips_brand_alias(self):
        assert clean_model_name("BMW Motorrad R 12 nineT", "BMW") == "R 12 nineT"

    def test_strips_noise_patterns(self):
        assert clean_model_name("MT-07 (EU5+)", "Yamaha") == "MT-07"
        assert clean_model_name("Tracer 9 GT (Y-AMT)", "Yamaha") == "Tracer 9 GT"

    def test_collapses_whitespace(self):
        assert clean_model_name("  S 1000   RR\n M Paket ", "BMW") == "S 1000 RR M Paket"

    def test_brand_inside_name_kept(self):
        assert clean_model_name("Ninja ZX-10R Kawasaki Racing", "Kawasaki") == (
            "Ninja ZX-10R Kawasaki Racing"
        )

    def test_empty(self):
        assert clean_model_name(None, "BMW") == ""
        assert clean_model_name("", "BMW") == ""


class TestMapCategory:
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("SUPERSPORT", Category.SPORT),
            ("Naked", Category.NAKED),
            ("Roadster", Category.NAKED),
            ("Sport Touring", Category.SPORT),
            ("TOURING", Category.TOURING),
            ("ADVENTURE", Category.ADVENTURE),
            ("OFF-ROAD", Category.OFF_ROAD),
            ("Enduro", Category.OFF_ROAD),
            ("Heritage", Category.RETRO_CLASSIC),
            ("SCOOTER", Category.SCOOTER),
            ("Cruiser", Category.CRUISER),
        ],
    )
    def test_labels(self, label, expected):
        assert map_category(label) == expected

    def test_unknown_label(self):
        assert map_category("AKSESUAR") is None
        assert map_category(None) is None


class TestResolveImageUrl:
    def test_absolute_kept(self):
        assert resolve_image_url("https://cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"

    def test_protocol_relative(self):
        assert resolve_image_url("//cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"

    def test_relative_joined_to_base(self):
        assert (
            resolve_image_url("/img/z900.png", "https://www.kawasaki.com.tr")
            == "https://www.kawasaki.com.tr/img/z900.png"
        )

    def test_relative_without_base(self):
        assert resolve_image_url("/img/z900.png") is None

    def test_data_uri_dropped(self):
        assert resolve_image_url("data:image/png;base64,AAAA") is None
