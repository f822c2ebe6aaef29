"""Tests for the four extractor variants and the shared extraction steps."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.common.models import Category, ExtractionStatus
from src.moto_tracker.errors import FetchError, ParseError
from src.moto_tracker.extractors import (
    CardHtmlExtractor,
    JsonApiExtractor,
    RenderedTextExtractor,
    SourceConfig,
    TableHtmlExtractor,
    build_extractor,
    fallback_records,
    finalize_records,
    get_source,
)


FIXTURES_DIR = Path(__file__).resolve().parents[1] / "fixtures"


def _read(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def _client(payload: str | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.get_text = AsyncMock(return_value=payload, side_effect=error)
    return client


class TestTableHtmlExtractor:
    """Kawasaki and Yamaha price-list tables."""

    @pytest.mark.asyncio
    async def test_kawasaki_price_list(self, test_config):
        source = get_source("kawasaki")
        client = _client(_read("kawasaki_price_list.html"))
        extractor = TableHtmlExtractor(source, config=test_config, client=client)

        outcome = await extractor.extract()

        assert outcome.status == ExtractionStatus.VALIDATED
        assert outcome.error is None
        assert [r.name for r in outcome.records] == [
            "Ninja ZX-10R",
            "Z900",
            "Versys 650",
            "KLX 230",
            "Vulcan S",
        ]
        assert outcome.items_found == 7
        client.get_text.assert_awaited_once_with(
            source.url, headers=source.headers, cache_key="kawasaki", timeout=5
        )

    def test_kawasaki_fields(self, test_config):
        extractor = TableHtmlExtractor(get_source("kawasaki"), config=test_config)
        candidates = extractor.parse(_read("kawasaki_price_list.html"))
        by_name = {c["name"]: c for c in candidates}

        assert by_name["Ninja ZX-10R"]["price"] == 1_250_000
        assert by_name["Ninja ZX-10R"]["category"] == Category.SPORT
        assert by_name["Ninja ZX-10R"]["engine_capacity"] is None
        assert by_name["Versys 650"]["engine_capacity"] == 650
        assert by_name["KLX 230"]["category"] == Category.OFF_ROAD
        assert by_name["Vulcan S"]["category"] == Category.CRUISER
        assert all(c["brand"] == "Kawasaki" for c in candidates)

    @pytest.mark.asyncio
    async def test_first_duplicate_wins(self, test_config):
        extractor = TableHtmlExtractor(
            get_source("kawasaki"),
            config=test_config,
            client=_client(_read("kawasaki_price_list.html")),
        )
        outcome = await extractor.extract()
        z900 = [r for r in outcome.records if r.name == "Z900"]
        assert len(z900) == 1
        assert z900[0].price == 582_000

    def test_yamaha_price_list(self, test_config):
        extractor = TableHtmlExtractor(get_source("yamaha"), config=test_config)
        candidates = extractor.parse(_read("yamaha_price_list.html"))
        by_name = {c["name"]: c for c in candidates}

        assert list(by_name) == ["MT-07", "YZF-R7", "Tracer 9 GT", "XMAX 300", "TÃ©nÃ©rÃ© 700"]
        assert by_name["MT-07"]["price"] == 411_000
        assert by_name["MT-07"]["engine_capacity"] == 700
        assert by_name["MT-07"]["category"] == Category.NAKED
        assert by_name["Tracer 9 GT"]["price"] == 699_000
        assert by_name["Tracer 9 GT"]["year"] == 2024
        assert by_name["TÃ©nÃ©rÃ© 700"]["category"] == Category.ADVENTURE

    def test_requires_table_layout(self, test_config):
        source = SourceConfig(name="t", brand="Kawasaki", kind="table_html", url="https://x")
        with pytest.raises(ValueError):
            TableHtmlExtractor(source, config=test_config)


class TestCardHtmlExtractor:
    """BMW Borusan cards with prices in hidden inputs."""

    def test_parse_cards(self, test_config):
        extractor = CardHtmlExtractor(get_source("bmw"), config=test_config)
        candidates = extractor.parse(_read("bmw_borusan.html"))
        by_name = {c["name"]: c for c in candidates}

        assert list(by_name) == ["R 1300 GS", "S 1000 RR M Paket", "G 310 R", "F 900 XR"]
        assert by_name["R 1300 GS"]["price"] == 1_150_000
        assert by_name["R 1300 GS"]["engine_capacity"] == 1254
        assert by_name["R 1300 GS"]["category"] == Category.ADVENTURE
        assert by_name["S 1000 RR M Paket"]["category"] == Category.SPORT
        assert by_name["S 1000 RR M Paket"]["engine_capacity"] == 999
        assert by_name["G 310 R"]["engine_capacity"] == 313
        assert by_name["G 310 R"]["year"] == 2024
        assert by_name["F 900 XR"]["engine_capacity"] == 895

    @pytest.mark.asyncio
    async def test_extract(self, test_config):
        extractor = CardHtmlExtractor(
            get_source("bmw"), config=test_config, client=_client(_read("bmw_borusan.html"))
        )
        outcome = await extractor.extract()
        assert outcome.status == ExtractionStatus.VALIDATED
        assert outcome.count == 4
        assert {r.brand for r in outcome.records} == {"BMW"}


class TestJsonApiExtractor:
    """JSON catalogs with English and Turkish keys."""

    def test_parse_products(self, test_config):
        extractor = JsonApiExtractor(get_source("bmw-api"), config=test_config)
        candidates = extractor.parse(_read("bmw_models.json"))
        by_name = {c["name"]: c for c in candidates}

        nine_t = by_name["R 12 nineT"]
        assert nine_t["price"] == 845_000
        assert nine_t["year"] == 2025
        assert nine_t["category"] == Category.RETRO_CLASSIC
        assert nine_t["engine_capacity"] == 1170
        assert nine_t["power"] == 109.0
        assert nine_t["image_url"] == (
            "https://www.bmw-motorrad.com.tr/content/dam/bmwmotorradnsc/r12-nine-t.jpg"
        )

        m_xr = by_name["M 1000 XR"]
        assert m_xr["price"] == 1_350_000
        assert m_xr["category"] == Category.SPORT
        assert m_xr["power"] == 201.0

    def test_turkish_keys(self, test_config):
        extractor = JsonApiExtractor(get_source("bmw-api"), config=test_config)
        ce04 = {c["name"]: c for c in extractor.parse(_read("bmw_models.json"))}["CE 04"]

        assert ce04["price"] == 470_000
        assert ce04["category"] == Category.SCOOTER
        assert ce04["power"] == 41.6
        assert ce04["torque"] == 62.0
        assert ce04["weight"] == 231.0
        assert ce04["image_url"] == "https://cdn.bmw-motorrad.com/ce04.png"
        assert ce04["specifications"] == {"menzil": "130 km", "engineType": "Elektrik"}

    @pytest.mark.asyncio
    async def test_invalid_items_dropped(self, test_config):
        extractor = JsonApiExtractor(
            get_source("bmw-api"), config=test_config, client=_client(_read("bmw_models.json"))
        )
        outcome = await extractor.extract()
        assert outcome.status == ExtractionStatus.VALIDATED
        assert [r.name for r in outcome.records] == ["R 12 nineT", "M 1000 XR", "CE 04"]

    def test_root_array(self, test_config):
        extractor = JsonApiExtractor(get_source("bmw-api"), config=test_config)
        candidates = extractor.parse('[{"name": "F 900 R", "price": "485.000 TL"}]')
        assert candidates[0]["name"] == "F 900 R"
        assert candidates[0]["price"] == 485_000

    def test_invalid_json(self, test_config):
        extractor = JsonApiExtractor(get_source("bmw-api"), config=test_config)
        with pytest.raises(ParseError):
            extractor.parse("<html>not json</html>")

    def test_no_item_array(self, test_config):
        extractor = JsonApiExtractor(get_source("bmw-api"), config=test_config)
        with pytest.raises(ParseError):
            extractor.parse('{"status": "ok"}')


class TestRenderedTextExtractor:
    """Honda rendered page text."""

    def test_parse_lines(self, test_config):
        extractor = RenderedTextExtractor(get_source("honda"), config=test_config)
        candidates = extractor.parse(_read("honda_rendered.txt"))
        by_name = {c["name"]: c for c in candidates}

        assert list(by_name) == ["CB500X", "CBR650R", "Forza 350", "X-ADV"]
        assert by_name["CB500X"]["price"] == 275_000
        assert by_name["CB500X"]["engine_capacity"] == 471
        assert by_name["CB500X"]["power"] == 47.0
        assert by_name["CBR650R"]["price"] == 385_000
        assert by_name["CBR650R"]["category"] == Category.SPORT
        assert by_name["Forza 350"]["price"] == 215_000
        assert by_name["Forza 350"]["category"] == Category.SCOOTER
        assert by_name["X-ADV"]["price"] is None
        assert by_name["X-ADV"]["power"] == 46.9

    def test_first_match_per_field_wins(self, test_config):
        extractor = RenderedTextExtractor(get_source("honda"), config=test_config)
        candidates = extractor.parse("CB650R\n349.000 TL\nKampanya 329.000 TL\n")
        assert candidates[0]["price"] == 349_000

    def test_prose_mention_does_not_open_item(self, test_config):
        extractor = RenderedTextExtractor(get_source("honda"), config=test_config)
        text = "CB500X\nYeni Forza tasarımı ile şehirde\nforza ruhu burada\n275.000 TL\n"

        candidates = extractor.parse(text)

        assert [c["name"] for c in candidates] == ["CB500X"]
        assert candidates[0]["price"] == 275_000

    @pytest.mark.asyncio
    async def test_extract_via_renderer(self, test_config):
        renderer = MagicMock()
        renderer.render = AsyncMock(return_value=_read("honda_rendered.txt"))
        source = get_source("honda")
        extractor = RenderedTextExtractor(source, config=test_config, renderer=renderer)

        outcome = await extractor.extract()

        assert outcome.status == ExtractionStatus.VALIDATED
        assert [r.name for r in outcome.records] == ["CB500X", "CBR650R", "Forza 350"]
        renderer.render.assert_awaited_once_with(
            source.url, timeout=5, user_agent="moto-tracker-tests/1.0"
        )

    @pytest.mark.asyncio
    async def test_payload_path_skips_network(self, test_config):
        renderer = MagicMock()
        renderer.render = AsyncMock()
        source = get_source("honda").model_copy(
            update={"payload_path": str(FIXTURES_DIR / "honda_rendered.txt")}
        )
        extractor = RenderedTextExtractor(source, config=test_config, renderer=renderer)

        outcome = await extractor.extract()

        assert outcome.status == ExtractionStatus.VALIDATED
        assert outcome.count == 3
        renderer.render.assert_not_awaited()


class TestFallback:
    """Every failure mode lands in the brand's sample catalog."""

    @pytest.mark.asyncio
    async def test_fetch_error(self, test_config):
        client = _client(error=FetchError("HTTP 503 from https://x", status_code=503))
        extractor = TableHtmlExtractor(get_source("yamaha"), config=test_config, client=client)

        outcome = await extractor.extract()

        assert outcome.status == ExtractionStatus.FALLBACK
        assert outcome.is_fallback
        assert "HTTP 503" in outcome.error
        assert [r.name for r in outcome.records] == [r.name for r in fallback_records("Yamaha")]
        assert "fallback sample data" in outcome.summary()

    @pytest.mark.asyncio
    async def test_timeout(self, test_config):
        async def slow_get_text(*args, **kwargs):
            await asyncio.sleep(5)
            return ""

        client = MagicMock()
        client.get_text = slow_get_text
        source = get_source("kawasaki").model_copy(update={"timeout_seconds": 0.05})
        extractor = TableHtmlExtractor(source, config=test_config, client=client)

        outcome = await extractor.extract()

        assert outcome.status == ExtractionStatus.FALLBACK
        assert outcome.error.startswith("Timed out")
        assert outcome.count == len(fallback_records("Kawasaki"))

    @pytest.mark.asyncio
    async def test_empty_parse_result(self, test_config):
        extractor = TableHtmlExtractor(
            get_source("kawasaki"),
            config=test_config,
            client=_client("<html><body><p>BakÄ±mdayÄ±z</p></body></html>"),
        )
        outcome = await extractor.extract()
        assert outcome.status == ExtractionStatus.FALLBACK
        assert outcome.error == "No valid records found (0 items parsed)"

    @pytest.mark.asyncio
    async def test_parse_error(self, test_config):
        extractor = JsonApiExtractor(
            get_source("bmw-api"), config=test_config, client=_client("not json")
        )
        outcome = await extractor.extract()
        assert outcome.status == ExtractionStatus.FALLBACK
        assert "Invalid JSON" in outcome.error
        assert {r.brand for r in outcome.records} == {"BMW"}

    @pytest.mark.asyncio
    async def test_missing_payload_file(self, test_config, tmp_path):
        source = get_source("honda").model_copy(
            update={"payload_path": str(tmp_path / "missing.txt")}
        )
        outcome = await RenderedTextExtractor(source, config=test_config).extract()
        assert outcome.status == ExtractionStatus.FALLBACK
        assert "Cannot read payload file" in outcome.error

    def test_fallback_catalog_is_fresh_copy(self):
        first = fallback_records("BMW")
        first.clear()
        assert len(fallback_records("BMW")) == 10
        assert len(fallback_records("bmw")) == 10

    def test_unknown_brand_has_no_catalog(self):
        assert fallback_records("Ducati") == []


class TestFinalizeRecords:
    def test_drops_invalid_and_duplicates(self):
        candidates = [
            {"name": "Z900", "brand": "Kawasaki", "year": 2025, "price": 582_000},
            {"name": "z900 ", "brand": "KAWASAKI", "year": 2025, "price": 600_000},
            {"name": "Filtre", "brand": "Kawasaki", "year": 2025, "price": 5_000},
            {"name": "", "brand": "Kawasaki", "year": 2025, "price": 300_000},
            {"name": "Versys 650", "brand": "Kawasaki", "year": 2025, "price": 455_000},
        ]
        records = finalize_records(candidates, min_price=10_000)
        assert [(r.name, r.price) for r in records] == [("Z900", 582_000), ("Versys 650", 455_000)]

    def test_all_records_valid(self):
        candidates = [
            {"name": "MT-07", "brand": "Yamaha", "year": 2025, "price": 411_000},
            {"name": "MT-09", "brand": "Yamaha", "year": None, "price": 511_000},
        ]
        records = finalize_records(candidates, min_price=10_000)
        assert len(records) == 1
        assert all(r.price >= 10_000 and r.name and r.brand and r.year for r in records)


class TestBuildExtractor:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("bmw", CardHtmlExtractor),
            ("yamaha", TableHtmlExtractor),
            ("kawasaki", TableHtmlExtractor),
            ("honda", RenderedTextExtractor),
            ("bmw-api", JsonApiExtractor),
        ],
    )
    def test_kind_dispatch(self, name, expected, test_config):
        extractor = build_extractor(get_source(name), config=test_config)
        assert isinstance(extractor, expected)
        assert extractor.name == name

    def test_unknown_kind(self, test_config):
        source = SourceConfig.model_construct(name="x", brand="X", kind="pdf", url="https://x")
        with pytest.raises(ValueError):
            build_extractor(source, config=test_config)

    def test_unknown_source(self):
        with pytest.raises(KeyError):
            get_source("ducati")
