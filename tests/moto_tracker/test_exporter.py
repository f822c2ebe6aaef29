"""Tests for the JSON export."""

from __future__ import annotations

import json
from datetime import date

import pytest

from src.common.models import CanonicalRecord, Category
from src.moto_tracker.errors import ParseError
from src.moto_tracker.pipeline.exporter import (
    export_filename,
    export_records,
    export_stats,
    load_records,
)
from src.moto_tracker.pipeline.models import ExtractionStats


RUN_DATE = date(2024, 6, 1)


class TestExportRecords:
    def test_filename(self):
        assert export_filename(RUN_DATE) == "motorcycles-2024-06-01.json"

    def test_writes_camel_case_array(self, tmp_path, sample_records):
        path = export_records(sample_records, tmp_path, run_date=RUN_DATE)

        assert path == tmp_path / "motorcycles-2024-06-01.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data) == 3
        assert data[0] == {
            "name": "MT-07",
            "brand": "Yamaha",
            "category": "Naked",
            "year": 2024,
            "price": 275000,
            "engineCapacity": 689,
            "power": 73.0,
        }
        assert data[2]["imageUrl"].startswith("https://")

    def test_utf8_and_pretty_printed(self, tmp_path):
        record = CanonicalRecord(
            name="Ténéré 700", brand="Yamaha", category=Category.ADVENTURE, year=2025, price=560_000
        )
        path = export_records([record], tmp_path, run_date=RUN_DATE)
        text = path.read_text(encoding="utf-8")

        assert "Ténéré 700" in text
        assert '\n  {\n    "name"' in text

    def test_creates_output_dir(self, tmp_path, sample_records):
        path = export_records(sample_records, tmp_path / "exports" / "nested", run_date=RUN_DATE)
        assert path.exists()

    def test_load_back(self, tmp_path, sample_records):
        path = export_records(sample_records, tmp_path, run_date=RUN_DATE)
        assert load_records(path) == sample_records


class TestLoadRecords:
    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ParseError):
            load_records(path)

    def test_not_an_array(self, tmp_path):
        path = tmp_path / "object.json"
        path.write_text('{"name": "MT-07"}', encoding="utf-8")
        with pytest.raises(ParseError):
            load_records(path)

    def test_drops_implausible_price(self, tmp_path, sample_records):
        cheap = CanonicalRecord(name="Helmet", brand="Yamaha", year=2024, price=500)
        path = export_records([*sample_records, cheap], tmp_path, run_date=RUN_DATE)

        assert load_records(path) == sample_records

    def test_custom_min_price(self, tmp_path, sample_records):
        path = export_records(sample_records, tmp_path, run_date=RUN_DATE)

        loaded = load_records(path, min_price=600_000)

        assert [r.name for r in loaded] == ["R 1300 GS"]

    def test_invalid_record(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('[{"name": "MT-07", "brand": "Yamaha", "price": -1}]', encoding="utf-8")
        with pytest.raises(ParseError):
            load_records(path)


class TestExportStats:
    def test_writes_stats_file(self, tmp_path):
        stats = ExtractionStats.from_outcomes([], duration_seconds=1.234)
        path = export_stats(stats, tmp_path, run_date=RUN_DATE)

        assert path.name == "extraction-stats-2024-06-01.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["totalRecords"] == 0
        assert data["durationSeconds"] == 1.23
