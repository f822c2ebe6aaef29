"""Shared test fixtures for the motorcycle price tracker."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.models import CanonicalRecord, Category
from src.moto_tracker.common.config import Config
from src.moto_tracker.database.connection import get_connection, init_db
from src.moto_tracker.database.sqlite_store import SQLiteStore


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return PROJECT_ROOT / "tests" / "fixtures"


@pytest.fixture
def test_config(tmp_path) -> Config:
    """Provide a Config whose paths all live under tmp_path."""
    return Config(
        database_path=str(tmp_path / "test_moto.db"),
        store_backend="sqlite",
        request_timeout=5,
        source_delay_seconds=0,
        user_agent="moto-tracker-tests/1.0",
        cache_raw_html=False,
        raw_html_cache_dir=str(tmp_path / "raw_html"),
        export_dir=str(tmp_path / "exports"),
    )


@pytest.fixture
def temp_db(test_config):
    """Provide a Config pointing to an initialized temporary SQLite database."""
    init_db(test_config)
    return test_config


@pytest.fixture
def db_conn(temp_db):
    """Provide an initialized SQLite connection from temp_db."""
    conn = get_connection(temp_db)
    yield conn
    conn.close()


@pytest.fixture
def sqlite_store(temp_db):
    """Provide a SQLiteStore over the temporary database."""
    store = SQLiteStore(temp_db)
    yield store
    store.close()


@pytest.fixture
def sample_record() -> CanonicalRecord:
    """Return a typical live Yamaha record."""
    return CanonicalRecord(
        name="MT-07",
        brand="Yamaha",
        category=Category.NAKED,
        year=2024,
        price=275_000,
        engine_capacity=689,
        power=73.0,
    )


@pytest.fixture
def sample_records(sample_record) -> list[CanonicalRecord]:
    """Return a small mixed-brand batch."""
    return [
        sample_record,
        CanonicalRecord(
            name="Z900",
            brand="Kawasaki",
            category=Category.NAKED,
            year=2025,
            price=582_000,
            engine_capacity=900,
        ),
        CanonicalRecord(
            name="R 1300 GS",
            brand="BMW",
            category=Category.ADVENTURE,
            year=2025,
            price=1_150_000,
            engine_capacity=1254,
            image_url="https://www.bmw-motorrad.com.tr/content/r1300gs.jpg",
        ),
    ]
