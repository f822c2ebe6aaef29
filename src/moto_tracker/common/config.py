"""Runtime configuration for the tracker modules."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from src.common.config import DATA_EXPORTS_DIR, DATA_RAW_DIR, settings

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
load_dotenv(_PROJECT_ROOT / ".env")


@dataclass
class Config:
    """Central configuration loaded from settings.yaml and environment variables."""

    # Database
    database_path: str = field(
        default_factory=lambda: os.getenv(
            "DATABASE_PATH", settings.database.db_path
        )
    )
    store_backend: str = field(default_factory=lambda: settings.database.backend)

    # Scraping
    request_timeout: float = field(
        default_factory=lambda: settings.scraper.request_timeout_seconds
    )
    source_delay_seconds: float = field(
        default_factory=lambda: settings.scraper.source_delay_seconds
    )
    user_agent: str | None = field(default_factory=lambda: settings.scraper.user_agent)
    parallel: bool = field(default_factory=lambda: settings.scraper.parallel)
    min_plausible_price: int = field(
        default_factory=lambda: settings.scraper.min_plausible_price
    )

    # Cache
    cache_raw_html: bool = field(default_factory=lambda: settings.scraper.cache_raw_html)
    raw_html_cache_dir: str = field(
        default_factory=lambda: os.getenv(
            "RAW_HTML_CACHE_DIR", str(DATA_RAW_DIR)
        )
    )

    # Export
    export_dir: str = field(
        default_factory=lambda: os.getenv("EXPORT_DIR", str(DATA_EXPORTS_DIR))
    )

    # Supabase
    supabase_url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_key: str = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_KEY", "")
    )

    def __post_init__(self) -> None:
        """Load overrides from environment."""
        if timeout := os.getenv("REQUEST_TIMEOUT"):
            self.request_timeout = float(timeout)
        if delay := os.getenv("SOURCE_DELAY_SECONDS"):
            self.source_delay_seconds = float(delay)
        if backend := os.getenv("STORE_BACKEND"):
            self.store_backend = backend
        if ua := os.getenv("SCRAPER_USER_AGENT"):
            self.user_agent = ua

    def _resolve(self, value: str) -> Path:
        p = Path(value)
        if p.is_absolute():
            return p
        return _PROJECT_ROOT / p

    @property
    def database_abs_path(self) -> Path:
        """Resolve database path relative to project root."""
        return self._resolve(self.database_path)

    @property
    def raw_html_cache_abs_dir(self) -> Path:
        """Resolve raw HTML cache dir relative to project root."""
        return self._resolve(self.raw_html_cache_dir)

    @property
    def export_abs_dir(self) -> Path:
        """Resolve export dir relative to project root."""
        return self._resolve(self.export_dir)
