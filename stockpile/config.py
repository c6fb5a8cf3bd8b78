"""Centralised settings for Stockpile.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from the package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("STOCKPILE_WORKSPACE", Path.home() / ".stockpile")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "stockpile.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Backend selection / query composition
    # ------------------------------------------------------------------
    scrape_backend: str = field(
        default_factory=lambda: os.environ.get("SCRAPE_BACKEND", "direct")
    )
    search_locale: str = field(
        default_factory=lambda: os.environ.get("SEARCH_LOCALE", "ja")
    )
    wiki_base_url: str = field(
        default_factory=lambda: os.environ.get("WIKI_BASE_URL", "")
    )

    # ------------------------------------------------------------------
    # Direct (HTTP) backend
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "SCRAPER_USER_AGENT",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/122.0.0.0 Safari/537.36",
        )
    )
    direct_max_chars: int = field(
        default_factory=lambda: int(os.environ.get("DIRECT_MAX_CHARS", "3000"))
    )

    # ------------------------------------------------------------------
    # Browser backend
    # ------------------------------------------------------------------
    browser_endpoint: str = field(
        default_factory=lambda: os.environ.get("BROWSER_ENDPOINT", "")
    )
    search_engine_url: str = field(
        default_factory=lambda: os.environ.get(
            "SEARCH_ENGINE_URL", "https://www.google.com"
        )
    )
    browser_settle_seconds: float = field(
        default_factory=lambda: float(os.environ.get("BROWSER_SETTLE_SECONDS", "2.0"))
    )
    browser_nav_timeout: float = field(
        default_factory=lambda: float(os.environ.get("BROWSER_NAV_TIMEOUT", "30.0"))
    )
    browser_max_chars: int = field(
        default_factory=lambda: int(os.environ.get("BROWSER_MAX_CHARS", "2000"))
    )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    discovery_max_results: int = field(
        default_factory=lambda: int(os.environ.get("DISCOVERY_MAX_RESULTS", "3"))
    )
    summary_chars: int = field(
        default_factory=lambda: int(os.environ.get("SUMMARY_CHARS", "200"))
    )
    fetch_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("FETCH_CONCURRENCY", "1"))
    )
    insufficient_content_status: str = field(
        default_factory=lambda: os.environ.get(
            "INSUFFICIENT_CONTENT_STATUS", "completed"
        )
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    @property
    def wiki_url(self) -> str:
        """Base URL of the wiki used by the direct discovery backend."""
        if self.wiki_base_url:
            return self.wiki_base_url.rstrip("/")
        return f"https://{self.search_locale}.wikipedia.org"

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton; import this everywhere:
#   from stockpile.config import settings
settings = Settings()
