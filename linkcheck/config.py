"""Centralised settings for the link checker.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

Per-run options (which pages to check, on-site only, ...) live in
:mod:`linkcheck.options`; this module only holds process-wide knobs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from the package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("LINKCHECK_REQUEST_TIMEOUT", "30.0"))
    )
    max_concurrent_fetches: int = field(
        default_factory=lambda: int(os.environ.get("LINKCHECK_MAX_CONCURRENT_FETCHES", "1"))
    )
    strict_status: bool = field(
        default_factory=lambda: _env_flag("LINKCHECK_STRICT_STATUS", "0")
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "LINKCHECK_USER_AGENT",
            "Mozilla/5.0 (compatible; linkcheck/0.1; +https://pypi.org/project/linkcheck)",
        )
    )

    # ------------------------------------------------------------------
    # Document tree
    # ------------------------------------------------------------------
    toc_filename: str = field(
        default_factory=lambda: os.environ.get("LINKCHECK_TOC_FILENAME", "table_of_contents.html")
    )

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    report_filename: str = field(
        default_factory=lambda: os.environ.get("LINKCHECK_REPORT_FILENAME", "Report.htm")
    )
    progress: bool = field(
        default_factory=lambda: _env_flag("LINKCHECK_PROGRESS", "1")
    )


# Module-level singleton — import this everywhere:
#   from linkcheck.config import settings
settings = Settings()
