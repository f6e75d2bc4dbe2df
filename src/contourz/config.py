from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from contourz.errors import ConfigError

DATA_DIR = Path.home() / ".contourz"
DEFAULT_DB_PATH = DATA_DIR / "contourz.db"


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_anon_key: str
    db_path: Path = DEFAULT_DB_PATH
    http_timeout: float = 30.0


def get_settings() -> Settings:
    """Read backend settings from the environment (a .env file is loaded by the entry points)."""
    url = os.environ.get("SUPABASE_URL", "").strip()
    if not url:
        raise ConfigError("SUPABASE_URL is not set")
    key = os.environ.get("SUPABASE_ANON_KEY", "").strip()
    if not key:
        raise ConfigError("SUPABASE_ANON_KEY is not set")

    db_path = os.environ.get("CONTOURZ_DB_PATH")
    timeout = os.environ.get("CONTOURZ_HTTP_TIMEOUT", "30")
    try:
        http_timeout = float(timeout)
    except ValueError:
        raise ConfigError(f"CONTOURZ_HTTP_TIMEOUT must be a number, got {timeout!r}") from None

    return Settings(
        supabase_url=url.rstrip("/"),
        supabase_anon_key=key,
        db_path=Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH,
        http_timeout=http_timeout,
    )
