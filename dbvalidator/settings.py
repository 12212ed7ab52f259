from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Resolve repo root from this file's location:
# dbvalidator/settings.py → parent = dbvalidator/ → parent = repo root
REPO_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_CONFIG = REPO_ROOT / "configs" / "validators.yaml"


@dataclass
class Settings:
    """
    Centralized configuration for the CLI and config-driven wiring.

    Values are loaded from environment variables (and a .env file, if
    present) via Settings.from_env().
    """

    # --- DB mode / adapters ---
    db_mode: str = "sqlite"  # "sqlite" or "postgres"
    sqlite_path: str = ""
    postgres_dsn: str = ""

    # --- Validator wiring ---
    config_path: str = str(DEFAULT_CONFIG)

    # --- Observability ---
    log_level: str = "WARNING"
    metrics: str = "noop"  # "noop" or "prometheus"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build Settings from environment variables with sane fallbacks.

        - DBV_CONFIG and DBV_SQLITE_PATH can be absolute or relative.
        - Relative paths are resolved against the current directory.
        """
        load_dotenv()

        def getenv_path(name: str, default: str) -> str:
            raw = os.getenv(name, "").strip()
            if not raw:
                return default
            return str(Path(raw).expanduser().resolve())

        return cls(
            db_mode=os.getenv("DBV_DB_MODE", cls.db_mode).strip().lower(),
            sqlite_path=getenv_path("DBV_SQLITE_PATH", cls.sqlite_path),
            postgres_dsn=os.getenv("DBV_POSTGRES_DSN", cls.postgres_dsn),
            config_path=getenv_path("DBV_CONFIG", cls.config_path),
            log_level=os.getenv("DBV_LOG_LEVEL", cls.log_level).strip().upper(),
            metrics=os.getenv("DBV_METRICS", cls.metrics).strip().lower(),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
