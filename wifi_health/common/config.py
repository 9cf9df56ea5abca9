from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env junto a la raíz del repo; las variables reales del entorno tienen prioridad.
    repo_root = Path(__file__).resolve().parents[2]
    return str(repo_root / ".env")


@dataclass(frozen=True)
class Settings:
    db_url: str
    sample_interval_seconds: int
    log_level: str


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("WIFI_HEALTH_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    db_url = os.getenv("WIFI_HEALTH_DB_URL", "sqlite:///wifi_health.db")
    sample_interval_seconds = int(os.getenv("WIFI_HEALTH_SAMPLE_INTERVAL_SECONDS", "30"))
    log_level = os.getenv("WIFI_HEALTH_LOG_LEVEL", "INFO").upper()

    return Settings(
        db_url=db_url,
        sample_interval_seconds=max(1, sample_interval_seconds),
        log_level=log_level,
    )
