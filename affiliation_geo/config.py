"""
Central configuration loaded from environment variables with sensible defaults.
Reference data paths, resolver knobs and the HTTP service all read from here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parents[1] / "data" / "reference"


@dataclass(frozen=True)
class ReferenceConfig:
    countries_path: str = os.getenv("AFFIL_COUNTRIES_PATH", str(_DATA_DIR / "countries.json"))
    institutions_path: str = os.getenv("AFFIL_INSTITUTIONS_PATH", str(_DATA_DIR / "institutions.json"))


@dataclass(frozen=True)
class ResolverConfig:
    # Comma-pieces before the last one searched for Georgia context cities
    disambiguation_window: int = int(os.getenv("AFFIL_DISAMBIGUATION_WINDOW", "2"))
    # Attach a logging trace hook to every resolve call made by the CLI/service
    trace_city_matches: bool = os.getenv("AFFIL_TRACE_CITY_MATCHES", "false").lower() == "true"


@dataclass(frozen=True)
class APIConfig:
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", "8000"))
    max_batch_lines: int = int(os.getenv("API_MAX_BATCH_LINES", "1000"))


@dataclass(frozen=True)
class Settings:
    reference: ReferenceConfig = field(default_factory=ReferenceConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    env: str = os.getenv("APP_ENV", "development")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
