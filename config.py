# Di dalam file: config.py

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Tuple


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Konfigurasi aplikasi, dibaca dari environment variable."""

    database_url: str = field(
        default_factory=lambda: os.getenv("MIRATH_DATABASE_URL", "sqlite:///./mirath.db")
    )
    cache_size: int = field(
        default_factory=lambda: int(os.getenv("MIRATH_CACHE_SIZE", "100"))
    )
    # Toleransi hanya untuk memutuskan apakah 'aul/radd dipicu
    special_case_epsilon: float = field(
        default_factory=lambda: float(os.getenv("MIRATH_SPECIAL_CASE_EPSILON", "0.0001"))
    )
    slow_calculation_ms: float = field(
        default_factory=lambda: float(os.getenv("MIRATH_SLOW_CALCULATION_MS", "100"))
    )
    cors_origins: Tuple[str, ...] = field(
        default_factory=lambda: _split_csv(
            os.getenv("MIRATH_CORS_ORIGINS", "http://localhost,http://localhost:3000")
        )
    )
    log_level: str = field(default_factory=lambda: os.getenv("MIRATH_LOG_LEVEL", "INFO"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
