"""Configuration management for the shift pay engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment.

    Pay rates and pay rules are not part of this object; they are passed to
    the calculators as an explicit ``AppSettings`` snapshot.
    """

    database_url: str
    engine_version: str
    host: str
    port: int
    debug: bool
    log_level: str

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./shiftpay.db",
            ),
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for command line and server entry points."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
