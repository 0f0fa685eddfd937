"""
Configuration management for SkyRadius.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky API configuration."""
    username: Optional[str] = os.getenv('OPENSKY_USERNAME') or None
    password: Optional[str] = os.getenv('OPENSKY_PASSWORD') or None
    base_url: str = os.getenv('OPENSKY_BASE_URL', 'https://opensky-network.org/api')

    # Per-attempt connect/read timeout and retry budget
    timeout_seconds: float = float(os.getenv('OPENSKY_TIMEOUT_SECONDS', '20'))
    max_attempts: int = int(os.getenv('OPENSKY_MAX_ATTEMPTS', '3'))
    backoff_base_seconds: float = float(os.getenv('OPENSKY_BACKOFF_SECONDS', '1'))

    # Suggested client wait after all attempts time out
    retry_after_seconds: int = int(os.getenv('OPENSKY_RETRY_AFTER_SECONDS', '30'))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.username and self.password)

    @property
    def credentials(self) -> Optional[Tuple[str, str]]:
        """Username/password pair, or None unless both are set."""
        if not self.is_authenticated:
            return None
        return (self.username, self.password)


@dataclass(frozen=True)
class AdsbdbConfig:
    """adsbdb.com configuration for route and aircraft lookups (no API key)."""
    base_url: str = os.getenv('ADSBDB_BASE_URL', 'https://api.adsbdb.com/v0')
    timeout_seconds: float = float(os.getenv('ADSBDB_TIMEOUT_SECONDS', '5'))


@dataclass(frozen=True)
class EnrichmentConfig:
    """Fan-out settings for route/type enrichment."""
    # adsbdb allows 60 requests per 60s, two lookups per candidate
    max_candidates: int = int(os.getenv('ENRICHMENT_MAX_CANDIDATES', '30'))
    deadline_seconds: float = float(os.getenv('ENRICHMENT_DEADLINE_SECONDS', '5'))
    stagger_seconds: float = float(os.getenv('ENRICHMENT_STAGGER_SECONDS', '0.05'))
    max_workers: int = int(os.getenv('ENRICHMENT_MAX_WORKERS', '60'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    opensky: OpenSkyConfig
    adsbdb: AdsbdbConfig
    enrichment: EnrichmentConfig

    # Flask settings
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        opensky=OpenSkyConfig(),
        adsbdb=AdsbdbConfig(),
        enrichment=EnrichmentConfig(),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
