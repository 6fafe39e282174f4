"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.

The anchoring and matching numbers below are heuristics (context sizes,
probe windows, fuzzy threshold).  They are exposed here so they can be tuned
per deployment without touching the matching code.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/anchormark/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class AnchorConfig(BaseModel):
    """Anchor construction parameters."""

    context_chars: int = Field(default=50, ge=0)
    logographic_context_chars: int = Field(default=100, ge=0)
    prefix_probe_chars: int = Field(default=20, ge=1)
    probe_min_chars: int = Field(default=3, ge=1)
    probe_max_chars: int = Field(default=10, ge=1)
    probe_start_positions: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def probe_bounds_ordered(self) -> AnchorConfig:
        if self.probe_min_chars > self.probe_max_chars:
            msg = "ANCHOR__PROBE_MIN_CHARS must not exceed ANCHOR__PROBE_MAX_CHARS"
            raise ValueError(msg)
        return self


class LocatorConfig(BaseModel):
    """Resolution cascade parameters."""

    fuzzy_threshold: float = Field(default=0.7, gt=0.0, le=1.0)
    fuzzy_window: int = Field(default=50, ge=1)


class MarkerConfig(BaseModel):
    """Rendered marker naming."""

    class_name: str = "anchormark-highlight"
    style_element_id: str = "anchormark-highlight-styles"


class StoreConfig(BaseModel):
    """Persistence backend configuration."""

    path: Path | None = None
    key: str = "anchormark-highlights"
    retries: int = Field(default=1, ge=0, le=1)
    timeout_seconds: float = Field(default=5.0, gt=0.0)


class AppConfig(BaseModel):
    """Application runtime configuration."""

    log_dir: Path = Path("logs")
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``LOCATOR__FUZZY_THRESHOLD``, ``STORE__PATH``, ``ANCHOR__CONTEXT_CHARS``.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    anchor: AnchorConfig = AnchorConfig()
    locator: LocatorConfig = LocatorConfig()
    markers: MarkerConfig = MarkerConfig()
    store: StoreConfig = StoreConfig()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
