"""
Application settings using Pydantic.

Provides environment-based configuration loading with SLORULES_ prefix.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from slorules.core.promutils import parse_duration
from slorules.models import Info, Mode, PluginMetadata


class Settings(BaseSettings):
    """Application settings."""

    # Window catalog, embedded defaults when unset
    windows_path: Optional[Path] = None
    default_slo_period: str = "30d"

    # Generation
    optimized_sli_rules: bool = False
    disable_default_plugins: bool = False
    extra_labels: Dict[str, str] = {}
    # Plugins applied to every SLO: [{"id": "...", "config": {...}, "priority": 0}]
    extra_plugins: List[Dict] = []

    # Stamped into the SLO info metric
    version: str = "dev"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "SLORULES_"

    @field_validator("default_slo_period")
    @classmethod
    def _check_period(cls, v: str) -> str:
        parse_duration(v)
        return v

    @field_validator("extra_plugins")
    @classmethod
    def _check_plugins(cls, v: List[Dict]) -> List[Dict]:
        for plugin in v:
            if not plugin.get("id"):
                raise ValueError("extra plugins require an id")
        return v

    def plugin_metadata(self) -> List[PluginMetadata]:
        """Application level plugins as SLO plugin references."""
        return [
            PluginMetadata(id=p["id"], config=p.get("config"), priority=int(p.get("priority", 0)))
            for p in self.extra_plugins
        ]

    def info(self, mode: Mode | str, spec: str = "") -> Info:
        """Request metadata stamped with the configured tool version."""
        return Info(version=self.version, mode=mode, spec=spec)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
