"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (LIBCURATOR__REGISTRY__URL=https://...)
  3. libcurator.yaml        (searched in cwd, then the platform config dir)
  4. Hardcoded defaults

The config file is optional; every field has a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("libcurator")
_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("libcurator")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_CACHE_DIR) / "registry.db")


def _find_config_file() -> str | None:
    """Return the path of the first libcurator.yaml found, or None."""
    candidates = [
        Path("libcurator.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "libcurator.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class RegistrySettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str = "https://registry.npmjs.org"
    search_size: int = 10
    timeout_seconds: float = 10.0
    user_agent: str = "libcurator"
    use_version_endpoint: bool = False

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("search_size")
    @classmethod
    def validate_search_size(cls, v: int) -> int:
        if not 1 <= v <= 250:
            raise ValueError("search_size must be between 1 and 250")
        return v


class SearchSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    debounce_ms: int = 500


class ManifestSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_concurrency: int = 8
    include_dev_dependencies: bool = False
    accepted_media_types: list[str] = ["application/json"]

    @field_validator("max_concurrency")
    @classmethod
    def validate_max_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be >= 1")
        return v


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    ttl_minutes: int = 60
    db_path: str = _DEFAULT_DB_PATH


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: LIBCURATOR__CACHE__ENABLED=false
        env_prefix="LIBCURATOR__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    registry: RegistrySettings = RegistrySettings()
    search: SearchSettings = SearchSettings()
    manifest: ManifestSettings = ManifestSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
