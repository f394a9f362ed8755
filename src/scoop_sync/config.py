# SPDX-License-Identifier: MIT
"""Configuration management for the scoop-sync layer."""

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_BACKEND_TIMEOUT,
    DEFAULT_BACKEND_URL,
    DEFAULT_CACHE_DB_PATH,
    DEFAULT_CACHE_MAX_AGE_HOURS,
    ENV_PREFIX,
)


class BackendConfig(BaseModel):
    """Configuration for reaching the package-manager backend."""

    url: str = Field(DEFAULT_BACKEND_URL, description="Base URL of the backend")
    timeout_seconds: int = Field(
        DEFAULT_BACKEND_TIMEOUT, ge=1, description="Per-call transport timeout"
    )


class CacheConfig(BaseModel):
    """Configuration for the local snapshot store."""

    enabled: bool = Field(True, description="Paint from the snapshot on startup")
    db_path: str = Field(DEFAULT_CACHE_DB_PATH, description="SQLite database path")
    max_age_hours: int = Field(
        DEFAULT_CACHE_MAX_AGE_HOURS,
        ge=1,
        description="Snapshots older than this are reported as stale",
    )

    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


class SyncConfig(BaseModel):
    """Configuration for the synchronization cycle."""

    strict_fetch: bool = Field(
        True,
        description="Treat failed authoritative reads as errors instead of empty lists",
    )
    background_update_check: bool = Field(
        True, description="Trigger the backend update scan after each cycle"
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    backend: BackendConfig = BackendConfig()
    cache: CacheConfig = CacheConfig()
    sync: SyncConfig = SyncConfig()


class ConfigManager:
    """Manages application configuration from files and environment."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path or self._find_config_file()
        self._config: AppConfig | None = None

    def _find_config_file(self) -> Path | None:
        """Find configuration file in standard locations."""
        search_paths = [
            Path.cwd() / ".scoop-sync" / "config.yaml",  # Local config first
            Path.cwd() / "config.yaml",
            Path.home() / ".config" / "scoop-sync" / "config.yaml",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def load_config(self) -> AppConfig:
        """Load configuration from file or create default."""
        if self._config is not None:
            return self._config

        default_config = self.get_default_config()

        if self.config_path and self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}

            config_data = self._deep_merge_configs(default_config, file_config)
        else:
            config_data = default_config

        config_data = self._apply_env_overrides(config_data)

        self._config = AppConfig(**config_data)
        return self._config

    def _deep_merge_configs(
        self, default_config: dict[str, Any], override_config: dict[str, Any]
    ) -> dict[str, Any]:
        """Merge override config into default config one section at a time.

        Sections are merged key by key so a file may override a single
        setting (e.g. ``sync: {strict_fetch: false}``) without restating the
        rest of the section.

        Args:
            default_config: Base configuration with all defaults
            override_config: User-provided overrides

        Returns:
            Merged configuration
        """
        result = copy.deepcopy(default_config)

        for key, value in override_config.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key].update(value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config_data: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides to config."""
        # Example: SCOOP_SYNC_BACKEND_URL=http://localhost:9000
        #          SCOOP_SYNC_SYNC_STRICT_FETCH=false
        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            section, _, field = key[len(ENV_PREFIX) :].lower().partition("_")
            if not field or section not in AppConfig.model_fields:
                continue

            section_model = AppConfig.model_fields[section].annotation
            if field not in getattr(section_model, "model_fields", {}):
                continue

            config_data.setdefault(section, {})
            if value.lower() in ("true", "false"):
                config_data[section][field] = value.lower() == "true"
            else:
                config_data[section][field] = value

        return config_data

    def get_complete_config_dict(self) -> dict[str, Any]:
        """Get the complete configuration as a dictionary for display."""
        return self.load_config().model_dump()

    def show_config(self) -> str:
        """Show the complete configuration in YAML format.

        Returns:
            YAML formatted configuration string
        """
        return yaml.dump(
            self.get_complete_config_dict(), default_flow_style=False, sort_keys=False
        )

    def get_default_config(self) -> dict[str, Any]:
        """Get the default configuration as a plain dictionary."""
        return {
            "backend": {
                "url": DEFAULT_BACKEND_URL,
                "timeout_seconds": DEFAULT_BACKEND_TIMEOUT,
            },
            "cache": {
                "enabled": True,
                "db_path": DEFAULT_CACHE_DB_PATH,
                "max_age_hours": DEFAULT_CACHE_MAX_AGE_HOURS,
            },
            "sync": {
                "strict_fetch": True,
                "background_update_check": True,
            },
        }

    def create_default_config(self, output_path: Path) -> None:
        """Write the default configuration file."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.get_default_config(), f, default_flow_style=False, sort_keys=False
            )


# Global config manager instance with factory pattern
_config_manager_instance: ConfigManager | None = None


def get_config_manager(config_path: Path | None = None) -> ConfigManager:
    """Get or create the global config manager instance.

    Args:
        config_path: Optional path to config file (only used on first call)

    Returns:
        The global ConfigManager instance
    """
    global _config_manager_instance
    if _config_manager_instance is None:
        _config_manager_instance = ConfigManager(config_path)
    return _config_manager_instance


def set_config_manager(manager: ConfigManager) -> None:
    """Set the config manager instance (primarily for testing)."""
    global _config_manager_instance
    _config_manager_instance = manager


def reset_config_manager() -> None:
    """Reset the config manager instance (primarily for testing)."""
    global _config_manager_instance
    _config_manager_instance = None
