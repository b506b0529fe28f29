"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
from pathlib import Path
from typing import Any, Optional, cast

import yaml
from pydantic import BaseModel, Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "FAMILYCAL_"


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    # Console Logging
    console_enabled: bool = Field(default=True, description="Enable console logging")
    console_level: str = Field(
        default="INFO",
        description="Console log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    console_colors: bool = Field(
        default=True, description="Enable colored console output (auto-detected)"
    )

    # File Logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_level: str = Field(
        default="DEBUG",
        description="File log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    file_directory: Optional[str] = Field(
        default=None, description="Custom log directory (defaults to data_dir/logs)"
    )
    file_prefix: str = Field(default="familycal", description="Log file prefix")
    max_log_files: int = Field(default=5, description="Maximum number of log files to keep")

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )


class FamilyCalSettings(BaseSettings):
    """Application settings with environment variable support."""

    _explicit_args: set = PrivateAttr(default_factory=set)
    _env_vars_set: set = PrivateAttr(default_factory=set)

    app_name: str = Field(default="familycal", description="Application name")

    # File Paths
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "familycal")
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local" / "share" / "familycal")
    database_path: Optional[Path] = Field(
        default=None, description="SQLite database file (defaults to data_dir/familycal.db)"
    )

    # Recurring series generation
    extension_threshold_days: int = Field(
        default=30, ge=1, description="Extend series whose horizon is within this many days"
    )
    extension_horizon_years: int = Field(
        default=1, ge=1, description="Years ahead of now the extension job materializes"
    )
    initial_horizon_years: int = Field(
        default=1, ge=1, description="Years ahead of now a new series materializes"
    )

    # Logging Configuration
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings, description="Logging settings"
    )

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs: Any) -> None:
        env_vars_set = {
            key[len(ENV_PREFIX) :].lower() for key in os.environ if key.startswith(ENV_PREFIX)
        }

        super().__init__(**kwargs)

        self._explicit_args = set(kwargs.keys())
        self._env_vars_set = env_vars_set

        self._load_yaml_config()

    def _find_config_file(self) -> Optional[Path]:
        """Find config file, checking project directory first, then user config dir."""
        project_root = Path(__file__).parent.parent.parent
        project_config = project_root / "config" / "config.yaml"
        if project_config.exists():
            return project_config

        user_config = self.config_dir / "config.yaml"
        if user_config.exists():
            return user_config

        return None

    def _is_overridden(self, setting: str) -> bool:
        return setting in self._explicit_args or setting in self._env_vars_set

    def _load_basic_settings(self, config_data: dict) -> None:
        """Load top-level path settings from YAML data."""
        for setting in ["data_dir", "config_dir", "database_path"]:
            if setting in config_data and not self._is_overridden(setting):
                setattr(self, setting, Path(config_data[setting]))

    def _load_recurrence_config(self, config_data: dict) -> None:
        """Load recurring series settings from YAML data."""
        if "recurrence" not in config_data:
            return

        recurrence_config = config_data["recurrence"]
        recurrence_settings = [
            "extension_threshold_days",
            "extension_horizon_years",
            "initial_horizon_years",
        ]

        for setting in recurrence_settings:
            if setting in recurrence_config and not self._is_overridden(setting):
                setattr(self, setting, int(recurrence_config[setting]))

    def _load_logging_config(self, config_data: dict) -> None:
        """Load logging configuration from YAML data."""
        if "logging" not in config_data or "logging" in self._explicit_args:
            return

        logging_config = config_data["logging"]
        for setting in LoggingSettings.model_fields:
            if setting in logging_config:
                setattr(self.logging, setting, logging_config[setting])

    def _load_yaml_config(self) -> None:
        """Load configuration from YAML file if it exists."""
        config_file = self._find_config_file()
        if not config_file:
            return

        try:
            with config_file.open() as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                return

            self._load_basic_settings(config_data)
            self._load_recurrence_config(config_data)
            self._load_logging_config(config_data)

        except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
            # Keep defaults and environment values
            logging.warning(f"Could not load YAML config from {config_file}: {e}")

    @property
    def database_file(self) -> Path:
        """Path to SQLite database file."""
        if self.database_path is not None:
            return self.database_path
        return self.data_dir / "familycal.db"

    @property
    def config_file(self) -> Path:
        """Path to YAML configuration file."""
        return self.config_dir / "config.yaml"


_settings_instance: Optional[FamilyCalSettings] = None


def get_settings() -> FamilyCalSettings:
    """Get the global settings instance, creating it lazily if needed."""
    if globals()["_settings_instance"] is None:
        globals()["_settings_instance"] = FamilyCalSettings()
    return globals()["_settings_instance"]


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None


class _SettingsProxy:
    """Proxy object that provides lazy access to the global settings."""

    def __getattr__(self, name: str) -> Any:
        return getattr(get_settings(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(get_settings(), name, value)

    def __repr__(self) -> str:
        return repr(get_settings())


settings = cast(FamilyCalSettings, _SettingsProxy())
