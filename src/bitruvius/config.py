"""Application configuration with pydantic-settings + TOML."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict, TomlConfigSettingsSource


CONFIG_FILE_NAME = "config.toml"


def _default_config_dir() -> Path:
    return Path.home() / ".bitruvius"


def _default_export_dir() -> Path:
    return _default_config_dir() / "exports"


class PosingSettings(BaseSettings):
    """Kinematic and timing constants for the posing engine."""

    base_unit: float = Field(default=150.0, gt=0)
    drag_sensitivity: float = Field(default=0.5, gt=0)
    calibration_ms: float = Field(default=250.0, gt=0)
    segment_ms: float = Field(default=250.0, gt=0)
    undo_limit: int = Field(default=50, gt=0)
    log_limit: int = Field(default=100, gt=0)
    collection_fraction: float = Field(default=0.85, ge=0)
    frame_interval_ms: float = Field(default=16.0, gt=0)


class AppConfig(BaseSettings):
    """Root application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BITRUVIUS_",
        env_nested_delimiter="__",
    )

    config_dir: Path = Field(default_factory=_default_config_dir)
    export_dir: Path = Field(default_factory=_default_export_dir)
    posing: PosingSettings = Field(default_factory=PosingSettings)

    @classmethod
    def settings_customise_sources(cls, settings_cls, **kwargs):  # type: ignore[override]
        toml_path = _default_config_dir() / CONFIG_FILE_NAME
        sources = (
            kwargs.get("init_settings"),
            kwargs.get("env_settings"),
        )
        if toml_path.exists():
            sources = (*sources, TomlConfigSettingsSource(settings_cls, toml_file=toml_path))
        return (*sources, kwargs.get("dotenv_settings"), kwargs.get("file_secret_settings"))

    @property
    def log_file(self) -> Path:
        """Log destination while the TUI owns the terminal."""
        return self.config_dir / "bitruvius.log"

    def ensure_dirs(self) -> None:
        """Create the settings/log directory and the pose and history export target."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.export_dir.mkdir(parents=True, exist_ok=True)


def load_config() -> AppConfig:
    """Load application config, creating defaults if needed."""
    config = AppConfig()
    config.ensure_dirs()
    return config
