"""Configuration management for errctx using Pydantic models."""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class CaptureConfig(BaseModel):
    """Call-site capture configuration section."""
    path_prefix: str = Field(alias="pathPrefix", default="")
    trim_library_root: bool = Field(alias="trimLibraryRoot", default=False)

    model_config = ConfigDict(populate_by_name=True)


class RenderConfig(BaseModel):
    """Tree rendering configuration section."""
    sort_keys: bool = Field(alias="sortKeys", default=True)
    width: int = 240

    @field_validator("width")
    @classmethod
    def validate_width(cls, v):
        if v < 40:
            raise ValueError("width must be >= 40")
        return v

    model_config = ConfigDict(populate_by_name=True)


class ErrctxConfig(BaseModel):
    """Complete errctx configuration model."""
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> ErrctxConfig:
    """Load configuration from a JSON file with fallback to defaults.

    Args:
        config_path: Path to a JSON configuration file. If None, the
                    defaults are returned.

    Returns:
        ErrctxConfig: Loaded and validated configuration

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the configuration is invalid
    """
    if config_path is None:
        return ErrctxConfig()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e

    try:
        config = ErrctxConfig(**config_data)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e

    logger.debug(f"Loaded errctx config from {config_path}")
    return config
