"""
Configuration management for copysift.

Uses Pydantic Settings for type-safe configuration, read from
``COPYSIFT_*`` environment variables and an optional YAML file.
"""

from pathlib import Path
from typing import List, Literal, Optional, Union

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from copysift.components.colors import PRESET_COLORS
from copysift.core.errors import ConfigurationError
from copysift.core.models import SearchMode, validate_color


class SearchConfig(BaseSettings):
    """Settings shared by searching and duplicate clustering."""

    model_config = SettingsConfigDict(env_prefix="COPYSIFT_")

    threshold: float = Field(
        default=0.45,
        ge=0.0,
        le=1.0,
        description="Global Jaccard threshold for similar mode and clustering"
    )
    shingle_size: int = Field(
        default=3,
        ge=1,
        description="Characters per shingle"
    )
    mode: SearchMode = Field(
        default=SearchMode.SIMILAR,
        description="Search mode: contains or similar"
    )
    search_column: Union[int, Literal["all"]] = Field(
        default=0,
        description="Column index to search, or 'all'"
    )
    palette: List[str] = Field(
        default_factory=lambda: list(PRESET_COLORS),
        description="Colors handed out to queries and duplicate groups"
    )
    log_level: str = Field(
        default="INFO",
        description="Loguru level for the stderr sink"
    )

    @field_validator("search_column")
    @classmethod
    def _non_negative_column(cls, value):
        if isinstance(value, int) and value < 0:
            raise ValueError(f"search_column must be >= 0 or 'all', got {value}")
        return value

    @field_validator("palette")
    @classmethod
    def _valid_palette(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("palette must contain at least one color")
        for color in value:
            validate_color(color)
        return value


def load_config(config_path: Optional[Path] = None, **overrides) -> SearchConfig:
    """Load configuration from environment, an optional YAML file and keyword overrides.

    Args:
        config_path: Optional YAML file with SearchConfig fields
        **overrides: Explicit values, applied last (None values are ignored)

    Returns:
        SearchConfig instance

    Raises:
        ConfigurationError: If the file is missing or a value is invalid
    """
    values = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")
        values.update(loaded)

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return SearchConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
