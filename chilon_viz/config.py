"""Configuration loader for the chilon-viz graph explorer."""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

LOGGER = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent
CONFIG_ENV_VAR = "CHILON_VIZ_CONFIG"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class CorpusConfig(_FrozenModel):
    """Location of the bundled corpus and the initial view limits."""

    path: str = Field(..., min_length=1)
    initial_max_nodes: int = Field(0, ge=0)
    initial_max_edges: int = Field(0, ge=0)

    def resolved_path(self) -> Path:
        """Return the corpus path resolved against the package directory."""

        candidate = Path(self.path).expanduser()
        if candidate.is_absolute():
            return candidate
        return PACKAGE_ROOT / candidate


class ScalesConfig(_FrozenModel):
    """Visual magnitude ranges for normalised sizes and the slider domain."""

    node_size_range: Tuple[float, float] = (10.0, 100.0)
    edge_size_range: Tuple[float, float] = (10.0, 100.0)
    slider_range: Tuple[float, float] = (0.0, 100.0)

    @field_validator("node_size_range", "edge_size_range", "slider_range")
    @classmethod
    def _validate_range(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        low, high = value
        if low >= high:
            msg = f"range lower bound must be below upper bound, got {low} >= {high}"
            raise ValueError(msg)
        return (float(low), float(high))


class FilterDefaultsConfig(_FrozenModel):
    """Initial state of the categorical toggles."""

    include_blank_and_unknown: bool = True
    include_self_loops: bool = True
    include_categorical_edges: bool = True
    include_disconnected_nodes: bool = True
    use_logarithmic_scale: bool = False


class LayoutConfig(_FrozenModel):
    """Force configuration and integrator energy settings."""

    width: float = Field(1200.0, gt=0)
    height: float = Field(800.0, gt=0)
    link_distance: float = Field(300.0, gt=0)
    link_strength: float = Field(2.0, ge=0)
    charge_strength: float = -800.0
    charge_distance_min: float = Field(200.0, ge=0)
    charge_distance_max: float = Field(400.0, gt=0)
    collision_padding: float = Field(4.0, ge=0)
    alpha_restart: float = Field(1.0, gt=0, le=1.0)
    alpha_min: float = Field(0.001, gt=0, lt=1.0)
    alpha_decay: Optional[float] = Field(default=None, gt=0, lt=1.0)
    velocity_decay: float = Field(0.4, ge=0, le=1.0)
    drag_alpha_target: float = Field(0.3, ge=0, le=1.0)
    drag_release_alpha: float = Field(0.3, ge=0, le=1.0)
    node_color: str = Field("#B3D9CB", min_length=1)
    seed: int = 1

    @model_validator(mode="after")
    def _validate_charge_distances(self) -> "LayoutConfig":
        if self.charge_distance_min > self.charge_distance_max:
            msg = "layout.charge_distance_min cannot exceed layout.charge_distance_max"
            raise ValueError(msg)
        return self

    @property
    def effective_alpha_decay(self) -> float:
        """Return the configured decay, defaulting to ~300 ticks to reach ``alpha_min``."""

        if self.alpha_decay is not None:
            return self.alpha_decay
        return 1.0 - self.alpha_min ** (1.0 / 300.0)

    @property
    def center(self) -> Tuple[float, float]:
        """Return the centering point of the viewport."""

        return (self.width / 2.0, self.height / 2.0)


class InteractionConfig(_FrozenModel):
    """Input handling settings."""

    debounce_seconds: float = Field(0.1, ge=0)


class ColorsConfig(_FrozenModel):
    """Parameters of the sinusoidal label color generator."""

    frequency: float = 2.4
    phases: List[float] = Field(default_factory=lambda: [0.0, 2.0, 4.0], min_length=3, max_length=3)
    center: float = Field(128.0, ge=0, le=255)
    width: float = Field(127.0, ge=0, le=255)

    @model_validator(mode="after")
    def _validate_channel_bounds(self) -> "ColorsConfig":
        if self.center + self.width > 255 or self.center - self.width < 0:
            msg = "colors.center +/- colors.width must stay within [0, 255]"
            raise ValueError(msg)
        return self


class AppConfig(_FrozenModel):
    """Top-level application configuration composed from config.yaml."""

    corpus: CorpusConfig
    scales: ScalesConfig = Field(default_factory=ScalesConfig)
    filters: FilterDefaultsConfig = Field(default_factory=FilterDefaultsConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    colors: ColorsConfig = Field(default_factory=ColorsConfig)

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to the config.yaml shipped inside the package.
        """
        return PACKAGE_ROOT / "config.yaml"


def _determine_config_path(path: Optional[Path]) -> Path:
    """Return the configuration path, honouring the environment override."""

    if path is not None:
        return path
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        candidate = Path(override).expanduser()
        if candidate.exists():
            return candidate
        LOGGER.warning("Configured config file override does not exist: %s", candidate)
    return AppConfig.default_path()


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read YAML content from disk.

    Args:
        path: Location of the YAML file.

    Returns:
        Dict[str, Any]: Parsed YAML content.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file missing at %s", path)
        raise ConfigError("Configuration file not found") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Configuration root must be a mapping: %s", path)
        raise ConfigError("Configuration root must be a mapping")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load application configuration from YAML.

    Args:
        path: Optional override path to the YAML file.

    Returns:
        AppConfig: Parsed configuration object.

    Raises:
        ConfigError: If the configuration cannot be loaded or validated.
    """
    config_path = _determine_config_path(path)
    raw_content = _read_yaml(config_path)
    try:
        return AppConfig(**raw_content)
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values: %s", exc)
        raise ConfigError("Configuration validation failed") from exc
